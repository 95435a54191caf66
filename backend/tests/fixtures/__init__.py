"""Fixture loading helpers for offline tests."""

import json
from pathlib import Path
from typing import Any, List

from qa_matrix.domain.status import recalculate
from qa_matrix.schemas.concern import Concern

FIXTURES_DIR = Path(__file__).resolve().parent


def load_fixture(name: str) -> Any:
    """Load a JSON fixture file by name."""
    path = FIXTURES_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")
    return json.loads(path.read_text())


def load_ledger() -> List[Concern]:
    """The three-concern sample ledger, with derived fields computed."""
    return [recalculate(Concern.model_validate(c)) for c in load_fixture("ledger.json")]


def load_report_rows() -> List[List[Any]]:
    """Raw report rows: a title row, the header row, four defects and one blank row."""
    return load_fixture("report_rows.json")
