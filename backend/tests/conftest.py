"""Shared test fixtures.

Every test gets a fresh ledger (and, where storage matters, a fresh
in-memory store) so tests are fully isolated.
"""

from typing import List

import pytest

from qa_matrix.config import Settings
from qa_matrix.engines.apply_engine import ApplyEngine
from qa_matrix.engines.fuzzy_matcher import FuzzyMatcher
from qa_matrix.engines.reconciliation import ReconciliationStore
from qa_matrix.facade import QAMatrixFacade
from qa_matrix.repositories.kv_store import InMemoryKeyValueStore
from qa_matrix.repositories.ledger_repo import LedgerRepository
from qa_matrix.schemas.concern import Concern
from qa_matrix.schemas.report import DefectReportEntry
from qa_matrix.services.ledger_store import LedgerStore
from qa_matrix.services.repeat_service import RepeatService
from qa_matrix.services.report_ingestion import parse_report_rows
from tests.fixtures import load_ledger, load_report_rows


@pytest.fixture()
def sample_concerns() -> List[Concern]:
    """#1 C80 bolt (NG, W-1=2), #2 F40 wiper (all OK), #3 T30 seat belt (NG)."""
    return load_ledger()


@pytest.fixture()
def report_rows() -> list:
    return load_report_rows()


@pytest.fixture()
def sample_entries(report_rows) -> List[DefectReportEntry]:
    """Four defects: two for #1 (qty 2 + 3), one for #2, one matching nothing."""
    return parse_report_rows(report_rows)


# ── Storage / stores ─────────────────────────────────────────────────────

@pytest.fixture()
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def ledger_repo(kv_store) -> LedgerRepository:
    return LedgerRepository(kv_store)


@pytest.fixture()
def ledger(ledger_repo, sample_concerns) -> LedgerStore:
    store = LedgerStore(ledger_repo)
    store.bulk_import(sample_concerns)
    return store


@pytest.fixture()
def matcher() -> FuzzyMatcher:
    return FuzzyMatcher(threshold=0.15)


@pytest.fixture()
def recon_store(matcher) -> ReconciliationStore:
    """Reconciliation store with a fixed clock so manual ids are predictable."""
    return ReconciliationStore(matcher, clock=lambda: 1_000)


@pytest.fixture()
def repeat_service(ledger, recon_store) -> RepeatService:
    return RepeatService(ledger=ledger, store=recon_store, engine=ApplyEngine())


@pytest.fixture()
def facade(kv_store, sample_concerns) -> QAMatrixFacade:
    f = QAMatrixFacade(settings=Settings(database_url="sqlite://"), kv_store=kv_store)
    f.bulk_import(sample_concerns)
    yield f
    f.close()
