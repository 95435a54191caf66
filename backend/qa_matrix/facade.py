"""QA matrix facade — single entry point for all external interfaces.

The CLI (reconcile_report.py) and FastAPI should both use this instead of
wiring up stores and engines directly.  If the internal wiring changes
(new engines, different storage, etc.) only this file needs updating.

Usage::

    facade = QAMatrixFacade()              # uses Settings() from .env
    facade.load_report_rows(rows, "week-42.xlsx")
    result = facade.apply()
    facade.close()
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

from qa_matrix.config import Settings
from qa_matrix.database import build_engine, build_session_factory, init_db
from qa_matrix.domain.summary import dashboard_summary
from qa_matrix.engines.apply_engine import ApplyEngine
from qa_matrix.engines.fuzzy_matcher import FuzzyMatcher
from qa_matrix.engines.reconciliation import ReconciliationStore
from qa_matrix.repositories.kv_store import KeyValueStore, SqlKeyValueStore
from qa_matrix.repositories.ledger_repo import LedgerRepository
from qa_matrix.schemas.concern import Concern, ConcernCreate, ConcernField, ScoreSection
from qa_matrix.schemas.dashboard import DashboardSummary
from qa_matrix.schemas.diff import ApplyResult, DiffRecord, UndoResult
from qa_matrix.schemas.report import DefectReportEntry, MatchGroup, UnmatchedEntry
from qa_matrix.services.ledger_store import LedgerStore
from qa_matrix.services.repeat_service import RepeatService
from qa_matrix.services.report_ingestion import parse_report_rows

logger = logging.getLogger(__name__)


class QAMatrixFacade:
    """High-level API over the concern ledger and the repeat-issue workflow.

    Hides all internal wiring (storage, stores, engines, services).
    Returns only Pydantic schemas and plain values, never ORM models.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        kv_store: Optional[KeyValueStore] = None,
        ledger_repo: Optional[LedgerRepository] = None,
        matcher: Optional[FuzzyMatcher] = None,
    ):
        self._settings = settings or Settings()
        self._engine = None
        if ledger_repo is None:
            if kv_store is None:
                kv_store = self._setup_db()
            ledger_repo = LedgerRepository(kv_store, key=self._settings.ledger_storage_key)
        if matcher is None:
            matcher = FuzzyMatcher(threshold=self._settings.match_threshold)
        self._setup_services(ledger_repo, matcher)

    # ── internal wiring (private) ─────────────────────────────────────

    def _setup_db(self) -> KeyValueStore:
        s = self._settings
        if s.database_url.startswith("sqlite:///") and ":memory:" not in s.database_url:
            db_path = Path(s.database_url.replace("sqlite:///", ""))
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self._engine = build_engine(s.database_url, echo=s.debug)
        init_db(self._engine)
        return SqlKeyValueStore(build_session_factory(self._engine))

    def _setup_services(self, ledger_repo: LedgerRepository, matcher: FuzzyMatcher) -> None:
        self._ledger = LedgerStore(ledger_repo)
        self._repeats = RepeatService(
            ledger=self._ledger,
            store=ReconciliationStore(matcher),
            engine=ApplyEngine(),
            threshold=matcher.threshold,
            default_area=self._settings.default_area,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def match_threshold(self) -> float:
        return self._repeats.threshold

    # ══════════════════════════════════════════════════════════════════
    # CONCERN LEDGER
    # ══════════════════════════════════════════════════════════════════

    def list_concerns(self) -> List[Concern]:
        return self._ledger.concerns()

    def get_concern(self, s_no: int) -> Optional[Concern]:
        return self._ledger.get(s_no)

    def add_concern(self, payload: ConcernCreate) -> Concern:
        return self._ledger.add_concern(payload)

    def bulk_import(self, concerns: Sequence[Concern]) -> List[Concern]:
        return self._ledger.bulk_import(concerns)

    def update_weekly(self, s_no: int, week_index: int, value: int) -> Optional[Concern]:
        return self._ledger.update_weekly(s_no, week_index, value)

    def update_score(
        self, s_no: int, section: ScoreSection, key: str, value: Optional[float],
    ) -> Optional[Concern]:
        return self._ledger.update_score(s_no, section, key, value)

    def update_rating(self, s_no: int, rating: int) -> Optional[Concern]:
        return self._ledger.update_rating(s_no, rating)

    def update_field(self, s_no: int, field: ConcernField, value: str) -> Optional[Concern]:
        return self._ledger.update_field(s_no, field, value)

    def delete_concern(self, s_no: int) -> bool:
        return self._ledger.delete(s_no)

    def reset_ledger(self) -> None:
        """Drop every concern and the pending report batch."""
        self._repeats.clear()
        self._ledger.reset()
        logger.info("Ledger reset")

    def dashboard(self) -> DashboardSummary:
        return dashboard_summary(self._ledger.concerns())

    # ══════════════════════════════════════════════════════════════════
    # REPEAT-ISSUE WORKFLOW
    # ══════════════════════════════════════════════════════════════════

    def load_report(self, entries: Sequence[DefectReportEntry], file_name: str = "") -> None:
        self._repeats.load_report(entries, file_name)
        logger.info(
            "Report %r: %d entries, %d groups, %d unmatched",
            file_name, len(entries),
            len(self._repeats.matched_groups()), len(self._repeats.unmatched_entries()),
        )

    def load_report_rows(self, rows: Sequence[Sequence[Any]], file_name: str = "") -> int:
        """Parse raw spreadsheet rows and match them; returns the entry count."""
        entries = parse_report_rows(rows)
        self.load_report(entries, file_name)
        return len(entries)

    def rematch(self) -> None:
        self._repeats.run_matching()

    def matched_groups(self) -> List[MatchGroup]:
        return self._repeats.matched_groups()

    def unmatched_entries(self, active_only: bool = False) -> List[UnmatchedEntry]:
        if active_only:
            return self._repeats.active_unmatched()
        return self._repeats.unmatched_entries()

    def unpair(self, s_no: int, entry_index: int) -> Optional[UnmatchedEntry]:
        return self._repeats.unpair(s_no, entry_index)

    def reassign(self, entry: DefectReportEntry, from_s_no: int, to_s_no: int) -> bool:
        return self._repeats.reassign(entry, from_s_no, to_s_no)

    def manual_pair(self, unmatched_id: str, s_no: int) -> bool:
        return self._repeats.manual_pair(unmatched_id, s_no)

    def create_concern_from_unmatched(self, unmatched_id: str, **overrides: Any) -> Optional[Concern]:
        return self._repeats.create_concern_from_unmatched(unmatched_id, **overrides)

    def apply(self) -> ApplyResult:
        return self._repeats.apply()

    def undo(self) -> UndoResult:
        return self._repeats.undo()

    def diffs(self) -> List[DiffRecord]:
        return self._repeats.diffs()

    @property
    def is_applied(self) -> bool:
        return self._repeats.is_applied

    @property
    def report_file_name(self) -> str:
        return self._repeats.file_name

    def clear_report(self) -> None:
        self._repeats.clear()

    # ── lifecycle ─────────────────────────────────────────────────────

    def close(self) -> None:
        """Release the database engine (if this facade created one)."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
