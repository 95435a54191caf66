"""Repeat-issue reconciliation workflow.

Ties the ledger, the reconciliation store and the apply engine together:

1. Load a report batch and fuzzy-match it against the current ledger
2. Let the user correct the grouping (unpair / reassign / pair / create)
3. Apply the groups to the ledger, review the diff, optionally undo

A fresh matching run, or a new concern created from an unmatched entry,
voids any pending apply state: the ledger as it stands becomes final.
"""

import logging
from typing import Iterable, List, Optional

from qa_matrix.engines.apply_engine import ApplyEngine
from qa_matrix.engines.reconciliation import ReconciliationStore
from qa_matrix.schemas.concern import WEEKS_TRACKED, Concern, ConcernCreate
from qa_matrix.schemas.diff import ApplyOutcome, ApplyResult, DiffRecord, UndoOutcome, UndoResult
from qa_matrix.schemas.report import DefectReportEntry, MatchGroup, UnmatchedEntry
from qa_matrix.services.ledger_store import LedgerStore
from qa_matrix.services.report_ingestion import gravity_to_rating

logger = logging.getLogger(__name__)


def concern_text_for(entry: DefectReportEntry) -> str:
    """"<description> - <detail>", without a dangling separator."""
    text = f"{entry.description} - {entry.description_detail}".strip()
    if text.endswith(" -"):
        text = text[:-2].rstrip()
    return text


class RepeatService:
    def __init__(
        self,
        ledger: LedgerStore,
        store: ReconciliationStore,
        engine: ApplyEngine,
        threshold: float = 0.15,
        default_area: str = "Trim",
    ):
        self.ledger = ledger
        self.store = store
        self.engine = engine
        self.threshold = threshold
        self.default_area = default_area

    # ── batch ────────────────────────────────────────────────────────

    def load_report(self, entries: Iterable[DefectReportEntry], file_name: str = "") -> None:
        self.store.load_batch(entries, file_name)
        self.run_matching()

    def run_matching(self) -> None:
        self.store.run_matching(self.ledger.concerns(), threshold=self.threshold)
        self.engine.discard()

    def clear(self) -> None:
        self.store.clear()
        self.engine.discard()

    # ── corrections ──────────────────────────────────────────────────

    def unpair(self, s_no: int, entry_index: int) -> Optional[UnmatchedEntry]:
        return self.store.unpair(s_no, entry_index)

    def reassign(self, entry: DefectReportEntry, from_s_no: int, to_s_no: int) -> bool:
        target = self.ledger.get(to_s_no)
        if target is None:
            logger.debug("Ignoring reassign to unknown concern #%s", to_s_no)
            return False
        return self.store.reassign(entry, from_s_no, to_s_no, concern_text=target.description)

    def manual_pair(self, unmatched_id: str, s_no: int) -> bool:
        target = self.ledger.get(s_no)
        if target is None:
            logger.debug("Ignoring pair with unknown concern #%s", s_no)
            return False
        return self.store.manual_pair(unmatched_id, s_no, concern_text=target.description)

    def create_concern_from_unmatched(
        self,
        unmatched_id: str,
        area: Optional[str] = None,
        description: Optional[str] = None,
        defect_rating: Optional[int] = None,
        mfg_action: str = "",
        target: str = "",
    ) -> Optional[Concern]:
        """Turn an unmatched entry into a new concern and mark the entry reviewed.

        The entry's quantity seeds the most recent week.  The entry stays in
        the unmatched list (suppressed from the active view) so the report
        batch keeps every row.
        """
        item = self.store.find_unmatched(unmatched_id)
        if item is None:
            return None
        entry = item.entry
        weekly = [0] * WEEKS_TRACKED
        weekly[-1] = entry.quantity

        concern = self.ledger.add_concern(ConcernCreate(
            source=entry.source,
            station=entry.location,
            area=area or entry.pof_code or self.default_area,
            description=description or concern_text_for(entry),
            defect_rating=defect_rating or gravity_to_rating(entry.gravity),
            weekly_recurrence=weekly,
            mfg_action=mfg_action,
            resp=entry.responsible,
            target=target,
        ))
        self.store.mark_reviewed(unmatched_id)
        self.engine.discard()
        return concern

    # ── apply / undo ─────────────────────────────────────────────────

    def apply(self) -> ApplyResult:
        result = self.engine.apply(self.ledger.concerns(), self.store.groups())
        if result.outcome == ApplyOutcome.APPLIED:
            self.ledger.replace_all(result.ledger)
        return result

    def undo(self) -> UndoResult:
        result = self.engine.undo()
        if result.outcome == UndoOutcome.UNDONE:
            self.ledger.replace_all(result.ledger)
        return result

    # ── read-only snapshots ──────────────────────────────────────────

    @property
    def is_applied(self) -> bool:
        return self.engine.is_applied

    @property
    def file_name(self) -> str:
        return self.store.file_name

    def matched_groups(self) -> List[MatchGroup]:
        return self.store.groups()

    def unmatched_entries(self) -> List[UnmatchedEntry]:
        return self.store.unmatched()

    def active_unmatched(self) -> List[UnmatchedEntry]:
        return self.store.active_unmatched()

    def diffs(self) -> List[DiffRecord]:
        return self.engine.diffs
