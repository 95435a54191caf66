"""Apply engine — commits match groups into the concern ledger.

One apply cycle:
1. Snapshot the whole ledger (deep copy) as the single undo point
2. Add each group's repeat count to its concern's most recent week
3. Recalculate statuses for every touched concern
4. Record a diff row for the week change and for every status that flipped

Applying twice without an intervening undo (or a fresh matching run) would
double-count repeats, so a second apply is refused with a BLOCKED outcome.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from qa_matrix.domain.status import recalculate
from qa_matrix.schemas.concern import MOST_RECENT_WEEK, Concern
from qa_matrix.schemas.diff import (
    ApplyOutcome,
    ApplyResult,
    DiffField,
    DiffRecord,
    UndoOutcome,
    UndoResult,
)
from qa_matrix.schemas.report import MatchGroup

logger = logging.getLogger(__name__)

_STATUS_FIELDS = (
    (DiffField.WORKSTATION_STATUS, "workstation_status"),
    (DiffField.MFG_STATUS, "mfg_status"),
    (DiffField.PLANT_STATUS, "plant_status"),
)


class ApplyEngine:
    """Holds the pending diff and snapshot of at most one apply cycle."""

    def __init__(self) -> None:
        self._snapshot: Optional[List[Concern]] = None
        self._diffs: List[DiffRecord] = []
        self._applied = False

    # ── state ────────────────────────────────────────────────────────

    @property
    def is_applied(self) -> bool:
        return self._applied

    @property
    def can_undo(self) -> bool:
        return self._snapshot is not None

    @property
    def diffs(self) -> List[DiffRecord]:
        return list(self._diffs)

    def discard(self) -> None:
        """Forget any pending apply state; the current ledger becomes final."""
        self._snapshot = None
        self._diffs = []
        self._applied = False

    # ── apply / undo ─────────────────────────────────────────────────

    def apply(self, ledger: Sequence[Concern], groups: Iterable[MatchGroup]) -> ApplyResult:
        if self._applied:
            logger.warning("Apply refused: repeats already applied (undo or rematch first)")
            return ApplyResult(outcome=ApplyOutcome.BLOCKED, applied=True, diffs=self.diffs)

        self._snapshot = [c.model_copy(deep=True) for c in ledger]

        by_concern = {g.qa_s_no: g for g in groups}
        diffs: List[DiffRecord] = []
        updated: List[Concern] = []

        for concern in ledger:
            group = by_concern.get(concern.s_no)
            if group is None:
                updated.append(concern.model_copy(deep=True))
                continue
            after = self._add_repeats(concern, group.repeat_count)
            diffs.extend(self._diff(concern, after))
            updated.append(after)

        self._diffs = diffs
        self._applied = True
        logger.info(
            "Applied %d groups: %d diff rows", len(by_concern), len(diffs),
        )
        return ApplyResult(
            outcome=ApplyOutcome.APPLIED, applied=True, diffs=list(diffs), ledger=updated,
        )

    def undo(self) -> UndoResult:
        if self._snapshot is None:
            logger.info("Nothing to undo")
            return UndoResult(outcome=UndoOutcome.NOTHING_TO_UNDO)

        restored = self._snapshot
        self.discard()
        return UndoResult(outcome=UndoOutcome.UNDONE, ledger=restored)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _add_repeats(concern: Concern, repeat_count: int) -> Concern:
        weekly = list(concern.weekly_recurrence)
        weekly[MOST_RECENT_WEEK] += repeat_count
        return recalculate(concern.model_copy(update={"weekly_recurrence": weekly}))

    @staticmethod
    def _diff(before: Concern, after: Concern) -> List[DiffRecord]:
        rows = [
            DiffRecord(
                s_no=before.s_no,
                concern=before.description,
                field=DiffField.RECENT_WEEK,
                before=before.weekly_recurrence[MOST_RECENT_WEEK],
                after=after.weekly_recurrence[MOST_RECENT_WEEK],
            )
        ]
        for field, attr in _STATUS_FIELDS:
            old, new = getattr(before, attr), getattr(after, attr)
            if old != new:
                rows.append(DiffRecord(
                    s_no=before.s_no,
                    concern=before.description,
                    field=field,
                    before=old.value,
                    after=new.value,
                ))
        return rows
