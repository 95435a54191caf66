"""Reconciliation store — groups repeat-issue entries by matched concern.

Every entry of the active batch lives in exactly one place: inside one
match group or in the unmatched list.  Mutations referencing a group,
index or id that no longer exists are ignored rather than raised, since
they typically come from stale user interactions.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence

from qa_matrix.engines.fuzzy_matcher import FuzzyMatcher
from qa_matrix.schemas.concern import Concern
from qa_matrix.schemas.report import DefectReportEntry, MatchGroup, UnmatchedEntry

logger = logging.getLogger(__name__)

MANUAL_MATCH_SCORE = 1.0


def _now_ms() -> int:
    return int(time.time() * 1000)


class ReconciliationStore:
    """Match groups, unmatched entries and review state for one report batch."""

    def __init__(
        self,
        matcher: FuzzyMatcher,
        clock: Callable[[], int] = _now_ms,
    ):
        self.matcher = matcher
        self._clock = clock
        self._entries: List[DefectReportEntry] = []
        self._groups: dict[int, MatchGroup] = {}
        self._unmatched: List[UnmatchedEntry] = []
        self._reviewed: set[str] = set()
        self._last_stamp = 0
        self.file_name = ""

    # ── batch lifecycle ──────────────────────────────────────────────

    def load_batch(self, entries: Iterable[DefectReportEntry], file_name: str = "") -> None:
        """Install a new report batch; review state from a previous batch is dropped."""
        self._entries = list(entries)
        self.file_name = file_name
        self._reviewed = set()
        self._groups = {}
        self._unmatched = []

    def clear(self) -> None:
        self.load_batch([], "")

    def run_matching(
        self,
        concerns: Sequence[Concern],
        threshold: Optional[float] = None,
    ) -> None:
        """Rebuild groups and the unmatched list from the active batch.

        Unmatched ids are ``unmatched-<index>`` so re-running the same batch
        yields the same ids and keeps review state meaningful.
        """
        candidates = self.matcher.prepare_candidates(concerns)
        groups: dict[int, MatchGroup] = {}
        unmatched: List[UnmatchedEntry] = []

        for idx, entry in enumerate(self._entries):
            match = self.matcher.best_match(
                entry.search_text, candidates, threshold=threshold, location=entry.location,
            )
            if match is None:
                unmatched.append(UnmatchedEntry(id=f"unmatched-{idx}", entry=entry))
                continue
            group = groups.get(match.s_no)
            if group is None:
                groups[match.s_no] = MatchGroup(
                    qa_s_no=match.s_no,
                    qa_concern=match.concern,
                    entries=[entry],
                    repeat_count=entry.quantity,
                    match_score=match.score,
                )
            else:
                group.entries.append(entry)
                group.repeat_count += entry.quantity

        ordered = sorted(groups.values(), key=lambda g: g.repeat_count, reverse=True)
        self._groups = {g.qa_s_no: g for g in ordered}
        self._unmatched = unmatched
        logger.info(
            "Matched %d/%d entries into %d groups (%d unmatched)",
            len(self._entries) - len(unmatched), len(self._entries),
            len(self._groups), len(unmatched),
        )

    # ── corrections ──────────────────────────────────────────────────

    def unpair(self, s_no: int, entry_index: int) -> Optional[UnmatchedEntry]:
        """Move one entry out of a group into the unmatched list.

        Returns the new unmatched entry, or *None* for a stale reference.
        """
        group = self._groups.get(s_no)
        if group is None or not 0 <= entry_index < len(group.entries):
            logger.debug("Ignoring unpair of #%s[%s]: no such entry", s_no, entry_index)
            return None

        entry = group.entries.pop(entry_index)
        self._shrink(group, entry)
        item = UnmatchedEntry(id=self._manual_id(), entry=entry)
        self._unmatched.append(item)
        return item

    def reassign(
        self,
        entry: DefectReportEntry,
        from_s_no: int,
        to_s_no: int,
        concern_text: str = "",
    ) -> bool:
        """Move *entry* from one concern's group to another's."""
        group = self._groups.get(from_s_no)
        if group is None or from_s_no == to_s_no:
            return False
        pos = self._locate(group.entries, entry)
        if pos is None:
            logger.debug("Ignoring reassign: entry not in group #%s", from_s_no)
            return False

        moved = group.entries.pop(pos)
        self._shrink(group, moved)
        self._attach(to_s_no, moved, concern_text)
        return True

    def manual_pair(self, unmatched_id: str, s_no: int, concern_text: str = "") -> bool:
        """Pair an unmatched entry with a concern and mark it reviewed."""
        pos = next((i for i, u in enumerate(self._unmatched) if u.id == unmatched_id), None)
        if pos is None:
            logger.debug("Ignoring manual pair: unknown id %s", unmatched_id)
            return False

        item = self._unmatched.pop(pos)
        self._attach(s_no, item.entry, concern_text)
        self._reviewed.add(unmatched_id)
        return True

    def mark_reviewed(self, unmatched_id: str) -> None:
        """Suppress an unmatched entry from the active view without dropping it."""
        self._reviewed.add(unmatched_id)

    # ── read-only snapshots ──────────────────────────────────────────

    @property
    def entries(self) -> List[DefectReportEntry]:
        return list(self._entries)

    @property
    def reviewed_ids(self) -> frozenset[str]:
        return frozenset(self._reviewed)

    def groups(self) -> List[MatchGroup]:
        return [g.model_copy(update={"entries": list(g.entries)}) for g in self._groups.values()]

    def group(self, s_no: int) -> Optional[MatchGroup]:
        g = self._groups.get(s_no)
        return g.model_copy(update={"entries": list(g.entries)}) if g else None

    def unmatched(self) -> List[UnmatchedEntry]:
        return list(self._unmatched)

    def find_unmatched(self, unmatched_id: str) -> Optional[UnmatchedEntry]:
        return next((u for u in self._unmatched if u.id == unmatched_id), None)

    def active_unmatched(self) -> List[UnmatchedEntry]:
        """Unmatched entries the user has not resolved yet."""
        return [u for u in self._unmatched if u.id not in self._reviewed]

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _locate(entries: List[DefectReportEntry], entry: DefectReportEntry) -> Optional[int]:
        """Index of *entry*: by identity first, then by value."""
        for i, e in enumerate(entries):
            if e is entry:
                return i
        for i, e in enumerate(entries):
            if e == entry:
                return i
        return None

    def _shrink(self, group: MatchGroup, removed: DefectReportEntry) -> None:
        group.repeat_count -= removed.quantity
        if not group.entries:
            del self._groups[group.qa_s_no]

    def _attach(self, s_no: int, entry: DefectReportEntry, concern_text: str) -> None:
        group = self._groups.get(s_no)
        if group is None:
            self._groups[s_no] = MatchGroup(
                qa_s_no=s_no,
                qa_concern=concern_text,
                entries=[entry],
                repeat_count=entry.quantity,
                match_score=MANUAL_MATCH_SCORE,
            )
        else:
            group.entries.append(entry)
            group.repeat_count += entry.quantity

    def _manual_id(self) -> str:
        stamp = max(self._clock(), self._last_stamp + 1)
        self._last_stamp = stamp
        return f"unmatched-manual-{stamp}"
