"""Ledger store — sole owner of the concern ledger.

Every command validates its input, rebuilds the derived fields through the
status calculator and persists the ledger before returning, so raw and
derived fields never disagree outside a command.  Commands addressing an
unknown ``s_no`` are no-ops returning *None* / *False*; invalid values raise
``ValueError`` (pydantic's ``ValidationError`` is one).
"""

import logging
from typing import Any, Iterable, List, Optional

from qa_matrix.domain.status import recalculate
from qa_matrix.repositories.ledger_repo import LedgerRepository
from qa_matrix.schemas.concern import (
    SECTION_MODELS,
    WEEKS_TRACKED,
    Concern,
    ConcernCreate,
    ConcernField,
    ScoreSection,
)

logger = logging.getLogger(__name__)


def _rebuild(concern: Concern, **changes: Any) -> Concern:
    """Re-validate *concern* with *changes* applied, then recalculate."""
    data = concern.model_dump()
    data.update(changes)
    return recalculate(Concern.model_validate(data))


class LedgerStore:
    def __init__(self, repo: Optional[LedgerRepository] = None):
        self.repo = repo
        self._concerns: List[Concern] = []
        if repo is not None:
            stored = repo.load()
            if stored is not None:
                self._concerns = stored
                logger.info("Loaded %d concerns from storage", len(stored))

    # ── reads ────────────────────────────────────────────────────────

    def concerns(self) -> List[Concern]:
        """Deep-copied snapshot of the ledger."""
        return [c.model_copy(deep=True) for c in self._concerns]

    def get(self, s_no: int) -> Optional[Concern]:
        pos = self._index(s_no)
        return self._concerns[pos].model_copy(deep=True) if pos is not None else None

    def __len__(self) -> int:
        return len(self._concerns)

    def __contains__(self, s_no: object) -> bool:
        return any(c.s_no == s_no for c in self._concerns)

    def next_s_no(self) -> int:
        return max((c.s_no for c in self._concerns), default=0) + 1

    # ── commands ─────────────────────────────────────────────────────

    def add_concern(self, payload: ConcernCreate) -> Concern:
        concern = recalculate(Concern(s_no=self.next_s_no(), **payload.model_dump()))
        self._concerns.append(concern)
        self._commit()
        logger.info("Added concern #%d (%s)", concern.s_no, concern.station)
        return concern.model_copy(deep=True)

    def bulk_import(self, concerns: Iterable[Concern]) -> List[Concern]:
        """Append concerns, all or nothing; duplicate ``s_no`` values are rejected."""
        incoming = [recalculate(Concern.model_validate(c.model_dump())) for c in concerns]
        seen = {c.s_no for c in self._concerns}
        for c in incoming:
            if c.s_no in seen:
                raise ValueError(f"Duplicate concern s_no {c.s_no}")
            seen.add(c.s_no)
        self._concerns.extend(incoming)
        self._commit()
        logger.info("Imported %d concerns", len(incoming))
        return [c.model_copy(deep=True) for c in incoming]

    def update_weekly(self, s_no: int, week_index: int, value: int) -> Optional[Concern]:
        if not 0 <= week_index < WEEKS_TRACKED:
            raise ValueError(f"week_index must be in [0, {WEEKS_TRACKED}), got {week_index}")

        def change(c: Concern) -> Concern:
            weekly = list(c.weekly_recurrence)
            weekly[week_index] = value
            return _rebuild(c, weekly_recurrence=weekly)

        return self._mutate(s_no, change)

    def update_score(
        self,
        s_no: int,
        section: ScoreSection,
        key: str,
        value: Optional[float],
    ) -> Optional[Concern]:
        section = ScoreSection(section)
        model = SECTION_MODELS[section]
        if key not in model.model_fields:
            raise ValueError(f"Unknown {section.value} score key: {key!r}")

        def change(c: Concern) -> Concern:
            scores = getattr(c, section.value).model_dump()
            scores[key] = value
            return _rebuild(c, **{section.value: scores})

        return self._mutate(s_no, change)

    def update_rating(self, s_no: int, rating: int) -> Optional[Concern]:
        return self._mutate(s_no, lambda c: _rebuild(c, defect_rating=rating))

    def update_field(self, s_no: int, field: ConcernField, value: str) -> Optional[Concern]:
        field = ConcernField(field)
        return self._mutate(s_no, lambda c: _rebuild(c, **{field.value: value}))

    def delete(self, s_no: int) -> bool:
        pos = self._index(s_no)
        if pos is None:
            return False
        del self._concerns[pos]
        self._commit()
        logger.info("Deleted concern #%d", s_no)
        return True

    def replace_all(self, concerns: Iterable[Concern]) -> None:
        """Swap in a whole ledger (apply / undo results)."""
        self._concerns = [recalculate(c) for c in concerns]
        self._commit()

    def reset(self) -> None:
        """Empty the ledger and drop it from storage."""
        self._concerns = []
        if self.repo is not None:
            self.repo.clear()

    # ── helpers ──────────────────────────────────────────────────────

    def _index(self, s_no: int) -> Optional[int]:
        return next((i for i, c in enumerate(self._concerns) if c.s_no == s_no), None)

    def _mutate(self, s_no: int, change) -> Optional[Concern]:
        pos = self._index(s_no)
        if pos is None:
            logger.debug("Ignoring update for unknown concern #%s", s_no)
            return None
        updated = change(self._concerns[pos])
        self._concerns[pos] = updated
        self._commit()
        return updated.model_copy(deep=True)

    def _commit(self) -> None:
        if self.repo is not None:
            self.repo.save(self._concerns)
