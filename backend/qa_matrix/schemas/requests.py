"""Pydantic schemas for the HTTP command endpoints.

Request bodies for ledger edits and repeat-issue corrections, plus the
small response envelopes the routers return.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from qa_matrix.schemas.report import DefectReportEntry, UnmatchedEntry


# ── ledger edits ────────────────────────────────────────────────────────

class WeeklyUpdate(BaseModel):
    value: int = Field(ge=0, description="Defect count for the week")


class ScoreUpdate(BaseModel):
    """New station score; ``null`` marks the station as not evaluated."""

    value: Optional[float] = None


class RatingUpdate(BaseModel):
    defect_rating: Literal[1, 3, 5]


class FieldUpdate(BaseModel):
    value: str


# ── repeat-issue corrections ────────────────────────────────────────────

class UnpairRequest(BaseModel):
    s_no: int
    entry_index: int = Field(ge=0)


class ReassignRequest(BaseModel):
    entry: DefectReportEntry
    from_s_no: int
    to_s_no: int


class PairRequest(BaseModel):
    unmatched_id: str
    s_no: int


class CreateConcernRequest(BaseModel):
    """Optional overrides for a concern created from an unmatched entry.

    Anything left unset is derived from the report row.
    """

    area: Optional[str] = None
    description: Optional[str] = None
    defect_rating: Optional[Literal[1, 3, 5]] = None
    mfg_action: str = ""
    target: str = ""


# ── responses ───────────────────────────────────────────────────────────

class ReportStatus(BaseModel):
    file_name: str
    entries: int
    matched_groups: int
    unmatched: int
    active_unmatched: int
    applied: bool


class MutationResult(BaseModel):
    """Whether a correction changed anything (stale targets are ignored)."""

    changed: bool


class UnpairResult(MutationResult):
    unmatched: Optional[UnmatchedEntry] = None


class UnmatchedList(BaseModel):
    items: List[UnmatchedEntry]
    total: int
