"""Repeat-issue report schemas: defect entries, match groups, unmatched entries."""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class DefectReportEntry(BaseModel):
    """One row of an external repeat-issues report. Immutable once parsed."""

    location: str = ""
    defect_code: str = ""
    description: str = ""
    description_detail: str = ""
    gravity: str = ""
    quantity: int = Field(default=1, ge=1)
    source: str = ""
    responsible: str = ""

    date: str = ""
    pof_family: str = ""
    pof_code: str = ""

    model_config = {"frozen": True}

    @property
    def search_text(self) -> str:
        """Text the matcher compares against concern descriptions."""
        return f"{self.location} {self.description} {self.description_detail}"


class MatchResult(BaseModel):
    """Best concern found for a piece of defect text."""

    s_no: int
    concern: str
    score: float
    candidate_index: int


class MatchGroup(BaseModel):
    """Defect entries judged to belong to one concern."""

    qa_s_no: int
    qa_concern: str = ""
    entries: list[DefectReportEntry] = []
    repeat_count: int = 0
    match_score: float = 1.0


class UnmatchedEntry(BaseModel):
    id: str
    entry: DefectReportEntry


class ReportUploadRequest(BaseModel):
    """Report payload: either typed entries or raw spreadsheet rows.

    Raw rows go through header-driven column resolution first.
    """

    file_name: str = ""
    entries: Optional[list[DefectReportEntry]] = None
    rows: Optional[list[list[Any]]] = None

    @model_validator(mode="after")
    def exactly_one_source(self) -> "ReportUploadRequest":
        if (self.entries is None) == (self.rows is None):
            raise ValueError("Provide exactly one of 'entries' or 'rows'")
        return self
