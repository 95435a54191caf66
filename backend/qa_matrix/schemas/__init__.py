"""Pydantic schemas for request/response validation and domain types."""

from qa_matrix.schemas.concern import (
    ChassisScores,
    Concern,
    ConcernBase,
    ConcernCreate,
    ConcernField,
    ControlRating,
    FinalScores,
    QControlDetailScores,
    QControlScores,
    ScoreSection,
    Status,
    TrimScores,
)
from qa_matrix.schemas.dashboard import DashboardSummary, StatusTally
from qa_matrix.schemas.diff import (
    ApplyOutcome,
    ApplyResult,
    DiffField,
    DiffRecord,
    UndoOutcome,
    UndoResult,
)
from qa_matrix.schemas.report import (
    DefectReportEntry,
    MatchGroup,
    MatchResult,
    ReportUploadRequest,
    UnmatchedEntry,
)

__all__ = [
    "Concern", "ConcernBase", "ConcernCreate", "ConcernField",
    "ControlRating", "Status", "ScoreSection",
    "TrimScores", "ChassisScores", "FinalScores",
    "QControlScores", "QControlDetailScores",
    "DefectReportEntry", "MatchGroup", "MatchResult",
    "ReportUploadRequest", "UnmatchedEntry",
    "DiffField", "DiffRecord", "ApplyOutcome", "ApplyResult",
    "UndoOutcome", "UndoResult",
    "DashboardSummary", "StatusTally",
]
