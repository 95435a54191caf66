"""Apply/undo result schemas."""

from enum import Enum
from typing import Union

from pydantic import BaseModel

from qa_matrix.schemas.concern import Concern


class DiffField(str, Enum):
    RECENT_WEEK = "W-1 (Last Week)"
    WORKSTATION_STATUS = "WS Status"
    MFG_STATUS = "MFG Status"
    PLANT_STATUS = "Plant Status"


class DiffRecord(BaseModel):
    """One changed scalar field of one concern."""

    s_no: int
    concern: str
    field: DiffField
    before: Union[int, str]
    after: Union[int, str]


class ApplyOutcome(str, Enum):
    APPLIED = "applied"
    BLOCKED = "blocked"  # already applied; undo or rematch first


class UndoOutcome(str, Enum):
    UNDONE = "undone"
    NOTHING_TO_UNDO = "nothing_to_undo"


class ApplyResult(BaseModel):
    outcome: ApplyOutcome
    applied: bool
    diffs: list[DiffRecord] = []
    ledger: list[Concern] = []


class UndoResult(BaseModel):
    outcome: UndoOutcome
    ledger: list[Concern] = []
