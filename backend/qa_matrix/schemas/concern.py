"""Concern (QA matrix ledger entry) schemas and supporting enums."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

WEEKS_TRACKED = 6
MOST_RECENT_WEEK = WEEKS_TRACKED - 1


class Status(str, Enum):
    OK = "OK"
    NG = "NG"


class ScoreSection(str, Enum):
    """Tag for the five control-score records held by a concern."""

    TRIM = "trim"
    CHASSIS = "chassis"
    FINAL = "final"
    Q_CONTROL = "q_control"
    Q_CONTROL_DETAIL = "q_control_detail"


class ConcernField(str, Enum):
    """Free-text concern fields editable through the ledger store."""

    SOURCE = "source"
    STATION = "station"
    AREA = "area"
    DESCRIPTION = "description"
    MFG_ACTION = "mfg_action"
    RESP = "resp"
    TARGET = "target"


# ── score sections (None = not yet evaluated) ──────────────────────────


class TrimScores(BaseModel):
    T10: Optional[float] = None
    T20: Optional[float] = None
    T30: Optional[float] = None
    T40: Optional[float] = None
    T50: Optional[float] = None
    T60: Optional[float] = None
    T70: Optional[float] = None
    T80: Optional[float] = None
    T90: Optional[float] = None
    T100: Optional[float] = None
    TPQG: Optional[float] = None


class ChassisScores(BaseModel):
    C10: Optional[float] = None
    C20: Optional[float] = None
    C30: Optional[float] = None
    C40: Optional[float] = None
    C45: Optional[float] = None
    P10: Optional[float] = None
    P20: Optional[float] = None
    P30: Optional[float] = None
    C50: Optional[float] = None
    C60: Optional[float] = None
    C70: Optional[float] = None
    RSub: Optional[float] = None
    TS: Optional[float] = None
    C80: Optional[float] = None
    CPQG: Optional[float] = None


class FinalScores(BaseModel):
    F10: Optional[float] = None
    F20: Optional[float] = None
    F30: Optional[float] = None
    F40: Optional[float] = None
    F50: Optional[float] = None
    F60: Optional[float] = None
    F70: Optional[float] = None
    F80: Optional[float] = None
    F90: Optional[float] = None
    F100: Optional[float] = None
    FPQG: Optional[float] = None
    # Counted toward the plant rating, not the MFG rating.
    ResidualTorque: Optional[float] = None


class QControlScores(BaseModel):
    """Process-level (quality) control evidence."""

    freq_control_1_1: Optional[float] = None
    visual_control_1_2: Optional[float] = None
    periodic_audit_1_3: Optional[float] = None
    human_control_1_4: Optional[float] = None
    sae_alert_3_1: Optional[float] = None
    freq_measure_3_2: Optional[float] = None
    manual_tool_3_3: Optional[float] = None
    human_tracking_3_4: Optional[float] = None
    auto_control_5_1: Optional[float] = None
    impossibility_5_2: Optional[float] = None
    sae_prohibition_5_3: Optional[float] = None


class QControlDetailScores(BaseModel):
    """Plant-level detail controls."""

    CVT: Optional[float] = None
    SHOWER: Optional[float] = None
    DynamicUB: Optional[float] = None
    CC4: Optional[float] = None


SECTION_MODELS: dict[ScoreSection, type[BaseModel]] = {
    ScoreSection.TRIM: TrimScores,
    ScoreSection.CHASSIS: ChassisScores,
    ScoreSection.FINAL: FinalScores,
    ScoreSection.Q_CONTROL: QControlScores,
    ScoreSection.Q_CONTROL_DETAIL: QControlDetailScores,
}


class ControlRating(BaseModel):
    """Score sums compared against the defect rating."""

    mfg: float = 0
    quality: float = 0
    plant: float = 0


# ── concern ────────────────────────────────────────────────────────────


class ConcernBase(BaseModel):
    source: str = ""
    station: str = ""
    area: str = ""
    description: str = ""
    defect_rating: Literal[1, 3, 5] = 1
    weekly_recurrence: list[int] = Field(
        default_factory=lambda: [0] * WEEKS_TRACKED,
        description="Repeat counts per week, oldest first; last slot is W-1.",
    )

    trim: TrimScores = Field(default_factory=TrimScores)
    chassis: ChassisScores = Field(default_factory=ChassisScores)
    final: FinalScores = Field(default_factory=FinalScores)
    q_control: QControlScores = Field(default_factory=QControlScores)
    q_control_detail: QControlDetailScores = Field(default_factory=QControlDetailScores)

    mfg_action: str = ""
    resp: str = ""
    target: str = ""

    @field_validator("weekly_recurrence")
    @classmethod
    def validate_weekly_recurrence(cls, v: list[int]) -> list[int]:
        if len(v) != WEEKS_TRACKED:
            raise ValueError(
                f"weekly_recurrence must have exactly {WEEKS_TRACKED} entries, got {len(v)}"
            )
        if any(w < 0 for w in v):
            raise ValueError(f"weekly_recurrence values must be >= 0: {v}")
        return v


class ConcernCreate(ConcernBase):
    """Payload for a new concern; the ledger assigns ``s_no``."""


class Concern(ConcernBase):
    s_no: int

    # Derived cache, always rebuilt by domain.status.recalculate.
    recurrence: int = 0
    combined_rating: int = 0
    control_rating: ControlRating = Field(default_factory=ControlRating)
    workstation_status: Status = Status.NG
    mfg_status: Status = Status.NG
    plant_status: Status = Status.NG
