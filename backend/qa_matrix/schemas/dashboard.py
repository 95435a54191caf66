"""Dashboard summary schemas."""

from pydantic import BaseModel


class StatusTally(BaseModel):
    total: int = 0
    ok_workstation: int = 0
    ok_mfg: int = 0
    ok_plant: int = 0


class DashboardSummary(StatusTally):
    """Overall tally plus per-area and per-source breakdowns."""

    by_area: dict[str, StatusTally] = {}
    by_source: dict[str, StatusTally] = {}
