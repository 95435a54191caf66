"""Dashboard tallies over the concern ledger."""

from typing import Iterable, List

from qa_matrix.schemas.concern import Concern, Status
from qa_matrix.schemas.dashboard import DashboardSummary, StatusTally

AREAS = ("TRIM", "CHASSIS", "FINAL")
SOURCES = ("DVX", "ER3", "ER4", "FIELD", "SCA")


def tally(concerns: Iterable[Concern]) -> StatusTally:
    """Count concerns and how many are OK at each control level."""
    items: List[Concern] = list(concerns)
    return StatusTally(
        total=len(items),
        ok_workstation=sum(1 for c in items if c.workstation_status == Status.OK),
        ok_mfg=sum(1 for c in items if c.mfg_status == Status.OK),
        ok_plant=sum(1 for c in items if c.plant_status == Status.OK),
    )


def dashboard_summary(concerns: Iterable[Concern]) -> DashboardSummary:
    """Overall tally plus fixed per-area and per-source breakdowns.

    Area and source comparisons are case-insensitive; concerns outside the
    known areas/sources only count toward the overall figures.
    """
    items = list(concerns)
    overall = tally(items)
    return DashboardSummary(
        **overall.model_dump(),
        by_area={
            area: tally(c for c in items if c.area.upper() == area)
            for area in AREAS
        },
        by_source={
            source: tally(c for c in items if c.source.upper() == source)
            for source in SOURCES
        },
    )
