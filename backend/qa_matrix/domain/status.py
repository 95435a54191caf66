"""Status recalculation — derives ratings and OK/NG statuses from raw fields.

Every mutation of a concern's defect rating, weekly recurrence or any score
must pass through :func:`recalculate` before it is considered committed.

Usage:
    from qa_matrix.domain.status import recalculate

    concern = recalculate(concern.model_copy(update={"defect_rating": 5}))
"""

from typing import Iterable, Optional

from pydantic import BaseModel

from qa_matrix.schemas.concern import Concern, ControlRating, Status


def _sum_present(values: Iterable[Optional[float]]) -> float:
    """Sum the evaluated scores; absent (None) scores count as 0."""
    return sum(v for v in values if v is not None)


def _section_values(section: BaseModel, exclude: frozenset[str] = frozenset()) -> list:
    return [v for k, v in section.model_dump().items() if k not in exclude]


def control_rating(concern: Concern) -> ControlRating:
    """Compute the three score sums for a concern.

    Formula:
        mfg     = trim + chassis + final (without ResidualTorque)
        quality = q_control
        plant   = ResidualTorque + q_control + q_control_detail
    """
    mfg = _sum_present(
        _section_values(concern.trim)
        + _section_values(concern.chassis)
        + _section_values(concern.final, exclude=frozenset({"ResidualTorque"}))
    )
    q_control = _section_values(concern.q_control)
    quality = _sum_present(q_control)
    plant = _sum_present(
        [concern.final.ResidualTorque]
        + q_control
        + _section_values(concern.q_control_detail)
    )
    return ControlRating(mfg=mfg, quality=quality, plant=plant)


def recalculate(concern: Concern) -> Concern:
    """Return a copy of *concern* with every derived field rebuilt.

    Pure and idempotent: raw fields are untouched and a second call on the
    result yields an equal concern.

    Rules:
        - workstation: NG on any live weekly recurrence, else mfg >= rating
        - MFG:         mfg >= rating
        - plant:       plant >= rating

    The workstation and MFG statuses deliberately share the mfg threshold;
    the workstation status additionally fails on recurrence.

    Examples:
        >>> c = recalculate(Concern(s_no=1, defect_rating=3))
        >>> c.combined_rating, c.mfg_status.value
        (3, 'NG')
    """
    rating = concern.defect_rating
    recurrence = sum(concern.weekly_recurrence)
    ratings = control_rating(concern)

    mfg_ok = ratings.mfg >= rating
    has_recurrence = any(w > 0 for w in concern.weekly_recurrence)

    return concern.model_copy(
        update={
            "recurrence": recurrence,
            "combined_rating": rating + recurrence,
            "control_rating": ratings,
            "workstation_status": Status.OK if (mfg_ok and not has_recurrence) else Status.NG,
            "mfg_status": Status.OK if mfg_ok else Status.NG,
            "plant_status": Status.OK if ratings.plant >= rating else Status.NG,
        },
        deep=True,
    )
