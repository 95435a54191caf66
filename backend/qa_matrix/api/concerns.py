"""Concern endpoints — read and edit the QA matrix ledger.

Every edit goes through the ledger store, so the returned concern always
carries freshly recalculated ratings and statuses.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from qa_matrix.dependencies import get_facade
from qa_matrix.facade import QAMatrixFacade
from qa_matrix.logging_config import get_logger
from qa_matrix.schemas.concern import Concern, ConcernCreate, ConcernField, ScoreSection
from qa_matrix.schemas.dashboard import DashboardSummary
from qa_matrix.schemas.requests import FieldUpdate, RatingUpdate, ScoreUpdate, WeeklyUpdate

logger = get_logger(__name__)
router = APIRouter()


def _found(concern, s_no: int) -> Concern:
    if concern is None:
        logger.warning("concern_not_found", s_no=s_no)
        raise HTTPException(status_code=404, detail=f"Concern {s_no} not found")
    return concern


def _invalid(e: ValueError, **context) -> HTTPException:
    logger.warning("concern_update_rejected", error=str(e), **context)
    return HTTPException(status_code=422, detail=str(e))


@router.get("/", response_model=List[Concern])
def list_concerns(facade: QAMatrixFacade = Depends(get_facade)) -> List[Concern]:
    """List the whole ledger in s_no order of insertion."""
    return facade.list_concerns()


@router.get("/dashboard", response_model=DashboardSummary)
def dashboard(facade: QAMatrixFacade = Depends(get_facade)) -> DashboardSummary:
    """OK counts overall, per area and per source."""
    return facade.dashboard()


@router.get("/{s_no}", response_model=Concern)
def get_concern(s_no: int, facade: QAMatrixFacade = Depends(get_facade)) -> Concern:
    return _found(facade.get_concern(s_no), s_no)


@router.post("/", response_model=Concern, status_code=status.HTTP_201_CREATED)
def add_concern(
    payload: ConcernCreate,
    facade: QAMatrixFacade = Depends(get_facade),
) -> Concern:
    concern = facade.add_concern(payload)
    logger.info("concern_added", s_no=concern.s_no, station=concern.station)
    return concern


@router.post("/import", response_model=List[Concern], status_code=status.HTTP_201_CREATED)
def import_concerns(
    concerns: List[Concern],
    facade: QAMatrixFacade = Depends(get_facade),
) -> List[Concern]:
    """Append complete concerns (e.g. from a spreadsheet export); all or nothing."""
    try:
        imported = facade.bulk_import(concerns)
    except ValueError as e:
        raise _invalid(e, count=len(concerns))
    logger.info("concerns_imported", count=len(imported))
    return imported


@router.put("/{s_no}/weekly/{week_index}", response_model=Concern)
def update_weekly(
    s_no: int,
    week_index: int,
    body: WeeklyUpdate,
    facade: QAMatrixFacade = Depends(get_facade),
) -> Concern:
    try:
        concern = facade.update_weekly(s_no, week_index, body.value)
    except ValueError as e:
        raise _invalid(e, s_no=s_no, week_index=week_index)
    return _found(concern, s_no)


@router.put("/{s_no}/scores/{section}/{key}", response_model=Concern)
def update_score(
    s_no: int,
    section: ScoreSection,
    key: str,
    body: ScoreUpdate,
    facade: QAMatrixFacade = Depends(get_facade),
) -> Concern:
    try:
        concern = facade.update_score(s_no, section, key, body.value)
    except ValueError as e:
        raise _invalid(e, s_no=s_no, section=section.value, key=key)
    return _found(concern, s_no)


@router.put("/{s_no}/rating", response_model=Concern)
def update_rating(
    s_no: int,
    body: RatingUpdate,
    facade: QAMatrixFacade = Depends(get_facade),
) -> Concern:
    return _found(facade.update_rating(s_no, body.defect_rating), s_no)


@router.put("/{s_no}/fields/{field}", response_model=Concern)
def update_field(
    s_no: int,
    field: ConcernField,
    body: FieldUpdate,
    facade: QAMatrixFacade = Depends(get_facade),
) -> Concern:
    return _found(facade.update_field(s_no, field, body.value), s_no)


@router.delete("/{s_no}", status_code=status.HTTP_204_NO_CONTENT)
def delete_concern(s_no: int, facade: QAMatrixFacade = Depends(get_facade)) -> Response:
    if not facade.delete_concern(s_no):
        raise HTTPException(status_code=404, detail=f"Concern {s_no} not found")
    logger.info("concern_deleted", s_no=s_no)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def reset_ledger(facade: QAMatrixFacade = Depends(get_facade)) -> Response:
    """Drop the whole ledger and any loaded report."""
    facade.reset_ledger()
    logger.info("ledger_reset")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
