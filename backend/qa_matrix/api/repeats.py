"""Repeat-issue endpoints: upload a report, correct the matching, apply.

Provides API endpoints for:
- Uploading a report (typed entries or raw spreadsheet rows)
- Inspecting match groups and unmatched entries
- Corrections: unpair, reassign, manual pair, create concern
- Applying the groups to the ledger, reviewing the diff, undoing

Corrections that name a stale group, entry or concern are ignored and
answered with ``changed: false``.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from qa_matrix.dependencies import get_facade
from qa_matrix.facade import QAMatrixFacade
from qa_matrix.logging_config import get_logger, report_context
from qa_matrix.schemas.concern import Concern
from qa_matrix.schemas.diff import ApplyOutcome, ApplyResult, DiffRecord, UndoResult
from qa_matrix.schemas.report import MatchGroup, ReportUploadRequest
from qa_matrix.schemas.requests import (
    CreateConcernRequest,
    MutationResult,
    PairRequest,
    ReassignRequest,
    ReportStatus,
    UnmatchedList,
    UnpairRequest,
    UnpairResult,
)

logger = get_logger(__name__)
router = APIRouter()


def _report_status(facade: QAMatrixFacade) -> ReportStatus:
    groups = facade.matched_groups()
    unmatched = facade.unmatched_entries()
    return ReportStatus(
        file_name=facade.report_file_name,
        entries=sum(len(g.entries) for g in groups) + len(unmatched),
        matched_groups=len(groups),
        unmatched=len(unmatched),
        active_unmatched=len(facade.unmatched_entries(active_only=True)),
        applied=facade.is_applied,
    )


@router.post("/upload", response_model=ReportStatus)
def upload_report(
    request: ReportUploadRequest,
    facade: QAMatrixFacade = Depends(get_facade),
) -> ReportStatus:
    """Load a report batch and match it against the ledger.

    Replaces any previous batch and discards pending apply state.
    """
    with report_context(request.file_name):
        if request.rows is not None:
            count = facade.load_report_rows(request.rows, request.file_name)
        else:
            facade.load_report(request.entries, request.file_name)
            count = len(request.entries)

        report = _report_status(facade)
        logger.info(
            "report_uploaded",
            entries=count,
            matched_groups=report.matched_groups,
            unmatched=report.unmatched,
        )
    return report


@router.get("/status", response_model=ReportStatus)
def report_status(facade: QAMatrixFacade = Depends(get_facade)) -> ReportStatus:
    return _report_status(facade)


@router.post("/rematch", response_model=ReportStatus)
def rematch(facade: QAMatrixFacade = Depends(get_facade)) -> ReportStatus:
    """Re-run matching of the current batch against the current ledger."""
    facade.rematch()
    logger.info("report_rematched", file_name=facade.report_file_name)
    return _report_status(facade)


@router.get("/groups", response_model=List[MatchGroup])
def list_groups(facade: QAMatrixFacade = Depends(get_facade)) -> List[MatchGroup]:
    """Match groups, most repeats first."""
    return facade.matched_groups()


@router.get("/unmatched", response_model=UnmatchedList)
def list_unmatched(
    active_only: bool = False,
    facade: QAMatrixFacade = Depends(get_facade),
) -> UnmatchedList:
    """Unmatched entries; ``active_only`` hides entries already turned into concerns."""
    items = facade.unmatched_entries(active_only=active_only)
    return UnmatchedList(items=items, total=len(items))


@router.post("/unpair", response_model=UnpairResult)
def unpair(body: UnpairRequest, facade: QAMatrixFacade = Depends(get_facade)) -> UnpairResult:
    moved = facade.unpair(body.s_no, body.entry_index)
    logger.info("entry_unpaired", s_no=body.s_no, entry_index=body.entry_index, changed=moved is not None)
    return UnpairResult(changed=moved is not None, unmatched=moved)


@router.post("/reassign", response_model=MutationResult)
def reassign(body: ReassignRequest, facade: QAMatrixFacade = Depends(get_facade)) -> MutationResult:
    changed = facade.reassign(body.entry, body.from_s_no, body.to_s_no)
    logger.info("entry_reassigned", from_s_no=body.from_s_no, to_s_no=body.to_s_no, changed=changed)
    return MutationResult(changed=changed)


@router.post("/pair", response_model=MutationResult)
def manual_pair(body: PairRequest, facade: QAMatrixFacade = Depends(get_facade)) -> MutationResult:
    changed = facade.manual_pair(body.unmatched_id, body.s_no)
    logger.info("entry_paired", unmatched_id=body.unmatched_id, s_no=body.s_no, changed=changed)
    return MutationResult(changed=changed)


@router.post(
    "/unmatched/{unmatched_id}/concern",
    response_model=Concern,
    status_code=status.HTTP_201_CREATED,
)
def create_concern(
    unmatched_id: str,
    body: CreateConcernRequest = CreateConcernRequest(),
    facade: QAMatrixFacade = Depends(get_facade),
) -> Concern:
    """Add a new concern seeded from an unmatched report entry."""
    concern = facade.create_concern_from_unmatched(unmatched_id, **body.model_dump())
    if concern is None:
        logger.warning("unmatched_entry_not_found", unmatched_id=unmatched_id)
        raise HTTPException(status_code=404, detail=f"Unmatched entry {unmatched_id} not found")
    logger.info("concern_created_from_unmatched", unmatched_id=unmatched_id, s_no=concern.s_no)
    return concern


@router.post("/apply", response_model=ApplyResult)
def apply_repeats(facade: QAMatrixFacade = Depends(get_facade)) -> ApplyResult:
    """Add every group's repeat count to the concern's most recent week."""
    with report_context(facade.report_file_name):
        result = facade.apply()
        if result.outcome == ApplyOutcome.BLOCKED:
            logger.warning("apply_blocked")
            raise HTTPException(
                status_code=409,
                detail="Repeats already applied; undo or rematch before applying again",
            )
        logger.info("repeats_applied", diffs=len(result.diffs))
    return result


@router.post("/undo", response_model=UndoResult)
def undo_apply(facade: QAMatrixFacade = Depends(get_facade)) -> UndoResult:
    result = facade.undo()
    logger.info("apply_undo", outcome=result.outcome.value)
    return result


@router.get("/diffs", response_model=List[DiffRecord])
def list_diffs(facade: QAMatrixFacade = Depends(get_facade)) -> List[DiffRecord]:
    """Changes made by the last apply (empty once undone or rematched)."""
    return facade.diffs()


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def clear_report(facade: QAMatrixFacade = Depends(get_facade)) -> Response:
    facade.clear_report()
    logger.info("report_cleared")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
