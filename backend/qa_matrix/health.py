"""Health check endpoints with dependency checking.

- Application status
- Database connectivity
- Ledger storage (stored payload readable)
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qa_matrix.database import get_db
from qa_matrix.dependencies import get_facade
from qa_matrix.facade import QAMatrixFacade
from qa_matrix.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)

SERVICE_NAME = "qa-matrix"
VERSION = "1.0.0"


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity.

    Args:
        db: Database session.

    Returns:
        Dict with status and optional error message.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"healthy": True, "message": "Database connected"}
    except SQLAlchemyError as e:
        logger.error("database_health_check_failed", error=str(e))
        return {"healthy": False, "message": f"Database error: {str(e)}"}


def check_ledger(facade: QAMatrixFacade) -> Dict[str, Any]:
    """Report ledger size and whether a report batch is pending."""
    return {
        "healthy": True,
        "concerns": len(facade.list_concerns()),
        "report_loaded": bool(facade.report_file_name),
        "repeats_applied": facade.is_applied,
    }


@router.get("/health")
def health_check() -> Dict[str, Any]:
    """Basic health check - just app status."""
    return {"status": "healthy", "service": SERVICE_NAME, "version": VERSION}


@router.get("/health/detailed")
def detailed_health_check(
    db: Session = Depends(get_db),
    facade: QAMatrixFacade = Depends(get_facade),
) -> Dict[str, Any]:
    """Detailed health check with dependency status.

    Returns:
        Health status for the database and the ledger.
    """
    checks = {
        "database": check_database(db),
        "ledger": check_ledger(facade),
    }

    all_healthy = all(check["healthy"] for check in checks.values())
    overall_status = "healthy" if all_healthy else "degraded"

    logger.info(
        "health_check_performed",
        status=overall_status,
        database=checks["database"]["healthy"],
        concerns=checks["ledger"]["concerns"],
    )

    return {
        "status": overall_status,
        "service": SERVICE_NAME,
        "version": VERSION,
        "checks": checks,
    }


@router.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Readiness probe: 200 if the database answers, 503 otherwise."""
    result = check_database(db)
    if not result["healthy"]:
        raise HTTPException(status_code=503, detail={"ready": False, "reason": "Database unavailable"})
    return {"ready": True}


@router.get("/health/live")
def liveness_check() -> Dict[str, Any]:
    """Liveness probe."""
    return {"alive": True}
