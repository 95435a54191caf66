"""Service-layer orchestration modules."""

from qa_matrix.services.ledger_store import LedgerStore
from qa_matrix.services.repeat_service import RepeatService
from qa_matrix.services.report_ingestion import parse_report_rows

__all__ = [
    "LedgerStore",
    "RepeatService",
    "parse_report_rows",
]
