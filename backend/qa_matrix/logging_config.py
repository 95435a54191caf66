"""Structured logging configuration using structlog.

The API layer logs structlog events; engines and services log through the
standard library with %-style messages.  Both end up on one handler that
renders JSON (for log aggregation) or a colored console line.

Usage::

    from qa_matrix.logging_config import get_logger, report_context

    logger = get_logger(__name__)
    with report_context("week42.xlsx"):
        logger.info("report_uploaded", entries=87)
    # Output: {"event": "report_uploaded", "report": "week42.xlsx", "entries": 87, ...}
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

_HANDLER_NAME = "qa_matrix"

# Libraries that are chatty at INFO.
_QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """Configure structured logging for the application.

    Safe to call more than once: the handler installed by a previous call
    is replaced, handlers installed by others are left alone.

    Args:
        json_logs: If True, output JSON format. If False, use human-readable format.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    level = getattr(logging, log_level.upper())
    shared = _shared_processors()

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    ))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name, typically __name__ of the module.

    Returns:
        Structured logger instance with bound context.
    """
    return structlog.get_logger(name)


@contextmanager
def report_context(file_name: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with the report file name."""
    with structlog.contextvars.bound_contextvars(report=file_name):
        yield
