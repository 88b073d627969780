"""Structured logging with request correlation IDs.

The API middleware stores the request's correlation ID in a contextvar;
every record logged while handling that request carries it.

Usage:
    from marketplace.utils.logging import get_logger, log_reservation_operation

    logger = get_logger(__name__)
    log_reservation_operation(logger, "create_manual", reservation_id="RES-...")
"""

import logging
import os
import uuid
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

NO_CORRELATION_ID = "-"
LOG_FORMAT = "%(levelname)s %(name)s [%(correlation_id)s] %(message)s"


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation ID to the current context, generating one if needed.

    Returns:
        The correlation ID now in effect
    """
    cid = correlation_id or str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Stamps ``record.correlation_id``; never drops records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Appends ``key=value`` pairs from ``record.context`` to the message."""

    def __init__(self, fmt: str = LOG_FORMAT) -> None:
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or NO_CORRELATION_ID

        message = super().format(record)
        context: dict[str, Any] = getattr(record, "context", None) or {}
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} | {pairs}"


def configure_logging(level: str | int | None = None) -> None:
    """Install a structured stream handler on the root logger once.

    Level defaults to LOG_LEVEL (INFO).
    """
    root = logging.getLogger()
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())

    if any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` with the correlation ID filter attached."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def log_reservation_operation(
    logger: logging.Logger,
    operation: str,
    **fields: Any,
) -> None:
    """Log one engine event with its non-empty fields as structured context.

    Level follows the outcome: ``error`` set logs at ERROR, ``error_code``
    (a rejected request) at WARNING, anything else at INFO.

    Args:
        logger: Logger instance
        operation: Event name, e.g. "create_manual" or "conflict_detected"
        **fields: reservation_id, resource_id, lead_id, actor_user_id,
            error_code, error, or any other context
    """
    context = {key: value for key, value in fields.items() if value not in (None, "")}

    if context.get("error"):
        level = logging.ERROR
    elif context.get("error_code"):
        level = logging.WARNING
    else:
        level = logging.INFO

    logger.log(
        level,
        "Reservation operation: %s",
        operation,
        extra={"operation": operation, "context": context},
    )
