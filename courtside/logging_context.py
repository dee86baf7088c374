"""Booking-attempt logging context for tracing a payment across modules.

Provides an attempt_id-aware logger that attaches the id of the
BookingIntent being submitted to every log message, so one payment
attempt can be followed from validation through the Backend call.

Usage:
    from courtside.logging_context import get_attempt_logger, set_attempt_id

    set_attempt_id("ATT-3f9c2a")
    logger = get_attempt_logger(__name__)
    logger.info("Submitting")  # record.attempt_id == "ATT-3f9c2a"
"""

import logging
from contextvars import ContextVar

_attempt_id: ContextVar[str] = ContextVar("attempt_id", default="NO_ATTEMPT")


def set_attempt_id(attempt_id: str) -> None:
    """Set the booking-attempt id for the current async context."""
    _attempt_id.set(attempt_id)


def get_attempt_id() -> str:
    """Retrieve the current booking-attempt id."""
    return _attempt_id.get()


class AttemptIdFilter(logging.Filter):
    """Injects attempt_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.attempt_id = _attempt_id.get()  # type: ignore[attr-defined]
        return True


def get_attempt_logger(name: str) -> logging.Logger:
    """Return a logger with the AttemptIdFilter attached.

    The filter adds ``attempt_id`` to each record so formatters can
    include ``%(attempt_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, AttemptIdFilter) for f in logger.filters):
        logger.addFilter(AttemptIdFilter())
    return logger
