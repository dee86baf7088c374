"""Errors raised by Booking Backend implementations."""

from typing import Optional


class BackendError(Exception):
    """Base error for Backend request failures.

    ``message`` is the Backend's own text, kept verbatim for display.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendAuthError(BackendError):
    """Raised when the Backend rejects the bearer credential."""


class BackendNotFoundError(BackendError):
    """Raised when the Backend resource is not found."""


class BackendConflictError(BackendError):
    """Raised when the Backend refuses a request that conflicts with current state."""


class BackendConnectionError(BackendError):
    """Raised when the Backend cannot be reached or times out."""


class BackendRequestError(BackendError):
    """Raised for any other non-success Backend response."""
