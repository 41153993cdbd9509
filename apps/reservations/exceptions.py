"""Errors raised by the reservation workflows.

Every error carries a stable ``code`` for API clients and a ``retryable``
flag: only transient store failures are worth retrying unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ReservationError(Exception):
    """Base class for reservation failures."""

    code = "reservation_error"
    retryable = False

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": self.code,
            "detail": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            payload["errors"] = self.details
        return payload


class ReservationValidationError(ReservationError):
    """Malformed input or a status change the lifecycle does not allow."""

    code = "validation_error"


class ReservationConflictError(ReservationError):
    """The vehicle is already taken for the requested dates."""

    code = "conflict"

    def __init__(self, message: str, *, conflicting_ids=None, details=None):
        super().__init__(message, details=details)
        self.conflicting_ids = list(conflicting_ids or [])


class ReservationNotFoundError(ReservationError):
    """A referenced vehicle, equipment, activity or reservation does not exist."""

    code = "not_found"


class TransientStoreError(ReservationError):
    """The database could not complete the unit of work (lock timeout, lost connection)."""

    code = "transient_store_error"
    retryable = True
