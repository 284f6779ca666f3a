"""Error types raised by the tracker services."""

from __future__ import annotations


class TrackerError(RuntimeError):
    """Base class for failures surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(TrackerError):
    """Raised when a project or task id does not resolve."""

    status_code = 404


class ValidationError(TrackerError):
    """Raised for malformed input, including any invalid batch entry."""

    status_code = 400


class RuleViolation(TrackerError):
    """Raised when a completion, creation or deletion rule rejects a mutation."""

    status_code = 400


class StoreFailure(TrackerError):
    """Raised when the database fails unexpectedly."""

    status_code = 500


__all__ = [
    "NotFoundError",
    "RuleViolation",
    "StoreFailure",
    "TrackerError",
    "ValidationError",
]
