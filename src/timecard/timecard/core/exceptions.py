from __future__ import annotations

from typing import Iterable


class DomainError(Exception):
    """Base exception for business rule violations."""

    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ValidationFailed(ValidationError):
    """Raised for a malformed interval (time_out at or before time_in)."""


class InvalidGeometry(ValidationError):
    """Raised for non-numeric or out-of-range coordinates."""


class NotFound(DomainError):
    """Raised when a punch, job or shift id does not resolve."""


class OverlapDetected(DomainError):
    """Raised when a punch interval collides with another punch of the same worker."""

    def __init__(self, message: str, *, conflicting_ids: Iterable[str] = ()):
        super().__init__(message)
        self.conflicting_ids = tuple(conflicting_ids)


class InvalidState(DomainError):
    """Raised when a lifecycle transition is attempted from a disallowed state."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageUnavailable(DomainError):
    """Transient I/O failure at the storage boundary. Callers may retry."""

    retryable = True
