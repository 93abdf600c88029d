from __future__ import annotations

from typing import Mapping, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400

    def __init__(self, message: str, *, errors: Optional[Mapping[str, Sequence[str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = dict(errors) if errors else None


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 422


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Raised when the store rejects a write because of a uniqueness constraint."""

    status_code = 409


class TooManyAttemptsError(DomainError):
    status_code = 429

    def __init__(self, message: str, *, retry_after: int):
        super().__init__(message)
        self.retry_after = int(retry_after)


class IdentifierExhaustedError(DomainError):
    """No free employee identifier left for a generated prefix."""

    status_code = 500


class InvalidStateError(DomainError):
    """Raised when an action does not fit the current state of a record."""

    status_code = 400
