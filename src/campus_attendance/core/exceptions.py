from __future__ import annotations

from typing import Optional

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations.

    ``status_code`` is the HTTP status the controller layer answers with and
    ``message`` is always safe to show to the client.
    """

    status_code = 400
    default_kind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, *, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials are invalid or no live session exists."""

    status_code = 401
    default_kind = ErrorKind.UNAUTHENTICATED


class SessionExpiredError(AuthenticationError):
    default_kind = ErrorKind.SESSION_EXPIRED


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    default_kind = ErrorKind.FORBIDDEN


class CsrfError(AuthorizationError):
    default_kind = ErrorKind.CSRF_MISMATCH


class ConflictError(DomainError):
    """Raised when a unique key (email, user id) is already taken."""

    status_code = 409
    default_kind = ErrorKind.EMAIL_CONFLICT


class PersistenceError(DomainError):
    """Storage failure. The message is generic; details go to the server log."""

    status_code = 500
    default_kind = ErrorKind.PERSISTENCE
