from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles; each one owns exactly one profile table."""

    STUDENT = "student"
    FACULTY = "faculty"
    INTERN = "intern"


class AuditAction(str, Enum):
    """Actions recorded in the activity log."""

    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    REGISTRATION = "registration"
    UNAUTHORIZED_ACCESS = "unauthorized_access"
    PROFILE_UPDATE = "profile_update"


class ErrorKind(str, Enum):
    """Machine-readable failure kinds carried by domain errors."""

    MISSING_FIELD = "missing_field"
    INVALID_EMAIL = "invalid_email"
    INVALID_DATE = "invalid_date"
    UNDERAGE = "underage"
    INVALID_USER_ID = "invalid_user_id"
    INVALID_ROLE = "invalid_role"
    WEAK_PASSWORD = "weak_password"
    MISSING_ROLE_FIELDS = "missing_role_fields"
    INVALID_ROLE_FIELDS = "invalid_role_fields"
    INVALID_REQUEST = "invalid_request"
    EMAIL_CONFLICT = "email_conflict"
    USER_ID_CONFLICT = "user_id_conflict"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHENTICATED = "unauthenticated"
    SESSION_EXPIRED = "session_expired"
    FORBIDDEN = "forbidden"
    CSRF_MISMATCH = "csrf_mismatch"
    REGISTRATION_FAILED = "registration_failed"
    PERSISTENCE = "persistence"
