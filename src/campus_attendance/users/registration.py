"""Signup: validate input, then write the user and its role profile atomically."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Optional

from ..audit.model import ClientInfo
from ..audit.service import ActivityAuditor
from ..auth.credentials import CredentialStore
from ..common.validators import (
    is_blank,
    parse_positive_int,
    require_date,
    require_email,
    require_minimum_age,
    require_positive_int,
    sanitize_text,
)
from ..core.constants import MIN_SIGNUP_AGE
from ..core.enums import AuditAction, ErrorKind, Role
from ..core.exceptions import ConflictError, DomainError, PersistenceError, ValidationError
from ..database.errors import DuplicateKeyError
from .model import FacultyProfile, InternProfile, RoleProfile, StudentProfile, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

BASE_FIELDS = ("first_name", "last_name", "email", "password", "user_id", "dob", "role")

ROLE_FIELDS = {
    Role.STUDENT: ("major_id", "year_of_study"),
    Role.FACULTY: ("department_id", "designation"),
    Role.INTERN: ("assigned_department", "start_date", "end_date"),
}

_MISSING_ROLE_FIELDS_MESSAGES = {
    Role.STUDENT: "Major and year of study are required for students",
    Role.FACULTY: "Department and designation are required for faculty",
    Role.INTERN: "Assigned department, start date, and end date are required for interns",
}


def email_conflict() -> ConflictError:
    return ConflictError("Email already registered", kind=ErrorKind.EMAIL_CONFLICT)


def user_id_conflict() -> ConflictError:
    return ConflictError("User ID already exists", kind=ErrorKind.USER_ID_CONFLICT)


def conflict_for(exc: DuplicateKeyError) -> ConflictError:
    return email_conflict() if exc.key == "email" else user_id_conflict()


def build_role_profile(role: Role, user_id: int, fields: Mapping[str, Any]) -> RoleProfile:
    """Build the single profile matching ``role``.

    Raises ``ValidationError`` (MISSING_ROLE_FIELDS / INVALID_ROLE_FIELDS).
    """
    required = ROLE_FIELDS[role]
    if any(is_blank(fields.get(name)) for name in required):
        raise ValidationError(_MISSING_ROLE_FIELDS_MESSAGES[role], kind=ErrorKind.MISSING_ROLE_FIELDS)

    try:
        if role == Role.STUDENT:
            return StudentProfile(
                user_id=user_id,
                major_id=parse_positive_int(fields["major_id"]),
                year_of_study=parse_positive_int(fields["year_of_study"]),
            )
        if role == Role.FACULTY:
            return FacultyProfile(
                user_id=user_id,
                department_id=parse_positive_int(fields["department_id"]),
                designation=str(fields["designation"]).strip(),
            )
        start = require_date(fields["start_date"], "start_date")
        end = require_date(fields["end_date"], "end_date")
        if end < start:
            raise ValidationError("end_date cannot be before start_date", kind=ErrorKind.INVALID_ROLE_FIELDS)
        return InternProfile(
            user_id=user_id,
            assigned_department=parse_positive_int(fields["assigned_department"]),
            start_date=start,
            end_date=end,
        )
    except ValueError:
        raise ValidationError(f"Invalid {role.value} details", kind=ErrorKind.INVALID_ROLE_FIELDS)


@dataclass(frozen=True)
class RegistrationResult:
    """Tagged outcome: ``ok`` with ``user``, or not ``ok`` with ``error``."""

    ok: bool
    user: Optional[User] = None
    error: Optional[DomainError] = None

    @classmethod
    def success(cls, user: User) -> "RegistrationResult":
        return cls(ok=True, user=user)

    @classmethod
    def failure(cls, error: DomainError) -> "RegistrationResult":
        return cls(ok=False, error=error)


class RegistrationCoordinator:
    """Use case: account signup.

    Validation happens in a fixed order and stops at the first failure. The
    user row and its role row are written in one transaction, so a failure
    between the two inserts leaves nothing behind.
    """

    def __init__(
        self,
        users: UserRepository,
        credentials: CredentialStore,
        auditor: ActivityAuditor,
        *,
        today: Callable[[], date] = date.today,
        min_age: int = MIN_SIGNUP_AGE,
    ):
        self._users = users
        self._credentials = credentials
        self._auditor = auditor
        self._today = today
        self._min_age = min_age

    def register(self, form: Mapping[str, Any], *, client: Optional[ClientInfo] = None) -> RegistrationResult:
        try:
            user = self._register(form)
        except DomainError as e:
            return RegistrationResult.failure(e)
        except Exception:
            logger.exception("Registration failed")
            return RegistrationResult.failure(
                PersistenceError("Registration failed. Please try again later.", kind=ErrorKind.REGISTRATION_FAILED)
            )

        self._auditor.log(
            user.user_id, AuditAction.REGISTRATION, f"New {user.role.value} account created", client=client
        )
        return RegistrationResult.success(user)

    def _register(self, form: Mapping[str, Any]) -> User:
        for name in BASE_FIELDS:
            if is_blank(form.get(name)):
                raise ValidationError(f"{name} is required", kind=ErrorKind.MISSING_FIELD)

        password = str(form["password"])
        data = {key: sanitize_text(value) for key, value in form.items() if key != "password"}

        email = require_email(str(data["email"]))
        born = require_date(data["dob"], "dob")
        require_minimum_age(born, today=self._today(), min_age=self._min_age)
        user_id = require_positive_int(
            data["user_id"], "User ID must be a positive number", kind=ErrorKind.INVALID_USER_ID
        )
        try:
            role = Role(str(data["role"]).lower())
        except ValueError:
            raise ValidationError("Invalid role", kind=ErrorKind.INVALID_ROLE)
        self._credentials.require_strong(password)

        # Advisory only: the unique keys in storage decide (see DuplicateKeyError below).
        if self._users.email_exists(email):
            raise email_conflict()
        if self._users.user_id_exists(user_id):
            raise user_id_conflict()

        user = User(
            user_id=user_id,
            first_name=str(data["first_name"]),
            last_name=str(data["last_name"]),
            email=email,
            password_hash=self._credentials.hash(password),
            role=role,
            date_of_birth=born,
        )

        try:
            with self._users.transaction() as tx:
                tx.insert_user(user)
                tx.insert_profile(build_role_profile(role, user_id, data))
        except DuplicateKeyError as e:
            raise conflict_for(e)

        return user
