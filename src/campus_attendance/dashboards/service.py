from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Callable, Mapping, Optional

from markupsafe import Markup

from ..audit.model import ClientInfo
from ..audit.service import ActivityAuditor
from ..common.validators import (
    require_date,
    require_email,
    require_minimum_age,
    require_non_empty,
    sanitize_text,
)
from ..core.constants import MIN_SIGNUP_AGE
from ..core.enums import AuditAction
from ..core.exceptions import ValidationError
from ..database.errors import DuplicateKeyError
from ..users.model import InternProfile, ProfileView
from ..users.registration import ROLE_FIELDS, build_role_profile, conflict_for, email_conflict
from ..users.repository import UserRepository

_EDITABLE_USER_FIELDS = ("first_name", "last_name", "email", "dob")


def _resanitize(value: Any) -> Any:
    # dashboard reads return stored (escaped) text; unescape first so it is not escaped twice
    if isinstance(value, str):
        value = Markup(value).unescape()
    return sanitize_text(value)


def _current_values(view: ProfileView) -> dict:
    values = view.as_dict()
    profile = view.profile
    if isinstance(profile, InternProfile):
        values["start_date"] = profile.start_date
        values["end_date"] = profile.end_date
    return values


class ProfileService:
    """Use case: a signed-in user reads or edits their own profile."""

    def __init__(
        self,
        users: UserRepository,
        auditor: ActivityAuditor,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._users = users
        self._auditor = auditor
        self._today = today

    def get_profile(self, user_id: int) -> ProfileView:
        view = self._users.get_profile_view(int(user_id))
        if not view:
            raise ValidationError("Profile not found")
        return view

    def update_profile(
        self,
        user_id: int,
        changes: Mapping[str, Any],
        *,
        client: Optional[ClientInfo] = None,
    ) -> ProfileView:
        view = self.get_profile(user_id)
        user = view.user
        allowed = set(_EDITABLE_USER_FIELDS) | set(ROLE_FIELDS[user.role])

        merged = _current_values(view)
        merged.update({k: _resanitize(v) for k, v in changes.items() if k in allowed})

        email = require_email(str(merged["email"]))
        born = require_date(merged["dob"], "dob")
        require_minimum_age(born, today=self._today(), min_age=MIN_SIGNUP_AGE)
        updated_user = replace(
            user,
            first_name=require_non_empty(merged["first_name"], "first_name"),
            last_name=require_non_empty(merged["last_name"], "last_name"),
            email=email,
            date_of_birth=born,
        )
        profile = build_role_profile(user.role, user.user_id, merged)

        if email != user.email and self._users.email_exists(email):
            raise email_conflict()

        try:
            with self._users.transaction() as tx:
                tx.update_user(updated_user)
                tx.update_profile(profile)
        except DuplicateKeyError as e:
            raise conflict_for(e)

        changed = sorted(k for k in changes if k in allowed)
        self._auditor.log(
            user.user_id, AuditAction.PROFILE_UPDATE, f"Updated fields: {', '.join(changed)}", client=client
        )
        return self.get_profile(user.user_id)


def describe_profile(view: ProfileView) -> dict:
    data = view.as_dict()
    data["profile_missing"] = view.profile is None
    return data
