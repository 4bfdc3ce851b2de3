"""Explicit (method, action) -> handler tables for the role dashboards.

Each portal owns one table and one role set; the controller runs the access
gate once per request and then dispatches here with the session claims
(``{"user_id", "role"}``), so the tables can be tested without HTTP.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..audit.model import ClientInfo
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .service import ProfileService, describe_profile

Handler = Callable[[Mapping[str, Any], Mapping[str, Any], Optional[ClientInfo]], Any]


@dataclass(frozen=True)
class RouteTable:
    portal: str
    allowed_roles: frozenset
    handlers: Dict[Tuple[str, str], Handler] = field(default_factory=dict)

    def resolve(self, method: str, action: str) -> Handler:
        handler = self.handlers.get((method.upper(), action or ""))
        if handler is None:
            raise ValidationError("Invalid action")
        return handler

    def dispatch(
        self,
        method: str,
        action: str,
        claims: Mapping[str, Any],
        payload: Optional[Mapping[str, Any]] = None,
        client: Optional[ClientInfo] = None,
    ) -> Any:
        return self.resolve(method, action)(claims, payload or {}, client)


def build_route_tables(profiles: ProfileService) -> Dict[str, RouteTable]:
    def get_profile(claims: Mapping[str, Any], payload: Mapping[str, Any], client: Optional[ClientInfo]) -> dict:
        return describe_profile(profiles.get_profile(claims["user_id"]))

    def update_profile(claims: Mapping[str, Any], payload: Mapping[str, Any], client: Optional[ClientInfo]) -> dict:
        return describe_profile(profiles.update_profile(claims["user_id"], payload, client=client))

    return {
        "student-dashboard": RouteTable(
            portal="student-dashboard",
            allowed_roles=frozenset({Role.STUDENT}),
            handlers={("GET", "getStudentData"): get_profile, ("POST", "updateProfile"): update_profile},
        ),
        "faculty-dashboard": RouteTable(
            portal="faculty-dashboard",
            allowed_roles=frozenset({Role.FACULTY}),
            handlers={("GET", "getFacultyData"): get_profile, ("POST", "updateProfile"): update_profile},
        ),
        "intern-dashboard": RouteTable(
            portal="intern-dashboard",
            allowed_roles=frozenset({Role.INTERN}),
            handlers={("GET", "getInternData"): get_profile, ("POST", "updateProfile"): update_profile},
        ),
    }
