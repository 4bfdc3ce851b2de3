"""Per-request access guard.

Every protected entry point goes through ``AccessGate`` before doing any work:
authenticate the session cookie, then check the role, then (for mutating
requests) the CSRF token. The gate knows nothing about the handlers it guards.
"""
from __future__ import annotations

import hmac
from functools import wraps
from typing import Iterable, Optional

from flask import g, request

from ..audit.model import ClientInfo
from ..audit.service import ActivityAuditor
from ..core.constants import CSRF_HEADER, MUTATING_METHODS, UNKNOWN_CLIENT
from ..core.enums import AuditAction, Role
from ..core.exceptions import AuthorizationError, CsrfError
from .service import AuthService
from .sessions import Session, SessionCookie


def client_from_request() -> ClientInfo:
    return ClientInfo(
        ip_address=request.remote_addr or UNKNOWN_CLIENT,
        user_agent=request.headers.get("User-Agent") or UNKNOWN_CLIENT,
    )


def _normalize_roles(allowed_roles: Iterable[Role | str]) -> frozenset[Role]:
    return frozenset(Role(r) for r in allowed_roles)


class AccessGate:
    def __init__(self, auth: AuthService, auditor: ActivityAuditor, cookie: SessionCookie):
        self._auth = auth
        self._auditor = auditor
        self._cookie = cookie

    def session_id_from_request(self) -> Optional[str]:
        return request.cookies.get(self._cookie.name)

    def require_authenticated(self) -> Session:
        session = self._auth.identity(self.session_id_from_request(), client=client_from_request())
        g.current_session = session
        return session

    def require_role(self, allowed_roles: Iterable[Role | str]) -> Session:
        allowed = _normalize_roles(allowed_roles)
        session = self.require_authenticated()
        if session.role not in allowed:
            required = ",".join(sorted(r.value for r in allowed))
            actual = session.role.value if session.role else ""
            self._auditor.log(
                session.user_id,
                AuditAction.UNAUTHORIZED_ACCESS,
                f"Attempted to access role-restricted content. User role: {actual}, Required: {required}",
                client=client_from_request(),
            )
            raise AuthorizationError("Access denied. Insufficient permissions.")
        return session

    @staticmethod
    def verify_csrf(session: Session) -> None:
        supplied = request.headers.get(CSRF_HEADER, "")
        if not supplied or not session.csrf_token or not hmac.compare_digest(supplied, session.csrf_token):
            raise CsrfError("Invalid or missing CSRF token")

    def protect(self, *roles: Role | str, csrf: bool = False):
        """Decorator: run the gate, then call the view with ``session`` as first argument.

        With ``csrf=True`` the token is checked on mutating methods only.
        """

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                session = self.require_role(roles) if roles else self.require_authenticated()
                if csrf and request.method in MUTATING_METHODS:
                    self.verify_csrf(session)
                return view(session, *args, **kwargs)

            return wrapper

        return decorator
