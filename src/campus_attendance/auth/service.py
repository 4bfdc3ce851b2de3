from __future__ import annotations

import logging
from typing import Optional

from ..audit.model import ClientInfo
from ..audit.service import ActivityAuditor
from ..common.validators import sanitize_text
from ..core.enums import AuditAction, ErrorKind
from ..core.exceptions import AuthenticationError, SessionExpiredError
from ..users.repository import UserRepository
from .credentials import CredentialStore
from .sessions import Session, SessionManager

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AuthService:
    """Use case: login, logout and "who is the caller"."""

    def __init__(
        self,
        users: UserRepository,
        credentials: CredentialStore,
        sessions: SessionManager,
        auditor: ActivityAuditor,
    ):
        self._users = users
        self._credentials = credentials
        self._sessions = sessions
        self._auditor = auditor

    def login(
        self,
        email: str,
        password: str,
        *,
        previous_session_id: Optional[str] = None,
        client: Optional[ClientInfo] = None,
    ) -> Session:
        email = str(sanitize_text(email or "")).lower()
        user = self._users.get_by_email(email) if email else None

        if user is None:
            self._credentials.verify_dummy(password)
            logger.warning("Failed login attempt for unknown email: %s", email)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE, kind=ErrorKind.INVALID_CREDENTIALS)

        if not self._credentials.verify(password, user.password_hash):
            self._auditor.log(user.user_id, AuditAction.LOGIN_FAILED, "Invalid password", client=client)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE, kind=ErrorKind.INVALID_CREDENTIALS)

        session = self._sessions.create(user, previous_session_id=previous_session_id)
        self._auditor.log(user.user_id, AuditAction.LOGIN_SUCCESS, client=client)
        return session

    def logout(self, session_id: Optional[str], *, client: Optional[ClientInfo] = None) -> None:
        """Idempotent; only a live session leaves a ``logout`` entry."""
        session = self._sessions.peek(session_id)
        if session and session.logged_in and session.user_id is not None:
            self._auditor.log(session.user_id, AuditAction.LOGOUT, client=client)
        self._sessions.destroy(session_id)

    def identity(self, session_id: Optional[str], *, client: Optional[ClientInfo] = None) -> Session:
        """Validate and refresh the caller's session.

        An expired session is logged out: it leaves a ``logout`` entry before the
        error propagates.
        """
        stored = self._sessions.peek(session_id)
        try:
            return self._sessions.validate(session_id)
        except SessionExpiredError:
            if stored is not None and stored.user_id is not None:
                self._auditor.log(stored.user_id, AuditAction.LOGOUT, "Session expired", client=client)
            raise
