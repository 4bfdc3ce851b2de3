"""Server-side sessions.

A session lives only in process memory and is addressed by an opaque id carried
in a cookie. Expiry is sliding: every successful ``validate`` moves
``login_time`` forward, and a session idle for longer than the lifetime is
destroyed on its next use or by the periodic idle purge.
"""
from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Protocol

from flask import Response

from ..common.datetime_utils import now_local
from ..core.constants import (
    CSRF_TOKEN_BYTES,
    DEFAULT_SESSION_LIFETIME_HOURS,
    SESSION_ID_BYTES,
    SESSION_PURGE_INTERVAL_SECONDS,
)
from ..core.enums import ErrorKind, Role
from ..core.exceptions import AuthenticationError, SessionExpiredError
from ..users.model import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    session_id: str
    user_id: Optional[int]
    role: Optional[Role]
    username: str
    email: str
    login_time: Optional[datetime]
    csrf_token: str
    logged_in: bool = False

    def claims(self) -> dict:
        return {"user_id": self.user_id, "role": self.role.value if self.role else None}

    def identity(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value if self.role else None,
        }


class SessionStore(Protocol):
    def get(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def set(self, session: Session) -> None:
        raise NotImplementedError

    def destroy(self, session_id: str) -> None:
        raise NotImplementedError

    def touch(self, session_id: str, login_time: datetime) -> Optional[Session]:
        raise NotImplementedError

    def expire(self, session_id: str, cutoff: datetime) -> bool:
        raise NotImplementedError

    def purge_idle(self, cutoff: datetime) -> int:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local store. Sessions do not survive a restart."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def set(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def touch(self, session_id: str, login_time: datetime) -> Optional[Session]:
        """Move ``login_time`` forward only while the entry still exists."""
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                return None
            refreshed = replace(current, login_time=login_time)
            self._sessions[session_id] = refreshed
            return refreshed

    def expire(self, session_id: str, cutoff: datetime) -> bool:
        """Drop the entry only if its last activity is still older than ``cutoff``."""
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None or (current.login_time is not None and current.login_time >= cutoff):
                return False
            del self._sessions[session_id]
            return True

    def purge_idle(self, cutoff: datetime) -> int:
        """Drop sessions whose last activity is older than ``cutoff``."""
        with self._lock:
            stale = [
                sid for sid, s in self._sessions.items() if s.login_time is None or s.login_time < cutoff
            ]
            for sid in stale:
                del self._sessions[sid]
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class SessionManager:
    """Creates, validates (with sliding refresh) and destroys sessions."""

    def __init__(
        self,
        store: SessionStore,
        *,
        lifetime: timedelta = timedelta(hours=DEFAULT_SESSION_LIFETIME_HOURS),
        clock: Callable[[], datetime] = now_local,
        purge_interval: timedelta = timedelta(seconds=SESSION_PURGE_INTERVAL_SECONDS),
    ):
        self._store = store
        self._lifetime = lifetime
        self._clock = clock
        self._purge_interval = purge_interval
        self._last_purge: Optional[datetime] = None

    def _purge_if_due(self, now: datetime) -> None:
        # abandoned sessions (browser closed, no logout) are only reclaimed here
        if self._last_purge is not None and now - self._last_purge < self._purge_interval:
            return
        self._last_purge = now
        purged = self._store.purge_idle(now - self._lifetime)
        if purged:
            logger.info("Purged %d idle sessions", purged)

    @staticmethod
    def _new_session_id() -> str:
        return secrets.token_urlsafe(SESSION_ID_BYTES)

    @staticmethod
    def _new_csrf_token() -> str:
        return secrets.token_hex(CSRF_TOKEN_BYTES)

    def create(self, user: User, *, previous_session_id: Optional[str] = None) -> Session:
        """Start an authenticated session under a brand-new id.

        The pre-login id (if any) is destroyed so a planted id can never become
        authenticated; its CSRF token is carried over when one was bound.
        """
        csrf_token = ""
        if previous_session_id:
            previous = self._store.get(previous_session_id)
            if previous and previous.csrf_token:
                csrf_token = previous.csrf_token
            self._store.destroy(previous_session_id)

        now = self._clock()
        self._purge_if_due(now)
        session = Session(
            session_id=self._new_session_id(),
            user_id=user.user_id,
            role=user.role,
            username=user.username,
            email=user.email,
            login_time=now,
            csrf_token=csrf_token or self._new_csrf_token(),
            logged_in=True,
        )
        self._store.set(session)
        return session

    def validate(self, session_id: Optional[str]) -> Session:
        session = self._store.get(session_id) if session_id else None
        if not session or not session.logged_in or session.login_time is None or session.user_id is None:
            raise AuthenticationError("Authentication required", kind=ErrorKind.UNAUTHENTICATED)

        now = self._clock()
        if now - session.login_time > self._lifetime:
            self._store.expire(session.session_id, now - self._lifetime)
            raise SessionExpiredError("Session expired. Please login again.")

        # a logout racing this request wins: touch never re-creates a destroyed entry
        refreshed = self._store.touch(session.session_id, now)
        if refreshed is None:
            raise AuthenticationError("Authentication required", kind=ErrorKind.UNAUTHENTICATED)
        self._purge_if_due(now)
        return refreshed

    def peek(self, session_id: Optional[str]) -> Optional[Session]:
        """Return the stored session without validating or refreshing it."""
        return self._store.get(session_id) if session_id else None

    def destroy(self, session_id: Optional[str]) -> None:
        if session_id:
            self._store.destroy(session_id)


@dataclass(frozen=True)
class SessionCookie:
    """Cookie carrying the session id; cleared with the attributes it was set with."""

    name: str = "attendance_sid"
    path: str = "/"
    domain: Optional[str] = None
    secure: bool = False
    httponly: bool = True
    samesite: Optional[str] = "Lax"

    def attach(self, response: Response, session: Session) -> Response:
        response.set_cookie(
            self.name,
            session.session_id,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )
        return response

    def clear(self, response: Response) -> Response:
        response.delete_cookie(
            self.name,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )
        return response
