from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Optional

from .audit.mysql_activity_repository import MySQLActivityLogRepository
from .audit.repository import ActivityLogRepository
from .audit.service import ActivityAuditor
from .auth.credentials import DEFAULT_HASH_METHOD, CredentialStore
from .auth.gate import AccessGate
from .auth.service import AuthService
from .auth.sessions import InMemorySessionStore, SessionCookie, SessionManager, SessionStore
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_SESSION_LIFETIME_HOURS
from .dashboards.routes import RouteTable, build_route_tables
from .dashboards.service import ProfileService
from .database.connection import DBConfig, DatabaseConnection
from .users.mysql_user_repository import MySQLUserRepository
from .users.registration import RegistrationCoordinator
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    activity_repo: ActivityLogRepository
    session_store: SessionStore

    credentials: CredentialStore
    auditor: ActivityAuditor
    sessions: SessionManager
    session_cookie: SessionCookie
    gate: AccessGate

    auth_service: AuthService
    registration: RegistrationCoordinator
    profile_service: ProfileService
    route_tables: Dict[str, RouteTable]


def build_services(
    users_repo: UserRepository,
    activity_repo: ActivityLogRepository,
    *,
    session_store: Optional[SessionStore] = None,
    session_cookie: Optional[SessionCookie] = None,
    session_lifetime: timedelta = timedelta(hours=DEFAULT_SESSION_LIFETIME_HOURS),
    hash_method: str = DEFAULT_HASH_METHOD,
    clock: Callable[[], datetime] = now_local,
    today: Callable[[], date] = date.today,
) -> Container:
    """Wire services around any repository implementation (MySQL or in-memory)."""
    session_store = session_store or InMemorySessionStore()
    session_cookie = session_cookie or SessionCookie()

    credentials = CredentialStore(method=hash_method)
    auditor = ActivityAuditor(activity_repo, clock=clock)
    sessions = SessionManager(session_store, lifetime=session_lifetime, clock=clock)
    auth_service = AuthService(users_repo, credentials, sessions, auditor)
    gate = AccessGate(auth_service, auditor, session_cookie)
    registration = RegistrationCoordinator(users_repo, credentials, auditor, today=today)
    profile_service = ProfileService(users_repo, auditor, today=today)

    return Container(
        users_repo=users_repo,
        activity_repo=activity_repo,
        session_store=session_store,
        credentials=credentials,
        auditor=auditor,
        sessions=sessions,
        session_cookie=session_cookie,
        gate=gate,
        auth_service=auth_service,
        registration=registration,
        profile_service=profile_service,
        route_tables=build_route_tables(profile_service),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    cookie = SessionCookie(
        name=getattr(settings, "SESSION_COOKIE_NAME", "attendance_sid"),
        domain=getattr(settings, "SESSION_COOKIE_DOMAIN", None),
        secure=bool(getattr(settings, "SESSION_COOKIE_SECURE", False)),
        samesite=getattr(settings, "SESSION_COOKIE_SAMESITE", "Lax"),
    )
    lifetime = timedelta(hours=float(getattr(settings, "SESSION_LIFETIME_HOURS", DEFAULT_SESSION_LIFETIME_HOURS)))

    return build_services(
        MySQLUserRepository(conn),
        MySQLActivityLogRepository(conn),
        session_cookie=cookie,
        session_lifetime=lifetime,
        hash_method=getattr(settings, "PASSWORD_HASH_METHOD", DEFAULT_HASH_METHOD),
    )
