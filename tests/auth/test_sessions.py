from __future__ import annotations

from datetime import date, timedelta

import pytest

from campus_attendance.auth.sessions import InMemorySessionStore, SessionManager
from campus_attendance.core.enums import ErrorKind, Role
from campus_attendance.core.exceptions import AuthenticationError, SessionExpiredError
from campus_attendance.users.model import User


def _user(role: Role = Role.STUDENT) -> User:
    return User(
        user_id=7,
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.edu",
        password_hash="x",
        role=role,
        date_of_birth=date(2000, 5, 20),
    )


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def manager(store, clock):
    return SessionManager(store, lifetime=timedelta(hours=8), clock=clock)


def test_create_binds_identity_and_tokens(manager):
    session = manager.create(_user(Role.FACULTY))

    assert session.logged_in
    assert session.user_id == 7
    assert session.role == Role.FACULTY
    assert session.username == "Ada Lovelace"
    assert len(session.session_id) >= 32
    assert len(session.csrf_token) == 64
    assert session.claims() == {"user_id": 7, "role": "faculty"}


def test_validate_within_lifetime_refreshes_login_time(manager, clock):
    session = manager.create(_user())

    clock.advance(hours=7, minutes=59)
    refreshed = manager.validate(session.session_id)
    assert refreshed.login_time == clock.now

    # sliding: another 7h59 from the refresh is still fine
    clock.advance(hours=7, minutes=59)
    assert manager.validate(session.session_id).user_id == 7


def test_validate_after_lifetime_destroys_session(manager, store, clock):
    session = manager.create(_user())

    clock.advance(hours=8, minutes=1)
    with pytest.raises(SessionExpiredError) as exc:
        manager.validate(session.session_id)
    assert exc.value.kind == ErrorKind.SESSION_EXPIRED
    assert exc.value.status_code == 401
    assert store.get(session.session_id) is None

    with pytest.raises(AuthenticationError) as again:
        manager.validate(session.session_id)
    assert again.value.kind == ErrorKind.UNAUTHENTICATED


def test_validate_rejects_missing_or_unknown_id(manager):
    with pytest.raises(AuthenticationError):
        manager.validate(None)
    with pytest.raises(AuthenticationError):
        manager.validate("not-a-session")


def test_login_rotates_session_id_and_keeps_csrf_token(manager, store):
    first = manager.create(_user())
    second = manager.create(_user(), previous_session_id=first.session_id)

    assert second.session_id != first.session_id
    assert second.csrf_token == first.csrf_token
    assert store.get(first.session_id) is None
    with pytest.raises(AuthenticationError):
        manager.validate(first.session_id)


def test_unknown_previous_id_gets_fresh_csrf_token(manager):
    session = manager.create(_user(), previous_session_id="planted-by-attacker")
    assert session.session_id != "planted-by-attacker"
    assert session.csrf_token


def test_destroy_is_idempotent(manager, store):
    session = manager.create(_user())
    manager.destroy(session.session_id)
    manager.destroy(session.session_id)
    manager.destroy(None)
    assert len(store) == 0


class LogoutDuringLookup(InMemorySessionStore):
    """Destroys the entry right after it is read, like a concurrent /logout."""

    def __init__(self):
        super().__init__()
        self.manager = None
        self.armed = False

    def get(self, session_id):
        session = super().get(session_id)
        if self.armed:
            self.armed = False
            self.manager.destroy(session_id)
        return session


def test_logout_between_lookup_and_refresh_stays_logged_out(clock):
    store = LogoutDuringLookup()
    manager = SessionManager(store, clock=clock)
    store.manager = manager
    session = manager.create(_user())

    clock.advance(minutes=5)
    store.armed = True
    with pytest.raises(AuthenticationError):
        manager.validate(session.session_id)

    assert store.get(session.session_id) is None
    assert len(store) == 0


def test_touch_and_expire_only_act_on_live_entries(store, manager, clock):
    session = manager.create(_user())

    assert store.touch("missing", clock.now) is None
    # refreshed after the cutoff, so a stale expiry decision must not drop it
    assert store.expire(session.session_id, clock.now - timedelta(minutes=1)) is False
    assert store.get(session.session_id) is not None

    assert store.expire(session.session_id, clock.now + timedelta(minutes=1)) is True
    assert store.get(session.session_id) is None


def test_abandoned_sessions_are_dropped_without_explicit_purge(manager, store, clock):
    for _ in range(500):
        manager.create(_user())
    assert len(store) == 500

    clock.advance(days=30)
    survivor = manager.create(_user())

    assert len(store) == 1
    assert store.get(survivor.session_id) is not None


def test_idle_purge_runs_at_most_once_per_interval(manager, store, clock):
    early = manager.create(_user())
    clock.advance(hours=8)
    manager.create(_user())

    clock.advance(seconds=30)
    manager.create(_user())
    assert store.get(early.session_id) is not None

    clock.advance(seconds=31)
    manager.create(_user())
    assert store.get(early.session_id) is None
    assert len(store) == 3


def test_explicit_purge_idle_uses_cutoff(store, manager, clock):
    old = manager.create(_user())
    clock.advance(seconds=30)
    fresh = manager.create(_user())

    assert store.purge_idle(clock.now - timedelta(seconds=10)) == 1
    assert store.get(old.session_id) is None
    assert store.get(fresh.session_id) is not None
