from __future__ import annotations

from datetime import date

import pytest
from flask import g

from campus_attendance.core.enums import AuditAction, ErrorKind, Role
from campus_attendance.core.exceptions import AuthenticationError, AuthorizationError, CsrfError, SessionExpiredError
from campus_attendance.users.model import User


def _login(container, role: Role):
    user = User(
        user_id=42,
        first_name="Sam",
        last_name="Doe",
        email="sam@example.edu",
        password_hash="x",
        role=role,
        date_of_birth=date(1999, 1, 1),
    )
    return container.sessions.create(user)


def _cookie(container, session) -> dict:
    return {"Cookie": f"{container.session_cookie.name}={session.session_id}"}


def test_require_authenticated_without_cookie_is_401(app, container):
    with app.test_request_context("/protected/student-dashboard"):
        with pytest.raises(AuthenticationError) as exc:
            container.gate.require_authenticated()
    assert exc.value.status_code == 401


def test_require_authenticated_exposes_session(app, container):
    session = _login(container, Role.STUDENT)
    with app.test_request_context("/", headers=_cookie(container, session)):
        current = container.gate.require_authenticated()
        assert g.current_session is current
        assert current.user_id == 42


def test_role_mismatch_is_audited_once_and_handler_not_run(app, container, activity_repo):
    session = _login(container, Role.STUDENT)
    calls = []

    @container.gate.protect(Role.FACULTY)
    def faculty_only(current):
        calls.append(current)
        return "secret"

    with app.test_request_context("/", headers=_cookie(container, session)):
        with pytest.raises(AuthorizationError) as exc:
            faculty_only()

    assert exc.value.status_code == 403
    assert exc.value.message == "Access denied. Insufficient permissions."
    assert calls == []
    denied = activity_repo.of(AuditAction.UNAUTHORIZED_ACCESS)
    assert len(denied) == 1
    assert denied[0].user_id == 42
    assert "User role: student" in denied[0].details
    assert "Required: faculty" in denied[0].details


def test_allowed_role_reaches_handler(app, container, activity_repo):
    session = _login(container, Role.INTERN)

    @container.gate.protect("intern", "faculty")
    def view(current):
        return current.role

    with app.test_request_context("/", headers=_cookie(container, session)):
        assert view() == Role.INTERN
    assert activity_repo.entries == []


def test_csrf_header_must_match_session_token(app, container):
    session = _login(container, Role.STUDENT)

    @container.gate.protect(Role.STUDENT, csrf=True)
    def mutate(current):
        return "ok"

    headers = _cookie(container, session)
    with app.test_request_context("/", method="POST", headers=headers):
        with pytest.raises(CsrfError) as exc:
            mutate()
    assert exc.value.kind == ErrorKind.CSRF_MISMATCH

    with app.test_request_context("/", method="POST", headers={**headers, "X-CSRF-Token": "wrong"}):
        with pytest.raises(CsrfError):
            mutate()

    with app.test_request_context("/", method="POST", headers={**headers, "X-CSRF-Token": session.csrf_token}):
        assert mutate() == "ok"


def test_csrf_is_not_required_for_reads(app, container):
    session = _login(container, Role.STUDENT)

    @container.gate.protect(Role.STUDENT, csrf=True)
    def read(current):
        return current.claims()

    with app.test_request_context("/", method="GET", headers=_cookie(container, session)):
        assert read() == {"user_id": 42, "role": "student"}


def test_expired_session_is_logged_out_in_audit_trail(app, container, activity_repo, clock):
    session = _login(container, Role.FACULTY)
    clock.advance(hours=8, minutes=1)

    with app.test_request_context("/", headers=_cookie(container, session)):
        with pytest.raises(SessionExpiredError):
            container.gate.require_authenticated()

    logouts = activity_repo.of(AuditAction.LOGOUT)
    assert len(logouts) == 1
    assert logouts[0].user_id == 42
    assert logouts[0].details == "Session expired"
