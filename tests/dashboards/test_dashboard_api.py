from __future__ import annotations

import pytest

from campus_attendance.core.enums import AuditAction
from fakes import faculty_form, intern_form, student_form

CSRF = "X-CSRF-Token"


def _sign_in(client, form) -> str:
    assert client.post("/signup", json=form).status_code == 200
    resp = client.post("/login", json={"email": form["email"], "password": form["password"]})
    assert resp.status_code == 200
    return resp.headers[CSRF]


@pytest.mark.parametrize(
    "form, portal, action",
    [
        (student_form(), "student-dashboard", "getStudentData"),
        (faculty_form(), "faculty-dashboard", "getFacultyData"),
        (intern_form(), "intern-dashboard", "getInternData"),
    ],
)
def test_each_role_reads_its_dashboard(client, form, portal, action):
    _sign_in(client, form)

    resp = client.get(f"/protected/{portal}?action={action}")
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["user_id"] == form["user_id"]
    assert body["data"]["role"] == form["role"]
    assert body["data"]["profile_missing"] is False


def test_student_profile_includes_major_name(client):
    _sign_in(client, student_form())
    data = client.get("/protected/student-dashboard?action=getStudentData").get_json()["data"]
    assert data["major_name"] == "Computer Science"
    assert data["year_of_study"] == 2
    assert "password_hash" not in data


def test_wrong_role_is_403_and_audited_once(client, activity_repo):
    _sign_in(client, student_form())

    resp = client.get("/protected/faculty-dashboard?action=getFacultyData")

    assert resp.status_code == 403
    assert resp.get_json() == {"success": False, "message": "Access denied. Insufficient permissions."}
    assert len(activity_repo.of(AuditAction.UNAUTHORIZED_ACCESS)) == 1


def test_anonymous_caller_is_401(client, activity_repo):
    resp = client.get("/protected/student-dashboard?action=getStudentData")
    assert resp.status_code == 401
    assert activity_repo.entries == []


def test_unknown_portal_is_404(client):
    _sign_in(client, student_form())
    resp = client.get("/protected/admin-dashboard?action=getAll")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Resource not found"}


def test_unknown_action_is_400(client):
    _sign_in(client, student_form())
    resp = client.get("/protected/student-dashboard?action=deleteEverything")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid action"


def test_update_profile_requires_csrf_token(client, users_repo):
    _sign_in(client, student_form())

    resp = client.post("/protected/student-dashboard?action=updateProfile", json={"first_name": "Augusta"})

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Invalid or missing CSRF token"
    assert users_repo.users[1001].first_name == "Ada"


def test_update_profile_with_csrf_token(client, users_repo, activity_repo):
    token = _sign_in(client, student_form())

    resp = client.post(
        "/protected/student-dashboard?action=updateProfile",
        json={"first_name": "Augusta", "year_of_study": 3, "role": "faculty"},
        headers={CSRF: token},
    )
    data = resp.get_json()["data"]

    assert resp.status_code == 200
    assert data["first_name"] == "Augusta"
    assert data["year_of_study"] == 3
    assert data["role"] == "student"
    assert users_repo.users[1001].first_name == "Augusta"
    updates = activity_repo.of(AuditAction.PROFILE_UPDATE)
    assert [e.details for e in updates] == ["Updated fields: first_name, year_of_study"]


def test_update_intern_dates_validates_order(client, users_repo):
    token = _sign_in(client, intern_form())

    bad = client.post(
        "/protected/intern-dashboard?action=updateProfile",
        json={"end_date": "2025-12-31"},
        headers={CSRF: token},
    )
    ok = client.post(
        "/protected/intern-dashboard?action=updateProfile",
        json={"end_date": "2026-09-30"},
        headers={CSRF: token},
    )

    assert bad.status_code == 400
    assert ok.status_code == 200
    assert ok.get_json()["data"]["end_date"] == "2026-09-30"
    assert ok.get_json()["data"]["start_date"] == "2026-01-05"


def test_update_profile_email_conflict_is_409(client):
    client.post("/signup", json=faculty_form())
    token = _sign_in(client, student_form())

    resp = client.post(
        "/protected/student-dashboard?action=updateProfile",
        json={"email": "alan@example.edu"},
        headers={CSRF: token},
    )

    assert resp.status_code == 409
    assert resp.get_json()["message"] == "Email already registered"


def test_echoed_profile_values_are_not_escaped_twice(client, users_repo):
    token = _sign_in(client, student_form(last_name="O'Brien"))
    shown = client.get("/protected/student-dashboard?action=getStudentData").get_json()["data"]
    assert shown["last_name"] == "O&#39;Brien"

    resp = client.post(
        "/protected/student-dashboard?action=updateProfile",
        json={"last_name": shown["last_name"], "first_name": "Ada <Countess>"},
        headers={CSRF: token},
    )

    assert resp.status_code == 200
    assert users_repo.users[1001].last_name == "O&#39;Brien"
    assert users_repo.users[1001].first_name == "Ada &lt;Countess&gt;"
