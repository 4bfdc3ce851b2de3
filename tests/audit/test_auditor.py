from __future__ import annotations

import logging
from datetime import datetime

from campus_attendance.audit.model import ClientInfo
from campus_attendance.audit.service import ActivityAuditor
from campus_attendance.core.enums import AuditAction
from fakes import BrokenActivityLog, FakeClock, InMemoryActivityLog


def test_log_appends_entry_with_client_and_timestamp():
    repo = InMemoryActivityLog()
    clock = FakeClock(datetime(2026, 2, 1, 8, 30))
    auditor = ActivityAuditor(repo, clock=clock)

    ok = auditor.log(5, AuditAction.LOGIN_SUCCESS, client=ClientInfo("10.0.0.7", "pytest"))

    assert ok is True
    entry = repo.entries[0]
    assert entry.user_id == 5
    assert entry.action == AuditAction.LOGIN_SUCCESS
    assert entry.ip_address == "10.0.0.7"
    assert entry.user_agent == "pytest"
    assert entry.created_at == datetime(2026, 2, 1, 8, 30)


def test_missing_client_is_recorded_as_unknown():
    repo = InMemoryActivityLog()
    ActivityAuditor(repo).log(None, AuditAction.LOGOUT, "bye")

    entry = repo.entries[0]
    assert entry.ip_address == entry.user_agent == "unknown"
    assert entry.details == "bye"


def test_write_failure_is_logged_not_raised(caplog):
    repo = BrokenActivityLog()

    with caplog.at_level(logging.ERROR, logger="campus_attendance.audit.service"):
        ok = ActivityAuditor(repo).log(1, AuditAction.REGISTRATION)

    assert ok is False
    assert repo.attempts == 1
    assert "Activity logging failed" in caplog.text
