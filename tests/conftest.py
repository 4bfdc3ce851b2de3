from __future__ import annotations

from datetime import datetime

import pytest

from campus_attendance.container import build_services
from campus_attendance.main import create_app
from fakes import TODAY, FakeClock, InMemoryActivityLog, InMemoryUsers

TEST_HASH_METHOD = "pbkdf2:sha256:1000"


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 15, 9, 0, 0))


@pytest.fixture
def users_repo():
    return InMemoryUsers()


@pytest.fixture
def activity_repo():
    return InMemoryActivityLog()


@pytest.fixture
def container(users_repo, activity_repo, clock):
    return build_services(
        users_repo,
        activity_repo,
        hash_method=TEST_HASH_METHOD,
        clock=clock,
        today=lambda: TODAY,
    )


@pytest.fixture
def app(container):
    return create_app(container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()
