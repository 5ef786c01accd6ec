"""Shared pytest fixtures.

The database URL is pointed at a temporary SQLite file before any service
module is imported, so tests never touch a real database.
"""

import os
import tempfile
from datetime import date

_TEST_DB_DIR = tempfile.mkdtemp(prefix="event_reminders_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test_events.db')}"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["NOTIFICATION_WEBHOOK_URL"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import database  # noqa: E402

TODAY = date(2024, 6, 10)
USER = "user-a"


@pytest.fixture
def db():
    """Fresh schema and session per test"""
    database.Base.metadata.drop_all(bind=database.engine)
    database.Base.metadata.create_all(bind=database.engine)
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """API client with "today" fixed to TODAY"""
    import api_server

    api_server.app.dependency_overrides[api_server.get_today] = lambda: TODAY
    with TestClient(api_server.app) as test_client:
        yield test_client
    api_server.app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-User-Id": USER}
