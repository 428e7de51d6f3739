# tests/conftest.py
import os
import tempfile
from datetime import date, time, timedelta

# Point the app at a throwaway SQLite file before any counselbook import
# builds the engine from settings.
os.environ.setdefault(
    "DB_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'counselbook_test.db')}",
)
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from counselbook.core.config import get_settings  # noqa: E402
from counselbook.db.session import _build_sync_db_url, reset_schema_sync  # noqa: E402
from counselbook.main import create_app  # noqa: E402
from counselbook.models.person import Person  # noqa: E402

COUNSELOR_ID = "counselor-1"
STUDENT_ID = "student-1"


def future_day(days: int = 7) -> date:
    return date.today() + timedelta(days=days)


def slot_payload(days: int = 7, start: time = time(9, 0), end: time = time(9, 30)) -> dict:
    return {
        "date": future_day(days).isoformat(),
        "startTime": start.isoformat(),
        "endTime": end.isoformat(),
    }


@pytest.fixture(autouse=True)
def _reset_db():
    """
    Automatically reset the DB before each test so every test gets a clean
    schema and empty tables.
    """
    reset_schema_sync()
    yield


@pytest.fixture
def client() -> TestClient:
    """
    TestClient built from the application factory.
    """
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def people():
    """
    Seed the identity directory with one counselor and one student.
    """
    engine = create_engine(_build_sync_db_url(get_settings().DB_URL))
    seeded = [
        Person(id=COUNSELOR_ID, name="Dana Counselor", email="dana@school.example", role="counselor"),
        Person(id=STUDENT_ID, name="Sam Student", email="sam@school.example", role="student"),
    ]
    with Session(engine, expire_on_commit=False) as session:
        session.add_all(seeded)
        session.commit()
    engine.dispose()
    return {person.id: person for person in seeded}
