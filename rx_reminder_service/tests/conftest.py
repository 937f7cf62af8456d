"""
Pytest configuration and shared fixtures.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.db.db_config import get_db, get_sqlite_connection
from app.main import app
from app.schemas.models import Medicine
from app.services import drug_lookup, notifications, reminder_state

INTERNAL_KEY = "test-internal-key"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


@pytest.fixture(autouse=True)
def clean_in_process_state():
    reminder_state.SLOT_STATE.clear()
    notifications.PENDING_REMINDERS.clear()
    drug_lookup._CACHE.clear()
    yield
    reminder_state.SLOT_STATE.clear()
    notifications.PENDING_REMINDERS.clear()
    drug_lookup._CACHE.clear()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "prescriptions.db"


@pytest.fixture
def conn(db_path):
    c = get_sqlite_connection(db_path)
    yield c
    c.close()


@pytest.fixture
def client(db_path, monkeypatch):
    monkeypatch.setenv("INTERNAL_SERVICE_SECRET", INTERNAL_KEY)

    def _test_db():
        c = get_sqlite_connection(db_path)
        try:
            yield c
        finally:
            c.close()

    app.dependency_overrides[get_db] = _test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def internal_headers():
    return {"x-internal-key": INTERNAL_KEY}


@pytest.fixture
def reminder_day():
    return date(2026, 10, 17)


@pytest.fixture
def amoxicillin():
    return Medicine(
        id=1, name="Amoxicillin", dosage="500mg", frequency="Twice daily",
        duration="7 days", instructions="After meals",
    )


@pytest.fixture
def paracetamol():
    return Medicine(
        id=2, name="Paracetamol", dosage="650mg", frequency="Once daily",
        duration="5 days", instructions="Follow doctor's instructions",
    )
