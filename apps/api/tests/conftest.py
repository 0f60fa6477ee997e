from __future__ import annotations

import os
import tempfile
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

# Ensure config is set before app import
_TEST_DB = Path(tempfile.gettempdir()) / f"friday_registration_test_{os.getpid()}.db"
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", f"sqlite:///{_TEST_DB}")
os.environ.setdefault("AUTH_MODE", "jwt")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_32_chars_minimum")
os.environ.setdefault("ENV", "local")
os.environ.setdefault("DEV_ROUTES_ENABLED", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("PRAYER_TIMEZONE", "Europe/Berlin")

from app.cli import create_admin  # noqa: E402
from app.db import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base, Prayer  # noqa: E402
from app.services import registration_service  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "StrongPass123"


@pytest.fixture(scope="session", autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if _TEST_DB.exists():
        _TEST_DB.unlink()


@pytest.fixture(autouse=True)
def clean_db():
    db = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(delete(table))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_prayer():
    """Insert a prayer in its own committed transaction and return its id."""

    def _make(**overrides) -> uuid.UUID:
        values = {
            "title": "Friday Prayer",
            "scheduled_at": datetime.now(timezone.utc) + timedelta(days=2),
            "capacity": 150,
            "location": "Main Prayer Hall",
            "active": True,
            "auto_activation": True,
        }
        values.update(overrides)
        with SessionLocal() as db:
            prayer = Prayer(**values)
            db.add(prayer)
            db.commit()
            return prayer.id

    return _make


@pytest.fixture
def large_parties(monkeypatch):
    """Lift the per-registration party cap so whole-capacity scenarios can run."""
    monkeypatch.setattr(
        registration_service,
        "settings",
        replace(registration_service.settings, max_party_size=1000),
    )


@pytest.fixture
def admin_headers(client: TestClient) -> dict[str, str]:
    with SessionLocal() as db:
        create_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD)

    resp = client.post("/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
