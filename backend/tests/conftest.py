"""Pytest fixtures: a fresh SQLite database per test."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from eventlog.database import Base, configure_sqlite, get_db
from eventlog.main import app
from eventlog.services import auth_service

# Import all models so they register with Base.metadata
from eventlog.models.user import User                          # noqa: F401
from eventlog.models.tag import Tag                            # noqa: F401
from eventlog.models.event import Event                        # noqa: F401
from eventlog.models.attachment import Attachment              # noqa: F401
from eventlog.models.event_edit_history import EventEditHistory  # noqa: F401


@pytest.fixture(autouse=True)
def _fast_password_hashing(monkeypatch):
    """Full-strength PBKDF2 makes every registration slow; tests don't need it."""
    monkeypatch.setattr(auth_service, "_ITERATIONS", 1_000)


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create records through the API and return the JSON response
# ---------------------------------------------------------------------------
def register_user(client: TestClient, username: str = "alice", display_name: str = None,
                  password: str = "password123") -> dict:
    """POST /api/auth/register; returns the user plus ready-made auth headers."""
    resp = client.post("/api/auth/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "displayName": display_name or username.capitalize(),
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    data = resp.json()
    return {**data["user"], "token": data["token"], "headers": {"Authorization": f"Bearer {data['token']}"}}


def create_test_tag(client: TestClient, name: str = "work", color: str = None) -> dict:
    """POST /api/tags and return the response JSON."""
    payload = {"name": name}
    if color:
        payload["color"] = color
    resp = client.post("/api/tags/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(client: TestClient, user: dict, title: str = "Standup", content: str = "Daily sync",
                      event_type: str = "simple_message", **extra) -> dict:
    """POST /api/events as ``user`` and return the response JSON."""
    resp = client.post("/api/events/", headers=user["headers"], json={
        "title": title,
        "content": content,
        "type": event_type,
        **extra,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()
