"""Pytest fixtures — per-test SQLite database for fast, isolated tests."""
import os

# Keep app startup off the developer database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.auth.security import create_access_token, hash_password
from app.database import Base, get_db
from app.main import app

# Import all models so they register with Base.metadata
from app.models.admin import Admin, Role              # noqa: F401
from app.models.event import Event                    # noqa: F401
from app.models.event_mutation import EventMutation   # noqa: F401

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
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


@pytest.fixture
def super_admin(db):
    return create_test_admin(db, "root", Role.super_admin)


@pytest.fixture
def admin(db):
    return create_test_admin(db, "alice", Role.admin)


@pytest.fixture
def other_admin(db):
    return create_test_admin(db, "bob", Role.admin)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def create_test_admin(db, username: str, role: Role = Role.admin, password: str = TEST_PASSWORD) -> Admin:
    """Insert an admin directly and return it."""
    admin = Admin(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(password),
        role=role,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def auth_headers(admin: Admin) -> dict:
    return {"Authorization": f"Bearer {create_access_token(admin)}"}


def event_payload(**overrides) -> dict:
    payload = {
        "title": "Sunday League Final",
        "date": "Sun 14 June, 15:00",
        "location": "Riverside Stadium",
        "description": "Season closer with the top two teams.",
        "image": "data:image/png;base64,iVBORw0KGgo=",
        "tags": ["football", "final"],
        "category": "Football",
    }
    payload.update(overrides)
    return payload


def submit_event(client: TestClient, admin: Admin, **overrides) -> dict:
    """Helper — POST /api/events as ``admin`` and return the event JSON."""
    resp = client.post("/api/events/", json=event_payload(**overrides), headers=auth_headers(admin))
    assert resp.status_code == 201, resp.text
    return resp.json()["event"]


def published_event(client: TestClient, owner: Admin, moderator: Admin, **overrides) -> dict:
    """Helper — submit as ``owner`` then approve as ``moderator``."""
    event = submit_event(client, owner, **overrides)
    resp = client.put(f"/api/events/{event['event_id']}/approve", headers=auth_headers(moderator))
    assert resp.status_code == 200, resp.text
    return resp.json()["event"]


def fetch_event(client: TestClient, event_id: str, viewer: Admin) -> dict:
    resp = client.get(f"/api/events/{event_id}", headers=auth_headers(viewer))
    assert resp.status_code == 200, resp.text
    return resp.json()
