"""Pytest configuration and fixtures."""

import os
import tempfile

# Setup environment before the app (and its settings) are imported
os.environ.setdefault("IHARU_DATA_DIR", tempfile.mkdtemp())
os.environ.setdefault("IHARU_DB_PATH", os.path.join(os.environ["IHARU_DATA_DIR"], "test.db"))
os.environ.setdefault("IHARU_RESEND_API_KEY", "")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from iharu.database import get_session  # noqa: E402
from iharu.main import app  # noqa: E402


# -------------------------------------------------------------------------
# Database Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    """TestClient wired to the in-memory database."""

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# -------------------------------------------------------------------------
# Account Fixtures
# -------------------------------------------------------------------------


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def signup(client, email: str, name: str, role: str, password: str = "secret123") -> dict:
    r = client.post(
        "/api/v1/auth/signup",
        json={"email": email, "password": password, "name": name, "role": role},
    )
    assert r.status_code == 201, r.text
    data = r.json()
    return {
        "token": data["token"],
        "user": data["user"],
        "headers": auth_headers(data["token"]),
    }


@pytest.fixture
def parent(client) -> dict:
    """A parent account with its own family."""
    return signup(client, "mom@example.com", "엄마", "parent")


@pytest.fixture
def child_profile(client, parent) -> dict:
    r = client.post("/api/v1/children", json={"name": "하루"}, headers=parent["headers"])
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def child(client, child_profile) -> dict:
    """A child account linked to ``child_profile``."""
    account = signup(client, "kid@example.com", "하루", "child")
    r = client.post(
        "/api/v1/family/join",
        json={"invite_code": child_profile["invite_code"]},
        headers=account["headers"],
    )
    assert r.status_code == 200, r.text
    account["profile_id"] = child_profile["id"]
    return account
