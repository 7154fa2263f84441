import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

# Keep the app's own engine off disk; every request goes through test_engine anyway
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from tourney.database import create_db_engine, get_session, init_db  # noqa: E402
from tourney.main import app  # noqa: E402
from tourney.security import get_auth_settings  # noqa: E402
from tourney.services.auth_service import AuthSettings  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_AUTH_SETTINGS = AuthSettings(token_secret="test-secret", token_ttl_minutes=60)

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-password"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. Same engine factory as the app, so foreign keys are enforced here too
# 3. Tables dropped and recreated per test (see session_fixture)
# 4. App dependencies overridden to use test_engine and fixed auth settings
test_engine = create_db_engine(TEST_DATABASE_URL, poolclass=StaticPool)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


def override_get_auth_settings():
    return TEST_AUTH_SETTINGS


def auth_headers(client: TestClient, username: str, password: str) -> dict:
    response = client.post("/api/users/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    SQLModel.metadata.drop_all(test_engine)
    init_db(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="anon_client")
def anon_client_fixture(session: Session):
    """Test client without credentials

    Overrides MUST be set BEFORE TestClient() and stay in place
    for the entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_auth_settings] = override_get_auth_settings

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="client")
def client_fixture(anon_client: TestClient):
    """Test client logged in as the first (admin) account"""
    response = anon_client.post("/api/users/register", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 201
    assert response.json()["admin"] is True

    anon_client.headers.update(auth_headers(anon_client, ADMIN_USERNAME, ADMIN_PASSWORD))
    return anon_client
