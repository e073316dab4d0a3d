"""
Pytest configuration for account-service tests
"""

import os
import tempfile

# Settings are read once at import, so the environment must be ready first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="account-service-uploads-")
os.environ["ENABLE_SCHEDULER"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from account_service import database, models, schemas
from account_service.main import app
from account_service.services import accounts
from account_service.stores import AccountStore


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    yield engine
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """Test client whose requests use the in-memory database"""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[database.get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory registering a user directly through the account service"""

    def _make_user(username="alice", email="a@x.com", password="p1", role=models.Role.USER, **extra):
        # Admins cannot self-register, so they are promoted after creation
        initial_role = models.Role.USER if role == models.Role.ADMIN else role
        data = schemas.UserCreate(username=username, email=email, password=password, role=initial_role, **extra)
        user = accounts.register_user(db_session, data)
        if role == models.Role.ADMIN:
            user = AccountStore(db_session).update_by_id(user.id, {"role": role.value})
        return user

    return _make_user


def register_and_login(client, username="alice", email="a@x.com", password="p1", **extra) -> str:
    """Registers a user over HTTP and returns their bearer token"""
    response = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()["access_token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
