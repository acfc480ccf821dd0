import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-min-32-chars")

import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

import app.models  # noqa: F401
from app.core.config import Settings
from app.core.dependencies import get_rate_tracker
from app.core.rate_tracker import LimitsRateTracker
from app.core.security import create_access_token
from app.database.database import get_session
from app.main import app as fastapi_app
from app.models.enums import UserRole
from app.models.user import User


# Test settings fixture
@pytest.fixture(scope="function")
def test_settings():
    """Provide test settings with mock values."""
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        SECRET_KEY="test-secret-key-for-testing-only-min-32-chars",
        ALGORITHM="HS256",
        ACCESS_TOKEN_EXPIRE_MINUTES=30,
        BACKEND_CORS_ORIGINS="",
    )


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="session")
def session_fixture(engine):
    """Provide a test database session."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="rate_tracker")
def rate_tracker_fixture():
    """Fresh rate tracker so hourly counters never leak between tests."""
    return LimitsRateTracker()


@pytest.fixture(name="client")
def client_fixture(session: Session, rate_tracker: LimitsRateTracker):
    """
    Provide a TestClient whose routes use the test session and rate tracker.

    Dependency overrides are cleared on teardown.
    """
    fastapi_app.dependency_overrides[get_session] = lambda: session
    fastapi_app.dependency_overrides[get_rate_tracker] = lambda: rate_tracker
    client = TestClient(fastapi_app)
    yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    """
    Factory creating users with a complete profile and an established account by default.

    Keyword arguments override any User field.
    """
    counter = {"n": 0}

    def make(**overrides) -> User:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "username": f"user{n}",
            "email": f"user{n}@example.com",
            "first_name": "Test",
            "last_name": f"User{n}",
            "phone": "0600000000",
            "avatar": "https://cdn.example.com/avatar.png",
            "date_creation": datetime.now() - timedelta(days=90),
        }
        fields.update(overrides)
        user = User(**fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return make


@pytest.fixture(name="user")
def user_fixture(make_user) -> User:
    return make_user(username="regular", email="regular@example.com")


@pytest.fixture(name="other_user")
def other_user_fixture(make_user) -> User:
    return make_user(username="other", email="other@example.com")


@pytest.fixture(name="admin_user")
def admin_user_fixture(make_user) -> User:
    return make_user(
        username="moderator", email="moderator@example.com", role=UserRole.ADMIN
    )


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    """Build bearer headers for a user."""

    def headers(user: User) -> dict[str, str]:
        token = create_access_token(data={"sub": user.username})
        return {"Authorization": f"Bearer {token}"}

    return headers


@pytest.fixture(scope="function")
def mock_session():
    """Provide a mock database session."""
    return MagicMock(spec=Session)
