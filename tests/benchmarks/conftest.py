"""Shared fixtures for benchmark tests."""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlmodel import Session, create_engine, SQLModel
from sqlmodel.pool import StaticPool

from app.models.user import User


@pytest.fixture(name="session")
def session_fixture():
    """
    Create and yield a SQLModel Session bound to a fresh in-memory SQLite database.

    Yields:
        Session: A SQLModel Session connected to the created in-memory SQLite database; the session is closed when the fixture tears down.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="bench_author")
def bench_author_fixture(session: Session) -> User:
    """
    Persist an established author with a complete profile.

    The username and email carry a random suffix so repeated benchmark rounds never collide.
    """
    unique = uuid.uuid4().hex[:8]
    author = User(
        username=f"bench_user_{unique}",
        email=f"bench_{unique}@example.com",
        first_name="Bench",
        last_name="Author",
        phone="0600000000",
        avatar="https://cdn.example.com/bench.png",
        date_creation=datetime.now() - timedelta(days=120),
    )
    session.add(author)
    session.commit()
    session.refresh(author)
    return author


@pytest.fixture(name="spam_listing")
def spam_listing_fixture() -> dict:
    return {
        "title": "URGENT!!! Exclusive deal, act now",
        "description": (
            "Congratulations, you have been selected! Wire transfer only, "
            "call +1 555-123-4567 or see http://bit.ly/cheap-flat. $5000k savings!!!"
        ),
    }


@pytest.fixture(name="clean_listing")
def clean_listing_fixture() -> dict:
    return {
        "title": "Bright studio in the old town",
        "description": "Furnished studio close to the station, available from June.",
    }
