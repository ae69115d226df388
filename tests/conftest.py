"""Pytest configuration and shared fixtures for habitpace tests.

This module provides database fixtures, habit factories and a Flask test
client without touching the real app database.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import models so they're registered with SQLModel metadata
from habitpace.config import TestConfig
from habitpace.infra.database import create_session_factory
from habitpace.models import Habit, HabitType, TimeFrame, User


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Point every config instance at a throwaway data directory."""

    monkeypatch.setenv("HABITPACE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HABITPACE_TEST_DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("HABITPACE_DEV_MODE", "true")
    monkeypatch.delenv("HABITPACE_DATABASE_URL", raising=False)
    monkeypatch.delenv("HABITPACE_TIMEZONE", raising=False)
    monkeypatch.delenv("HABITPACE_WEEKLY_FREQUENCY", raising=False)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a single test."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what repositories receive in the app."""

    return create_session_factory(db_engine)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user(db_session) -> User:
    """Create a default owner for scoping data."""

    u = User(username="tester")
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


@pytest.fixture
def other_user(db_session) -> User:
    u = User(username="someone-else")
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


@pytest.fixture
def habit_factory(db_session, user):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Exercise",
        habit_type: HabitType = HabitType.BINARY,
        completed_dates: list[str] | None = None,
        counts: dict[str, float] | None = None,
        goal: float | None = None,
        time_frame: TimeFrame | None = None,
        weekly_frequency: int = 5,
        is_paused: bool = False,
        owner: User | None = None,
        created_at: datetime | None = None,
    ) -> Habit:
        owner = owner or user
        habit = Habit(
            name=name,
            user_id=owner.id,
            habit_type=habit_type.value,
            completed_dates=list(completed_dates or []),
            counts=dict(counts or {}),
            goal=goal,
            time_frame=time_frame.value if time_frame else None,
            weekly_frequency=weekly_frequency,
            is_paused=is_paused,
        )
        if created_at is not None:
            habit.created_at = created_at
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


# =============================================================================
# Flask Fixtures
# =============================================================================


@pytest.fixture
def app():
    """Flask app wired to a temp database."""

    from habitpace import create_app

    flask_app = create_app(config=TestConfig())
    yield flask_app

    flask_app.extensions["habitpace"]["engine"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Headers the identity layer would forward for user 1."""

    return {"X-User-Id": "1"}
