"""Pytest configuration and shared fixtures for HabitSage tests.

Every test gets its own temporary SQLite database, so repositories and
services run against real SQLModel tables without touching the app database.
"""

from __future__ import annotations

import tempfile
from datetime import date, datetime, time, timezone
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from habitsage.infra.repositories import SQLModelHabitRepository
from habitsage.models import CompletionLog, Habit

OWNER_ID = 1
OTHER_OWNER_ID = 2


def utc_midnight(day: date) -> datetime:
    """UTC datetime at the start of ``day``."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
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
    """Session factory matching the ``Callable[[], Session]`` repositories expect."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(db_session):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Drink Water",
        frequency: str = "daily",
        specific_weekdays: list[int] | None = None,
        created_on: date = date(2024, 1, 1),
        owner_id: int = OWNER_ID,
    ) -> Habit:
        habit = Habit(
            owner_id=owner_id,
            name=name,
            frequency=frequency,
            specific_weekdays=list(specific_weekdays or []),
            created_at=utc_midnight(created_on),
        )
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def log_factory(repo):
    """Factory writing completion logs straight through the repository."""

    def _create_log(habit: Habit, period_key: date, completed: bool = True) -> CompletionLog:
        log, _ = repo.upsert_log(habit.owner_id, habit.id, period_key, completed)
        return log

    return _create_log


def make_habit(
    frequency: str = "daily",
    specific_weekdays: list[int] | None = None,
    created_on: date = date(2024, 1, 1),
) -> Habit:
    """Unsaved habit for pure-function tests."""
    return Habit(
        id=1,
        owner_id=OWNER_ID,
        name="Test habit",
        frequency=frequency,
        specific_weekdays=list(specific_weekdays or []),
        created_at=utc_midnight(created_on),
    )


def make_logs(*days: date, completed: bool = True) -> list[CompletionLog]:
    """Unsaved completion logs for pure-function tests."""
    return [
        CompletionLog(owner_id=OWNER_ID, habit_id=1, period_key=day, completed=completed)
        for day in days
    ]
