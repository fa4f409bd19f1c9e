"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from ...errors import StoreUnavailableError
from ...logging_config import get_logger
from ...models.habit import CompletionLog, Habit, utcnow

logger = get_logger(__name__)


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into ``StoreUnavailableError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"Habit store failed to {action}: {exc}")
        raise StoreUnavailableError(f"Failed to {action}: {exc}") from exc


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_habit(self, owner_id: int, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID, scoped to its owner."""
        with _store_errors("fetch habit"):
            with self.session_factory() as session:
                obj = session.exec(
                    select(Habit).where(Habit.id == habit_id, Habit.owner_id == owner_id)
                ).first()
                if obj:
                    session.expunge(obj)
                return obj

    def list_habits(self, owner_id: int) -> list[Habit]:
        """List all habits of an owner, oldest first."""
        with _store_errors("list habits"):
            with self.session_factory() as session:
                statement = (
                    select(Habit)
                    .where(Habit.owner_id == owner_id)
                    .order_by(Habit.created_at, Habit.id)  # type: ignore
                )
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows

    def create_habit(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with _store_errors("create habit"):
            with self.session_factory() as session:
                session.add(habit)
                session.commit()
                session.refresh(habit)
                session.expunge(habit)
                return habit

    def update_habit(
        self,
        owner_id: int,
        habit_id: int,
        *,
        name: str,
        frequency: str,
        specific_weekdays: Sequence[int],
    ) -> Optional[Habit]:
        """Overwrite the editable fields of a habit; ``None`` if it is not the owner's."""
        with _store_errors("update habit"):
            with self.session_factory() as session:
                habit = session.exec(
                    select(Habit).where(Habit.id == habit_id, Habit.owner_id == owner_id)
                ).first()
                if habit is None:
                    return None
                habit.name = name
                habit.frequency = frequency
                habit.specific_weekdays = list(specific_weekdays)
                session.add(habit)
                session.commit()
                session.refresh(habit)
                session.expunge(habit)
                return habit

    def delete_habit(self, owner_id: int, habit_id: int) -> bool:
        """Delete a habit; its logs go with it through the ORM cascade."""
        with _store_errors("delete habit"):
            with self.session_factory() as session:
                habit = session.exec(
                    select(Habit).where(Habit.id == habit_id, Habit.owner_id == owner_id)
                ).first()
                if habit is None:
                    return False
                session.delete(habit)
                session.commit()
                return True

    # Completion log operations
    @staticmethod
    def _select_log(session: Session, owner_id: int, habit_id: int, period_key: date):
        return session.exec(
            select(CompletionLog)
            .where(CompletionLog.owner_id == owner_id)
            .where(CompletionLog.habit_id == habit_id)
            .where(CompletionLog.period_key == period_key)
        ).first()

    def find_log(self, owner_id: int, habit_id: int, period_key: date) -> Optional[CompletionLog]:
        """Get the log stored under an exact period key."""
        with _store_errors("fetch completion log"):
            with self.session_factory() as session:
                obj = self._select_log(session, owner_id, habit_id, period_key)
                if obj:
                    session.expunge(obj)
                return obj

    @staticmethod
    def _swap_completed(session: Session, log: CompletionLog, completed: bool, now) -> bool:
        """Set ``completed`` on a stored log and return the value it replaced.

        The UPDATE only matches while the row still holds the value we read,
        so a concurrent writer is seen as the previous state rather than lost.
        """
        while True:
            previous = log.completed
            result = session.connection().execute(
                update(CompletionLog)
                .where(CompletionLog.id == log.id)  # type: ignore
                .where(CompletionLog.completed == previous)  # type: ignore
                .values(completed=completed, recorded_at=now)
            )
            if result.rowcount:
                session.commit()
                return previous
            session.refresh(log)

    def upsert_log(
        self, owner_id: int, habit_id: int, period_key: date, completed: bool
    ) -> tuple[CompletionLog, Optional[bool]]:
        """Insert or update the log for a period.

        Returns the stored log and the ``completed`` value it replaced
        (``None`` when the log was created). A concurrent insert for the same
        period surfaces as an IntegrityError on the unique constraint; the
        write is then applied to the winner's row (last write wins).
        """
        with _store_errors("upsert completion log"):
            with self.session_factory() as session:
                now = utcnow()
                log = self._select_log(session, owner_id, habit_id, period_key)
                previous: Optional[bool] = None
                if log is None:
                    log = CompletionLog(
                        owner_id=owner_id,
                        habit_id=habit_id,
                        period_key=period_key,
                        completed=completed,
                        recorded_at=now,
                    )
                    session.add(log)
                    try:
                        session.commit()
                    except IntegrityError:
                        session.rollback()
                        log = self._select_log(session, owner_id, habit_id, period_key)
                        if log is None:
                            raise
                        previous = self._swap_completed(session, log, completed, now)
                else:
                    previous = self._swap_completed(session, log, completed, now)
                session.refresh(log)
                session.expunge(log)
                return log, previous

    def list_completed_logs(self, owner_id: int, habit_id: int) -> list[CompletionLog]:
        """All completed logs for a habit, in no particular order."""
        with _store_errors("list completed logs"):
            with self.session_factory() as session:
                statement = (
                    select(CompletionLog)
                    .where(CompletionLog.owner_id == owner_id)
                    .where(CompletionLog.habit_id == habit_id)
                    .where(CompletionLog.completed == True)  # noqa: E712
                )
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows

    def list_logs(self, owner_id: int, habit_id: Optional[int] = None) -> list[CompletionLog]:
        """All logs for an owner, optionally for a single habit, oldest period first."""
        with _store_errors("list completion logs"):
            with self.session_factory() as session:
                statement = select(CompletionLog).where(CompletionLog.owner_id == owner_id)
                if habit_id is not None:
                    statement = statement.where(CompletionLog.habit_id == habit_id)
                statement = statement.order_by(CompletionLog.period_key)  # type: ignore
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows
