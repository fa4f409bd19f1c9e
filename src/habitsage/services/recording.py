"""Recording habit completions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..domain.repositories import HabitRepository
from ..errors import HabitNotFoundError
from ..logging_config import get_logger
from ..models.habit import CompletionLog, Habit
from .periods import DateLike, habit_period_key, to_utc_date

logger = get_logger(__name__)


@dataclass(slots=True)
class RecordResult:
    """Outcome of a record call, enough for callers to award points or badges."""

    habit: Habit
    log: CompletionLog
    period_key: date
    completed: bool
    newly_completed: bool


def _require_habit(repository: HabitRepository, owner_id: int, habit_id: int) -> Habit:
    habit = repository.get_habit(owner_id, habit_id)
    if habit is None:
        raise HabitNotFoundError(habit_id, owner_id)
    return habit


def record(
    repository: HabitRepository,
    owner_id: int,
    habit_id: int,
    when: DateLike,
    completed: bool,
) -> RecordResult:
    """Mark the period covering ``when`` as done or not done.

    Repeated calls within the same period update one log in place.

    Raises:
        HabitNotFoundError: If the habit is missing or owned by someone else
    """

    habit = _require_habit(repository, owner_id, habit_id)
    key = habit_period_key(habit, when)
    if key < habit_period_key(habit, habit.created_at):
        logger.warning(
            f"Recording habit {habit_id} for {key}, before it was created on "
            f"{to_utc_date(habit.created_at)}"
        )

    log, previous = repository.upsert_log(owner_id, habit_id, key, completed)
    newly_completed = completed and previous is not True

    logger.info(
        f"Recorded habit {habit_id} period {key.isoformat()} completed={completed}",
        extra={"owner_id": owner_id, "newly_completed": newly_completed},
    )
    return RecordResult(
        habit=habit,
        log=log,
        period_key=key,
        completed=completed,
        newly_completed=newly_completed,
    )


def period_status(habit: Habit, logs: Iterable[CompletionLog], key: date) -> Optional[bool]:
    """Status of the period ``key`` from logs re-keyed under the habit's current frequency.

    After a frequency change several stored logs can fall into one period;
    any completed one marks it done.
    """

    statuses = [log.completed for log in logs if habit_period_key(habit, log.period_key) == key]
    if not statuses:
        return None
    return any(statuses)


def completion_status(
    repository: HabitRepository, owner_id: int, habit_id: int, when: DateLike
) -> Optional[bool]:
    """Completed flag of the log covering ``when``; ``None`` if nothing was recorded.

    Raises:
        HabitNotFoundError: If the habit is missing or owned by someone else
    """

    habit = _require_habit(repository, owner_id, habit_id)
    logs = repository.list_logs(owner_id, habit_id)
    return period_status(habit, logs, habit_period_key(habit, when))


__all__ = ["RecordResult", "completion_status", "period_status", "record"]
