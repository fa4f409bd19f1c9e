"""Completion-rate calculations over a trailing window."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from ..domain.repositories import HabitRepository
from ..errors import HabitNotFoundError
from ..logging_config import get_logger
from ..models.habit import CompletionLog, Habit, HabitFrequency
from .periods import (
    coerce_frequency,
    habit_period_key,
    habit_weekdays,
    iter_days,
    next_period_key,
    sunday_weekday,
    to_utc_date,
    utc_today,
)

logger = get_logger(__name__)

INSUFFICIENT_DATA = -1.0
DEFAULT_WINDOW_DAYS = 30
# Daily habits need a few samples before a rate means anything
DAILY_MINIMUM_PERIODS = 3


def is_insufficient(rate: float) -> bool:
    """True when ``rate`` is the insufficient-data sentinel rather than a real fraction."""

    return rate < 0


def minimum_periods(habit: Habit) -> int:
    """Number of elapsed periods required before a rate is reported."""

    weekdays = habit_weekdays(habit)
    if weekdays:
        return len(weekdays)
    if coerce_frequency(habit.frequency) is HabitFrequency.DAILY:
        return DAILY_MINIMUM_PERIODS
    return 1


def count_periods(
    habit: Habit, logs: Iterable[CompletionLog], start: date, end: date
) -> tuple[int, int]:
    """Return ``(completed, total)`` periods for the habit between two days.

    ``start`` must not precede the habit's creation day.
    """

    done = {habit_period_key(habit, log.period_key) for log in logs if log.completed}
    weekdays = habit_weekdays(habit)
    completed = 0
    total = 0

    if weekdays:
        for day in iter_days(start, end):
            if sunday_weekday(day) not in weekdays:
                continue
            total += 1
            if day in done:
                completed += 1
        return completed, total

    created_key = habit_period_key(habit, habit.created_at)
    key = habit_period_key(habit, start)
    while key <= end:
        if key >= created_key:
            total += 1
            if key in done:
                completed += 1
        key = next_period_key(habit.frequency, key)
    return completed, total


def compute_completion_rate(
    habit: Habit,
    logs: Iterable[CompletionLog],
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    today: Optional[date] = None,
) -> float:
    """Fraction of periods completed over the last ``window_days`` days.

    Returns ``INSUFFICIENT_DATA`` when the habit is younger than the window
    start allows or too few periods have elapsed to say anything useful.
    """

    today = today or utc_today()
    range_start = today - timedelta(days=window_days - 1)
    effective_start = max(range_start, to_utc_date(habit.created_at))
    if effective_start > today:
        return INSUFFICIENT_DATA

    completed, total = count_periods(habit, logs, effective_start, today)
    if total == 0 or total < minimum_periods(habit):
        return INSUFFICIENT_DATA
    return completed / total


def completion_rate(
    repository: HabitRepository,
    owner_id: int,
    habit_id: int,
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    today: Optional[date] = None,
) -> float:
    """Completion rate for a stored habit.

    Raises:
        HabitNotFoundError: If the habit is missing or owned by someone else
    """

    habit = repository.get_habit(owner_id, habit_id)
    if habit is None:
        raise HabitNotFoundError(habit_id, owner_id)
    logs = repository.list_completed_logs(owner_id, habit_id)
    rate = compute_completion_rate(habit, logs, window_days=window_days, today=today)
    logger.debug(f"Habit {habit_id} completion rate over {window_days}d = {rate}")
    return rate


__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "INSUFFICIENT_DATA",
    "completion_rate",
    "compute_completion_rate",
    "count_periods",
    "is_insufficient",
    "minimum_periods",
]
