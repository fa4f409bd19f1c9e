"""Streak calculations over completion logs."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from ..domain.repositories import HabitRepository
from ..logging_config import get_logger
from ..models.habit import CompletionLog, Habit
from .periods import (
    habit_period_key,
    habit_weekdays,
    next_period_key,
    previous_period_key,
    sunday_weekday,
    to_utc_date,
    utc_today,
)

logger = get_logger(__name__)

HABIT_NOT_FOUND = -1


def _completed_keys(habit: Habit, logs: Iterable[CompletionLog]) -> set[date]:
    """Period keys of the completed logs, re-keyed under the habit's current frequency.

    Periods before the one the habit was created in are dropped.
    """

    first = habit_period_key(habit, habit.created_at)
    keys = {habit_period_key(habit, log.period_key) for log in logs if log.completed}
    return {key for key in keys if key >= first}


def _target_day_streak(habit: Habit, done: set[date], today: date) -> int:
    # Walk back one day at a time over target weekdays only. An unlogged
    # today does not break the streak; any earlier unlogged target day does.
    weekdays = habit_weekdays(habit)
    created = to_utc_date(habit.created_at)
    streak = 0
    cursor = today
    while cursor >= created:
        if sunday_weekday(cursor) in weekdays:
            if cursor in done:
                streak += 1
            elif cursor != today:
                break
        cursor -= timedelta(days=1)
    return streak


def _period_streak(habit: Habit, done: set[date], today: date) -> int:
    expected = habit_period_key(habit, today)
    keys = sorted((k for k in done if k <= expected), reverse=True)
    if not keys:
        return 0

    most_recent = keys[0]
    if most_recent != expected:
        previous = previous_period_key(habit.frequency, expected)
        if most_recent != previous:
            return 0
        # The current period may simply not be logged yet
        expected = previous

    streak = 0
    for key in keys:
        if key == expected:
            streak += 1
            expected = previous_period_key(habit.frequency, expected)
        elif key < expected:
            break
    return streak


def compute_current_streak(
    habit: Habit, logs: Iterable[CompletionLog], *, today: Optional[date] = None
) -> int:
    """Consecutive completed periods ending at ``today``.

    Specific-weekday habits count target days; everything else counts
    periods (days, Sunday-started weeks or months).
    """

    today = today or utc_today()
    done = _completed_keys(habit, logs)
    if not done:
        return 0
    if habit_weekdays(habit):
        return _target_day_streak(habit, done, today)
    return _period_streak(habit, done, today)


def compute_longest_streak(habit: Habit, logs: Iterable[CompletionLog]) -> int:
    """Longest run of consecutive completed periods anywhere in the history."""

    done = sorted(_completed_keys(habit, logs))
    if not done:
        return 0

    weekdays = habit_weekdays(habit)

    def following(key: date) -> date:
        if not weekdays:
            return next_period_key(habit.frequency, key)
        cursor = key + timedelta(days=1)
        while sunday_weekday(cursor) not in weekdays:
            cursor += timedelta(days=1)
        return cursor

    longest = 0
    run = 0
    last: Optional[date] = None
    for key in done:
        if weekdays and sunday_weekday(key) not in weekdays:
            continue
        if last is not None and key == following(last):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last = key
    return longest


def current_streak(
    repository: HabitRepository,
    owner_id: int,
    habit_id: int,
    *,
    today: Optional[date] = None,
) -> int:
    """Current streak for a stored habit, or ``HABIT_NOT_FOUND`` (-1)."""

    habit = repository.get_habit(owner_id, habit_id)
    if habit is None:
        logger.debug(f"Streak requested for missing habit {habit_id} (owner {owner_id})")
        return HABIT_NOT_FOUND
    logs = repository.list_completed_logs(owner_id, habit_id)
    streak = compute_current_streak(habit, logs, today=today)
    logger.debug(f"Habit {habit_id} current streak = {streak}")
    return streak


def longest_streak(repository: HabitRepository, owner_id: int, habit_id: int) -> int:
    """Longest streak for a stored habit, or ``HABIT_NOT_FOUND`` (-1)."""

    habit = repository.get_habit(owner_id, habit_id)
    if habit is None:
        return HABIT_NOT_FOUND
    return compute_longest_streak(habit, repository.list_completed_logs(owner_id, habit_id))


__all__ = [
    "HABIT_NOT_FOUND",
    "compute_current_streak",
    "compute_longest_streak",
    "current_streak",
    "longest_streak",
]
