"""Per-habit overview combining streaks, rates and today's status."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..domain.repositories import HabitRepository
from ..errors import HabitNotFoundError, InvalidConfigurationError
from ..logging_config import get_logger
from ..models.habit import Habit, HabitFrequency
from .completion import DEFAULT_WINDOW_DAYS, compute_completion_rate
from .periods import (
    coerce_frequency,
    habit_period_key,
    habit_weekdays,
    is_actionable,
    utc_today,
    validate_habit_config,
)
from .recording import period_status
from .streaks import compute_current_streak, compute_longest_streak

logger = get_logger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


@dataclass(slots=True)
class HabitStats:
    """Display-ready numbers for one habit."""

    habit: Habit
    current_streak: int
    longest_streak: int
    completion_rate: float
    completed_this_period: Optional[bool]
    actionable_today: bool


def build_stats(
    repository: HabitRepository,
    habit: Habit,
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    today: Optional[date] = None,
) -> HabitStats:
    """Compute stats for an already loaded habit with a single log fetch."""

    today = today or utc_today()
    logs = repository.list_logs(habit.owner_id, habit.id)
    completed_logs = [log for log in logs if log.completed]

    status = period_status(habit, logs, habit_period_key(habit, today))

    return HabitStats(
        habit=habit,
        current_streak=compute_current_streak(habit, completed_logs, today=today),
        longest_streak=compute_longest_streak(habit, completed_logs),
        completion_rate=compute_completion_rate(
            habit, completed_logs, window_days=window_days, today=today
        ),
        completed_this_period=status,
        actionable_today=is_actionable(habit, today),
    )


def validate_name(name: str) -> str:
    """Strip ``name`` and check its length."""

    name = name.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise InvalidConfigurationError(
            f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters."
        )
    return name


def edit_habit(
    repository: HabitRepository,
    owner_id: int,
    habit_id: int,
    *,
    name: Optional[str] = None,
    frequency: Optional[str] = None,
    specific_weekdays: Optional[Sequence[int]] = None,
) -> Habit:
    """Change a habit's name, frequency or target weekdays.

    Omitted fields keep their value, except that weekdays are cleared when
    the habit moves off ``weekly``. Existing logs are left as they are and
    are re-keyed under the new frequency when streaks and rates are read.

    Raises:
        HabitNotFoundError: If the habit is missing or owned by someone else
        InvalidConfigurationError: If the resulting configuration is invalid
    """

    habit = repository.get_habit(owner_id, habit_id)
    if habit is None:
        raise HabitNotFoundError(habit_id, owner_id)

    new_name = validate_name(name) if name is not None else habit.name
    new_frequency = coerce_frequency(frequency or habit.frequency)
    if specific_weekdays is None:
        keep = new_frequency is HabitFrequency.WEEKLY
        specific_weekdays = sorted(habit_weekdays(habit)) if keep else []
    weekdays = validate_habit_config(new_frequency, specific_weekdays)

    updated = repository.update_habit(
        owner_id,
        habit_id,
        name=new_name,
        frequency=new_frequency.value,
        specific_weekdays=weekdays,
    )
    if updated is None:
        raise HabitNotFoundError(habit_id, owner_id)
    logger.info(
        f"Updated habit {habit_id}: {habit.frequency} -> {updated.frequency}",
        extra={"owner_id": owner_id, "specific_weekdays": weekdays},
    )
    return updated


def habit_overview(
    repository: HabitRepository,
    owner_id: int,
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    today: Optional[date] = None,
) -> list[HabitStats]:
    """Stats for every habit of an owner, oldest habit first."""

    today = today or utc_today()
    return [
        build_stats(repository, habit, window_days=window_days, today=today)
        for habit in repository.list_habits(owner_id)
    ]


__all__ = ["HabitStats", "build_stats", "edit_habit", "habit_overview", "validate_name"]
