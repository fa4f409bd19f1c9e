"""Reporting utilities for HabitSage."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from ..models.habit import CompletionLog, Habit, HabitFrequency
from .completion import count_periods
from .periods import coerce_frequency, start_of_week, to_utc_date, utc_today


@dataclass(slots=True)
class WeeklyProgress:
    """Completed vs. expected periods for one Sunday-started week."""

    week_start: date
    completed: int = 0
    total: int = 0

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.completed / self.total * 100)

    @property
    def label(self) -> str:
        return f"Wk {self.week_start.strftime('%U')}"


def weekly_progress(
    habits: Iterable[Habit],
    logs: Iterable[CompletionLog],
    *,
    weeks: int = 8,
    today: Optional[date] = None,
) -> list[WeeklyProgress]:
    """Aggregate completion across habits for the last ``weeks`` weeks, oldest first.

    Only days on/after each habit's creation and not after ``today`` are
    expected. Monthly habits do not fit a weekly chart and are left out.
    """

    today = today or utc_today()
    current_week = start_of_week(today)
    buckets = [
        WeeklyProgress(week_start=current_week - timedelta(weeks=offset))
        for offset in range(weeks - 1, -1, -1)
    ]

    logs_by_habit: dict[int, list[CompletionLog]] = defaultdict(list)
    for log in logs:
        logs_by_habit[log.habit_id].append(log)

    for habit in habits:
        if coerce_frequency(habit.frequency) is HabitFrequency.MONTHLY:
            continue
        created = to_utc_date(habit.created_at)
        habit_logs = logs_by_habit.get(habit.id, [])
        for bucket in buckets:
            start = max(bucket.week_start, created)
            end = min(bucket.week_start + timedelta(days=6), today)
            if start > end:
                continue
            completed, total = count_periods(habit, habit_logs, start, end)
            bucket.completed += completed
            bucket.total += total

    return buckets


__all__ = ["WeeklyProgress", "weekly_progress"]
