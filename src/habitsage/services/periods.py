"""Calendar helpers mapping habit frequencies onto period keys.

Every log is stored under the *period key* of the date it covers:

* daily: the date itself
* weekly: the Sunday that starts the week
* weekly with specific weekdays: the date itself (each target day stands alone)
* monthly: the first of the month

All arithmetic runs on UTC calendar dates. Recording and both analytics
engines go through :func:`period_key`, so reads and writes always agree.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator, Optional, Union

from ..errors import InvalidConfigurationError
from ..models.habit import Habit, HabitFrequency

DateLike = Union[date, datetime]

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def coerce_frequency(frequency: HabitFrequency | str) -> HabitFrequency:
    """Return ``frequency`` as a :class:`HabitFrequency`."""

    if isinstance(frequency, HabitFrequency):
        return frequency
    try:
        return HabitFrequency(str(frequency).strip().lower())
    except ValueError as exc:
        raise InvalidConfigurationError(f"Unknown habit frequency: {frequency!r}") from exc


def to_utc_date(value: DateLike) -> date:
    """Normalize a date or datetime to its UTC calendar day.

    Naive datetimes are taken to be UTC already.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def sunday_weekday(day: date) -> int:
    """Weekday number with Sunday=0 .. Saturday=6."""

    return (day.weekday() + 1) % 7


def start_of_week(day: date) -> date:
    """Most recent Sunday on or before ``day``."""

    return day - timedelta(days=sunday_weekday(day))


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def normalize_weekdays(weekdays: Optional[Iterable[int]]) -> frozenset[int]:
    """Keep only valid weekday numbers (0-6); anything else is dropped."""

    if not weekdays:
        return frozenset()
    valid = set()
    for value in weekdays:
        if isinstance(value, bool):
            continue
        try:
            number = int(value)
        except (TypeError, ValueError):
            continue
        if 0 <= number <= 6:
            valid.add(number)
    return frozenset(valid)


def target_weekdays(
    frequency: HabitFrequency | str, specific_weekdays: Optional[Iterable[int]] = None
) -> frozenset[int]:
    """Weekdays a habit is restricted to; empty unless the habit is weekly."""

    if coerce_frequency(frequency) is not HabitFrequency.WEEKLY:
        return frozenset()
    return normalize_weekdays(specific_weekdays)


def habit_weekdays(habit: Habit) -> frozenset[int]:
    return target_weekdays(habit.frequency, habit.specific_weekdays)


def period_key(
    frequency: HabitFrequency | str,
    when: DateLike,
    specific_weekdays: Optional[Iterable[int]] = None,
) -> date:
    """Return the canonical period key covering ``when``."""

    freq = coerce_frequency(frequency)
    day = to_utc_date(when)
    if freq is HabitFrequency.DAILY:
        return day
    if freq is HabitFrequency.WEEKLY:
        if normalize_weekdays(specific_weekdays):
            return day
        return start_of_week(day)
    return start_of_month(day)


def habit_period_key(habit: Habit, when: DateLike) -> date:
    return period_key(habit.frequency, when, habit.specific_weekdays)


def previous_period_key(frequency: HabitFrequency | str, key: date) -> date:
    """Key of the period immediately before ``key``.

    Monthly keys always land on the 1st of the previous month.
    """

    freq = coerce_frequency(frequency)
    if freq is HabitFrequency.DAILY:
        return key - timedelta(days=1)
    if freq is HabitFrequency.WEEKLY:
        return start_of_week(key) - timedelta(days=7)
    return start_of_month(start_of_month(key) - timedelta(days=1))


def next_period_key(frequency: HabitFrequency | str, key: date) -> date:
    """Key of the period immediately after ``key``."""

    freq = coerce_frequency(frequency)
    if freq is HabitFrequency.DAILY:
        return key + timedelta(days=1)
    if freq is HabitFrequency.WEEKLY:
        return start_of_week(key) + timedelta(days=7)
    month_start = start_of_month(key)
    # day 28 + 4 always lands in the following month
    return start_of_month(month_start.replace(day=28) + timedelta(days=4))


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each calendar day from ``start`` to ``end`` inclusive."""

    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def is_actionable(habit: Habit, on: DateLike) -> bool:
    """Whether the habit can be checked off on the given day.

    Specific-weekday habits are only actionable on their target days.
    """

    weekdays = habit_weekdays(habit)
    if not weekdays:
        return True
    return sunday_weekday(to_utc_date(on)) in weekdays


def validate_habit_config(
    frequency: HabitFrequency | str, specific_weekdays: Optional[Iterable[int]] = None
) -> list[int]:
    """Validate a habit's frequency/weekday pair before it is stored.

    Returns the sorted weekday list to persist.
    """

    freq = coerce_frequency(frequency)
    weekdays = list(specific_weekdays or [])
    if not weekdays:
        return []
    if freq is not HabitFrequency.WEEKLY:
        raise InvalidConfigurationError("Specific weekdays are only allowed on weekly habits.")
    invalid = [d for d in weekdays if isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6]
    if invalid:
        raise InvalidConfigurationError(f"Weekdays must be between 0 (Sun) and 6 (Sat): {invalid}")
    return sorted(set(weekdays))


__all__ = [
    "WEEKDAY_LABELS",
    "coerce_frequency",
    "habit_period_key",
    "habit_weekdays",
    "is_actionable",
    "iter_days",
    "next_period_key",
    "normalize_weekdays",
    "period_key",
    "previous_period_key",
    "start_of_month",
    "start_of_week",
    "sunday_weekday",
    "target_weekdays",
    "to_utc_date",
    "utc_today",
    "validate_habit_config",
]
