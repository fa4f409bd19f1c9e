"""Exception types raised by the habit engine and its store."""

from __future__ import annotations


class HabitSageError(Exception):
    """Base exception for all HabitSage errors."""


class HabitNotFoundError(HabitSageError):
    """Raised when a habit does not exist or belongs to another owner."""

    def __init__(self, habit_id: object, owner_id: object | None = None):
        self.habit_id = habit_id
        self.owner_id = owner_id
        super().__init__(f"Habit {habit_id} not found")


class InvalidConfigurationError(HabitSageError, ValueError):
    """Raised for an unknown frequency or a bad specific-weekday set."""


class StoreUnavailableError(HabitSageError):
    """Raised when the persistence layer fails."""


__all__ = [
    "HabitSageError",
    "HabitNotFoundError",
    "InvalidConfigurationError",
    "StoreUnavailableError",
]
