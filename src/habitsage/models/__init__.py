"""SQLModel table exports."""

from .habit import CompletionLog, Habit, HabitFrequency

__all__ = [
    "CompletionLog",
    "Habit",
    "HabitFrequency",
]
