"""Habit and completion-log data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HabitFrequency(str, Enum):
    """How often a habit is expected to be completed."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Habit(SQLModel, table=True):
    """A recurring habit owned by a single user.

    ``specific_weekdays`` uses Sunday=0 .. Saturday=6 and only applies to
    weekly habits; when non-empty each listed weekday is its own period.
    """

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(nullable=False, index=True)
    name: str = Field(nullable=False, max_length=50, index=True)
    frequency: str = Field(default=HabitFrequency.DAILY.value, nullable=False, max_length=16)
    specific_weekdays: list[int] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False, default=list)
    )
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    logs: list["CompletionLog"] = Relationship(
        sa_relationship=relationship(
            "CompletionLog",
            back_populates="habit",
            cascade="all, delete-orphan",
        ),
    )


class CompletionLog(SQLModel, table=True):
    """Done / not-done record for one habit period.

    At most one row exists per ``(habit_id, period_key)``; later writes for
    the same period update it in place.
    """

    __tablename__: ClassVar[str] = "completion_log"
    __table_args__: ClassVar[tuple] = (
        UniqueConstraint("habit_id", "period_key", name="uq_completion_log_habit_period"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(nullable=False, index=True)
    habit_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("habit.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    period_key: date = Field(nullable=False, index=True)
    completed: bool = Field(default=True, nullable=False)
    recorded_at: datetime = Field(default_factory=utcnow, nullable=False)

    habit: Optional["Habit"] = Relationship(
        sa_relationship=relationship("Habit", back_populates="logs"),
    )
