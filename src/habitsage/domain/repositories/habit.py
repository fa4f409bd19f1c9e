"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ...models.habit import CompletionLog, Habit


class HabitRepository(Protocol):
    """Storage for habits and their completion logs, scoped by owner.

    Implementations raise ``StoreUnavailableError`` when the backing store
    fails. ``upsert_log`` must be atomic per ``(habit_id, period_key)``.
    """

    def get_habit(self, owner_id: int, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit owned by ``owner_id``."""
        ...

    def list_habits(self, owner_id: int) -> list[Habit]:
        """List all habits of an owner, oldest first."""
        ...

    def create_habit(self, habit: Habit) -> Habit:
        """Persist a new habit."""
        ...

    def update_habit(
        self,
        owner_id: int,
        habit_id: int,
        *,
        name: str,
        frequency: str,
        specific_weekdays: Sequence[int],
    ) -> Optional[Habit]:
        """Overwrite name, frequency and weekdays; ``None`` if the habit is not the owner's."""
        ...

    def delete_habit(self, owner_id: int, habit_id: int) -> bool:
        """Delete a habit and every log recorded against it."""
        ...

    def find_log(self, owner_id: int, habit_id: int, period_key: date) -> Optional[CompletionLog]:
        """Exact-match lookup on period key."""
        ...

    def upsert_log(
        self, owner_id: int, habit_id: int, period_key: date, completed: bool
    ) -> tuple[CompletionLog, Optional[bool]]:
        """Create or update the log for a period; always refreshes ``recorded_at``.

        Returns the log and the ``completed`` value it held before this write
        (``None`` if it did not exist), read in the same transaction.
        """
        ...

    def list_completed_logs(self, owner_id: int, habit_id: int) -> list[CompletionLog]:
        """All logs with ``completed=True``; no ordering guaranteed."""
        ...

    def list_logs(self, owner_id: int, habit_id: Optional[int] = None) -> list[CompletionLog]:
        """All logs of an owner, optionally narrowed to one habit."""
        ...
