"""Habit repository protocol."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ...models.habit import Habit, TimeFrame


class HabitRepository(Protocol):
    """Repository for managing a user's habits.

    Every method is scoped by ``user_id``; a habit owned by someone else is
    treated as missing.
    """

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, *, user_id: int, include_paused: bool = False) -> list[Habit]:
        """List habits, optionally including paused ones."""
        ...

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List only habits that are not paused."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit by ID."""
        ...

    def rename(self, habit_id: int, name: str, *, user_id: int) -> Habit:
        """Change a habit's label."""
        ...

    def update_goals(
        self,
        habit_id: int,
        *,
        user_id: int,
        goal: Optional[float] = None,
        time_frame: Optional[TimeFrame] = None,
        weekly_frequency: Optional[int] = None,
    ) -> Habit:
        """Update goal settings; ``None`` leaves a field unchanged."""
        ...

    def set_scheduled_days(self, habit_id: int, days: Iterable[str], *, user_id: int) -> Habit:
        """Replace the weekdays a binary habit is planned for."""
        ...

    def set_paused(self, habit_id: int, paused: bool, *, user_id: int) -> Habit:
        """Pause or resume a habit."""
        ...

    # Completion operations
    def toggle_completion(self, habit_id: int, day: str, *, user_id: int) -> Habit:
        """Flip whether a binary habit was done on ``day``."""
        ...

    def update_count(self, habit_id: int, day: str, count: float, *, user_id: int) -> Habit:
        """Set the amount logged for a counted habit on ``day``."""
        ...

    def get_current_streak(self, habit_id: int, *, user_id: int, today: Optional[str] = None) -> int:
        """Calculate current streak for a habit."""
        ...

    def get_longest_streak(self, habit_id: int, *, user_id: int) -> int:
        """Calculate longest streak for a habit."""
        ...


class HabitNotFound(ValueError):
    """Raised when a habit id does not exist for the requesting user."""

    def __init__(self, habit_id: int | None = None):
        self.habit_id = habit_id
        super().__init__("Habit not found")
