"""SQLModel table exports."""

from .habit import WEEKDAY_NAMES, Habit, HabitType, TimeFrame
from .user import User

__all__ = [
    "Habit",
    "HabitType",
    "TimeFrame",
    "User",
    "WEEKDAY_NAMES",
]
