"""Repository protocols."""

from .habit import HabitNotFound, HabitRepository

__all__ = ["HabitNotFound", "HabitRepository"]
