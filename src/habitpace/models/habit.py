"""Habit tracking data structures."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .user import User

# Values written by earlier clients of the habit store.
_LEGACY_TYPE_ALIASES = {"yesno": "binary", "count": "counted"}

WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class HabitType(str, Enum):
    """How a habit is tracked."""

    BINARY = "binary"
    COUNTED = "counted"

    @classmethod
    def parse(cls, value: Any) -> "HabitType":
        """Accept enum members, canonical names and legacy ``yesno``/``count``."""

        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        return cls(_LEGACY_TYPE_ALIASES.get(raw, raw))


class TimeFrame(str, Enum):
    """Period over which a counted habit's goal applies."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: Any) -> "TimeFrame":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


def all_weekdays() -> list[str]:
    return list(WEEKDAY_NAMES)


class Habit(SQLModel, table=True):
    """A user-defined habit tracked per calendar day.

    Binary habits record ``completed_dates``; counted habits record ``counts``
    and derive completion from any positive amount.
    """

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    habit_type: str = Field(default=HabitType.BINARY.value, nullable=False, max_length=16)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    completed_dates: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    counts: dict[str, float] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    goal: Optional[float] = Field(default=None)
    time_frame: Optional[str] = Field(default=None, max_length=8)
    weekly_frequency: int = Field(default=5, nullable=False)
    scheduled_days: list[str] = Field(
        default_factory=all_weekdays, sa_column=Column(JSON, nullable=False)
    )
    is_paused: bool = Field(default=False, nullable=False)

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="habits"))

    @property
    def type(self) -> HabitType:
        return HabitType.parse(self.habit_type)

    @property
    def is_counted(self) -> bool:
        return self.type is HabitType.COUNTED


__all__ = ["Habit", "HabitType", "TimeFrame", "WEEKDAY_NAMES", "all_weekdays"]
