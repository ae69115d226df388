"""Habit payload definitions."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ...models.habit import HabitType, TimeFrame
from ...services.metrics import normalize_weekday


def _structured_errors(exc: ValidationError) -> dict[str, list[str]]:
    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = str(loc[0]) if loc else "__root__"
        structured.setdefault(key, []).append(error.get("msg", "Invalid value"))
    return structured


def _clean_weekdays(value: Any) -> Any:
    if value is None:
        return value
    if isinstance(value, str):
        value = [part for part in (piece.strip() for piece in value.split(",")) if part]
    return [normalize_weekday(str(day)) for day in value]


class HabitForm(BaseModel):
    """Payload for creating a habit."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(max_length=80, description="Short label for the habit")
    habit_type: HabitType = Field(default=HabitType.BINARY, alias="type")
    goal: Optional[float] = Field(default=None, ge=0, description="Target amount per time frame")
    time_frame: Optional[TimeFrame] = Field(default=None, alias="timeFrame")
    # None defers to the configured deployment default
    weekly_frequency: Optional[int] = Field(default=None, ge=1, le=7, alias="weeklyFrequency")
    scheduled_days: Optional[list[str]] = Field(default=None, alias="scheduledDays")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Ensure the habit name is present."""

        if not value or not value.strip():
            raise ValueError("Please provide a habit name.")
        return value

    @field_validator("habit_type", mode="before")
    @classmethod
    def accept_legacy_type(cls, value: Any) -> Any:
        if value is None or isinstance(value, HabitType):
            return value
        return HabitType.parse(value)

    @field_validator("scheduled_days", mode="before")
    @classmethod
    def normalize_days(cls, value: Any) -> Any:
        return _clean_weekdays(value)

    @model_validator(mode="after")
    def ensure_counted_goal(self) -> "HabitForm":
        """Counted habits need a goal; the time frame defaults to a year."""

        if self.habit_type is HabitType.COUNTED:
            if not self.goal:
                raise ValueError("Set a goal for a counted habit.")
            if self.time_frame is None:
                self.time_frame = TimeFrame.YEAR
        return self

    @classmethod
    def parse_payload(cls, payload: dict[str, Any]) -> tuple[Optional["HabitForm"], dict[str, list[str]]]:
        """Validate ``payload`` returning (form, {}) or (None, errors)."""

        try:
            return cls.model_validate(payload), {}
        except ValidationError as exc:
            return None, _structured_errors(exc)


class HabitUpdateForm(BaseModel):
    """Partial update payload; absent fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: Optional[str] = Field(default=None, max_length=80)
    goal: Optional[float] = Field(default=None, gt=0)
    time_frame: Optional[TimeFrame] = Field(default=None, alias="timeFrame")
    weekly_frequency: Optional[int] = Field(default=None, ge=1, le=7, alias="weeklyFrequency")
    scheduled_days: Optional[list[str]] = Field(default=None, alias="scheduledDays")
    is_paused: Optional[bool] = Field(default=None, alias="isPaused")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Habit name cannot be blank.")
        return value

    @field_validator("scheduled_days", mode="before")
    @classmethod
    def normalize_days(cls, value: Any) -> Any:
        return _clean_weekdays(value)

    @classmethod
    def parse_payload(
        cls, payload: dict[str, Any]
    ) -> tuple[Optional["HabitUpdateForm"], dict[str, list[str]]]:
        try:
            return cls.model_validate(payload), {}
        except ValidationError as exc:
            return None, _structured_errors(exc)

    def changed_fields(self) -> Iterable[str]:
        return self.model_dump(exclude_unset=True).keys()


class CountForm(BaseModel):
    """Amount logged for one day."""

    count: float = Field(ge=0)


__all__ = ["CountForm", "HabitForm", "HabitUpdateForm"]
