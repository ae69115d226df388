"""Habit metrics: streaks, weekly counts, period progress and yearly pace.

Every function in this module is pure. Inputs are calendar-date strings in
``YYYY-MM-DD`` form (or ``date`` objects) and plain mappings of date string to
amount; nothing here touches the database or mutates its arguments. Empty
containers and missing goals produce a zero baseline instead of an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union
from zoneinfo import ZoneInfo

from ..models.habit import WEEKDAY_NAMES, Habit, HabitType, TimeFrame

DateLike = Union[str, date]

SUNDAY = 6
# Every weekly figure (streak displays, weekly goal, week timeframe) starts here.
WEEK_START = SUNDAY
DEFAULT_WEEKLY_FREQUENCY = 5
# Projection denominator; leap years use 365 as well.
DAYS_IN_YEAR = 365
MONTHS_IN_YEAR = 12
WEEKS_IN_YEAR = 52


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def to_day(value: DateLike) -> date:
    """Return the calendar day for a ``YYYY-MM-DD`` string, ``date`` or ``datetime``."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def day_key(value: DateLike) -> str:
    """Return the canonical ``YYYY-MM-DD`` key for a day."""

    return to_day(value).isoformat()


def _resolve_day(today: Optional[DateLike]) -> date:
    return date.today() if today is None else to_day(today)


def local_today(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> date:
    """Resolve "now" to a calendar date in the caller's timezone.

    Without ``tz_name`` the process-local timezone is used. Naive ``now``
    values are assumed to already be local to ``tz_name``.
    """

    tz = ZoneInfo(tz_name) if tz_name else None
    if now is None:
        return datetime.now(tz).date()
    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    return now.date()


def start_of_week(today: Optional[DateLike] = None) -> date:
    """Return the most recent ``WEEK_START`` on or before ``today``."""

    day = _resolve_day(today)
    return day - timedelta(days=(day.weekday() - WEEK_START) % 7)


def period_start(time_frame: Optional[Union[TimeFrame, str]], today: Optional[DateLike] = None) -> date:
    """Return the first day of the ``time_frame`` period containing ``today``.

    A missing time frame is read as ``year``.
    """

    day = _resolve_day(today)
    frame = TimeFrame.parse(time_frame) if time_frame else TimeFrame.YEAR
    if frame is TimeFrame.DAY:
        return day
    if frame is TimeFrame.WEEK:
        return start_of_week(day)
    if frame is TimeFrame.MONTH:
        return day.replace(day=1)
    return date(day.year, 1, 1)


def day_of_year(now: Optional[Union[datetime, date]] = None) -> int:
    """Return ``ceil(hours since Jan 1 / 24)``, never less than 1.

    A bare ``date`` counts as the whole of that day, so Jan 2 is day 2.
    """

    if now is None:
        now = datetime.now()
    if isinstance(now, datetime):
        jan_first = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        hours = (now - jan_first).total_seconds() / 3600
        return max(1, math.ceil(hours / 24))
    return now.timetuple().tm_yday


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like a display would: halves go away from zero."""

    quantum = Decimal(1).scaleb(-ndigits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if ndigits == 0 else float(rounded)


def _day_keys(dates: Iterable[DateLike]) -> set[str]:
    return {day_key(d) for d in dates}


def _weeks_elapsed(start: date, end: date) -> int:
    return max(1, math.ceil((end - start).days / 7))


# ---------------------------------------------------------------------------
# Streaks and weekly completion
# ---------------------------------------------------------------------------


def current_streak(dates: Iterable[DateLike], today: Optional[DateLike] = None) -> int:
    """Return the run of consecutive completed days ending today or yesterday.

    The streak stays alive through ``today`` until today's entry is made, so
    a run ending yesterday still counts. Completions dated after ``today``
    are ignored.
    """

    day = _resolve_day(today)
    days = {d for d in map(to_day, _day_keys(dates)) if d <= day}
    yesterday = day - timedelta(days=1)

    if day in days:
        cursor = day
    elif yesterday in days:
        cursor = yesterday
    else:
        return 0

    streak = 1
    cursor -= timedelta(days=1)
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(dates: Iterable[DateLike]) -> int:
    """Return the longest run of consecutive calendar days in ``dates``."""

    longest = 0
    run = 0
    last_day: Optional[date] = None
    for d in sorted(map(to_day, _day_keys(dates))):
        if last_day is not None and d == last_day + timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = d
    return longest


def completions_between(dates: Iterable[DateLike], start: DateLike, end: DateLike) -> int:
    """Count distinct completion days within ``[start, end]``."""

    start_key, end_key = day_key(start), day_key(end)
    return sum(1 for key in _day_keys(dates) if start_key <= key <= end_key)


def completions_in_week(dates: Iterable[DateLike], today: Optional[DateLike] = None) -> int:
    """Count completions from the start of the current week through ``today``."""

    day = _resolve_day(today)
    return completions_between(dates, start_of_week(day), day)


def weekly_goal_met(
    dates: Iterable[DateLike],
    weekly_frequency: Optional[int] = None,
    today: Optional[DateLike] = None,
) -> bool:
    target = weekly_frequency or DEFAULT_WEEKLY_FREQUENCY
    return completions_in_week(dates, today) >= target


# ---------------------------------------------------------------------------
# Counted habits
# ---------------------------------------------------------------------------


def period_total(counts: Mapping[str, float], start: DateLike, end: DateLike) -> float:
    """Sum the amounts logged on days within ``[start, end]``."""

    start_key, end_key = day_key(start), day_key(end)
    return sum((amount for key, amount in counts.items() if start_key <= key <= end_key), 0)


def calculate_progress(
    counts: Mapping[str, float],
    goal: Optional[float],
    time_frame: Optional[Union[TimeFrame, str]],
    today: Optional[DateLike] = None,
    *,
    capped: bool = True,
) -> float:
    """Return percent of ``goal`` reached in the current ``time_frame`` period.

    With ``capped=False`` values above 100 are returned as-is so callers can
    show an over-achieved state.
    """

    if not goal or goal <= 0:
        return 0.0
    day = _resolve_day(today)
    total = period_total(counts, period_start(time_frame, day), day)
    progress = 100.0 * total / goal
    return min(100.0, progress) if capped else progress


def _percent(actual: float, target: float) -> float:
    return 100.0 * actual / target if target else 0.0


@dataclass(frozen=True, slots=True)
class ProjectedPace:
    """Year-end projection at the current pace."""

    total_count: float
    day_of_year: int
    projected_total: int
    projected_progress: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalCount": self.total_count,
            "dayOfYear": self.day_of_year,
            "projectedTotal": self.projected_total,
            "projectedProgress": self.projected_progress,
        }


@dataclass(frozen=True, slots=True)
class PaceSummary:
    """Annual, projected, monthly and weekly pace against a yearly goal."""

    yearly_goal: float
    year_total: float
    annual_progress: float
    projection: ProjectedPace
    monthly_target: int
    monthly_total: float
    monthly_progress: float
    weekly_target: int
    weekly_total: float
    weekly_progress: float

    @property
    def ahead_of_pace(self) -> bool:
        return self.projection.projected_progress > 100

    def as_dict(self) -> dict[str, Any]:
        return {
            "yearlyGoal": self.yearly_goal,
            "yearTotal": self.year_total,
            "annualProgress": self.annual_progress,
            **self.projection.as_dict(),
            "monthlyTarget": self.monthly_target,
            "monthlyTotal": self.monthly_total,
            "monthlyProgress": self.monthly_progress,
            "weeklyTarget": self.weekly_target,
            "weeklyTotal": self.weekly_total,
            "weeklyProgress": self.weekly_progress,
            "aheadOfPace": self.ahead_of_pace,
        }


def projected_year_end(
    counts: Mapping[str, float],
    yearly_goal: Optional[float],
    now: Optional[Union[datetime, date]] = None,
) -> ProjectedPace:
    """Project the all-time total forward to a 365-day year."""

    elapsed = day_of_year(now)
    total = sum(counts.values(), 0)
    projected_total = int(round_half_up(total / elapsed * DAYS_IN_YEAR))
    projected_progress = _percent(projected_total, yearly_goal or 0)
    return ProjectedPace(
        total_count=total,
        day_of_year=elapsed,
        projected_total=projected_total,
        projected_progress=projected_progress,
    )


def pace_summary(
    counts: Mapping[str, float],
    yearly_goal: Optional[float],
    now: Optional[Union[datetime, date]] = None,
) -> PaceSummary:
    """Compare this year's, month's and week's totals with a yearly goal. Uncapped."""

    if now is None:
        now = datetime.now()
    day = to_day(now)
    goal = yearly_goal or 0

    year_total = period_total(counts, period_start(TimeFrame.YEAR, day), day)
    monthly_target = int(round_half_up(goal / MONTHS_IN_YEAR))
    monthly_total = period_total(counts, period_start(TimeFrame.MONTH, day), day)
    weekly_target = int(round_half_up(goal / WEEKS_IN_YEAR))
    weekly_total = period_total(counts, start_of_week(day), day)

    return PaceSummary(
        yearly_goal=goal,
        year_total=year_total,
        annual_progress=_percent(year_total, goal),
        projection=projected_year_end(counts, goal, now),
        monthly_target=monthly_target,
        monthly_total=monthly_total,
        monthly_progress=_percent(monthly_total, monthly_target),
        weekly_target=weekly_target,
        weekly_total=weekly_total,
        weekly_progress=_percent(weekly_total, weekly_target),
    )


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


def normalize_weekday(name: str) -> str:
    """Return the canonical weekday name, raising ``ValueError`` for unknown names."""

    candidate = name.strip().capitalize()
    if candidate not in WEEKDAY_NAMES:
        raise ValueError(f"Unknown weekday: {name!r}")
    return candidate


def is_scheduled_on(scheduled_days: Optional[Iterable[str]], day: DateLike) -> bool:
    """Return True when ``day`` falls on a scheduled weekday; ``None`` means every day."""

    if scheduled_days is None:
        return True
    weekday = WEEKDAY_NAMES[to_day(day).weekday()]
    return weekday in {name.strip().capitalize() for name in scheduled_days}


def schedule_shortfall(
    scheduled_days: Optional[Iterable[str]], weekly_frequency: Optional[int]
) -> int:
    """How many more weekdays must be scheduled to reach ``weekly_frequency``."""

    if not weekly_frequency:
        return 0
    planned = len(WEEKDAY_NAMES) if scheduled_days is None else len(set(scheduled_days))
    return max(0, weekly_frequency - planned)


def schedule_covers_frequency(
    scheduled_days: Optional[Iterable[str]], weekly_frequency: Optional[int]
) -> bool:
    return schedule_shortfall(scheduled_days, weekly_frequency) == 0


# ---------------------------------------------------------------------------
# Whole-habit summaries
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HabitSnapshot:
    """Immutable view of the habit fields the metrics read."""

    habit_type: HabitType
    completed_dates: frozenset[str] = frozenset()
    counts: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    goal: Optional[float] = None
    time_frame: Optional[TimeFrame] = None
    weekly_frequency: int = DEFAULT_WEEKLY_FREQUENCY
    scheduled_days: Optional[tuple[str, ...]] = None
    created_at: Optional[datetime] = None

    @property
    def is_counted(self) -> bool:
        return self.habit_type is HabitType.COUNTED

    @property
    def completion_dates(self) -> frozenset[str]:
        """Completed days; for counted habits, every day with a positive amount."""

        if self.is_counted:
            return frozenset(key for key, amount in self.counts.items() if amount > 0)
        return self.completed_dates

    @property
    def effective_time_frame(self) -> TimeFrame:
        return self.time_frame or TimeFrame.YEAR

    @classmethod
    def from_habit(cls, habit: Habit) -> "HabitSnapshot":
        return cls(
            habit_type=HabitType.parse(habit.habit_type),
            completed_dates=frozenset(habit.completed_dates or ()),
            counts=MappingProxyType(dict(habit.counts or {})),
            goal=habit.goal,
            time_frame=TimeFrame.parse(habit.time_frame) if habit.time_frame else None,
            weekly_frequency=habit.weekly_frequency or DEFAULT_WEEKLY_FREQUENCY,
            scheduled_days=tuple(habit.scheduled_days) if habit.scheduled_days is not None else None,
            created_at=habit.created_at,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "HabitSnapshot":
        """Build a snapshot from a stored document (camelCase keys)."""

        habit_type = HabitType.parse(record.get("type") or HabitType.BINARY)
        counted = habit_type is HabitType.COUNTED
        goal = record.get("goal") or (record.get("yearlyGoal") if counted else None)
        time_frame = record.get("timeFrame") or (TimeFrame.YEAR if counted else None)
        scheduled = record.get("scheduledDays")
        created_at = record.get("createdAt")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        elif isinstance(created_at, date) and not isinstance(created_at, datetime):
            created_at = datetime(created_at.year, created_at.month, created_at.day)

        return cls(
            habit_type=habit_type,
            completed_dates=frozenset(record.get("completedDates") or ()),
            counts=MappingProxyType(dict(record.get("counts") or {})),
            goal=goal,
            time_frame=TimeFrame.parse(time_frame) if time_frame else None,
            weekly_frequency=record.get("weeklyFrequency") or DEFAULT_WEEKLY_FREQUENCY,
            scheduled_days=tuple(scheduled) if scheduled is not None else None,
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class HabitStats:
    total_completions: int
    average_per_week: float
    current_streak: int
    longest_streak: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalCompletions": self.total_completions,
            "averagePerWeek": self.average_per_week,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
        }


@dataclass(frozen=True, slots=True)
class WeeklyStats:
    this_week: float
    times_per_week: float
    progress: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "thisWeek": self.this_week,
            "timesPerWeek": self.times_per_week,
            "progress": self.progress,
        }


def habit_stats(snapshot: HabitSnapshot, today: Optional[DateLike] = None) -> HabitStats:
    """Summarise all-time completion figures for a habit."""

    day = _resolve_day(today)
    dates = snapshot.completion_dates
    created = to_day(snapshot.created_at) if snapshot.created_at else day
    weeks = _weeks_elapsed(created, day)
    return HabitStats(
        total_completions=len(dates),
        average_per_week=round_half_up(len(dates) / weeks, 1),
        current_streak=current_streak(dates, day),
        longest_streak=longest_streak(dates),
    )


def weekly_stats(snapshot: HabitSnapshot, today: Optional[DateLike] = None) -> WeeklyStats:
    """Return this week's figure, the yearly weekly rate and week/period progress.

    Binary habits report completions against ``weekly_frequency``; counted
    habits report this week's summed amount and the capped progress of their
    own time frame.
    """

    day = _resolve_day(today)
    jan_first = date(day.year, 1, 1)
    weeks = _weeks_elapsed(jan_first, day)

    if snapshot.is_counted:
        active_days = sum(
            1
            for key, amount in snapshot.counts.items()
            if amount > 0 and day_key(jan_first) <= key <= day_key(day)
        )
        return WeeklyStats(
            this_week=period_total(snapshot.counts, start_of_week(day), day),
            times_per_week=round_half_up(active_days / weeks, 1),
            progress=calculate_progress(
                snapshot.counts, snapshot.goal, snapshot.effective_time_frame, day
            ),
        )

    this_week = completions_in_week(snapshot.completed_dates, day)
    this_year = completions_between(snapshot.completed_dates, jan_first, day)
    target = snapshot.weekly_frequency or DEFAULT_WEEKLY_FREQUENCY
    return WeeklyStats(
        this_week=this_week,
        times_per_week=round_half_up(this_year / weeks, 1),
        progress=min(100.0, _percent(this_week, target)),
    )


__all__ = [
    "DAYS_IN_YEAR",
    "DEFAULT_WEEKLY_FREQUENCY",
    "HabitSnapshot",
    "HabitStats",
    "PaceSummary",
    "ProjectedPace",
    "SUNDAY",
    "WEEK_START",
    "WeeklyStats",
    "calculate_progress",
    "completions_between",
    "completions_in_week",
    "current_streak",
    "day_key",
    "day_of_year",
    "habit_stats",
    "is_scheduled_on",
    "local_today",
    "longest_streak",
    "normalize_weekday",
    "pace_summary",
    "period_start",
    "period_total",
    "projected_year_end",
    "round_half_up",
    "schedule_covers_frequency",
    "schedule_shortfall",
    "start_of_week",
    "to_day",
    "weekly_goal_met",
    "weekly_stats",
]
