"""Habit service helpers: join stored habits with their derived metrics."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..domain.repositories.habit import HabitNotFound, HabitRepository
from ..models.habit import Habit
from . import metrics


def compute_streaks(habit: Habit, *, today: date | None = None) -> tuple[int, int]:
    """Return (current_streak, longest_streak) for a stored habit."""

    snapshot = metrics.HabitSnapshot.from_habit(habit)
    dates = snapshot.completion_dates
    return metrics.current_streak(dates, today), metrics.longest_streak(dates)


def serialize_habit(habit: Habit, *, today: date | None = None) -> dict[str, Any]:
    """Return the stored fields of a habit plus its live current streak."""

    snapshot = metrics.HabitSnapshot.from_habit(habit)
    return {
        "id": habit.id,
        "name": habit.name,
        "type": snapshot.habit_type.value,
        "createdAt": habit.created_at.isoformat() if habit.created_at else None,
        "completedDates": sorted(snapshot.completion_dates),
        "counts": dict(snapshot.counts),
        "goal": snapshot.goal,
        "timeFrame": snapshot.time_frame.value if snapshot.time_frame else None,
        "weeklyFrequency": snapshot.weekly_frequency,
        "scheduledDays": list(snapshot.scheduled_days or ()),
        "isPaused": habit.is_paused,
        "currentStreak": metrics.current_streak(snapshot.completion_dates, today),
    }


def habit_detail(
    habit: Habit,
    *,
    today: date | None = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Build the detail payload: stored fields, all-time stats and weekly figures.

    Counted habits also get capped/uncapped period progress and the yearly
    pace block; binary habits get their weekly goal and schedule figures.
    """

    today = today or metrics.local_today(now=now)
    snapshot = metrics.HabitSnapshot.from_habit(habit)
    payload = serialize_habit(habit, today=today)
    payload["stats"] = metrics.habit_stats(snapshot, today).as_dict()
    payload["weekly"] = metrics.weekly_stats(snapshot, today).as_dict()

    if snapshot.is_counted:
        frame = snapshot.effective_time_frame
        payload["progress"] = metrics.calculate_progress(snapshot.counts, snapshot.goal, frame, today)
        payload["progressUncapped"] = metrics.calculate_progress(
            snapshot.counts, snapshot.goal, frame, today, capped=False
        )
        payload["pace"] = metrics.pace_summary(snapshot.counts, snapshot.goal, now or today).as_dict()
    else:
        payload["weeklyGoalMet"] = metrics.weekly_goal_met(
            snapshot.completed_dates, snapshot.weekly_frequency, today
        )
        payload["scheduledToday"] = metrics.is_scheduled_on(snapshot.scheduled_days, today)
        payload["scheduleShortfall"] = metrics.schedule_shortfall(
            snapshot.scheduled_days, snapshot.weekly_frequency
        )
    return payload


def get_habit_stats(
    repository: HabitRepository,
    habit_id: int,
    *,
    user_id: int,
    today: date | None = None,
) -> metrics.HabitStats:
    """Load a habit and summarise its completion history."""

    habit = repository.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise HabitNotFound(habit_id)
    return metrics.habit_stats(metrics.HabitSnapshot.from_habit(habit), today)


def summary_line(habit: Habit, *, today: date | None = None) -> str:
    """One-line text summary used by the CLI."""

    snapshot = metrics.HabitSnapshot.from_habit(habit)
    stats = metrics.habit_stats(snapshot, today)
    weekly = metrics.weekly_stats(snapshot, today)
    if snapshot.is_counted:
        week_part = f"{weekly.this_week:g} this week · {weekly.progress:.0f}% of {snapshot.effective_time_frame.value} goal"
    else:
        week_part = f"{weekly.this_week:g}/{snapshot.weekly_frequency} this week"
    return (
        f"{habit.name}: {stats.current_streak} day streak "
        f"(best {stats.longest_streak}) · {week_part}"
    )


__all__ = [
    "compute_streaks",
    "get_habit_stats",
    "habit_detail",
    "serialize_habit",
    "summary_line",
]
