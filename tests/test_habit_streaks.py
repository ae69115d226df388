"""Tests for habit streak calculations.

These tests verify the logic for calculating current and longest streaks,
including edge cases like:
- Consecutive days
- Gaps in habit completion
- A streak that is still alive because yesterday was completed
- Empty habit data
- Counted habits, where any positive amount counts as done
- Month and year boundaries
"""

from __future__ import annotations

from datetime import date, timedelta

from habitpace.models import HabitType
from habitpace.services import metrics


def _days_back(today: date, count: int, *, start: int = 0) -> list[str]:
    return [(today - timedelta(days=offset)).isoformat() for offset in range(start, start + count)]


class TestCurrentStreak:
    """Tests for calculating current consecutive day streaks."""

    def test_no_entries_returns_zero_streak(self):
        assert metrics.current_streak([], "2024-01-03") == 0

    def test_three_consecutive_days_ending_today(self):
        dates = ["2024-01-01", "2024-01-02", "2024-01-03"]

        assert metrics.current_streak(dates, "2024-01-03") == 3

    def test_gap_breaks_streak(self):
        dates = ["2024-01-01", "2024-01-03"]

        assert metrics.current_streak(dates, "2024-01-03") == 1

    def test_consecutive_days_returns_correct_streak(self):
        today = date(2024, 3, 20)
        dates = _days_back(today, 7)

        assert metrics.current_streak(dates, today) == 7

    def test_streak_alive_when_only_yesterday_done(self):
        """A run ending yesterday still counts before today's entry is made."""
        today = date(2024, 3, 20)
        dates = _days_back(today, 5, start=1)

        assert metrics.current_streak(dates, today) == 5

    def test_missing_today_and_yesterday_returns_zero(self):
        today = date(2024, 3, 20)
        dates = _days_back(today, 5, start=2)

        assert metrics.current_streak(dates, today) == 0

    def test_gap_after_today_run(self):
        today = date(2024, 3, 20)
        dates = _days_back(today, 2) + _days_back(today, 2, start=3)

        assert metrics.current_streak(dates, today) == 2

    def test_future_dates_are_ignored(self):
        dates = ["2024-01-02", "2024-01-03", "2024-01-05"]

        assert metrics.current_streak(dates, "2024-01-03") == 2

    def test_streak_crosses_month_and_year_boundaries(self):
        dates = ["2023-12-30", "2023-12-31", "2024-01-01"]

        assert metrics.current_streak(dates, "2024-01-01") == 3

    def test_leap_day_is_part_of_the_run(self):
        dates = ["2024-02-28", "2024-02-29", "2024-03-01"]

        assert metrics.current_streak(dates, "2024-03-01") == 3

    def test_accepts_date_objects_and_duplicates(self):
        dates = [date(2024, 1, 2), "2024-01-02", date(2024, 1, 3)]

        assert metrics.current_streak(dates, date(2024, 1, 3)) == 2

    def test_repeated_calls_are_stable(self):
        dates = frozenset(["2024-01-01", "2024-01-02", "2024-01-03"])

        first = metrics.current_streak(dates, "2024-01-03")
        second = metrics.current_streak(dates, "2024-01-03")

        assert first == second == 3

    def test_counted_habit_uses_positive_counts(self):
        snapshot = metrics.HabitSnapshot(
            habit_type=HabitType.COUNTED,
            counts={"2024-01-01": 5, "2024-01-02": 0, "2024-01-03": 2},
        )

        assert metrics.current_streak(snapshot.completion_dates, "2024-01-03") == 1


class TestLongestStreak:
    """Tests for calculating the longest historical streak."""

    def test_no_entries_returns_zero(self):
        assert metrics.longest_streak([]) == 0

    def test_single_entry_returns_one(self):
        assert metrics.longest_streak(["2024-01-01"]) == 1

    def test_picks_longest_run(self):
        dates = ["2024-01-01", "2024-01-02", "2024-01-05", "2024-01-06", "2024-01-07"]

        assert metrics.longest_streak(dates) == 3

    def test_unsorted_input_is_handled(self):
        dates = ["2024-01-07", "2024-01-01", "2024-01-06", "2024-01-02", "2024-01-05"]

        assert metrics.longest_streak(dates) == 3

    def test_multiple_streaks_returns_longest(self):
        dates = (
            [(date(2024, 1, 1) + timedelta(days=i)).isoformat() for i in range(3)]
            + [(date(2024, 1, 10) + timedelta(days=i)).isoformat() for i in range(7)]
            + [(date(2024, 1, 20) + timedelta(days=i)).isoformat() for i in range(4)]
        )

        assert metrics.longest_streak(dates) == 7

    def test_run_across_daylight_saving_change(self):
        """Calendar days are compared directly, so DST weeks are not short a day."""
        dates = [(date(2024, 3, 8) + timedelta(days=i)).isoformat() for i in range(5)]
        dates += [(date(2024, 10, 25) + timedelta(days=i)).isoformat() for i in range(6)]

        assert metrics.longest_streak(dates) == 6

    def test_duplicates_do_not_inflate_run(self):
        dates = ["2024-01-01", "2024-01-01", "2024-01-02"]

        assert metrics.longest_streak(dates) == 2

    def test_current_streak_can_be_longest(self):
        today = date(2024, 6, 30)
        dates = ["2024-01-01", "2024-01-02"] + _days_back(today, 14)

        assert metrics.longest_streak(dates) == 14
        assert metrics.current_streak(dates, today) == 14
