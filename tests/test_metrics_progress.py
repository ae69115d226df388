from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from habitpace.models import TimeFrame
from habitpace.services import metrics


def test_week_starts_on_sunday():
    assert metrics.start_of_week("2024-01-03") == date(2023, 12, 31)
    assert metrics.start_of_week("2024-01-07") == date(2024, 1, 7)
    assert metrics.start_of_week("2024-01-13") == date(2024, 1, 7)


@pytest.mark.parametrize(
    ("time_frame", "expected"),
    [
        (TimeFrame.DAY, date(2024, 5, 15)),
        (TimeFrame.WEEK, date(2024, 5, 12)),
        (TimeFrame.MONTH, date(2024, 5, 1)),
        (TimeFrame.YEAR, date(2024, 1, 1)),
        ("month", date(2024, 5, 1)),
        (None, date(2024, 1, 1)),
    ],
)
def test_period_start(time_frame, expected):
    assert metrics.period_start(time_frame, date(2024, 5, 15)) == expected


def test_completions_in_week_counts_from_sunday_through_today():
    dates = ["2024-01-06", "2024-01-07", "2024-01-08", "2024-01-10", "2024-01-11"]

    assert metrics.completions_in_week(dates, "2024-01-10") == 3


def test_weekly_goal_met_uses_frequency_and_default():
    dates = ["2024-01-07", "2024-01-08", "2024-01-09"]

    assert metrics.weekly_goal_met(dates, 3, "2024-01-10") is True
    assert metrics.weekly_goal_met(dates, 4, "2024-01-10") is False
    # default frequency is five per week
    assert metrics.weekly_goal_met(dates, None, "2024-01-10") is False


def test_monthly_progress_scenario():
    counts = {"2024-01-01": 50, "2024-01-02": 50}

    capped = metrics.calculate_progress(counts, 200, "month", "2024-01-02")
    uncapped = metrics.calculate_progress(counts, 200, "month", "2024-01-02", capped=False)

    assert capped == pytest.approx(50.0)
    assert uncapped == pytest.approx(50.0)


def test_progress_caps_only_when_asked():
    counts = {"2024-01-02": 300}

    assert metrics.calculate_progress(counts, 200, TimeFrame.MONTH, "2024-01-02") == 100.0
    assert metrics.calculate_progress(
        counts, 200, TimeFrame.MONTH, "2024-01-02", capped=False
    ) == pytest.approx(150.0)


@pytest.mark.parametrize(
    ("time_frame", "today", "expected"),
    [
        (TimeFrame.DAY, "2024-01-09", 30.0),
        (TimeFrame.WEEK, "2024-01-10", 50.0),
        (TimeFrame.MONTH, "2024-01-10", 60.0),
        (TimeFrame.YEAR, "2024-01-10", 60.0),
    ],
)
def test_progress_only_sums_current_period(time_frame, today, expected):
    counts = {"2023-12-31": 1000, "2024-01-06": 10, "2024-01-07": 20, "2024-01-09": 30}

    assert metrics.calculate_progress(counts, 100, time_frame, today) == pytest.approx(expected)


@pytest.mark.parametrize("time_frame", list(TimeFrame))
def test_empty_counts_give_zero_progress(time_frame):
    assert metrics.calculate_progress({}, 50, time_frame, "2024-02-10") == 0.0
    assert metrics.calculate_progress({}, 50, time_frame, "2024-02-10", capped=False) == 0.0


@pytest.mark.parametrize("goal", [None, 0])
def test_missing_goal_gives_zero_progress(goal):
    assert metrics.calculate_progress({"2024-01-01": 10}, goal, "year", "2024-01-01") == 0.0


def test_uncapped_progress_scales_linearly():
    counts = {"2024-04-01": 40, "2024-04-02": 70}
    doubled = {key: value * 2 for key, value in counts.items()}

    single = metrics.calculate_progress(counts, 100, "month", "2024-04-02", capped=False)
    double = metrics.calculate_progress(doubled, 100, "month", "2024-04-02", capped=False)

    assert double == pytest.approx(2 * single)


def test_counts_mapping_is_not_mutated():
    counts = {"2024-01-01": 5}
    metrics.calculate_progress(counts, 10, "day", "2024-01-01")
    metrics.pace_summary(counts, 100, date(2024, 1, 1))

    assert counts == {"2024-01-01": 5}


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2024, 1, 1, 0, 0), 1),
        (datetime(2024, 1, 1, 0, 30), 1),
        (datetime(2024, 1, 2, 12, 0), 2),
        (datetime(2024, 12, 31, 23, 0), 366),
        (date(2024, 1, 2), 2),
        (date(2023, 12, 31), 365),
    ],
)
def test_day_of_year(now, expected):
    assert metrics.day_of_year(now) == expected


def test_projected_year_end_scenario():
    counts = {"2024-01-01": 60, "2024-01-02": 40}

    pace = metrics.projected_year_end(counts, 36500, datetime(2024, 1, 2, 9, 0))

    assert pace.day_of_year == 2
    assert pace.projected_total == 18250
    assert pace.projected_progress == pytest.approx(50.0)


def test_projected_year_end_without_goal_or_counts():
    pace = metrics.projected_year_end({}, None, date(2024, 3, 1))

    assert pace.projected_total == 0
    assert pace.projected_progress == 0.0


def test_round_half_up_rounds_halves_away_from_zero():
    assert metrics.round_half_up(0.5) == 1
    assert metrics.round_half_up(2.5) == 3
    assert metrics.round_half_up(2.45, 1) == pytest.approx(2.5)
    assert metrics.round_half_up(2.44, 1) == pytest.approx(2.4)


def test_pace_summary_targets_and_totals():
    counts = {"2023-12-31": 10, "2024-01-01": 50, "2024-01-02": 50}

    pace = metrics.pace_summary(counts, 36500, date(2024, 1, 2))

    assert pace.monthly_target == 3042
    assert pace.weekly_target == 702
    assert pace.year_total == 100
    assert pace.monthly_total == 100
    # the week started on Sunday 2023-12-31
    assert pace.weekly_total == 110
    assert pace.annual_progress == pytest.approx(100 * 100 / 36500)
    assert pace.monthly_progress == pytest.approx(100 * 100 / 3042)
    assert pace.weekly_progress == pytest.approx(100 * 110 / 702)
    assert pace.projection.projected_total == metrics.round_half_up(110 / 2 * 365)


def test_pace_summary_half_targets_round_up():
    pace = metrics.pace_summary({}, 26, date(2024, 6, 1))

    assert pace.weekly_target == 1
    assert pace.monthly_target == 2


def test_pace_summary_zero_goal_is_all_zero():
    pace = metrics.pace_summary({"2024-01-01": 5}, None, date(2024, 1, 1))

    assert pace.monthly_target == 0
    assert pace.weekly_target == 0
    assert pace.monthly_progress == 0.0
    assert pace.weekly_progress == 0.0
    assert pace.annual_progress == 0.0
    assert pace.projection.projected_progress == 0.0


def test_pace_summary_as_dict_flags_ahead_of_pace():
    counts = {"2024-01-01": 200}

    data = metrics.pace_summary(counts, 365, date(2024, 1, 1)).as_dict()

    assert data["projectedTotal"] == 73000
    assert data["aheadOfPace"] is True
    assert data["weeklyTarget"] == 7


def test_local_today_resolves_in_requested_timezone():
    now = datetime(2024, 1, 1, 3, 0, tzinfo=timezone.utc)

    assert metrics.local_today("America/New_York", now=now) == date(2023, 12, 31)
    assert metrics.local_today("Asia/Tokyo", now=now) == date(2024, 1, 1)
    assert metrics.local_today(None, now=datetime(2024, 5, 5, 23, 59)) == date(2024, 5, 5)
