"""Flask CLI commands for habitpace."""

from __future__ import annotations

from datetime import timedelta

import click
from flask import current_app

from .models.habit import Habit, HabitType, TimeFrame
from .services import metrics


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("habitpace-stats")
    @click.option("--user-id", type=int, required=True, help="Owner whose habits to summarise")
    @click.option("--include-paused", is_flag=True, default=False, help="Also list paused habits")
    def habitpace_stats(user_id: int, include_paused: bool) -> None:
        """Print streak and weekly figures for each habit."""

        from .extensions import get_habit_repository
        from .services.habits import summary_line

        today = metrics.local_today(current_app.config["HABITPACE_CONFIG"].TIMEZONE)
        habits = get_habit_repository().list_all(user_id=user_id, include_paused=include_paused)
        if not habits:
            click.echo("No habits found.")
            return
        for habit in habits:
            click.echo(summary_line(habit, today=today))

    @app.cli.command("habitpace-seed")
    @click.option("--demo", is_flag=True, default=False, help="Create the demo user and habits")
    def habitpace_seed(demo: bool) -> None:
        """Seed application data (demo)."""

        if not demo:
            click.echo("No action specified. Use --demo to seed demo data.")
            return

        from .extensions import get_habit_repository, get_session_factory
        from .services.users import ensure_demo_user

        user = ensure_demo_user(get_session_factory())
        repo = get_habit_repository()
        if repo.list_all(user_id=user.id, include_paused=True):
            click.echo(f"Demo user {user.id} already has habits; nothing to do.")
            return

        today = metrics.local_today(current_app.config["HABITPACE_CONFIG"].TIMEZONE)
        recent = [(today - timedelta(days=offset)).isoformat() for offset in range(5)]
        repo.create(
            Habit(name="Meditate", habit_type=HabitType.BINARY.value, completed_dates=recent),
            user_id=user.id,
        )
        reading = repo.create(
            Habit(
                name="Read pages",
                habit_type=HabitType.COUNTED.value,
                goal=7300,
                time_frame=TimeFrame.YEAR.value,
            ),
            user_id=user.id,
        )
        for offset, pages in enumerate((30, 12, 0, 25)):
            repo.update_count(
                reading.id, (today - timedelta(days=offset)).isoformat(), pages, user_id=user.id
            )
        click.echo(f"Demo habits created for user {user.id}.")
