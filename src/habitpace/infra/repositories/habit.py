"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlmodel import Session, select

from ...domain.repositories.habit import HabitNotFound
from ...logging_config import get_logger
from ...models.habit import Habit, HabitType, TimeFrame
from ...services import metrics
from ..database import SessionFactory

logger = get_logger(__name__)


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation.

    Mutations are read-modify-write on a single row inside one session.
    JSON columns are always reassigned with fresh containers so the change is
    flushed.
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _load(session: Session, habit_id: int, user_id: int) -> Habit:
        habit = session.exec(
            select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
        ).first()
        if habit is None:
            raise HabitNotFound(habit_id)
        return habit

    @staticmethod
    def _save(session: Session, habit: Habit) -> Habit:
        session.add(habit)
        session.commit()
        session.refresh(habit)
        session.expunge(habit)
        return habit

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, include_paused: bool = False) -> list[Habit]:
        """List habits ordered by name, optionally including paused ones."""
        with self.session_factory() as session:
            statement = (
                select(Habit).where(Habit.user_id == user_id).order_by(Habit.name)  # type: ignore
            )

            if not include_paused:
                statement = statement.where(Habit.is_paused == False)  # noqa: E712

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List only habits that are not paused."""
        return self.list_all(user_id=user_id, include_paused=False)

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit.

        Goal and time frame only apply to counted habits and are dropped for
        binary ones; a counted habit without a time frame tracks a yearly goal.
        """
        with self.session_factory() as session:
            habit.user_id = user_id
            habit.habit_type = HabitType.parse(habit.habit_type).value
            if habit.is_counted:
                habit.time_frame = TimeFrame.parse(habit.time_frame or TimeFrame.YEAR).value
                habit.completed_dates = []
            else:
                habit.goal = None
                habit.time_frame = None
                habit.counts = {}
            created = self._save(session, habit)
        logger.info(
            "Habit created",
            extra={"habit_id": created.id, "user_id": user_id, "habit_type": created.habit_type},
        )
        return created

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit by ID; unknown ids are ignored."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if habit:
                session.delete(habit)
                session.commit()
                logger.info("Habit deleted", extra={"habit_id": habit_id, "user_id": user_id})

    def rename(self, habit_id: int, name: str, *, user_id: int) -> Habit:
        """Change a habit's label."""
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Habit name cannot be empty")
        with self.session_factory() as session:
            habit = self._load(session, habit_id, user_id)
            habit.name = cleaned
            return self._save(session, habit)

    def update_goals(
        self,
        habit_id: int,
        *,
        user_id: int,
        goal: Optional[float] = None,
        time_frame: Optional[TimeFrame] = None,
        weekly_frequency: Optional[int] = None,
    ) -> Habit:
        """Update goal settings; ``None`` leaves a field unchanged.

        Goal and time frame only apply to counted habits, whose goal must be
        positive.
        """
        with self.session_factory() as session:
            habit = self._load(session, habit_id, user_id)
            if not habit.is_counted and (goal is not None or time_frame is not None):
                raise ValueError("Goal and time frame only apply to counted habits")
            if goal is not None:
                if goal <= 0:
                    raise ValueError("Goal must be greater than zero")
                habit.goal = goal
            if time_frame is not None:
                habit.time_frame = TimeFrame.parse(time_frame).value
            if weekly_frequency is not None:
                if not 1 <= weekly_frequency <= 7:
                    raise ValueError("Weekly frequency must be between 1 and 7")
                habit.weekly_frequency = weekly_frequency
            return self._save(session, habit)

    def set_scheduled_days(self, habit_id: int, days: Iterable[str], *, user_id: int) -> Habit:
        """Replace the weekdays a habit is planned for, in Monday-first order."""
        wanted = {metrics.normalize_weekday(day) for day in days}
        ordered = [name for name in metrics.WEEKDAY_NAMES if name in wanted]
        with self.session_factory() as session:
            habit = self._load(session, habit_id, user_id)
            habit.scheduled_days = ordered
            return self._save(session, habit)

    def set_paused(self, habit_id: int, paused: bool, *, user_id: int) -> Habit:
        """Pause or resume a habit."""
        with self.session_factory() as session:
            habit = self._load(session, habit_id, user_id)
            habit.is_paused = paused
            return self._save(session, habit)

    # Completion operations
    def toggle_completion(self, habit_id: int, day: str, *, user_id: int) -> Habit:
        """Flip whether a binary habit was done on ``day``."""
        key = metrics.day_key(day)
        with self.session_factory() as session:
            habit = self._load(session, habit_id, user_id)
            if habit.is_counted:
                raise ValueError("Counted habits are updated through their daily count")
            completed = set(habit.completed_dates or [])
            if key in completed:
                completed.remove(key)
            else:
                completed.add(key)
            habit.completed_dates = sorted(completed)
            saved = self._save(session, habit)
        logger.info(
            "Habit completion toggled",
            extra={"habit_id": habit_id, "user_id": user_id, "date": key, "done": key in completed},
        )
        return saved

    def update_count(self, habit_id: int, day: str, count: float, *, user_id: int) -> Habit:
        """Set the amount logged for a counted habit on ``day``; zero clears the day."""
        if count < 0:
            raise ValueError("Count cannot be negative")
        key = metrics.day_key(day)
        with self.session_factory() as session:
            habit = self._load(session, habit_id, user_id)
            if not habit.is_counted:
                raise ValueError("Binary habits are updated by toggling completion")
            counts = dict(habit.counts or {})
            if count > 0:
                counts[key] = count
            else:
                counts.pop(key, None)
            habit.counts = counts
            saved = self._save(session, habit)
        logger.info(
            "Habit count updated",
            extra={"habit_id": habit_id, "user_id": user_id, "date": key, "count": count},
        )
        return saved

    def get_current_streak(
        self, habit_id: int, *, user_id: int, today: Optional[str] = None
    ) -> int:
        """Calculate current streak for a habit."""
        habit = self.get_by_id(habit_id, user_id=user_id)
        if habit is None:
            raise HabitNotFound(habit_id)
        snapshot = metrics.HabitSnapshot.from_habit(habit)
        return metrics.current_streak(snapshot.completion_dates, today)

    def get_longest_streak(self, habit_id: int, *, user_id: int) -> int:
        """Calculate longest streak for a habit."""
        habit = self.get_by_id(habit_id, user_id=user_id)
        if habit is None:
            raise HabitNotFound(habit_id)
        snapshot = metrics.HabitSnapshot.from_habit(habit)
        return metrics.longest_streak(snapshot.completion_dates)
