"""Habit routes (JSON)."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator

from flask import current_app, jsonify, request
from werkzeug.exceptions import BadRequest, HTTPException, NotFound, Unauthorized

from ...domain.repositories.habit import HabitNotFound
from ...extensions import get_habit_repository, get_session_factory
from ...logging_config import get_logger
from ...models.habit import Habit, all_weekdays
from ...services import metrics
from ...services.habits import habit_detail, serialize_habit
from ...services.users import ensure_user
from . import bp
from .forms import CountForm, HabitForm, HabitUpdateForm

logger = get_logger(__name__)

USER_HEADER = "X-User-Id"
_TRUTHY = {"1", "true", "yes", "on"}


def _current_user_id() -> int:
    """Return the authenticated user id forwarded by the identity layer."""

    raw = request.headers.get(USER_HEADER, "").strip()
    if not raw.isdigit():
        raise Unauthorized(f"Missing or invalid {USER_HEADER} header")
    return int(raw)


def _parse_day(raw: object) -> date | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise BadRequest(f"Dates must be YYYY-MM-DD strings, got {raw!r}")
    try:
        return metrics.to_day(raw)
    except ValueError as exc:
        raise BadRequest(f"Dates must be YYYY-MM-DD, got {raw!r}") from exc


def _today() -> date:
    """Resolve today in the configured timezone; ``?today=`` overrides it."""

    override = _parse_day(request.args.get("today"))
    if override is not None:
        return override
    config = current_app.config["HABITPACE_CONFIG"]
    return metrics.local_today(config.TIMEZONE)


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BadRequest("Expected a JSON object")
    return payload


@contextmanager
def _domain_errors(habit_id: int) -> Iterator[None]:
    """Translate repository errors into HTTP errors."""

    try:
        yield
    except HabitNotFound as exc:
        raise NotFound(f"Habit {habit_id} was not found") from exc
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc


def _load_habit(habit_id: int, user_id: int) -> Habit:
    habit = get_habit_repository().get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise NotFound(f"Habit {habit_id} was not found")
    return habit


@bp.errorhandler(HTTPException)
def _http_error(exc: HTTPException):
    if exc.code and exc.code >= 500:  # pragma: no cover
        logger.error("Habit request failed", extra={"path": request.path, "status": exc.code})
    else:
        logger.warning(
            "Habit request rejected",
            extra={"path": request.path, "status": exc.code, "reason": exc.description},
        )
    return jsonify({"error": exc.description}), exc.code


@bp.get("/")
def list_habits():
    """List the user's habits with their live current streak."""

    user_id = _current_user_id()
    include_paused = request.args.get("include_paused", "").strip().lower() in _TRUTHY
    today = _today()
    habits = get_habit_repository().list_all(user_id=user_id, include_paused=include_paused)
    return jsonify(
        {
            "today": today.isoformat(),
            "habits": [serialize_habit(habit, today=today) for habit in habits],
        }
    )


@bp.post("/")
def create_habit():
    """Create a habit from a validated payload."""

    user_id = _current_user_id()
    form, errors = HabitForm.parse_payload(_json_body())
    if errors or form is None:
        return jsonify({"errors": errors}), 400

    config = current_app.config["HABITPACE_CONFIG"]
    ensure_user(get_session_factory(), user_id)
    habit = Habit(
        name=form.name,
        habit_type=form.habit_type.value,
        goal=form.goal,
        time_frame=form.time_frame.value if form.time_frame else None,
        weekly_frequency=form.weekly_frequency or config.DEFAULT_WEEKLY_FREQUENCY,
        scheduled_days=form.scheduled_days if form.scheduled_days is not None else all_weekdays(),
    )
    created = get_habit_repository().create(habit, user_id=user_id)
    return jsonify(serialize_habit(created, today=_today())), 201


@bp.get("/<int:habit_id>")
def get_habit(habit_id: int):
    """Return a habit with its stats, weekly figures and, for counted habits, pace."""

    user_id = _current_user_id()
    habit = _load_habit(habit_id, user_id)
    return jsonify(habit_detail(habit, today=_today()))


@bp.patch("/<int:habit_id>")
def update_habit(habit_id: int):
    """Apply name, goal, schedule and pause changes."""

    user_id = _current_user_id()
    form, errors = HabitUpdateForm.parse_payload(_json_body())
    if errors or form is None:
        return jsonify({"errors": errors}), 400

    changed = set(form.changed_fields())
    if not changed:
        raise BadRequest("No changes supplied")

    repo = get_habit_repository()
    _load_habit(habit_id, user_id)
    with _domain_errors(habit_id):
        if "name" in changed and form.name is not None:
            repo.rename(habit_id, form.name, user_id=user_id)
        if changed & {"goal", "time_frame", "weekly_frequency"}:
            repo.update_goals(
                habit_id,
                user_id=user_id,
                goal=form.goal,
                time_frame=form.time_frame,
                weekly_frequency=form.weekly_frequency,
            )
        if "scheduled_days" in changed:
            days = all_weekdays() if form.scheduled_days is None else form.scheduled_days
            repo.set_scheduled_days(habit_id, days, user_id=user_id)
        if "is_paused" in changed and form.is_paused is not None:
            repo.set_paused(habit_id, form.is_paused, user_id=user_id)

    return jsonify(serialize_habit(_load_habit(habit_id, user_id), today=_today()))


@bp.delete("/<int:habit_id>")
def delete_habit(habit_id: int):
    user_id = _current_user_id()
    _load_habit(habit_id, user_id)
    get_habit_repository().delete(habit_id, user_id=user_id)
    return "", 204


@bp.post("/<int:habit_id>/toggle")
def toggle_habit(habit_id: int):
    """Toggle a binary habit for ``date`` in the body (default: today)."""

    user_id = _current_user_id()
    day = _parse_day(_json_body().get("date")) or _today()
    with _domain_errors(habit_id):
        habit = get_habit_repository().toggle_completion(habit_id, day.isoformat(), user_id=user_id)
    return jsonify(serialize_habit(habit, today=_today()))


@bp.put("/<int:habit_id>/counts/<day>")
def update_count(habit_id: int, day: str):
    """Set the amount logged on ``day`` for a counted habit."""

    user_id = _current_user_id()
    parsed = _parse_day(day)
    try:
        form = CountForm.model_validate(_json_body())
    except ValueError as exc:
        raise BadRequest("Body must contain a non-negative 'count'") from exc
    with _domain_errors(habit_id):
        habit = get_habit_repository().update_count(
            habit_id, parsed.isoformat(), form.count, user_id=user_id
        )
    return jsonify(habit_detail(habit, today=_today()))
