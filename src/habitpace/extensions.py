"""Database and extension wiring for habitpace."""

from __future__ import annotations

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import SQLModelHabitRepository

EXTENSION_KEY = "habitpace"


def init_db(app: Flask) -> None:
    """Create the engine, schema and repositories for the app."""

    config: BaseConfig = app.config["HABITPACE_CONFIG"]
    engine, session_factory = bootstrap_database(config)
    app.extensions[EXTENSION_KEY] = {
        "engine": engine,
        "session_factory": session_factory,
        "habit_repo": SQLModelHabitRepository(session_factory),
    }


def _state() -> dict:
    state = current_app.extensions.get(EXTENSION_KEY)
    if state is None:  # pragma: no cover - exercised in integration tests
        raise RuntimeError("Database engine not initialized")
    return state


def get_session_factory() -> SessionFactory:
    return _state()["session_factory"]


def get_habit_repository() -> SQLModelHabitRepository:
    return _state()["habit_repo"]
