"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back on bad input."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "habitpace"
    DB_FILENAME = "habitpace.db"
    TESTING = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("HABITPACE_SECRET_KEY", "replace-me")
        self.DEV_MODE = _env_bool("HABITPACE_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("HABITPACE_DATABASE_URL", self._build_sqlite_url())
        self.TIMEZONE = os.getenv("HABITPACE_TIMEZONE") or None
        self.DEFAULT_WEEKLY_FREQUENCY = _env_int("HABITPACE_WEEKLY_FREQUENCY", 5)
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("HABITPACE_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITPACE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if not self.DATABASE_URL.startswith("sqlite"):
            return {}
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if self.DATABASE_URL in {"sqlite://", "sqlite:///:memory:"}:
            # in-memory databases live on a single connection
            options["poolclass"] = StaticPool
        return options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test-suite; callers usually override DATABASE_URL."""

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = os.getenv("HABITPACE_TEST_DATABASE_URL", "sqlite://")


__all__ = ["BaseConfig", "DevConfig", "TestConfig"]
