"""habitpace application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable, Optional

from flask import Flask

from .config import BaseConfig, DevConfig, TestConfig

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    yield "habitpace.blueprints.habits"


def create_app(config_name: str | None = None, config: Optional[BaseConfig] = None) -> Flask:
    """Create and configure the Flask application instance.

    ``config`` wins over ``config_name`` so tests can hand in a prepared object.
    """

    app = Flask(__name__, instance_relative_config=True)
    config_obj = config or _resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["HABITPACE_CONFIG"] = config_obj

    # Imported lazily so model modules stay importable without Flask wiring.
    from . import cli
    from .extensions import init_db
    from .logging_config import setup_logging

    setup_logging(config_obj)
    _register_blueprints(app)
    init_db(app)
    cli.init_app(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
