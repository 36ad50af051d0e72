"""Database and service wiring for the Flask app."""

from __future__ import annotations

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import bootstrap_database
from .services import Services, build_services

EXTENSION_KEY = "ledgerwise"


def init_db(app: Flask) -> None:
    """Create the engine, make sure the schema exists and attach the services."""

    config: BaseConfig = app.config["LEDGERWISE_CONFIG"]
    engine, session_factory = bootstrap_database(config)
    app.extensions[EXTENSION_KEY] = {
        "engine": engine,
        "session_factory": session_factory,
        "services": build_services(config, session_factory),
    }


def get_services(app: Flask | None = None) -> Services:
    """Return the service container of ``app`` (default: the current app)."""

    target = app or current_app
    try:
        return target.extensions[EXTENSION_KEY]["services"]
    except KeyError:  # pragma: no cover - only when init_db was skipped
        raise RuntimeError("Database not initialized") from None


def get_session_factory(app: Flask | None = None):
    target = app or current_app
    return target.extensions[EXTENSION_KEY]["session_factory"]
