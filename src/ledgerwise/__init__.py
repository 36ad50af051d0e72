"""Ledgerwise application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig
from .errors import LedgerwiseError, ValidationError
from .logging_config import get_logger, setup_logging

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}

logger = get_logger(__name__)


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    yield "ledgerwise.blueprints.auth"
    yield "ledgerwise.blueprints.transactions"
    yield "ledgerwise.blueprints.assets"
    yield "ledgerwise.blueprints.liabilities"
    yield "ledgerwise.blueprints.networth"
    yield "ledgerwise.blueprints.finance"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_cls = _resolve_config(config_name or app.config.get("ENV"))
    config_obj = config_cls()
    app.config.from_object(config_obj)
    app.config["LEDGERWISE_CONFIG"] = config_obj
    # Category patterns are ordered by spend; keep insertion order on output.
    app.json.sort_keys = False

    setup_logging(config_obj)
    _register_blueprints(app)
    _register_error_handlers(app)

    from .extensions import init_db

    init_db(app)
    _cli.init_app(app)
    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        app.register_blueprint(getattr(module, "bp"))


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(LedgerwiseError)
    def _handle_domain_error(exc: LedgerwiseError):
        body = {"error": exc.code, "message": str(exc)}
        if isinstance(exc, ValidationError) and exc.fields:
            body["fields"] = exc.fields
        return jsonify(body), exc.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.name.lower().replace(" ", "_"), "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.exception("Unhandled error")
        return jsonify({"error": "internal_error", "message": "Internal server error."}), 500


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
