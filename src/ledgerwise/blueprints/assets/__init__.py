"""Assets blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("assets", __name__, url_prefix="/api/assets")

from . import routes  # noqa: E402,F401

__all__ = ["bp"]
