"""Net worth blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("networth", __name__, url_prefix="/api/networth")

from . import routes  # noqa: E402,F401

__all__ = ["bp"]
