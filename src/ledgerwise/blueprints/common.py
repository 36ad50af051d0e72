"""Request helpers shared by the JSON blueprints."""

from __future__ import annotations

from datetime import datetime
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from flask import g, request

from ..errors import AuthenticationError, ForbiddenError, ValidationError
from ..extensions import get_services
from ..utils.dates import parse_datetime

F = TypeVar("F", bound=Callable[..., Any])


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Missing bearer token.")
    return token.strip()


def login_required(view: F) -> F:
    """Resolve the bearer token to ``g.current_user``.

    A ``userId`` query parameter naming another user is rejected with 403.
    """

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        user = get_services().auth.verify_token(_bearer_token())
        requested = request.args.get("userId")
        if requested not in (None, "") and requested != str(user.id):
            raise ForbiddenError("Access to another user's data is not allowed.")
        g.current_user = user
        return view(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    return int(g.current_user.id)


def json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.")
    return body


def optional_int(body: dict[str, Any], key: str) -> Optional[int]:
    raw = body.get(key)
    if raw in (None, ""):
        return None
    if isinstance(raw, bool):
        raise ValidationError.for_field(key, "Must be an integer.")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError.for_field(key, "Must be an integer.") from None


def optional_datetime(raw: Any, key: str) -> Optional[datetime]:
    if raw in (None, ""):
        return None
    if not isinstance(raw, str):
        raise ValidationError.for_field(key, "Must be an ISO-8601 date.")
    try:
        return parse_datetime(raw)
    except ValueError:
        raise ValidationError.for_field(key, "Must be an ISO-8601 date.") from None


def query_datetime(key: str) -> Optional[datetime]:
    return optional_datetime(request.args.get(key), key)
