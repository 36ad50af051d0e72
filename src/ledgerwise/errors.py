"""Exception types shared by services and the HTTP layer."""

from __future__ import annotations

from collections.abc import Mapping


class LedgerwiseError(Exception):
    """Base class for expected, user-facing failures."""

    code = "error"
    status_code = 500


class NotFoundError(LedgerwiseError):
    """A referenced user, transaction, asset or liability does not exist."""

    code = "not_found"
    status_code = 404


class ValidationError(LedgerwiseError):
    """Input rejected before any computation or write happens."""

    code = "validation_failed"
    status_code = 400

    def __init__(self, message: str, fields: Mapping[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.fields: dict[str, list[str]] = {key: list(value) for key, value in (fields or {}).items()}

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationError:
        return cls(message, {field: [message]})


class AuthenticationError(LedgerwiseError):
    code = "unauthorized"
    status_code = 401


class ForbiddenError(LedgerwiseError):
    code = "forbidden"
    status_code = 403


class ConflictError(LedgerwiseError):
    code = "conflict"
    status_code = 409


class ProviderError(LedgerwiseError):
    """The text-generation provider failed or returned an unusable body."""

    code = "provider_failed"
    status_code = 502


__all__ = [
    "AuthenticationError",
    "ConflictError",
    "ForbiddenError",
    "LedgerwiseError",
    "NotFoundError",
    "ProviderError",
    "ValidationError",
]
