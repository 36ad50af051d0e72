"""Registration, login and signed bearer tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..domain.repositories import UserRepository
from ..errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.user import User
from ..utils.dates import utcnow

logger = get_logger(__name__)

_hasher = PasswordHasher()
MIN_PASSWORD_LENGTH = 6
MAX_NAME_LENGTH = 100


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHash, VerificationError):
        return False


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: User


class AuthService:
    """User accounts and the tokens that identify them on each request."""

    def __init__(
        self,
        *,
        users: UserRepository,
        secret_key: str,
        salt: str = "ledgerwise-auth",
        max_age: int = 7 * 24 * 3600,
        clock: Callable[[], datetime] = utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        self._users = users
        self._serializer = URLSafeTimedSerializer(secret_key, salt=salt)
        self._max_age = max_age
        self._clock = clock
        self._log = log or logger

    # -- tokens -----------------------------------------------------------

    def issue_token(self, user: User) -> str:
        return self._serializer.dumps({"uid": user.id})

    def verify_token(self, token: str) -> User:
        """Resolve a bearer token to an active user."""

        try:
            payload = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired as exc:
            raise AuthenticationError("Token expired.") from exc
        except BadSignature as exc:
            raise AuthenticationError("Invalid token.") from exc
        user_id = payload.get("uid") if isinstance(payload, dict) else None
        user = self._users.get_by_id(user_id) if isinstance(user_id, int) else None
        if user is None or not user.is_active:
            raise AuthenticationError("Invalid token.")
        return user

    # -- accounts ---------------------------------------------------------

    def register(self, *, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        errors: dict[str, list[str]] = {}
        clean_name = (name or "").strip()
        if not clean_name:
            errors["name"] = ["Name is required."]
        elif len(clean_name) > MAX_NAME_LENGTH:
            errors["name"] = [f"Name must be at most {MAX_NAME_LENGTH} characters."]
        clean_email = normalize_email(email)
        if "@" not in clean_email:
            errors["email"] = ["A valid email is required."]
        if len(password or "") < MIN_PASSWORD_LENGTH:
            errors["password"] = [f"Password must be at least {MIN_PASSWORD_LENGTH} characters."]
        if errors:
            raise ValidationError("Invalid registration.", errors)

        if self._users.get_by_email(clean_email) is not None:
            raise ConflictError("Email already registered.")

        now = self._clock()
        user = self._users.create(
            User(
                name=clean_name,
                email=clean_email,
                password_hash=_hasher.hash(password),
                created_at=now,
                updated_at=now,
            )
        )
        self._log.info("User registered", extra={"user_id": user.id})
        return user

    def authenticate(self, *, email: Optional[str], password: Optional[str]) -> AuthResult:
        user = self._users.get_by_email(normalize_email(email))
        if user is None or not user.is_active or not _password_matches(user.password_hash, password or ""):
            self._log.warning("Login failed", extra={"email": normalize_email(email)})
            raise AuthenticationError("Invalid email or password.")
        self._log.info("User logged in", extra={"user_id": user.id})
        return AuthResult(token=self.issue_token(user), user=user)

    def get_profile(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")
        return user

    def email_exists(self, email: Optional[str]) -> bool:
        clean_email = normalize_email(email)
        return bool(clean_email) and self._users.get_by_email(clean_email) is not None

    def change_password(self, user_id: int, *, current_password: str, new_password: str) -> None:
        user = self.get_profile(user_id)
        if not _password_matches(user.password_hash, current_password or ""):
            raise AuthenticationError("Current password is incorrect.")
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError.for_field(
                "newPassword", f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
            )
        user.password_hash = _hasher.hash(new_password)
        user.updated_at = self._clock()
        self._users.update(user)
        self._log.info("Password changed", extra={"user_id": user_id})

    def delete_account(self, user_id: int, *, password: str) -> None:
        """Remove the user and every record they own."""

        user = self.get_profile(user_id)
        if not _password_matches(user.password_hash, password or ""):
            raise AuthenticationError("Password is incorrect.")
        self._users.delete(user_id)
        self._log.info("Account deleted", extra={"user_id": user_id})


__all__ = ["AuthResult", "AuthService", "MIN_PASSWORD_LENGTH", "normalize_email"]
