"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class AIConfig:
    """Settings for the OpenAI-compatible text-generation provider."""

    api_key: str | None = None
    model: str = "mixtral-8x7b-32768"
    base_url: str = "https://api.groq.com/openai/v1"
    temperature: float = 0.3
    max_tokens: int = 150
    timeout: float = 30.0

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Ledgerwise"
    DB_FILENAME = "ledgerwise.db"
    TESTING = False
    TOKEN_SALT = "ledgerwise-auth"

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("LEDGERWISE_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("LEDGERWISE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("LEDGERWISE_DATABASE_URL", self._build_sqlite_url())
        self.TOKEN_MAX_AGE = _env_int("LEDGERWISE_TOKEN_MAX_AGE", 7 * 24 * 3600)
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("LEDGERWISE_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("LEDGERWISE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}

    def ai_config(self) -> AIConfig:
        """Build the text-generation settings from the environment."""

        defaults = AIConfig()
        return AIConfig(
            api_key=os.getenv("LEDGERWISE_AI_API_KEY") or None,
            model=os.getenv("LEDGERWISE_AI_MODEL", defaults.model),
            base_url=os.getenv("LEDGERWISE_AI_BASE_URL", defaults.base_url).rstrip("/"),
            temperature=_env_float("LEDGERWISE_AI_TEMPERATURE", defaults.temperature),
            max_tokens=_env_int("LEDGERWISE_AI_MAX_TOKENS", defaults.max_tokens),
            timeout=_env_float("LEDGERWISE_AI_TIMEOUT", defaults.timeout),
        )


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration used by the test suite."""

    TESTING = True

    def ai_config(self) -> AIConfig:
        # Tests opt into a provider explicitly.
        return replace(super().ai_config(), api_key=None)
