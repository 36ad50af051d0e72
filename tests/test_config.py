"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from ledgerwise.config import BaseConfig
from ledgerwise.config import TestConfig as _TestConfig


def test_ai_config_reads_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGERWISE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LEDGERWISE_AI_API_KEY", "k")
    monkeypatch.setenv("LEDGERWISE_AI_BASE_URL", "https://llm.test/v1/")
    monkeypatch.setenv("LEDGERWISE_AI_TEMPERATURE", "0.7")
    monkeypatch.setenv("LEDGERWISE_AI_MAX_TOKENS", "not-a-number")

    ai = BaseConfig().ai_config()

    assert ai.enabled is True
    assert ai.base_url == "https://llm.test/v1"
    assert ai.temperature == 0.7
    assert ai.max_tokens == 150


def test_test_config_never_enables_provider(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGERWISE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LEDGERWISE_AI_API_KEY", "k")

    assert _TestConfig().ai_config().enabled is False


def test_secret_required_outside_dev_mode(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGERWISE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LEDGERWISE_DEV_MODE", "false")
    monkeypatch.delenv("LEDGERWISE_SECRET_KEY", raising=False)

    with pytest.raises(ValueError):
        BaseConfig()


def test_database_url_defaults_to_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGERWISE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("LEDGERWISE_DATABASE_URL", raising=False)

    assert BaseConfig().DATABASE_URL == f"sqlite:///{tmp_path.resolve() / 'ledgerwise.db'}"
