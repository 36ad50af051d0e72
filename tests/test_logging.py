"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import sys

from flask import Flask

from ledgerwise.config import BaseConfig
from ledgerwise.logging_config import JSONFormatter, get_logger, setup_logging


def _record(msg: str = "Balance adjusted", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ledgerwise.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_lifts_record_ids():
    log_data = json.loads(JSONFormatter().format(_record(asset_id=7, user_id=3, delta="12.50")))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "ledgerwise.test"
    assert log_data["message"] == "Balance adjusted"
    assert log_data["location"].endswith(":42")
    assert log_data["asset_id"] == 7
    assert log_data["user_id"] == 3
    assert log_data["extra"] == {"delta": "12.50"}
    assert "request" not in log_data


def test_json_formatter_adds_request_inside_flask_request():
    app = Flask(__name__)

    with app.test_request_context("/api/networth", method="GET"):
        log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["request"] == {"method": "GET", "path": "/api/networth"}
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    formatter = JSONFormatter()
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    record = logging.LogRecord(
        name="ledgerwise.test",
        level=logging.ERROR,
        pathname="test.py",
        lineno=1,
        msg="Error occurred",
        args=(),
        exc_info=exc_info,
    )

    log_data = json.loads(formatter.format(record))

    assert log_data["error"]["type"] == "ValueError"
    assert "Test error" in log_data["error"]["message"]


def test_setup_logging_writes_json_file(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGERWISE_DATA_DIR", str(tmp_path))
    config = BaseConfig()
    config.DEV_MODE = True

    logger = setup_logging(config)
    logger.info("Test info message")

    assert logger.name == "ledgerwise"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    log_file = tmp_path / "logs" / "ledgerwise.log"
    for handler in logger.handlers:
        handler.flush()
    lines = [line for line in log_file.read_text().splitlines() if line.strip()]
    assert lines
    for line in lines:
        entry = json.loads(line)
        assert {"timestamp", "level", "message"} <= set(entry)


def test_get_logger_namespaces_under_root():
    assert get_logger("module1").name == "ledgerwise.module1"
    assert get_logger("ledgerwise.services.net_worth").name == "ledgerwise.services.net_worth"
