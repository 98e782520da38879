"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from authapi.core.logger import JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("DEBUG")
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("WARNING")


def test_json_formatter_includes_known_extras() -> None:
    record = logging.LogRecord("authapi.test", logging.INFO, __file__, 1, "revoked", None, None)
    record.request_id = "req-1"
    record.jti = "abc"
    record.password = "never-logged"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "revoked"
    assert payload["request_id"] == "req-1"
    assert payload["jti"] == "abc"
    assert "password" not in payload
