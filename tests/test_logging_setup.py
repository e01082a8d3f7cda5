"""Tests for logging configuration and formatters."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from tile_server.core import logging_setup


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "tile_server.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    """Test that structured fields end up in the JSON object."""
    line = logging_setup.JsonFormatter().format(
        _record(path="/maps/roads/1/0/0.png", level=1)
    )
    payload = json.loads(line)
    assert payload["lvl"] == "WARNING"
    assert payload["name"] == "tile_server.test"
    assert payload["msg"] == "hello world"
    assert payload["path"] == "/maps/roads/1/0/0.png"
    assert payload["level"] == 1
    assert "args" not in payload
    assert "time" in payload


def test_json_formatter_includes_exception() -> None:
    """Test that exception tracebacks are serialized."""
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()
    payload = json.loads(logging_setup.JsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["exc_info"]


def test_text_formatter() -> None:
    """Test the key=value text format."""
    line = logging_setup.TextFormatter().format(_record(layer="roads"))
    assert "WARNING tile_server.test hello world" in line
    assert line.endswith("layer='roads'")


def test_setup_logging_json(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that setup_logging writes JSON lines to stdout."""
    logger = logging_setup.setup_logging("json", "info")
    logging.getLogger("tile_server.test").info("ready", extra={"port": 8080})
    line = capsys.readouterr().out.strip().splitlines()[-1]
    assert logger.level == logging.INFO
    assert json.loads(line)["port"] == 8080


def test_setup_logging_replaces_handler() -> None:
    """Test that reconfiguring does not stack handlers."""
    logging_setup.setup_logging("json")
    logger = logging_setup.setup_logging("text", "DEBUG")
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, logging_setup.TextFormatter)
    assert logger.level == logging.DEBUG


def test_setup_logging_rejects_unknown_format() -> None:
    """Test that unsupported formats raise."""
    with pytest.raises(ValueError, match="unsupported log format"):
        logging_setup.setup_logging("xml")


def test_setup_logging_rejects_unknown_level() -> None:
    """Test that unknown level names raise."""
    with pytest.raises(ValueError, match="unsupported log level"):
        logging_setup.setup_logging("json", "LOUD")
