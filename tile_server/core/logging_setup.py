"""Logging configuration for the tile server.

Log records carry structured context through ``extra=``; both formatters
emit every attribute that is not part of a plain ``logging.LogRecord``.

Example:
    Configure once at startup, then log with context:
        >>> setup_logging("json", "INFO")
        >>> logging.getLogger("tile_server.demo").info(
        ...     "request received", extra={"path": "/maps/roads/1/0/0.png"}
        ... )
        {"time": "...", "lvl": "INFO", "name": "tile_server.demo",
         "msg": "request received", "path": "/maps/roads/1/0/0.png"}
"""

from __future__ import annotations

import datetime
import json
import logging
import sys
from typing import Any

ROOT_LOGGER_NAME = "tile_server"

_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.datetime.fromtimestamp(
        record.created, tz=datetime.UTC
    ).isoformat(timespec="milliseconds")


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    ``{"time": ..., "lvl": "INFO", "name": "mod", "msg": "text", ...extra}``
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": _timestamp(record),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable ``time level name msg key=value ...`` lines."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            _timestamp(record),
            record.levelname,
            record.name,
            record.getMessage(),
        ]
        parts.extend(
            f"{key}={value!r}" for key, value in _extra_fields(record).items()
        )
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(log_format: str = "json", level: str = "INFO") -> logging.Logger:
    """Configure the package logger tree with a single stdout handler.

    Calling it again replaces the previous handler, so reconfiguration in
    tests or on reload does not duplicate output.

    Args:
        log_format: "json" or "text".
        level: Minimum level name, e.g. "INFO".

    Returns:
        The configured package root logger.

    Raises:
        ValueError: If the format or the level name is not supported.
    """
    formatters: dict[str, type[logging.Formatter]] = {
        "json": JsonFormatter,
        "text": TextFormatter,
    }
    if log_format not in formatters:
        raise ValueError(f"unsupported log format: {log_format!r}")
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"unsupported log level: {level!r}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatters[log_format]())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    return logger
