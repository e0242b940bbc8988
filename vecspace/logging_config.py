"""Logging setup for vecspace.

Library modules only call :func:`get_logger`. Handlers are installed once
by the command line scripts through :func:`setup_logging`, always on
stderr: stdout carries query results.

Fields passed through ``extra=`` (dimension, duration, byte counts) are
kept by both formatters.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from vecspace.config import Environment, get_settings

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, extras nested under ``fields``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }
        fields = _extra_fields(record)
        if fields:
            entry["fields"] = fields
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Single-line console output with ``key=value`` extras appended."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{line} [{pairs}]"


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> logging.Logger:
    """Install a single stderr handler on the root logger.

    Args:
        level: Level name; defaults to DEBUG when ``debug`` is set,
            otherwise to ``log_level`` from settings.
        json_output: Force the format; defaults to JSON outside development.

    Returns:
        The root logger.
    """
    settings = get_settings()

    if level is None:
        level = "DEBUG" if settings.debug else settings.log_level
    if json_output is None:
        json_output = settings.environment != Environment.DEVELOPMENT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
