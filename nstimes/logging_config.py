"""Logging setup.

Configures the root logger from ObservabilityConfig: a plain (optionally
colored) console formatter, or one JSON object per line when structured
logging is enabled. Context passed through ``extra={...}`` is kept in
the JSON output.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional, TextIO

from .config import ObservabilityConfig

_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
    "RESET": "\033[0m",
}

# Attributes every LogRecord carries; anything else came from ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class ColorFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = _COLORS.get(levelname, "")
        record.levelname = f"{color}{levelname}{_COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def setup_logging(
    config: Optional[ObservabilityConfig] = None,
    level: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure the root logger.

    Args:
        config: Logging configuration (defaults to environment values).
        level: Overrides the configured level (e.g. from ``--verbose``).
        stream: Output stream, stderr by default.
    """
    config = config or ObservabilityConfig()
    stream = stream or sys.stderr

    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or config.level).upper(), logging.WARNING))
    root.handlers.clear()

    handler = logging.StreamHandler(stream)
    if config.structured:
        handler.setFormatter(JsonFormatter())
    elif stream.isatty():
        handler.setFormatter(ColorFormatter(config.format))
    else:
        handler.setFormatter(logging.Formatter(config.format))
    root.addHandler(handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
