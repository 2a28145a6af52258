"""Logging setup for the generator.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where those records go and what they look like.

Example output (console format):
    WARNING [reusable_workflows.catalog] Skipping docker-ops: missing docs/docker-ops.md
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER = "reusable_workflows"
LOG_FORMATS = ("console", "json")

_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED}


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter with colored level names."""

    COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, *, color: bool = True) -> None:
        super().__init__()
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname.ljust(7)
        if self._color:
            level = f"{self.COLORS.get(record.levelno, '')}{level}{self.RESET}"

        parts = [level, f"[{record.name}]", record.getMessage()]

        extras = _extra_fields(record)
        if extras:
            parts.append(" ".join(f"{k}={v}" for k, v in extras.items()))

        result = " ".join(parts)
        if record.exc_info:
            result = f"{result}\n{self.formatException(record.exc_info)}"
        return result


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(_extra_fields(record))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def configure_logging(
    *,
    level: int | str = logging.WARNING,
    format: str = "console",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Calling this again replaces the previously installed handler.

    Args:
        level: Minimum level to emit.
        format: Output format ("console" or "json").
        stream: Destination stream (defaults to stderr).

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    stream = stream or sys.stderr
    if format == "json":
        formatter: logging.Formatter = JSONFormatter()
    elif format == "console":
        formatter = ConsoleFormatter(color=stream.isatty())
    else:
        raise ValueError(f"Unknown log format: {format}")

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_reusable_workflows", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    handler._reusable_workflows = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
