"""Logging configuration for henka.

Supports both text and JSON output formats.

Usage:
    from henka.logging_config import setup_logging

    setup_logging(level="INFO", format="json")

Log level and format can also be set with HENKA_LOG_LEVEL / HENKA_LOG_FORMAT.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

LogFormat = Literal["text", "json"]

_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "asctime", "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Produces log entries like:
    {"timestamp": "2024-01-15T10:30:45.123Z", "level": "INFO", "logger": "henka.reconciler", "message": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """Colored text formatter for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt or "%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        color = self.COLORS.get(record.levelname, "")
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    level: str | None = None,
    format: LogFormat | None = None,
    log_file: Path | None = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level. Defaults to HENKA_LOG_LEVEL or WARNING.
        format: "text" or "json". Defaults to HENKA_LOG_FORMAT or "text".
        log_file: Optional path of a rotating log file.
        max_bytes: Max size before rotation.
        backup_count: Number of rotated files kept.
    """
    level = level or os.environ.get("HENKA_LOG_LEVEL", "WARNING")
    format = format or os.environ.get("HENKA_LOG_FORMAT", "text")  # type: ignore[assignment]

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()

    if format == "json":
        console_formatter: logging.Formatter = JsonFormatter()
        file_formatter: logging.Formatter = JsonFormatter()
    else:
        console_formatter = ColoredFormatter()
        file_formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file is None:
        return

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        root_logger.warning("Could not create log file at %s: %s", log_file, e)
        return

    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)
