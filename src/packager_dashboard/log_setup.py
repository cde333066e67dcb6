"""Logging setup for the dashboard process itself."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any, TextIO

from .redaction import sanitize_for_logging, sanitize_text

LOGGER_NAME = "packager_dashboard"

# Structured fields callers may attach through `extra=`.
EXTRA_FIELDS = ("line_no",)


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per record, with credentials masked."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": sanitize_text(record.getMessage()),
        }
        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                event[field] = sanitize_for_logging(getattr(record, field))
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def setup_logger(
    name: str = LOGGER_NAME,
    level: int | str = logging.INFO,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Create the process-wide logger; JSON goes to stderr so stdout stays the UI."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
