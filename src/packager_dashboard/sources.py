"""Read packager events from a JSONL stream (file or stdin)."""

from __future__ import annotations

import json
import logging
import sys
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, TextIO

from .bus import EventBus
from .exceptions import EventSourceError
from .log_setup import LOGGER_NAME
from .redaction import sanitize_text

STDIN_MARKER = "-"


def iter_jsonl_events(
    lines: Iterable[str],
    *,
    logger: logging.Logger | None = None,
) -> Iterator[tuple[str, Any]]:
    """Yield `(event, payload)` pairs from `{"event": ..., "payload": ...}` lines.

    Blank lines are skipped. Lines that are not JSON objects with a string
    `event` field are logged and skipped.
    """
    log = logger or logging.getLogger(LOGGER_NAME)
    for line_no, line in enumerate(lines, start=1):
        text = line.strip()
        if not text:
            continue
        try:
            record = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning(
                "Skipping malformed event line %d: %s",
                line_no,
                exc,
                extra={"line_no": line_no},
            )
            continue
        if not isinstance(record, dict) or not isinstance(record.get("event"), str):
            log.warning(
                "Skipping event line %d without an event name: %s",
                line_no,
                sanitize_text(text[:120]),
                extra={"line_no": line_no},
            )
            continue
        yield record["event"], record.get("payload")


def open_event_stream(path: str | Path) -> TextIO:
    """Open a JSONL event file, or stdin for `-`."""
    if str(path) == STDIN_MARKER:
        return sys.stdin
    try:
        return Path(path).open("r", encoding="utf-8")
    except OSError as exc:
        raise EventSourceError(f"Failed opening event stream {path}: {exc}") from exc


class EventReader:
    """Background reader that publishes parsed events onto a bus inbox."""

    def __init__(
        self,
        lines: Iterable[str],
        bus: EventBus,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.lines = lines
        self.bus = bus
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.done = threading.Event()
        self._thread = threading.Thread(target=self._run, name="event-reader", daemon=True)

    def start(self) -> EventReader:
        self._thread.start()
        return self

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def _run(self) -> None:
        try:
            for name, payload in iter_jsonl_events(self.lines, logger=self.logger):
                self.bus.publish(name, payload)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            self.logger.error("Event stream read failed: %s", exc)
        finally:
            self.done.set()
