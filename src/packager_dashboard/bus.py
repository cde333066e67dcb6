"""Minimal publish/subscribe bus used to feed the dashboard store."""

from __future__ import annotations

import logging
import queue
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from .log_setup import LOGGER_NAME

Handler = Callable[[str, Any], Any]


class EventBus:
    """Named-event bus with synchronous `emit` and a thread-safe inbox.

    Producers on other threads call `publish`; the owning thread calls `pump`
    to deliver queued events, so handlers always run on one thread.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self._handlers: defaultdict[str, list[Handler]] = defaultdict(list)
        self._any_handlers: list[Handler] = []
        self._inbox: queue.SimpleQueue[tuple[str, Any]] = queue.SimpleQueue()

    def on(self, name: str, handler: Handler) -> None:
        self._handlers[name].append(handler)

    def on_any(self, handler: Handler) -> None:
        self._any_handlers.append(handler)

    def emit(self, name: str, payload: Any = None) -> None:
        """Deliver an event to its handlers on the calling thread."""
        for handler in [*self._handlers.get(name, ()), *self._any_handlers]:
            try:
                handler(name, payload)
            except Exception:
                # One failing subscriber must not starve the others.
                self.logger.exception("Event handler failed for %s", name)

    def publish(self, name: str, payload: Any = None) -> None:
        """Queue an event for delivery by the next `pump` call."""
        self._inbox.put((name, payload))

    def pump(self, timeout: float | None = 0.0) -> int:
        """Deliver queued events; waits up to `timeout` for the first one."""
        delivered = 0
        try:
            if timeout:
                item = self._inbox.get(timeout=timeout)
            else:
                item = self._inbox.get_nowait()
        except queue.Empty:
            return 0
        while True:
            self.emit(*item)
            delivered += 1
            try:
                item = self._inbox.get_nowait()
            except queue.Empty:
                return delivered

    def pending(self) -> bool:
        return not self._inbox.empty()
