"""Single owner of the dashboard state: parses, throttles, reduces, notifies."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..events import (
    CompilationEvent,
    CompilationProgressEvent,
    DashboardEvent,
    parse_event,
)
from ..log_setup import LOGGER_NAME
from .log_buffer import DEFAULT_LOG_CAPACITY
from .models import DashboardState, initial_state
from .reducer import reduce
from .throttle import ProgressThrottle

StateListener = Callable[[DashboardState], None]


class DashboardStore:
    """Hold the current state and feed bus events through the reducer.

    Not thread-safe: every method must be called from the thread that pumps
    the event bus.
    """

    def __init__(
        self,
        *,
        terminal_height: int,
        capacity: int = DEFAULT_LOG_CAPACITY,
        throttle: ProgressThrottle | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.capacity = capacity
        self.throttle = throttle if throttle is not None else ProgressThrottle()
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self._state = initial_state(terminal_height)
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> DashboardState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called after each state change; returns an unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispatch(self, name: str, payload: Any = None) -> bool:
        """Handle one raw bus event. Returns True when the state changed."""
        event = parse_event(name, payload)
        if event is None:
            self.logger.debug("Ignoring unknown dashboard event: %s", name)
            return self.tick()
        return self.apply(event)

    def apply(self, event: DashboardEvent) -> bool:
        """Handle one typed event, routing progress through the throttle."""
        before = self._state
        state = self._apply_due(before)

        if isinstance(event, CompilationProgressEvent):
            if self.throttle.submit(event.platform, event.progress) is not None:
                state = reduce(state, event, capacity=self.capacity)
        else:
            if isinstance(event, CompilationEvent):
                # Land any held-back progress before the status transition.
                pending = self.throttle.take(event.platform)
                if pending is not None:
                    state = self._reduce_progress(state, event.platform, pending)
            state = reduce(state, event, capacity=self.capacity)

        return self._commit(before, state)

    def tick(self) -> bool:
        """Apply progress values whose throttle window has elapsed."""
        before = self._state
        return self._commit(before, self._apply_due(before))

    def flush(self) -> bool:
        """Apply every pending progress value immediately."""
        before = self._state
        state = before
        for platform, value in self.throttle.flush():
            state = self._reduce_progress(state, platform, value)
        return self._commit(before, state)

    def _apply_due(self, state: DashboardState) -> DashboardState:
        for platform, value in self.throttle.drain_due():
            state = self._reduce_progress(state, platform, value)
        return state

    def _reduce_progress(
        self, state: DashboardState, platform: str, value: float
    ) -> DashboardState:
        event = CompilationProgressEvent(platform=platform, progress=value)
        return reduce(state, event, capacity=self.capacity)

    def _commit(self, before: DashboardState, after: DashboardState) -> bool:
        if after is before:
            return False
        self._state = after
        for listener in list(self._listeners):
            listener(after)
        return True
