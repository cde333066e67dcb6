"""Per-key trailing throttle for high-frequency progress updates."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(slots=True)
class _Window:
    due_at: float
    pending: float | None = None


class ProgressThrottle:
    """Coalesce progress values so each platform updates at most once per window.

    The first value seen while a platform is idle is returned for immediate
    application and opens a window. Values arriving inside the window replace
    a single pending slot; `drain_due` releases that slot once the window has
    elapsed, so the last value of a burst is always applied.
    """

    def __init__(
        self,
        window_seconds: float = 0.02,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def submit(self, key: str, value: float) -> float | None:
        """Offer a value; returns it when it may be applied now, else None."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now >= window.due_at:
            # An undrained pending value from an expired window is superseded.
            self._windows[key] = self._open(now)
            return value
        window.pending = value
        return None

    def drain_due(self) -> list[tuple[str, float]]:
        """Release pending values whose window has elapsed, in submission order."""
        now = self._clock()
        released: list[tuple[str, float]] = []
        for key, window in list(self._windows.items()):
            if now < window.due_at:
                continue
            if window.pending is None:
                del self._windows[key]
                continue
            released.append((key, window.pending))
            self._windows[key] = self._open(now)
        return released

    def take(self, key: str) -> float | None:
        """Remove and return the pending value for one key, ignoring its window."""
        window = self._windows.pop(key, None)
        return None if window is None else window.pending

    def flush(self) -> list[tuple[str, float]]:
        """Release every pending value now and forget all windows."""
        released = [
            (key, window.pending)
            for key, window in self._windows.items()
            if window.pending is not None
        ]
        self._windows.clear()
        return released

    def next_deadline(self) -> float | None:
        """Seconds until the earliest pending value is due, or None if nothing is pending."""
        now = self._clock()
        waits = [
            max(window.due_at - now, 0.0)
            for window in self._windows.values()
            if window.pending is not None
        ]
        return min(waits) if waits else None

    def _open(self, now: float) -> _Window:
        return _Window(due_at=now + self.window_seconds)

    def __len__(self) -> int:
        return sum(1 for window in self._windows.values() if window.pending is not None)
