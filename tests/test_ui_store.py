"""Tests for the dashboard store: throttled dispatch and listener notification."""

from __future__ import annotations

import logging

from packager_dashboard import events
from packager_dashboard.ui.models import CompilationState, DashboardState
from packager_dashboard.ui.store import DashboardStore
from packager_dashboard.ui.throttle import ProgressThrottle


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _store(clock: FakeClock) -> DashboardStore:
    return DashboardStore(
        terminal_height=30,
        throttle=ProgressThrottle(0.02, clock=clock),
        logger=logging.getLogger("test.store"),
    )


def test_progress_burst_applies_first_then_latest() -> None:
    clock = FakeClock()
    store = _store(clock)
    for value in (0.1, 0.2, 0.3, 0.4):
        store.dispatch(events.COMPILATION_PROGRESS, {"platform": "ios", "progress": value})
    assert store.state.compilations["ios"].progress == 0.1
    clock.now = 0.05
    assert store.tick() is True
    assert store.state.compilations["ios"].progress == 0.4


def test_clamped_values_after_flush() -> None:
    clock = FakeClock()
    store = _store(clock)
    observed = []
    for step, value in enumerate((-0.5, 0.3, 1.7)):
        clock.now = step * 0.1
        store.dispatch(events.COMPILATION_PROGRESS, {"platform": "ios", "progress": value})
        store.flush()
        observed.append(store.state.compilations["ios"].progress)
    assert observed == [0.0, 0.3, 1.0]


def test_finished_lands_pending_progress_first() -> None:
    clock = FakeClock()
    store = _store(clock)
    seen: list[DashboardState] = []
    store.subscribe(seen.append)
    store.dispatch(events.COMPILATION_START, {"platform": "ios"})
    store.dispatch(events.COMPILATION_PROGRESS, {"platform": "ios", "progress": 0.5})
    store.dispatch(events.COMPILATION_PROGRESS, {"platform": "ios", "progress": 0.9})
    store.dispatch(events.COMPILATION_FINISHED, {"platform": "ios", "errors": []})
    assert store.state.compilations["ios"] == CompilationState(progress=1.0, running=False)
    clock.now = 1.0
    assert store.tick() is False
    assert store.state.compilations["ios"].running is False
    assert len(seen) == 3


def test_terminal_events_are_not_throttled() -> None:
    store = _store(FakeClock())
    for platform in ("ios", "android", "web"):
        store.dispatch(events.COMPILATION_START, {"platform": platform})
        store.dispatch(events.COMPILATION_FAILED, {"platform": platform, "message": "x"})
    assert all(not status.running for status in store.state.compilations.values())
    assert len(store.state.logs) == 3


def test_store_respects_capacity() -> None:
    store = DashboardStore(terminal_height=30, capacity=5)
    for i in range(12):
        store.dispatch(events.LOG, {"level": "info", "args": [i]})
    assert [entry.args[0] for entry in store.state.logs] == [7, 8, 9, 10, 11]


def test_unknown_event_does_not_notify() -> None:
    store = _store(FakeClock())
    seen: list[DashboardState] = []
    unsubscribe = store.subscribe(seen.append)
    assert store.dispatch("hmr_client_connected", {}) is False
    assert seen == []
    unsubscribe()
    store.dispatch(events.LOG, {"args": ["after"]})
    assert seen == []
