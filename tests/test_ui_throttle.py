"""Tests for per-platform trailing progress throttling."""

from __future__ import annotations

from packager_dashboard.ui.throttle import ProgressThrottle


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_first_value_applies_immediately() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    assert throttle.submit("ios", 0.1) == 0.1
    assert len(throttle) == 0


def test_burst_keeps_only_latest_value_until_window_elapses() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    throttle.submit("ios", 0.1)
    clock.advance(0.005)
    assert throttle.submit("ios", 0.2) is None
    assert throttle.submit("ios", 0.3) is None
    assert throttle.drain_due() == []
    clock.advance(0.02)
    assert throttle.drain_due() == [("ios", 0.3)]
    assert throttle.drain_due() == []


def test_windows_are_tracked_per_platform() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    assert throttle.submit("ios", 0.1) == 0.1
    assert throttle.submit("android", 0.5) == 0.5
    assert throttle.submit("ios", 0.4) is None
    assert throttle.flush() == [("ios", 0.4)]
    assert len(throttle) == 0


def test_drained_value_opens_new_window() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    throttle.submit("ios", 0.1)
    throttle.submit("ios", 0.2)
    clock.advance(0.02)
    assert throttle.drain_due() == [("ios", 0.2)]
    assert throttle.submit("ios", 0.25) is None
    clock.advance(0.02)
    assert throttle.drain_due() == [("ios", 0.25)]


def test_idle_window_expires_without_output() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    throttle.submit("ios", 0.1)
    clock.advance(0.05)
    assert throttle.drain_due() == []
    assert throttle.submit("ios", 0.6) == 0.6


def test_take_removes_pending_value() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    throttle.submit("ios", 0.1)
    throttle.submit("ios", 0.7)
    assert throttle.take("ios") == 0.7
    assert throttle.take("ios") is None


def test_next_deadline_reports_earliest_pending() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    assert throttle.next_deadline() is None
    throttle.submit("ios", 0.1)
    clock.advance(0.015)
    throttle.submit("ios", 0.2)
    deadline = throttle.next_deadline()
    assert deadline is not None
    assert abs(deadline - 0.005) < 1e-9


def test_zero_window_never_holds_values() -> None:
    throttle = ProgressThrottle(0.0, clock=FakeClock())
    assert throttle.submit("ios", 0.1) == 0.1
    assert throttle.submit("ios", 0.2) == 0.2


def test_window_elapses_exactly_on_boundary_across_many_windows() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(0.02, clock=clock)
    throttle.submit("ios", 0.0)
    for step in range(1, 50):
        assert throttle.submit("ios", step / 100) is None
        clock.advance(0.02)
        assert throttle.drain_due() == [("ios", step / 100)]
