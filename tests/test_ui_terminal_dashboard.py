"""Tests for terminal dashboard rendering, plain output and logger routing."""

from __future__ import annotations

import io
import logging

from rich.console import Console

from packager_dashboard import events
from packager_dashboard.bus import EventBus
from packager_dashboard.sources import EventReader
from packager_dashboard.ui.models import make_request_response_entry, make_runtime_log_entry
from packager_dashboard.ui.projection import CompilationRow
from packager_dashboard.ui.store import DashboardStore
from packager_dashboard.ui.terminal_dashboard import (
    LINE_BREAK_MARKER,
    RUNTIME_LOG_MARKER,
    TerminalDashboard,
    compilation_text,
    format_args,
    progress_bar,
    request_response_text,
    runtime_log_text,
    single_line,
    status_style,
)


def _console(height: int = 30) -> Console:
    return Console(file=io.StringIO(), record=True, width=100, height=height)


def _dashboard(console: Console) -> TerminalDashboard:
    store = DashboardStore(terminal_height=console.size.height)
    return TerminalDashboard(console=console, store=store, host="localhost", port=8081)


def test_progress_bar_fill_and_width() -> None:
    assert progress_bar(0.0) == "[" + " " * 20 + "]"
    assert progress_bar(0.5) == "[" + "=" * 10 + " " * 10 + "]"
    assert progress_bar(1.0) == "[" + "=" * 20 + "]"


def test_status_style_by_range() -> None:
    assert status_style(200) == "green"
    assert status_style(304) == "yellow"
    assert status_style(500) == "red"


def test_format_args_uses_structural_repr_for_non_strings() -> None:
    rendered = format_args(["bundle", 3, {"files": 2}, None])
    assert rendered == "bundle 3 {'files': 2} None"


def test_format_args_redacts_secret_keys() -> None:
    assert "hunter2" not in format_args([{"password": "hunter2"}])


def test_runtime_log_line() -> None:
    text = runtime_log_text(make_runtime_log_entry("DONE", ["Bundled", 120, "modules"]))
    assert text.plain == f"DONE {RUNTIME_LOG_MARKER} Bundled 120 modules"


def test_request_line_upper_cases_method_and_appends_extra() -> None:
    entry = make_request_response_entry("get", "/index.bundle?token=abc", 500, ["ENOENT"])
    text = request_response_text(entry)
    assert text.plain == "GET /index.bundle?token=[REDACTED] 500 - ENOENT"


def test_compilation_text_floors_percent() -> None:
    text = compilation_text(CompilationRow("ios", 0.999, True))
    assert text.plain.startswith("IOS [")
    assert text.plain.endswith(" 99%")


def test_render_shows_placeholder_and_header() -> None:
    console = _console()
    dashboard = _dashboard(console)
    console.print(dashboard.render())
    output = console.export_text()
    assert "Packager server running on http://localhost:8081" in output
    assert "No compilation available yet..." in output
    assert "Logs:" in output


def test_render_shows_compilations_and_visible_logs_only() -> None:
    console = _console(height=12)
    dashboard = _dashboard(console)
    store = dashboard.store
    store.dispatch(events.COMPILATION_START, {"platform": "ios"})
    store.dispatch(events.COMPILATION_FINISHED, {"platform": "android", "errors": []})
    for i in range(20):
        store.dispatch(events.LOG, {"level": "info", "args": [f"message-{i:02d}"]})
    console.print(dashboard.render())
    output = console.export_text()
    assert "IOS" in output
    assert "ANDROID" in output
    assert "100%" in output
    # 12 rows - 5 chrome rows - 2 compilation rows
    assert "message-19" in output
    assert "message-15" in output
    assert "message-14" not in output


def test_single_line_folds_breaks_and_drops_blank_lines() -> None:
    assert single_line("a\n\n  b\r\nc") == f"a{LINE_BREAK_MARKER}  b{LINE_BREAK_MARKER}c"
    assert single_line("plain") == "plain"


def test_multiline_error_keeps_frame_within_terminal_height() -> None:
    console = _console(height=12)
    dashboard = _dashboard(console)
    store = dashboard.store
    store.dispatch(events.COMPILATION_START, {"platform": "ios"})
    for i in range(4):
        store.dispatch(events.LOG, {"level": "info", "args": [f"message-{i}"]})
    store.dispatch(
        events.COMPILATION_FINISHED,
        {"platform": "ios", "errors": ["SyntaxError: index.js\n  1 | import\n    ^\nUnexpected token"]},
    )
    store.dispatch(events.LOG, {"level": "info", "args": ["newest"]})
    lines = console.render_lines(dashboard.render())
    assert len(lines) <= 12
    console.print(dashboard.render())
    output = console.export_text()
    assert "newest" in output
    assert f"SyntaxError: index.js{LINE_BREAK_MARKER}" in output


def test_snapshot_dispatches_resize() -> None:
    console = _console(height=40)
    store = DashboardStore(terminal_height=10)
    dashboard = TerminalDashboard(console=console, store=store, host="h", port=1)
    snapshot = dashboard.snapshot()
    assert store.state.terminal_height == 40
    assert snapshot.log_row_budget == 40 - 5 - 1


def test_plain_mode_prints_each_entry_once() -> None:
    console = _console()
    dashboard = _dashboard(console)
    bus = EventBus()
    bus.on_any(dashboard.store.dispatch)
    lines = [
        '{"event": "compilation_start", "payload": {"platform": "ios"}}',
        '{"event": "log", "payload": {"level": "info", "args": ["hello"]}}',
        '{"event": "response_complete", "payload": {"request": '
        '{"method": "get", "path": "/status", "response": {"statusCode": 200}}}}',
        '{"event": "compilation_finished", "payload": {"platform": "ios", "errors": ["oops"]}}',
    ]
    reader = EventReader(lines, bus).start()
    dashboard.run_plain(bus, reader, poll_seconds=0.01)
    output = console.export_text()
    assert output.count(f"INFO {RUNTIME_LOG_MARKER} hello") == 1
    assert "GET /status 200" in output
    assert f"ERROR {RUNTIME_LOG_MARKER} oops" in output
    assert output.count("IOS [") == 2


def test_run_live_renders_final_frame() -> None:
    console = _console()
    dashboard = _dashboard(console)
    bus = EventBus()
    bus.on_any(dashboard.store.dispatch)
    lines = [
        '{"event": "compilation_progress", "payload": {"platform": "ios", "progress": 0.2}}',
        '{"event": "compilation_progress", "payload": {"platform": "ios", "progress": 0.6}}',
    ]
    reader = EventReader(lines, bus).start()
    dashboard.run_live(bus, reader, refresh_per_second=50)
    assert dashboard.store.state.compilations["ios"].progress == 0.6
    assert "Packager server running" in console.export_text()


def test_attach_logger_routes_records_to_bus() -> None:
    console = _console()
    dashboard = _dashboard(console)
    bus = EventBus()
    bus.on_any(dashboard.store.dispatch)
    logger = logging.getLogger("test.dashboard.routing")
    original = logging.StreamHandler(io.StringIO())
    logger.handlers = [original]
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    dashboard.attach_logger(logger, bus)
    logger.warning("disk almost full: token=abc123")
    bus.pump()
    dashboard.detach_logger()

    entry = dashboard.store.state.logs[-1]
    assert entry.level == "WARN"
    assert entry.args == ("disk almost full: token=[REDACTED]",)
    assert logger.handlers == [original]
