"""Rich-rendered live dashboard for a running packager server."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.padding import Padding
from rich.pretty import pretty_repr
from rich.table import Table
from rich.text import Text

from ..bus import EventBus
from ..events import LOG, TERMINAL_RESIZE
from ..redaction import redact_url, sanitize_for_logging, sanitize_text
from ..sources import EventReader
from .models import (
    CompilationState,
    DashboardState,
    LogEntry,
    LogLevel,
    RequestResponseEntry,
    RuntimeLogEntry,
)
from .projection import DEFAULT_CHROME_ROWS, CompilationRow, RenderSnapshot, project
from .store import DashboardStore

PROGRESS_BAR_WIDTH = 20
RUNTIME_LOG_MARKER = "▶︎"
LINE_BREAK_MARKER = " ⏎ "

_LEVEL_STYLES: dict[str, str] = {
    "DONE": "green",
    "ERROR": "red",
    "WARN": "yellow",
    "INFO": "white",
    "DEBUG": "dim",
}


def _level_from_record(level_no: int) -> LogLevel:
    if level_no >= logging.ERROR:
        return "ERROR"
    if level_no >= logging.WARNING:
        return "WARN"
    if level_no >= logging.INFO:
        return "INFO"
    return "DEBUG"


class _DashboardLogHandler(logging.Handler):
    """Route logger output into the dashboard log feed instead of the console."""

    def __init__(self, bus: EventBus) -> None:
        super().__init__()
        self.bus = bus

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.bus.publish(
                LOG,
                {
                    "level": _level_from_record(record.levelno),
                    "args": [sanitize_text(record.getMessage())],
                },
            )
        except Exception:
            self.handleError(record)


def single_line(value: str) -> str:
    """Fold line breaks so every log entry occupies exactly one terminal row."""
    lines = value.splitlines()
    if len(lines) <= 1:
        return lines[0] if lines else ""
    return LINE_BREAK_MARKER.join(line for line in lines if line.strip())


def format_args(args: Iterable[Any]) -> str:
    """Join runtime log arguments; non-strings get a structural repr."""
    parts = []
    for item in args:
        if isinstance(item, str):
            parts.append(item)
        else:
            parts.append(pretty_repr(sanitize_for_logging(item), max_width=10_000))
    return " ".join(parts)


def status_style(status_code: int) -> str:
    if status_code < 300:
        return "green"
    if status_code < 400:
        return "yellow"
    return "red"


def progress_bar(progress: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    filled = min(max(math.floor(progress * width), 0), width)
    return f"[{'=' * filled}{' ' * (width - filled)}]"


def runtime_log_text(entry: RuntimeLogEntry) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    text.append(entry.level, style=f"bold {_LEVEL_STYLES.get(entry.level, 'white')}")
    text.append(f" {RUNTIME_LOG_MARKER} ")
    text.append(single_line(format_args(entry.args)))
    return text


def request_response_text(entry: RequestResponseEntry) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    text.append(entry.method.upper(), style=f"bold {status_style(entry.status_code)}")
    text.append(" ")
    text.append(single_line(redact_url(entry.url)))
    text.append(" ")
    text.append(str(entry.status_code), style="dim")
    if entry.extra:
        text.append(" - ")
        text.append(single_line(" ".join(entry.extra)))
    return text


def log_entry_text(entry: LogEntry) -> Text:
    if isinstance(entry, RequestResponseEntry):
        return request_response_text(entry)
    return runtime_log_text(entry)


def compilation_text(row: CompilationRow) -> Text:
    """Single-line form of a compilation row, used by plain output."""
    text = Text()
    text.append(single_line(row.platform.upper()), style="bold magenta")
    text.append(" ")
    text.append(progress_bar(row.progress), style="white" if row.running else "dim")
    text.append(f" {math.floor(row.progress * 100)}%", style="green" if row.running else "dim")
    return text


class TerminalDashboard:
    """Render store snapshots either live (rich) or as an append-only plain feed."""

    def __init__(
        self,
        *,
        console: Console,
        store: DashboardStore,
        host: str,
        port: int,
        chrome_rows: int = DEFAULT_CHROME_ROWS,
    ) -> None:
        self.console = console
        self.store = store
        self.host = host
        self.port = port
        self.chrome_rows = chrome_rows
        self._logger: logging.Logger | None = None
        self._original_handlers: list[logging.Handler] = []
        self._log_handler: logging.Handler | None = None
        self._last_printed_key = 0
        self._last_printed_compilations: dict[str, CompilationState] = {}

    def attach_logger(self, logger: logging.Logger, bus: EventBus) -> None:
        """Replace the JSON console handler with a handler feeding the log pane."""
        self._logger = logger
        self._original_handlers = list(logger.handlers)
        self._log_handler = _DashboardLogHandler(bus)
        logger.handlers = [self._log_handler]

    def detach_logger(self) -> None:
        """Restore original logger handlers."""
        if self._logger is None:
            return
        self._logger.handlers = self._original_handlers
        self._logger = None
        self._original_handlers = []
        self._log_handler = None

    def sync_terminal_height(self) -> None:
        """Dispatch a resize event when the console height changed."""
        rows = self.console.size.height
        if rows != self.store.state.terminal_height:
            self.store.dispatch(TERMINAL_RESIZE, {"rows": rows})

    def snapshot(self) -> RenderSnapshot:
        self.sync_terminal_height()
        return project(self.store.state, chrome_rows=self.chrome_rows)

    def render(self, snapshot: RenderSnapshot | None = None) -> RenderableType:
        snapshot = snapshot or self.snapshot()
        return Group(
            self._build_header(),
            Padding(self._build_compilations(snapshot), (1, 0, 1, 2)),
            Text("Logs:", style="bold blue"),
            Padding(self._build_logs(snapshot), (1, 0, 0, 2)),
        )

    def run_live(
        self,
        bus: EventBus,
        reader: EventReader,
        *,
        refresh_per_second: float = 10.0,
    ) -> None:
        """Pump events into the store and redraw until the reader hits EOF."""
        frame_seconds = 1.0 / refresh_per_second
        with Live(
            self.render(),
            console=self.console,
            refresh_per_second=refresh_per_second,
        ) as live:
            while not (reader.done.is_set() and not bus.pending()):
                bus.pump(self._pump_timeout(frame_seconds))
                self.store.tick()
                live.update(self.render())
            self.store.flush()
            live.update(self.render(), refresh=True)

    def run_plain(self, bus: EventBus, reader: EventReader, *, poll_seconds: float = 0.1) -> None:
        """Print each new log entry and compilation change once, without redraws."""
        unsubscribe = self.store.subscribe(self.print_changes)
        try:
            while not (reader.done.is_set() and not bus.pending()):
                bus.pump(self._pump_timeout(poll_seconds))
                self.store.tick()
            self.store.flush()
        finally:
            unsubscribe()

    def print_changes(self, state: DashboardState) -> None:
        """Plain-mode listener: emit compilation transitions and unseen log entries."""
        for platform, status in state.compilations.items():
            previous = self._last_printed_compilations.get(platform)
            if previous is None or previous.running != status.running:
                row = CompilationRow(platform, status.progress, status.running)
                self.console.print(compilation_text(row))
        self._last_printed_compilations = dict(state.compilations)
        for entry in state.logs:
            if entry.key > self._last_printed_key:
                self.console.print(log_entry_text(entry))
                self._last_printed_key = entry.key

    def _pump_timeout(self, frame_seconds: float) -> float:
        deadline = self.store.throttle.next_deadline()
        if deadline is None:
            return frame_seconds
        return min(deadline, frame_seconds)

    def _build_header(self) -> Text:
        return Text(
            f"Packager server running on http://{self.host}:{self.port}",
            style="bold blue",
        )

    def _build_compilations(self, snapshot: RenderSnapshot) -> RenderableType:
        if snapshot.show_placeholder:
            return Text("No compilation available yet...", style="dim")
        table = Table.grid(padding=(0, 1))
        table.add_column(justify="right", style="bold magenta")
        table.add_column()
        table.add_column(justify="right", width=4)
        for row in snapshot.compilation_rows:
            bar_style = "white" if row.running else "dim"
            pct_style = "green" if row.running else "dim"
            table.add_row(
                single_line(row.platform.upper()),
                Text(progress_bar(row.progress), style=bar_style),
                Text(f"{math.floor(row.progress * 100)}%", style=pct_style),
            )
        return table

    def _build_logs(self, snapshot: RenderSnapshot) -> RenderableType:
        return Group(*(log_entry_text(entry) for entry in snapshot.visible_logs))
