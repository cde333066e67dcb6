"""CLI: render a live dashboard from a packager event stream."""

from __future__ import annotations

import argparse
import sys
from contextlib import suppress

from rich.console import Console

from .bus import EventBus
from .config import load_settings
from .exceptions import ConfigError, EventSourceError
from .log_setup import setup_logger
from .sources import STDIN_MARKER, EventReader, open_event_stream
from .ui.store import DashboardStore
from .ui.terminal_dashboard import TerminalDashboard
from .ui.throttle import ProgressThrottle

EXIT_CONFIG_ERROR = 2
EXIT_EVENT_SOURCE_ERROR = 3
EXIT_INTERRUPTED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Show compilation progress, runtime logs and requests of a packager server.",
    )
    parser.add_argument(
        "--events",
        default=STDIN_MARKER,
        help="JSONL file of packager events, or '-' for stdin.",
    )
    parser.add_argument(
        "--ui-mode",
        choices=["plain", "rich"],
        default=None,
        help="Override DASHBOARD_UI_MODE; rich redraws in place, plain appends lines.",
    )
    parser.add_argument("--host", type=str, default=None, help="Override DASHBOARD_HOST.")
    parser.add_argument("--port", type=int, default=None, help="Override DASHBOARD_PORT.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the dashboard until the event stream ends."""
    args = parse_args(argv)
    logger = setup_logger()

    try:
        settings = load_settings(
            {
                "DASHBOARD_HOST": args.host,
                "DASHBOARD_PORT": args.port,
                "DASHBOARD_UI_MODE": args.ui_mode,
            }
        )
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return EXIT_CONFIG_ERROR
    logger.setLevel(settings.log_level)

    ui_mode = settings.dashboard_ui_mode

    try:
        stream = open_event_stream(args.events)
    except EventSourceError as exc:
        logger.error("%s", exc)
        return EXIT_EVENT_SOURCE_ERROR

    console = Console()
    bus = EventBus(logger=logger)
    store = DashboardStore(
        terminal_height=console.size.height,
        capacity=settings.dashboard_log_capacity,
        throttle=ProgressThrottle(settings.progress_throttle_seconds),
        logger=logger,
    )
    bus.on_any(store.dispatch)
    dashboard = TerminalDashboard(
        console=console,
        store=store,
        host=settings.dashboard_host,
        port=settings.dashboard_port,
        chrome_rows=settings.dashboard_chrome_rows,
    )
    logger.info("Dashboard starting: %s", settings.safe_summary())
    reader = EventReader(stream, bus, logger=logger)

    try:
        if ui_mode == "rich":
            dashboard.attach_logger(logger, bus)
            reader.start()
            dashboard.run_live(
                bus,
                reader,
                refresh_per_second=settings.dashboard_refresh_per_second,
            )
        else:
            reader.start()
            dashboard.run_plain(bus, reader)
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    finally:
        dashboard.detach_logger()
        if stream is not sys.stdin:
            with suppress(OSError):
                stream.close()

    logger.info("Event stream ended; %d log entries retained.", len(store.state.logs))
    return 0


if __name__ == "__main__":
    sys.exit(main())
