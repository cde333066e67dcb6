"""Pure (state, event) -> state transitions for the dashboard."""

from __future__ import annotations

from dataclasses import replace

from ..events import (
    CompilationFailedEvent,
    CompilationFinishedEvent,
    CompilationProgressEvent,
    CompilationStartEvent,
    DashboardEvent,
    LogEvent,
    RequestFailedEvent,
    ResponseCompleteEvent,
    TerminalResizeEvent,
)
from . import compilations
from .log_buffer import DEFAULT_LOG_CAPACITY, append_log
from .models import (
    DashboardState,
    LogEntry,
    make_request_response_entry,
    make_runtime_log_entry,
)


def _push(state: DashboardState, entry: LogEntry, capacity: int) -> DashboardState:
    return replace(state, logs=append_log(state.logs, entry, capacity=capacity))


def reduce(
    state: DashboardState,
    event: DashboardEvent | None,
    *,
    capacity: int = DEFAULT_LOG_CAPACITY,
) -> DashboardState:
    """Apply one event. Only the touched branch of the state is replaced.

    Progress events are applied as given; rate limiting happens before the
    event reaches this function.
    """
    if isinstance(event, LogEvent):
        return _push(state, make_runtime_log_entry(event.level, event.args), capacity)

    if isinstance(event, ResponseCompleteEvent):
        # Covers ResponseFailed and RequestFailed, which share the request shape.
        request = event.request
        extra = event.event if isinstance(event, RequestFailedEvent) else []
        entry = make_request_response_entry(
            request.method,
            request.path,
            request.response.status_code,
            extra,
        )
        return _push(state, entry, capacity)

    if isinstance(event, CompilationStartEvent):
        return replace(
            state,
            compilations=compilations.start(state.compilations, event.platform),
        )

    if isinstance(event, CompilationProgressEvent):
        return replace(
            state,
            compilations=compilations.progress(
                state.compilations, event.platform, event.progress
            ),
        )

    if isinstance(event, CompilationFailedEvent):
        table, logs = compilations.failed(
            state.compilations,
            state.logs,
            event.platform,
            event.message,
            capacity=capacity,
        )
        return replace(state, compilations=table, logs=logs)

    if isinstance(event, CompilationFinishedEvent):
        table, logs = compilations.finished(
            state.compilations,
            state.logs,
            event.platform,
            event.errors,
            capacity=capacity,
        )
        return replace(state, compilations=table, logs=logs)

    if isinstance(event, TerminalResizeEvent):
        if event.rows <= 0 or event.rows == state.terminal_height:
            return state
        return replace(state, terminal_height=event.rows)

    return state
