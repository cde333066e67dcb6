"""Per-platform compilation status transitions."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .log_buffer import DEFAULT_LOG_CAPACITY, extend_logs
from .models import CompilationState, LogEntry, make_runtime_log_entry

CompilationTable = Mapping[str, CompilationState]


def clamp_progress(value: float) -> float:
    """Clamp raw bundler progress into [0, 1]; NaN counts as no progress."""
    if math.isnan(value):
        return 0.0
    return max(min(value, 1.0), 0.0)


def _with_platform(
    table: CompilationTable,
    platform: str,
    status: CompilationState,
) -> CompilationTable:
    # Existing platforms keep their position, new ones go last.
    updated = dict(table)
    updated[platform] = status
    return MappingProxyType(updated)


def start(table: CompilationTable, platform: str) -> CompilationTable:
    return _with_platform(table, platform, CompilationState(progress=0.0, running=True))


def progress(table: CompilationTable, platform: str, raw_progress: float) -> CompilationTable:
    return _with_platform(
        table,
        platform,
        CompilationState(progress=clamp_progress(raw_progress), running=True),
    )


def failed(
    table: CompilationTable,
    logs: tuple[LogEntry, ...],
    platform: str,
    message: str,
    *,
    capacity: int = DEFAULT_LOG_CAPACITY,
) -> tuple[CompilationTable, tuple[LogEntry, ...]]:
    """Stop the platform and record the failure message as an ERROR log line."""
    table = _with_platform(table, platform, CompilationState(progress=0.0, running=False))
    entry = make_runtime_log_entry("ERROR", [message])
    return table, extend_logs(logs, (entry,), capacity=capacity)


def finished(
    table: CompilationTable,
    logs: tuple[LogEntry, ...],
    platform: str,
    errors: Iterable[str],
    *,
    capacity: int = DEFAULT_LOG_CAPACITY,
) -> tuple[CompilationTable, tuple[LogEntry, ...]]:
    """Complete the platform and record one ERROR log line per compiler error."""
    table = _with_platform(table, platform, CompilationState(progress=1.0, running=False))
    entries = [make_runtime_log_entry("ERROR", [error]) for error in errors]
    if not entries:
        return table, logs
    return table, extend_logs(logs, entries, capacity=capacity)
