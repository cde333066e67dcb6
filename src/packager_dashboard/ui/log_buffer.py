"""Capacity-capped log history kept in arrival order."""

from __future__ import annotations

from collections.abc import Iterable

from .models import LogEntry

DEFAULT_LOG_CAPACITY = 100


def extend_logs(
    buffer: tuple[LogEntry, ...],
    entries: Iterable[LogEntry],
    *,
    capacity: int = DEFAULT_LOG_CAPACITY,
) -> tuple[LogEntry, ...]:
    """Return a new buffer with `entries` appended and the oldest overflow dropped."""
    combined = buffer + tuple(entries)
    if len(combined) > capacity:
        return combined[len(combined) - capacity :]
    return combined


def append_log(
    buffer: tuple[LogEntry, ...],
    entry: LogEntry,
    *,
    capacity: int = DEFAULT_LOG_CAPACITY,
) -> tuple[LogEntry, ...]:
    return extend_logs(buffer, (entry,), capacity=capacity)
