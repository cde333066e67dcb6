"""Typed log entry and state models for the packager dashboard."""

from __future__ import annotations

import itertools
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, TypeAlias

LogLevel = Literal["DEBUG", "INFO", "WARN", "ERROR", "DONE"]
LOG_LEVELS: tuple[LogLevel, ...] = ("DEBUG", "INFO", "WARN", "ERROR", "DONE")

# Shared by both entry variants so keys never collide, even within one millisecond.
_KEY_COUNTER = itertools.count(1)


def next_key() -> int:
    """Allocate the next process-wide render key."""
    return next(_KEY_COUNTER)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, slots=True)
class RuntimeLogEntry:
    """One runtime log line emitted by the served application or the bundler."""

    timestamp: int
    key: int
    level: LogLevel
    args: tuple[Any, ...]
    type: Literal["runtime_log"] = "runtime_log"


@dataclass(frozen=True, slots=True)
class RequestResponseEntry:
    """One HTTP request outcome observed by the dev server."""

    timestamp: int
    key: int
    method: str
    url: str
    status_code: int
    extra: tuple[str, ...] = ()
    type: Literal["request_response"] = "request_response"


LogEntry: TypeAlias = RuntimeLogEntry | RequestResponseEntry


def make_runtime_log_entry(level: LogLevel, args: Iterable[Any]) -> RuntimeLogEntry:
    """Build a runtime log entry stamped with the current time and a fresh key."""
    return RuntimeLogEntry(timestamp=now_ms(), key=next_key(), level=level, args=tuple(args))


def make_request_response_entry(
    method: str,
    url: str,
    status_code: int,
    extra: Iterable[str] = (),
) -> RequestResponseEntry:
    """Build a request/response entry; values are kept exactly as given."""
    return RequestResponseEntry(
        timestamp=now_ms(),
        key=next_key(),
        method=method,
        url=url,
        status_code=status_code,
        extra=tuple(extra),
    )


@dataclass(frozen=True, slots=True)
class CompilationState:
    """Build progress of one platform."""

    progress: float = 0.0
    running: bool = False


def _empty_compilations() -> Mapping[str, CompilationState]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class DashboardState:
    """Root state; replaced wholesale by the reducer, never mutated in place."""

    terminal_height: int
    compilations: Mapping[str, CompilationState] = field(default_factory=_empty_compilations)
    logs: tuple[LogEntry, ...] = ()


def initial_state(terminal_height: int) -> DashboardState:
    return DashboardState(terminal_height=terminal_height)
