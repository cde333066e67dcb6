"""Dashboard state model, reducer core and terminal rendering."""

from .log_buffer import append_log, extend_logs
from .models import CompilationState, DashboardState, LogEntry
from .projection import RenderSnapshot, project
from .throttle import ProgressThrottle

__all__ = [
    "CompilationState",
    "DashboardState",
    "LogEntry",
    "ProgressThrottle",
    "RenderSnapshot",
    "append_log",
    "extend_logs",
    "project",
]
