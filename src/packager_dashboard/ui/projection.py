"""Pure projection of dashboard state onto the visible terminal rows."""

from __future__ import annotations

from dataclasses import dataclass

from .models import CompilationState, DashboardState, LogEntry

# Header line, blank lines around the compilation block, and the "Logs:" title.
DEFAULT_CHROME_ROWS = 5


@dataclass(frozen=True, slots=True)
class CompilationRow:
    platform: str
    progress: float
    running: bool


@dataclass(frozen=True, slots=True)
class RenderSnapshot:
    """Everything the renderer needs for one frame."""

    terminal_height: int
    compilation_rows: tuple[CompilationRow, ...]
    show_placeholder: bool
    log_row_budget: int
    visible_logs: tuple[LogEntry, ...]

    @property
    def compilation_row_count(self) -> int:
        """Rows taken by the compilation block, including the placeholder row."""
        return max(len(self.compilation_rows), 1)


def _row(platform: str, status: CompilationState) -> CompilationRow:
    return CompilationRow(platform=platform, progress=status.progress, running=status.running)


def project(
    state: DashboardState,
    terminal_height: int | None = None,
    *,
    chrome_rows: int = DEFAULT_CHROME_ROWS,
) -> RenderSnapshot:
    """Compute the visible compilation rows and the tail of logs that fits."""
    height = state.terminal_height if terminal_height is None else terminal_height
    rows = tuple(_row(platform, status) for platform, status in state.compilations.items())
    budget = max(height - chrome_rows - max(len(rows), 1), 0)
    # logs[-0:] would return everything, so a zero budget is handled explicitly.
    visible = state.logs[-budget:] if budget else ()
    return RenderSnapshot(
        terminal_height=height,
        compilation_rows=rows,
        show_placeholder=not rows,
        log_row_budget=budget,
        visible_logs=visible,
    )
