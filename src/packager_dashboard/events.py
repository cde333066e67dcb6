"""Event names and lenient payload models for the packager event bus.

Producers (dev server, bundler, runtime log forwarder) are outside this
package and may send partial or oddly typed payloads. Every model here has a
default for every field and coerces bad values to that default, so a corrupt
event degrades to a harmless update instead of stopping the dashboard.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .ui.models import LOG_LEVELS, LogLevel

LOG = "log"
REQUEST_FAILED = "request_failed"
RESPONSE_FAILED = "response_failed"
RESPONSE_COMPLETE = "response_complete"
COMPILATION_START = "compilation_start"
COMPILATION_PROGRESS = "compilation_progress"
COMPILATION_FAILED = "compilation_failed"
COMPILATION_FINISHED = "compilation_finished"
TERMINAL_RESIZE = "terminal_resize"

UNKNOWN_PLATFORM = "unknown"

_LEVEL_ALIASES = {"WARNING": "WARN", "CRITICAL": "ERROR", "SUCCESS": "DONE"}


def _to_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


class BusPayload(BaseModel):
    """Base for all payload models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class LogEvent(BusPayload):
    level: LogLevel = "INFO"
    args: list[Any] = Field(default_factory=list)

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return "INFO"
        upper = value.strip().upper()
        upper = _LEVEL_ALIASES.get(upper, upper)
        return upper if upper in LOG_LEVELS else "INFO"

    @field_validator("args", mode="before")
    @classmethod
    def ensure_sequence(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]


class ResponseInfo(BusPayload):
    status_code: int = Field(default=0, alias="statusCode")

    @field_validator("status_code", mode="before")
    @classmethod
    def coerce_status(cls, value: Any) -> Any:
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0


class RequestInfo(BusPayload):
    method: str = ""
    path: str = ""
    response: ResponseInfo = Field(default_factory=ResponseInfo)

    @field_validator("method", "path", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @field_validator("response", mode="before")
    @classmethod
    def default_response(cls, value: Any) -> Any:
        return value if isinstance(value, (Mapping, ResponseInfo)) else {}


class ResponseCompleteEvent(BusPayload):
    request: RequestInfo = Field(default_factory=RequestInfo)

    @field_validator("request", mode="before")
    @classmethod
    def default_request(cls, value: Any) -> Any:
        return value if isinstance(value, (Mapping, RequestInfo)) else {}


class ResponseFailedEvent(ResponseCompleteEvent):
    pass


class RequestFailedEvent(ResponseCompleteEvent):
    event: list[str] = Field(default_factory=list)

    @field_validator("event", mode="before")
    @classmethod
    def coerce_event(cls, value: Any) -> Any:
        return _to_str_list(value)


class CompilationEvent(BusPayload):
    platform: str = UNKNOWN_PLATFORM

    @field_validator("platform", mode="before")
    @classmethod
    def coerce_platform(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNKNOWN_PLATFORM
        return str(value)


class CompilationStartEvent(CompilationEvent):
    pass


class CompilationProgressEvent(CompilationEvent):
    progress: float = 0.0

    @field_validator("progress", mode="before")
    @classmethod
    def coerce_progress(cls, value: Any) -> Any:
        try:
            return float(value)
        except (TypeError, ValueError, OverflowError):
            return 0.0


class CompilationFailedEvent(CompilationEvent):
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def coerce_message(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class CompilationFinishedEvent(CompilationEvent):
    errors: list[str] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def coerce_errors(cls, value: Any) -> Any:
        return _to_str_list(value)


class TerminalResizeEvent(BusPayload):
    rows: int = 0

    @field_validator("rows", mode="before")
    @classmethod
    def coerce_rows(cls, value: Any) -> Any:
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0


DashboardEvent: TypeAlias = (
    LogEvent
    | RequestFailedEvent
    | ResponseFailedEvent
    | ResponseCompleteEvent
    | CompilationStartEvent
    | CompilationProgressEvent
    | CompilationFailedEvent
    | CompilationFinishedEvent
    | TerminalResizeEvent
)

EVENT_MODELS: dict[str, type[BusPayload]] = {
    LOG: LogEvent,
    REQUEST_FAILED: RequestFailedEvent,
    RESPONSE_FAILED: ResponseFailedEvent,
    RESPONSE_COMPLETE: ResponseCompleteEvent,
    COMPILATION_START: CompilationStartEvent,
    COMPILATION_PROGRESS: CompilationProgressEvent,
    COMPILATION_FAILED: CompilationFailedEvent,
    COMPILATION_FINISHED: CompilationFinishedEvent,
    TERMINAL_RESIZE: TerminalResizeEvent,
}


def parse_event(name: str, payload: Any) -> DashboardEvent | None:
    """Turn a raw bus event into its payload model; None for unknown names."""
    model = EVENT_MODELS.get(name)
    if model is None:
        return None
    data = dict(payload) if isinstance(payload, Mapping) else {}
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError:
        return model()  # type: ignore[return-value]
