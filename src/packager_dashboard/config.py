"""Typed settings loader for the packager dashboard."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    dashboard_host: str = Field(default="localhost", alias="DASHBOARD_HOST")
    dashboard_port: int = Field(default=8081, alias="DASHBOARD_PORT")
    dashboard_log_capacity: int = Field(default=100, alias="DASHBOARD_LOG_CAPACITY")
    dashboard_progress_throttle_ms: int = Field(
        default=20,
        alias="DASHBOARD_PROGRESS_THROTTLE_MS",
    )
    dashboard_chrome_rows: int = Field(default=5, alias="DASHBOARD_CHROME_ROWS")
    dashboard_refresh_per_second: float = Field(
        default=10.0,
        alias="DASHBOARD_REFRESH_PER_SECOND",
    )
    dashboard_ui_mode: Literal["rich", "plain"] = Field(
        default="rich",
        alias="DASHBOARD_UI_MODE",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )

    @field_validator("log_level", "dashboard_ui_mode", mode="before")
    @classmethod
    def normalize_choice_case(cls, value: Any) -> Any:
        """Accept `debug`/`Rich` style env values."""
        if not isinstance(value, str):
            return value
        stripped = value.strip()
        return stripped.lower() if stripped.lower() in {"rich", "plain"} else stripped.upper()

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Validate numeric bounds that Field constraints would report poorly."""
        if not self.dashboard_host.strip():
            raise ValueError("DASHBOARD_HOST must not be empty.")
        if not (1 <= self.dashboard_port <= 65535):
            raise ValueError("DASHBOARD_PORT must be between 1 and 65535.")
        if self.dashboard_log_capacity <= 0:
            raise ValueError("DASHBOARD_LOG_CAPACITY must be > 0.")
        if self.dashboard_progress_throttle_ms < 0:
            raise ValueError("DASHBOARD_PROGRESS_THROTTLE_MS must be >= 0.")
        if self.dashboard_chrome_rows < 0:
            raise ValueError("DASHBOARD_CHROME_ROWS must be >= 0.")
        if self.dashboard_refresh_per_second <= 0:
            raise ValueError("DASHBOARD_REFRESH_PER_SECOND must be > 0.")
        return self

    @property
    def progress_throttle_seconds(self) -> float:
        return self.dashboard_progress_throttle_ms / 1000.0

    def safe_summary(self) -> dict[str, Any]:
        """Return the effective settings for startup logging."""
        return {
            "host": self.dashboard_host,
            "port": self.dashboard_port,
            "log_capacity": self.dashboard_log_capacity,
            "progress_throttle_ms": self.dashboard_progress_throttle_ms,
            "chrome_rows": self.dashboard_chrome_rows,
            "refresh_per_second": self.dashboard_refresh_per_second,
            "ui_mode": self.dashboard_ui_mode,
            "log_level": self.log_level,
        }


def load_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Load and validate settings, raising ConfigError on failure.

    `overrides` are keyed by env var name; None values are ignored so unset
    CLI flags fall through to the environment.
    """
    values = {key: value for key, value in (overrides or {}).items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
