"""Logging configuration settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Structured logging configuration.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=INFO, LOG_JSON_LOGS=true
    """

    level: LogLevel = Field(
        default="INFO",
        description="Logging level (DEBUG|INFO|WARNING|ERROR|CRITICAL)",
    )

    # JSON structured logging
    json_logs: bool = Field(
        default=True, description="Enable JSON-formatted structured logs"
    )

    include_uvicorn: bool = Field(
        default=True, description="Route Uvicorn loggers through the root handlers"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Map settings onto configure_logging() keyword arguments."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "include_uvicorn": self.include_uvicorn,
        }
