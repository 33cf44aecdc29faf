"""Logging configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Logging configuration.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=DEBUG, LOG_JSON_LOGS=false
    """

    service_name: str = Field(
        default="taskdesk-service",
        description="Service name stamped on every JSON log record",
    )
    level: LogLevel = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(
        default=True,
        description="Emit JSON lines (production) instead of human-readable console text",
    )

    # ─────────────────────────────────────────────────────
    # File output
    # ─────────────────────────────────────────────────────
    file_path: Path | None = Field(
        default=None, description="Optional path of a rotating JSON log file",
    )
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    file_backup_count: int = Field(default=5, ge=0)

    # ─────────────────────────────────────────────────────
    # Context
    # ─────────────────────────────────────────────────────
    include_context: bool = Field(
        default=True, description="Inject context variables (request_id, user, ...) into records",
    )

    # ─────────────────────────────────────────────────────
    # Third-party loggers
    # ─────────────────────────────────────────────────────
    uvicorn_level: LogLevel = Field(default="INFO")
    sqlalchemy_level: LogLevel = Field(default="WARNING")
    httpx_level: LogLevel = Field(default="WARNING")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments accepted by ``configure_logging``."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "log_file": str(self.file_path) if self.file_path else None,
            "include_context": self.include_context,
        }
