"""Application settings for FastAPI configuration."""

from __future__ import annotations

from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "staging", "production", "test"]


class AppSettings(BaseSettings):
    """FastAPI application settings.

    Environment variables use APP_ prefix.
    Example: APP_DEBUG=true, APP_TIMEZONE="Europe/Berlin"
    """

    # ─────────────────────────────────────────────────────
    # Service identity
    # ─────────────────────────────────────────────────────
    service_name: str = Field(
        default="taskdesk-service",
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Service name for logging (lowercase, hyphens allowed)",
    )
    title: str = Field(
        default="TaskDesk Notification API",
        min_length=1,
        max_length=200,
        description="API title displayed in documentation",
    )
    description: str = Field(
        default="Reminder delivery and daily digest pipeline for TaskDesk",
        description="API description (supports Markdown)",
    )
    version: str = Field(
        default="1.0.0",
        min_length=1,
        max_length=50,
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$",
        description="API version (semver format)",
    )
    environment: Environment = Field(
        default="development", description="Environment: development|staging|production|test",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # ─────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────
    host: str = Field(
        default="0.0.0.0", min_length=1, max_length=255, description="Server bind host",
    )
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    api_prefix: str = Field(
        default="/api/v1",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="Base URL prefix for API routes (e.g., /api/v1)",
    )

    # ─────────────────────────────────────────────────────
    # Locale
    # ─────────────────────────────────────────────────────
    timezone: str = Field(
        default="America/Los_Angeles",
        description="IANA time zone that defines the platform's calendar day",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            msg = f"Unknown time zone: {value}"
            raise ValueError(msg) from exc
        return value

    @model_validator(mode="after")
    def validate_production_settings(self) -> AppSettings:
        """Refuse debug mode in production."""
        if self.environment == "production" and self.debug:
            msg = "Debug mode must be disabled in production"
            raise ValueError(msg)
        return self

    @property
    def tzinfo(self) -> ZoneInfo:
        """Platform time zone as a ZoneInfo instance."""
        return ZoneInfo(self.timezone)
