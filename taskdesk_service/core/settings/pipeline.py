"""Reminder and digest pipeline settings."""

from __future__ import annotations

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Tuning for the scheduler-triggered reminder and digest batches.

    Environment variables use PIPELINE_ prefix.
    Example: PIPELINE_API_KEY=..., PIPELINE_MAX_CONCURRENCY=5
    """

    # ─────────────────────────────────────────────────────
    # Trigger authentication
    # ─────────────────────────────────────────────────────
    api_key: SecretStr | None = Field(
        default=None, description="Shared secret the external scheduler sends as X-API-Key",
    )

    # ─────────────────────────────────────────────────────
    # Concurrency
    # ─────────────────────────────────────────────────────
    max_concurrency: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Upper bound on concurrent dispatches / digest generations per batch",
    )

    # ─────────────────────────────────────────────────────
    # Reminders
    # ─────────────────────────────────────────────────────
    due_soon_minutes: int = Field(
        default=60, ge=1, description="Tasks due within this many minutes are 'due soon'",
    )
    health_due_soon_minutes: int = Field(
        default=5, ge=1, description="Look-ahead used by the health endpoint's due-soon count",
    )
    max_delivery_attempts: int | None = Field(
        default=None,
        ge=1,
        description="Cancel a reminder after this many fully failed dispatches (unset = retry forever)",
    )
    cancel_completed_task_reminders: bool = Field(
        default=True,
        description="Cancel due reminders whose task was completed instead of delivering them",
    )

    # ─────────────────────────────────────────────────────
    # Digests
    # ─────────────────────────────────────────────────────
    digest_freshness_hours: int = Field(default=12, ge=1, le=48)
    morning_hour: int = Field(default=5, ge=0, le=23, description="Local hour of the morning digest")
    afternoon_hour: int = Field(default=16, ge=0, le=23, description="Local hour of the afternoon digest")
    activity_window_hours: int = Field(default=24, ge=1, le=168)
    activity_limit: int = Field(default=50, ge=1, le=500)
    transcript_limit: int = Field(default=20, ge=1, le=200)
    digest_task_limit: int = Field(default=10, ge=1, le=100)
    digest_highlight_limit: int = Field(default=5, ge=1, le=20)
    notify_digest_ready: bool = Field(
        default=True, description="Send a push notice when a digest is first generated",
    )

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @model_validator(mode="after")
    def _validate_slots(self) -> PipelineSettings:
        if self.morning_hour >= self.afternoon_hour:
            msg = "morning_hour must be earlier than afternoon_hour"
            raise ValueError(msg)
        return self

    @property
    def trigger_key_configured(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())
