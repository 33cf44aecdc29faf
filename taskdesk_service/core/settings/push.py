"""Web Push (VAPID) settings."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PushSettings(BaseSettings):
    """Web Push transport credentials.

    Environment variables use PUSH_ prefix.
    Example: PUSH_VAPID_PRIVATE_KEY=..., PUSH_VAPID_SUBJECT=mailto:ops@example.com
    """

    vapid_public_key: str | None = Field(
        default=None, description="Public VAPID key handed to browsers when subscribing",
    )
    vapid_private_key: SecretStr | None = Field(
        default=None, description="Private VAPID key used to sign push requests",
    )
    vapid_subject: str | None = Field(
        default=None,
        description="VAPID 'sub' claim (mailto: or https: contact URI)",
    )
    ttl_seconds: int = Field(
        default=86400, ge=0, le=2419200, description="How long the push service keeps undelivered messages",
    )
    timeout: float = Field(default=10.0, gt=0, le=120.0, description="Push request timeout in seconds")

    model_config = SettingsConfigDict(
        env_prefix="PUSH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_configured(self) -> bool:
        return bool(
            self.vapid_public_key
            and self.vapid_private_key
            and self.vapid_private_key.get_secret_value()
            and self.vapid_subject,
        )
