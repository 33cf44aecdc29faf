"""Summarization provider settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

AIProvider = Literal["anthropic"]


@dataclass
class LLMSettings:
    """LLM provider settings container."""

    provider: str
    api_key: SecretStr | None
    model: str
    temperature: float
    max_tokens: int
    timeout: int
    max_retries: int


class AISettings(BaseSettings):
    """Settings for the text-generation service used to write digests.

    Environment variables use AI_ prefix.
    Example: AI_ANTHROPIC_API_KEY=sk-ant-..., AI_MODEL=claude-sonnet-4-20250514
    """

    provider: AIProvider = Field(default="anthropic", description="LLM provider name")
    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Anthropic API key",
    )
    model: str = Field(
        default="claude-sonnet-4-20250514", description="Model used for digest summaries",
    )
    max_tokens: int = Field(default=1024, ge=64, le=8192)
    temperature: float = Field(default=0.3, ge=0.0, le=1.0)
    timeout: int = Field(default=60, ge=1, le=600, description="Request timeout in seconds")
    max_retries: int = Field(default=2, ge=0, le=10)

    model_config = SettingsConfigDict(
        env_prefix="AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_configured(self) -> bool:
        """True when the selected provider has credentials."""
        return self.anthropic_api_key is not None and bool(
            self.anthropic_api_key.get_secret_value(),
        )

    def get_llm_settings(self) -> LLMSettings:
        return LLMSettings(
            provider=self.provider,
            api_key=self.anthropic_api_key,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            max_retries=self.max_retries,
        )
