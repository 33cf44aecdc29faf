"""Cached settings accessors.

Each section is read from the environment (and ``.env``) on first use and then
reused for the life of the process. Tests that change the environment call
``clear_all_caches()`` afterwards.
"""

from __future__ import annotations

from functools import lru_cache

from .ai import AISettings
from .app import AppSettings
from .logs import LoggingSettings
from .pipeline import PipelineSettings
from .postgres import PostgresSettings
from .push import PushSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """``APP_*``: service identity, host/port and the platform time zone."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> PostgresSettings:
    return PostgresSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_ai_settings() -> AISettings:
    """``AI_*``: which provider summarizes digests and its credentials."""
    return AISettings()


@lru_cache(maxsize=1)
def get_push_settings() -> PushSettings:
    """``PUSH_*``: VAPID keys and subject for Web Push."""
    return PushSettings()


@lru_cache(maxsize=1)
def get_pipeline_settings() -> PipelineSettings:
    """``PIPELINE_*``: concurrency, retry cap and the trigger API key."""
    return PipelineSettings()


_LOADERS = (
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_ai_settings,
    get_push_settings,
    get_pipeline_settings,
)


def clear_all_caches() -> None:
    for loader in _LOADERS:
        loader.cache_clear()
