"""Modular Pydantic Settings v2 configuration.

Each domain (app, db, logging, ai, push, pipeline) has its own frozen settings
class and environment prefix. Import settings via the cached loaders:

    from taskdesk_service.core.settings import get_app_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .ai import AISettings
from .app import AppSettings
from .loader import (
    clear_all_caches,
    get_ai_settings,
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_pipeline_settings,
    get_push_settings,
)
from .logs import LoggingSettings
from .pipeline import PipelineSettings
from .postgres import PostgresSettings
from .push import PushSettings

__all__ = [
    "AISettings",
    "AppSettings",
    "LoggingSettings",
    "PipelineSettings",
    "PostgresSettings",
    "PushSettings",
    "clear_all_caches",
    "get_ai_settings",
    "get_app_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_pipeline_settings",
    "get_push_settings",
]
