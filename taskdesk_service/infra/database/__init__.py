"""Database infrastructure: engine, session factory and lifecycle helpers."""

from __future__ import annotations

from .session import (
    AsyncSessionLocal,
    close_database,
    engine,
    get_async_session,
    get_session_factory,
    init_database,
)

__all__ = [
    "AsyncSessionLocal",
    "close_database",
    "engine",
    "get_async_session",
    "get_session_factory",
    "init_database",
]
