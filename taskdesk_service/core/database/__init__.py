"""Database foundations: declarative base, column types and generic repository."""

from __future__ import annotations

from .base import Base, TimestampMixin, UUIDPKMixin, UUIDTimestampedBase, utcnow
from .exceptions import NotFoundError, RepositoryError
from .repository import BaseRepository
from .types import UTCDateTime

__all__ = [
    "Base",
    "BaseRepository",
    "NotFoundError",
    "RepositoryError",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDPKMixin",
    "UUIDTimestampedBase",
    "utcnow",
]
