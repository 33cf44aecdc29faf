"""Model-specific repositories shared across features."""

from __future__ import annotations

from taskdesk_service.core.repositories.user import UserRepository, get_user_repository

__all__ = ["UserRepository", "get_user_repository"]
