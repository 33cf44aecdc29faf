"""Errors raised by repositories."""

from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """A data access call could not be satisfied."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(RepositoryError):
    """A row that must exist is missing, e.g. the task behind a due reminder.

    Services translate this into ``NotFoundException`` where the caller can
    act on it; anything that escapes is rendered as a 404 problem.
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]) -> None:
        self.model_name = model_name
        self.identifier = identifier
        keys = ", ".join(f"{key}={value}" for key, value in identifier.items())
        super().__init__(f"{model_name} not found ({keys})", details={"model": model_name, **identifier})
