"""Context propagation for structured logging.

Fields set here (request id, acting user, pipeline operation, ...) are copied
onto every log record emitted from the same async task by
``ContextInjectingFilter``. Context lives in a ContextVar, so concurrent
pipeline units each see only their own fields.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        ```python
        set_log_context(request_id="abc-123", user="alice")
        logger.info("Reminder created")  # carries request_id and user
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop every field from the current logging context."""
    _log_context.set({})


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Temporarily extend the logging context.

    The previous context is restored on exit, which keeps per-unit fields
    such as ``reminder_id`` from leaking into sibling work.

    Example:
        ```python
        with log_context(reminder_id=str(reminder.id)):
            await dispatcher.dispatch(...)
        ```
    """
    token = _log_context.set({**_log_context.get(), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextInjectingFilter(logging.Filter):
    """Copy the current logging context onto each LogRecord.

    Existing record attributes are never overwritten, so explicit
    ``extra={...}`` values win over context values.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
