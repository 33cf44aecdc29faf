"""Deferred formatting for debug logging.

Repositories and services log row counts and payload sizes at DEBUG on every
query. Passing a lambda keeps that formatting off the hot path when DEBUG is
disabled, which is the normal production setting.
"""

from __future__ import annotations

import logging
from typing import Any


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Adapter whose message (and args) may be zero-argument callables.

    Example:
        lazy = get_lazy_logger(__name__)
        lazy.debug(lambda: f"db.find_due -> {len(rows)} due")
    """

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        if callable(msg):
            msg = msg()
        args = tuple(arg() if callable(arg) else arg for arg in args)
        super().log(level, msg, *args, **kwargs)


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Lazy adapter over ``logging.getLogger(name)``; ``context`` lands in every record's ``extra``."""
    return LazyLoggerAdapter(logging.getLogger(name), context)
