"""Logging configuration setup.

Uses:
- dictConfig for the root logger and third-party levels
- QueueHandler + QueueListener so request handlers never block on I/O
- ContextInjectingFilter for automatic context propagation
- JSON Lines output for machine parsing
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from queue import Queue
from typing import TYPE_CHECKING, Any

from taskdesk_service.infra.logging.context import ContextInjectingFilter
from taskdesk_service.infra.logging.formatters import ConsoleFormatter, JSONFormatter

if TYPE_CHECKING:
    from taskdesk_service.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False

logger = logging.getLogger(__name__)


def shutdown() -> None:
    """Stop the QueueListener, flushing pending records."""
    global _log_queue, _listener

    if _listener is not None:
        _listener.stop()
        _listener = None
    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from taskdesk_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    options: dict[str, Any] = {
        **log_settings.to_logging_kwargs(),
        "service_name": log_settings.service_name,
        "third_party_levels": {
            "uvicorn": log_settings.uvicorn_level,
            "uvicorn.access": log_settings.uvicorn_level,
            "sqlalchemy.engine": log_settings.sqlalchemy_level,
            "httpx": log_settings.httpx_level,
            "anthropic": log_settings.httpx_level,
        },
        "file_max_bytes": log_settings.file_max_bytes,
        "file_backup_count": log_settings.file_backup_count,
    }
    options.update(configure_kwargs)

    configure_logging(**options)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    *,
    json_logs: bool = True,
    log_file: str | None = None,
    include_context: bool = True,
    service_name: str = "taskdesk-service",
    third_party_levels: dict[str, str] | None = None,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
) -> None:
    """Configure the root logger.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Emit JSON Lines instead of console text.
        log_file: Optional rotating log file path.
        include_context: Attach ContextInjectingFilter to the queue handler.
        service_name: Static ``service`` field for JSON records.
        third_party_levels: Per-logger level overrides.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
    """
    global _log_queue, _listener

    shutdown()
    logging.captureWarnings(True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": log_level.upper(), "handlers": []},
            "loggers": {
                name: {"level": level.upper()}
                for name, level in (third_party_levels or {}).items()
            },
        },
    )

    formatter: logging.Formatter = (
        JSONFormatter(static={"service": service_name}) if json_logs else ConsoleFormatter()
    )
    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter(static={"service": service_name}))
        handlers.append(file_handler)

    _log_queue = Queue()
    _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, QueueHandler):
            root.removeHandler(existing)

    # Context must be captured before the record crosses the queue
    queue_handler = QueueHandler(_log_queue)
    if include_context:
        queue_handler.addFilter(ContextInjectingFilter())
    root.addHandler(queue_handler)

    logger.debug(
        "Logging configured",
        extra={"log_level": log_level, "json_logs": json_logs, "log_file": log_file},
    )
