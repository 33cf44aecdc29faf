"""Helpers for the click commands: async bridging and terminal output."""

from taskdesk_service.cli.utils.async_runner import coro
from taskdesk_service.cli.utils.formatters import error, field, header, info, success, warning

__all__ = ["coro", "error", "field", "header", "info", "success", "warning"]
