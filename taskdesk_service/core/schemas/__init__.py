"""Shared API schemas."""

from __future__ import annotations

from .problem_details import FieldError, ProblemDetails

__all__ = ["FieldError", "ProblemDetails"]
