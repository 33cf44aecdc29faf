"""Global exception handlers rendering RFC 7807 problem responses."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskdesk_service.core.database import NotFoundError
from taskdesk_service.core.exceptions import AppException
from taskdesk_service.core.schemas import FieldError, ProblemDetails

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"

_REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header"})


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _problem_response(
    request: Request,
    problem: ProblemDetails,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    content = problem.to_response_content()
    if extra:
        content.update({key: value for key, value in extra.items() if key not in content})
    request_id = _get_request_id(request)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=problem.status, content=content, media_type=PROBLEM_JSON)


def _field_path(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in _REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException into a problem response."""
    logger.warning(
        "Application exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )
    extra = dict(exc.extra)
    errors = extra.pop("errors", None)
    problem = ProblemDetails(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or request.url.path,
        errors=[FieldError(**error) for error in errors] if errors else None,
    )
    return _problem_response(request, problem, extra)


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Repository lookups that escaped a service become 404s."""
    problem = ProblemDetails(
        type="not-found",
        title="Not Found",
        status=status.HTTP_404_NOT_FOUND,
        detail=exc.message,
        instance=request.url.path,
    )
    return _problem_response(request, problem)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Request validation failures with field-level errors."""
    errors = [
        FieldError(field=_field_path(tuple(error["loc"])), message=error["msg"])
        for error in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
            "errors": [error.model_dump() for error in errors],
        },
    )
    problem = ProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=errors[0].message if len(errors) == 1 else f"Request validation failed for {len(errors)} field(s)",
        instance=request.url.path,
        errors=errors,
    )
    return _problem_response(request, problem)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, expose nothing internal."""
    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=exc,
    )
    problem = ProblemDetails(
        type="internal-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        instance=request.url.path,
    )
    return _problem_response(request, problem)


def configure_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
