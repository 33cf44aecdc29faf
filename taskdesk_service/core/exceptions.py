"""HTTP-facing errors raised by services and dependencies.

``app.exception_handlers`` renders each of these as an RFC 7807
``application/problem+json`` body using ``status_code``, ``type``, ``title``,
``detail`` and whatever is in ``extra``.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, ClassVar


class AppException(Exception):
    """Base for errors that carry their own HTTP status.

    Attributes:
        status_code: HTTP status of the problem response.
        detail: Message shown to the client.
        type: Short problem identifier, e.g. ``reminder-terminal``.
        title: Summary of the problem type; defaults to the status phrase.
        instance: Optional URI for this occurrence.
        extra: Additional members merged into the problem body.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or _status_phrase(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


class _StatusException(AppException):
    """An ``AppException`` whose status and default type are fixed per subclass."""

    status: ClassVar[int] = 500
    default_type: ClassVar[str] = "about:blank"

    def __init__(
        self,
        detail: str,
        type: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=self.status,
            detail=detail,
            type=type or self.default_type,
            instance=instance,
            extra=extra,
        )


class BadRequestException(_StatusException):
    status = 400
    default_type = "bad-request"


class UnauthorizedException(_StatusException):
    """No usable ``X-User-Name`` or scheduler key."""

    status = 401
    default_type = "unauthorized"


class ForbiddenException(_StatusException):
    """The caller is not the task's creator, assignee or last editor."""

    status = 403
    default_type = "forbidden"


class NotFoundException(_StatusException):
    status = 404
    default_type = "not-found"


class ConflictException(_StatusException):
    """The reminder is already sent or cancelled."""

    status = 409
    default_type = "conflict"


class ServiceUnavailableException(_StatusException):
    status = 503
    default_type = "service-unavailable"


class ValidationException(AppException):
    """A request field is well-formed but not acceptable.

    ``field`` becomes the first entry of ``errors`` in the problem body.

    Example:
        raise ValidationException(
            detail="Reminder time must be in the future",
            field="trigger_time",
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "validation-error",
        field: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        field_errors = list(errors or [])
        if field is not None:
            field_errors.insert(0, {"field": field, "message": detail})
        payload = dict(extra or {})
        if field_errors:
            payload["errors"] = field_errors
        super().__init__(
            status_code=422,
            detail=detail,
            type=type,
            title="Validation Error",
            extra=payload,
        )


class PushConfigurationError(ServiceUnavailableException):
    """Web Push credentials are missing; raised when the transport is built."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            detail=f"Push transport is not configured: missing {', '.join(missing)}",
            type="push-not-configured",
            extra={"missing": missing},
        )


__all__ = [
    "AppException",
    "BadRequestException",
    "ConflictException",
    "ForbiddenException",
    "NotFoundException",
    "PushConfigurationError",
    "ServiceUnavailableException",
    "UnauthorizedException",
    "ValidationException",
]
