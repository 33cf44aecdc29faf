"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldError(BaseModel):
    """One rejected input field."""

    field: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="Human-readable reason the value was rejected")


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem",
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="URI reference identifying the specific occurrence",
    )
    errors: list[FieldError] | None = Field(
        default=None, description="Field-level validation errors",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "validation-error",
                "title": "Validation Error",
                "status": 422,
                "detail": "Reminder time must be in the future",
                "instance": "/api/v1/reminders",
                "errors": [
                    {"field": "trigger_time", "message": "Reminder time must be in the future"},
                ],
            },
        },
        str_strip_whitespace=True,
        extra="allow",
    )

    def to_response_content(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
