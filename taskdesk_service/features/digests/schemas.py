"""Digest payload and summarization response schemas.

All models serialize with camelCase keys, which is what clients and the
stored ``Digest.payload`` use.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from taskdesk_service.features.digests.exceptions import DigestParseError
from taskdesk_service.features.digests.models import DigestType


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DigestAIResponse(BaseModel):
    """Structure the summarization service must return.

    Strict: unknown keys and wrong types are rejected, nothing is defaulted.
    """

    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", strict=True)

    overdue_summary: str
    today_summary: str
    team_activity_summary: str
    team_highlights: list[str]
    focus_suggestion: str


def extract_ai_response(text: str) -> DigestAIResponse:
    """Pull the outermost ``{...}`` block out of free text and validate it.

    Raises:
        DigestParseError: No object found, invalid JSON, or schema mismatch.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise DigestParseError("No JSON object in summarization response", raw_response=text)
    try:
        return DigestAIResponse.model_validate_json(text[start : end + 1])
    except ValidationError as exc:
        raise DigestParseError(
            f"Summarization response failed validation: {exc.error_count()} error(s)",
            raw_response=text,
        ) from exc


class DigestTask(_CamelModel):
    id: UUID
    text: str
    priority: str
    due_date: datetime | None = None
    assigned_to: str | None = None
    status: str


class TaskSection(_CamelModel):
    count: int
    summary: str
    tasks: list[DigestTask] = Field(default_factory=list)


class ActivitySection(_CamelModel):
    summary: str
    highlights: list[str] = Field(default_factory=list)
    completed_yesterday: int = 0


class DigestPayload(_CamelModel):
    """The structured briefing shown to the user."""

    greeting: str
    overdue_tasks: TaskSection
    todays_tasks: TaskSection
    team_activity: ActivitySection
    focus_suggestion: str
    generated_at: datetime

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class LatestDigestResponse(_CamelModel):
    """Response of the latest-digest read."""

    has_digest: bool
    digest: DigestPayload | None = None
    digest_id: UUID | None = None
    digest_type: DigestType | None = None
    generated_at: datetime | None = None
    is_new: bool = False
    next_scheduled: datetime
    message: str | None = None
