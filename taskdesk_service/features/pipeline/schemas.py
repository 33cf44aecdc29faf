"""Response schemas for the trigger and health endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from taskdesk_service.features.digests.models import DigestType


class ReminderProcessResponse(BaseModel):
    """Aggregate result of one reminder scan."""

    processed: int = Field(description="Due reminders found by the scan")
    sent: int
    failed: int = Field(description="Left pending for the next scan")
    cancelled: int = Field(description="Cancelled instead of delivered")
    timestamp: datetime
    duration_ms: int


class ReminderHealthResponse(BaseModel):
    pending_reminders: int
    reminders_due_soon: int
    timestamp: datetime


class UserDigestResult(BaseModel):
    user_name: str
    status: Literal["generated", "reused", "failed"]
    digest_id: UUID | None = None
    notified: bool = False
    error: str | None = None


class DigestGenerateResponse(BaseModel):
    """Aggregate result of one digest batch."""

    digest_type: DigestType
    users: int
    generated: int
    reused: int
    notified: int
    failed: int
    timestamp: datetime
    duration_ms: int
    results: list[UserDigestResult] = Field(default_factory=list)


class DigestHealthResponse(BaseModel):
    morning_count: int = Field(description="Morning digests generated today (local day)")
    afternoon_count: int = Field(description="Afternoon digests generated today (local day)")
    ai_configured: bool
    push_configured: bool
    timestamp: datetime
