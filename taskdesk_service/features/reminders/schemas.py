"""Pydantic schemas for the reminders feature."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from taskdesk_service.features.reminders.models import ReminderChannel, ReminderStatus
from taskdesk_service.features.reminders.triggers import ReminderPreset


class ReminderCreate(BaseModel):
    """Payload used when creating a reminder.

    Either ``trigger_time`` or ``preset`` is required. Presets other than
    ``custom`` are computed from the task's due date.
    """

    task_id: UUID
    trigger_time: AwareDatetime | None = Field(
        default=None, description="When to notify (must be in the future)",
    )
    preset: ReminderPreset | None = Field(
        default=None, description="Compute trigger_time relative to the task's due date",
    )
    channel: ReminderChannel = ReminderChannel.BOTH
    message: str | None = Field(default=None, max_length=500)
    user_id: UUID | None = Field(
        default=None,
        description="Explicit recipient; omitted means whoever is assigned when it fires",
    )

    @model_validator(mode="after")
    def _require_time_source(self) -> ReminderCreate:
        if self.trigger_time is None and self.preset in (None, ReminderPreset.CUSTOM):
            msg = "trigger_time is required unless a relative preset is given"
            raise ValueError(msg)
        return self


class ReminderUpdate(BaseModel):
    """Reschedule, cancel, reopen or edit the message of a reminder."""

    trigger_time: AwareDatetime | None = None
    status: Literal["pending", "cancelled"] | None = None
    message: str | None = Field(default=None, max_length=500)


class ReminderResponse(BaseModel):
    """Reminder as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    task_id: UUID
    user_id: UUID | None
    trigger_time: datetime
    channel: ReminderChannel
    message: str | None
    status: ReminderStatus
    created_by: str
    is_automatic: bool
    sent_at: datetime | None
    attempt_count: int
    last_error: str | None
    created_at: datetime
    updated_at: datetime
