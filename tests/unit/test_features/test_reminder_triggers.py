"""Unit tests for trigger presets and reminder payload validation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from taskdesk_service.features.reminders.models import ReminderChannel
from taskdesk_service.features.reminders.schemas import ReminderCreate, ReminderUpdate
from taskdesk_service.features.reminders.triggers import ReminderPreset, compute_trigger_time

LA = ZoneInfo("America/Los_Angeles")
DUE = datetime(2026, 6, 2, 3, 0, tzinfo=UTC)  # June 1, 20:00 PDT


@pytest.mark.unit
class TestComputeTriggerTime:
    @pytest.mark.parametrize(
        ("preset", "offset"),
        [
            (ReminderPreset.AT_TIME, timedelta(0)),
            (ReminderPreset.FIVE_MIN_BEFORE, timedelta(minutes=5)),
            (ReminderPreset.FIFTEEN_MIN_BEFORE, timedelta(minutes=15)),
            (ReminderPreset.THIRTY_MIN_BEFORE, timedelta(minutes=30)),
            (ReminderPreset.ONE_HOUR_BEFORE, timedelta(hours=1)),
            (ReminderPreset.ONE_DAY_BEFORE, timedelta(days=1)),
        ],
    )
    def test_relative_presets(self, preset, offset):
        assert compute_trigger_time(preset, DUE, tz=LA) == DUE - offset

    def test_morning_of_uses_local_due_day(self):
        """The task is due on the evening of June 1 locally, so 09:00 June 1."""
        trigger = compute_trigger_time(ReminderPreset.MORNING_OF, DUE, tz=LA)

        assert trigger == datetime(2026, 6, 1, 9, 0, tzinfo=LA)
        assert trigger == datetime(2026, 6, 1, 16, 0, tzinfo=UTC)

    def test_custom_returns_given_time(self):
        custom = datetime(2026, 7, 1, 12, 0, tzinfo=UTC)

        assert compute_trigger_time(ReminderPreset.CUSTOM, None, tz=LA, custom=custom) == custom

    def test_custom_without_time_raises(self):
        with pytest.raises(ValueError, match="custom preset"):
            compute_trigger_time(ReminderPreset.CUSTOM, DUE, tz=LA)

    def test_relative_preset_without_due_date_raises(self):
        with pytest.raises(ValueError, match="needs a task due date"):
            compute_trigger_time(ReminderPreset.ONE_HOUR_BEFORE, None, tz=LA)


@pytest.mark.unit
class TestReminderCreateSchema:
    def test_defaults(self):
        payload = ReminderCreate(task_id=uuid4(), trigger_time=DUE)

        assert payload.channel == ReminderChannel.BOTH
        assert payload.user_id is None

    def test_requires_time_or_relative_preset(self):
        with pytest.raises(ValidationError, match="trigger_time is required"):
            ReminderCreate(task_id=uuid4())

    def test_custom_preset_still_needs_time(self):
        with pytest.raises(ValidationError):
            ReminderCreate(task_id=uuid4(), preset=ReminderPreset.CUSTOM)

    def test_relative_preset_alone_is_enough(self):
        payload = ReminderCreate(task_id=uuid4(), preset=ReminderPreset.ONE_HOUR_BEFORE)

        assert payload.trigger_time is None

    def test_naive_trigger_time_rejected(self):
        with pytest.raises(ValidationError):
            ReminderCreate(task_id=uuid4(), trigger_time=datetime(2026, 6, 1, 9, 0))

    def test_message_length_limit(self):
        with pytest.raises(ValidationError):
            ReminderCreate(task_id=uuid4(), trigger_time=DUE, message="x" * 501)


@pytest.mark.unit
class TestReminderUpdateSchema:
    def test_only_pending_or_cancelled_status(self):
        assert ReminderUpdate(status="cancelled").status == "cancelled"
        with pytest.raises(ValidationError):
            ReminderUpdate(status="sent")

    def test_message_presence_is_tracked(self):
        assert "message" in ReminderUpdate(message=None).model_fields_set
        assert "message" not in ReminderUpdate().model_fields_set
