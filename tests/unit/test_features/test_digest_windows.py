"""Unit tests for local-day windows and digest slots."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.digests.windows import (
    day_window,
    digest_type_for,
    next_scheduled_slot,
)

LA = ZoneInfo("America/Los_Angeles")


def local(*args: int) -> datetime:
    return datetime(*args, tzinfo=LA)


@pytest.mark.unit
class TestDayWindow:
    """Day boundaries follow the platform time zone, not UTC."""

    def test_window_uses_local_calendar_day(self):
        """03:00 UTC on June 2 is still June 1 in Los Angeles."""
        window = day_window(datetime(2026, 6, 2, 3, 0, tzinfo=UTC), LA)

        assert window.local_date.isoformat() == "2026-06-01"
        assert window.today_start == datetime(2026, 6, 1, 7, 0, tzinfo=UTC)
        assert window.today_end == datetime(2026, 6, 2, 7, 0, tzinfo=UTC)
        assert window.yesterday_start == datetime(2026, 5, 31, 7, 0, tzinfo=UTC)

    def test_spring_forward_day_is_23_hours(self):
        """The DST switch day is shorter; boundaries still sit on local midnights."""
        window = day_window(local(2026, 3, 8, 13, 0), LA)

        assert window.today_start == datetime(2026, 3, 8, 8, 0, tzinfo=UTC)
        assert window.today_end == datetime(2026, 3, 9, 7, 0, tzinfo=UTC)
        assert window.today_end - window.today_start == timedelta(hours=23)
        assert window.today_start - window.yesterday_start == timedelta(hours=24)

    def test_windows_are_utc(self):
        window = day_window(local(2026, 6, 1, 10, 0), LA)

        assert window.today_start.tzinfo is UTC
        assert window.today_end.tzinfo is UTC


@pytest.mark.unit
class TestNextScheduledSlot:
    """The next of 05:00 and 16:00 local, strictly after now."""

    def test_before_morning_slot(self):
        assert next_scheduled_slot(local(2026, 6, 1, 4, 59), LA) == local(2026, 6, 1, 5, 0)

    def test_exactly_at_morning_slot_moves_to_afternoon(self):
        assert next_scheduled_slot(local(2026, 6, 1, 5, 0), LA) == local(2026, 6, 1, 16, 0)

    def test_after_afternoon_slot_rolls_to_tomorrow(self):
        assert next_scheduled_slot(local(2026, 6, 1, 16, 0), LA) == local(2026, 6, 2, 5, 0)
        assert next_scheduled_slot(local(2026, 6, 1, 23, 30), LA) == local(2026, 6, 2, 5, 0)

    def test_accepts_utc_input(self):
        """18:00 UTC is 11:00 PDT, so the afternoon slot is next."""
        slot = next_scheduled_slot(datetime(2026, 6, 1, 18, 0, tzinfo=UTC), LA)

        assert slot == local(2026, 6, 1, 16, 0)
        assert slot.utcoffset() == timedelta(hours=-7)

    def test_custom_hours(self):
        slot = next_scheduled_slot(local(2026, 6, 1, 7, 0), LA, morning_hour=6, afternoon_hour=15)

        assert slot == local(2026, 6, 1, 15, 0)


@pytest.mark.unit
class TestDigestTypeFor:
    def test_before_local_noon_is_morning(self):
        assert digest_type_for(local(2026, 6, 1, 11, 59), LA) == DigestType.MORNING

    def test_noon_and_later_is_afternoon(self):
        assert digest_type_for(local(2026, 6, 1, 12, 0), LA) == DigestType.AFTERNOON

    def test_uses_local_time(self):
        """19:30 UTC is 12:30 PDT."""
        assert digest_type_for(datetime(2026, 6, 1, 19, 30, tzinfo=UTC), LA) == DigestType.AFTERNOON
