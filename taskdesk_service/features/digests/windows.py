"""Calendar-day windows and digest slots in the platform time zone.

"Today" is the local calendar day, so boundaries are computed in the
configured zone and converted to UTC instants for querying. Day lengths
follow the zone's DST transitions (23 or 25 hours on switch days).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING

from taskdesk_service.features.digests.models import DigestType

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

NOON = time(12, 0)


@dataclass(frozen=True, slots=True)
class DayWindow:
    """Boundaries of the local day containing ``as_of``, as UTC instants."""

    local_date: date
    today_start: datetime
    today_end: datetime
    yesterday_start: datetime


def local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(UTC)


def day_window(as_of: datetime, tz: ZoneInfo) -> DayWindow:
    local_date = as_of.astimezone(tz).date()
    return DayWindow(
        local_date=local_date,
        today_start=local_midnight(local_date, tz),
        today_end=local_midnight(local_date + timedelta(days=1), tz),
        yesterday_start=local_midnight(local_date - timedelta(days=1), tz),
    )


def next_scheduled_slot(
    now: datetime,
    tz: ZoneInfo,
    *,
    morning_hour: int = 5,
    afternoon_hour: int = 16,
) -> datetime:
    """Next digest slot strictly after ``now``, in local time.

    For display only; the external scheduler decides when digests run.
    """
    local_now = now.astimezone(tz)
    today = local_now.date()
    for hour in (morning_hour, afternoon_hour):
        slot = datetime.combine(today, time(hour), tzinfo=tz)
        if local_now < slot:
            return slot
    return datetime.combine(today + timedelta(days=1), time(morning_hour), tzinfo=tz)


def digest_type_for(now: datetime, tz: ZoneInfo) -> DigestType:
    """Morning before local noon, afternoon from noon on."""
    return DigestType.MORNING if now.astimezone(tz).time() < NOON else DigestType.AFTERNOON
