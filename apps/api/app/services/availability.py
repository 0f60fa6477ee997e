"""Registration window and status rules for prayer slots.

Everything here is a pure function of the prayer's settings, its remaining
capacity and the current time, so it can be used both inside ledger
transactions and for the public listing.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.models import Prayer
from app.models.prayer import PrayerStatus

SATURDAY = 5  # datetime.weekday()


@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def local_zone() -> ZoneInfo:
    return _zone(settings.prayer_timezone)


def registration_window(
    scheduled_at: datetime, tz: ZoneInfo | None = None
) -> tuple[datetime, datetime]:
    """Return ``(opens_at, closes_at)`` for a prayer starting at ``scheduled_at``.

    The window opens at local midnight of the latest Saturday on or before the
    prayer's local date and closes when the prayer starts.
    """
    if scheduled_at.tzinfo is None:
        raise ValueError("scheduled_at must be timezone-aware")

    tz = tz or local_zone()
    local_start = scheduled_at.astimezone(tz)
    days_since_saturday = (local_start.weekday() - SATURDAY) % 7
    saturday = local_start.date() - timedelta(days=days_since_saturday)
    opens_at = datetime.combine(saturday, time.min, tzinfo=tz)
    return opens_at, scheduled_at


def in_registration_window(
    scheduled_at: datetime, now: datetime, tz: ZoneInfo | None = None
) -> bool:
    opens_at, closes_at = registration_window(scheduled_at, tz)
    return opens_at <= now < closes_at


def accepts_registrations(prayer: Prayer, now: datetime, tz: ZoneInfo | None = None) -> bool:
    if prayer.active:
        return True
    if not prayer.auto_activation:
        return False
    return in_registration_window(prayer.scheduled_at, now, tz)


def derive_status(
    prayer: Prayer,
    remaining: int,
    now: datetime | None = None,
    tz: ZoneInfo | None = None,
) -> PrayerStatus:
    now = now or datetime.now(timezone.utc)
    if not accepts_registrations(prayer, now, tz):
        return PrayerStatus.CLOSED
    if remaining <= 0:
        return PrayerStatus.FULL
    return PrayerStatus.OPEN
