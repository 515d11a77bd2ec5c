"""
Operating-timezone helpers. Storage holds absolute (UTC) instants; the business
day and the policy hours are evaluated on the site's local clock.
"""
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.config import settings


@lru_cache(maxsize=8)
def get_zone(name: Optional[str] = None) -> ZoneInfo:
    """ZoneInfo for the configured operating timezone (or an explicit name)."""
    return ZoneInfo(name or settings.attendance_timezone)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize to an aware UTC datetime.

    Naive values are assumed to already be UTC (what SQLite hands back for
    timezone-aware columns).
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_local(dt: datetime, zone: ZoneInfo) -> datetime:
    return ensure_utc(dt).astimezone(zone)


def local_hour(dt: datetime, zone: ZoneInfo) -> int:
    return to_local(dt, zone).hour


def local_date_bounds(day: date, zone: ZoneInfo) -> Tuple[datetime, datetime]:
    """
    Half-open UTC interval [day_start, day_end) covering a local calendar date.

    Built from local midnights, so days that span a DST change are 23 or 25 hours long.
    """
    start_local = datetime.combine(day, time.min, tzinfo=zone)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def local_day_bounds(dt: datetime, zone: ZoneInfo) -> Tuple[datetime, datetime]:
    """UTC bounds of the local calendar day containing the instant dt."""
    return local_date_bounds(to_local(dt, zone).date(), zone)
