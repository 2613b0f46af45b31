"""Timezone helpers.

Timestamps are stored as UTC. SQLite drops ``tzinfo`` on the way back, so
anything read from the database may be naive and is treated as UTC.
"""

import datetime as dt
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shiptrack.core.config import settings


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@lru_cache(maxsize=None)
def app_timezone(name: str | None = None) -> dt.tzinfo:
    try:
        return ZoneInfo(name or settings.TZ)
    except ZoneInfoNotFoundError:
        return dt.timezone.utc


def as_utc(value: dt.datetime | None) -> dt.datetime | None:
    """Return ``value`` as an aware UTC datetime (naive input is assumed UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def localize(value: dt.datetime) -> dt.datetime:
    """Attach the application timezone to a naive wall-clock value and convert to UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=app_timezone())
    return value.astimezone(dt.timezone.utc)


def today_local() -> dt.date:
    return dt.datetime.now(app_timezone()).date()


def day_bounds(start: dt.date, end: dt.date) -> tuple[dt.datetime, dt.datetime]:
    """[start 00:00, end 23:59:59.999999] in the application timezone, as UTC."""
    tz = app_timezone()
    lo = dt.datetime.combine(start, dt.time.min, tzinfo=tz)
    hi = dt.datetime.combine(end, dt.time.max, tzinfo=tz)
    return lo.astimezone(dt.timezone.utc), hi.astimezone(dt.timezone.utc)
