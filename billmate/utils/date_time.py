from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC, which is how they are stored."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_now(tz: ZoneInfo, now: Optional[datetime] = None) -> datetime:
    """Current wall clock in the shop's timezone. Naive `now` is taken as local."""
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def day_bounds(tz: ZoneInfo, now: Optional[datetime] = None, days_back: int = 0) -> Tuple[datetime, datetime]:
    """Local midnight-to-midnight window, `days_back` days before today."""
    day = local_now(tz, now).date() - timedelta(days=days_back)
    return start_of_day(day, tz), start_of_day(day + timedelta(days=1), tz)
