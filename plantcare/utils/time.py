"""Time utilities for watering dates and the notification send-hour gate."""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
import pytz
from plantcare.core.config import settings

DATE_FORMAT = "%d.%m.%Y"


def get_timezone(timezone_str: Optional[str] = None):
    """Return the pytz timezone used for local-time computations."""
    return pytz.timezone(timezone_str or settings.timezone)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def get_local_time(now: Optional[datetime] = None, timezone_str: Optional[str] = None) -> datetime:
    """
    Get the given (or current) instant in the configured timezone.

    Args:
        now: Aware instant; naive values are treated as UTC
        timezone_str: IANA timezone (defaults to settings.timezone)

    Returns:
        Aware datetime in the configured timezone
    """
    tz = get_timezone(timezone_str)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)


def local_date_to_datetime(day: date, timezone_str: Optional[str] = None) -> datetime:
    """Local midnight of the given calendar day."""
    tz = get_timezone(timezone_str)
    return tz.localize(datetime.combine(day, time.min))


def start_of_today(now: Optional[datetime] = None, timezone_str: Optional[str] = None) -> datetime:
    """Local midnight of the current day."""
    return local_date_to_datetime(get_local_time(now, timezone_str).date(), timezone_str)


def compute_next_watering_date(
    last_watering_date: datetime,
    watering_interval: int,
    today: Optional[datetime] = None,
    timezone_str: Optional[str] = None
) -> datetime:
    """
    Compute the next watering instant for a scenario.

    The result is local midnight watering_interval calendar days after the
    local day of last_watering_date, clamped so that it is never before the
    start of today. Days are counted on the local calendar, so a DST change
    inside the interval does not shift the date.

    Args:
        last_watering_date: Last watering instant (aware)
        watering_interval: Interval in whole days (>= 1)
        today: Start of today; computed from the configured timezone if omitted
        timezone_str: IANA timezone (defaults to settings.timezone)

    Returns:
        Next watering instant
    """
    if today is None:
        today = start_of_today(timezone_str=timezone_str)
    last_day = get_local_time(last_watering_date, timezone_str).date()
    candidate = local_date_to_datetime(last_day + timedelta(days=watering_interval), timezone_str)
    if candidate < today:
        return today
    return candidate


def can_notify_by_time(
    now: Optional[datetime] = None,
    send_hour: Optional[int] = None,
    timezone_str: Optional[str] = None
) -> bool:
    """Check whether the local hour has reached the configured send hour."""
    if send_hour is None:
        send_hour = settings.send_hour
    return get_local_time(now, timezone_str).hour >= send_hour


def format_date(value: datetime, timezone_str: Optional[str] = None) -> str:
    """Format an instant as dd.mm.yyyy in the configured timezone."""
    return get_local_time(value, timezone_str).strftime(DATE_FORMAT)
