"""Calendar helpers in the user's local timezone."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fittrack.core.config import get_settings


def get_zone(tz_name: str | None) -> ZoneInfo:
    """Resolve an IANA timezone name, falling back to the configured default."""
    default = get_settings().default_timezone
    try:
        return ZoneInfo(tz_name or default)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(default)


def local_today(tz_name: str | None = None) -> date:
    """Today's date in the given timezone."""
    return datetime.now(get_zone(tz_name)).date()


def week_start(day: date) -> date:
    """Sunday that starts the week containing ``day``."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)
