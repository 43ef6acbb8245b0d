"""Datetime helpers shared by the profile, activity and sync APIs.

All timestamps travel as ISO-8601 strings in UTC with a trailing `Z`, which
is what the mobile clients parse.
"""

from datetime import datetime, time
from datetime import timezone as dt_timezone

from django.utils import timezone as django_tz
from django.utils.dateparse import parse_date, parse_datetime


def isoformat_utc(dt):
    """Format an aware datetime as ISO-8601 UTC (e.g. 2025-02-17T10:00:00.123Z).

    Args:
        dt: timezone-aware datetime, or None

    Returns:
        str | None: ISO string with millisecond precision
    """
    if dt is None:
        return None
    utc = dt.astimezone(dt_timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso():
    """Current server time as an ISO-8601 UTC string."""
    return isoformat_utc(django_tz.now())


def parse_iso_timestamp(value):
    """Parse an ISO-8601 datetime or date string into an aware UTC datetime.

    Naive datetimes are treated as UTC; a bare date means midnight UTC.

    Returns:
        datetime | None: None when the value cannot be parsed
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            if day is None:
                return None
            parsed = datetime.combine(day, time.min)
    except ValueError:
        # Well formed but out of range (e.g. month 13)
        return None
    if django_tz.is_naive(parsed):
        parsed = django_tz.make_aware(parsed, dt_timezone.utc)
    return parsed.astimezone(dt_timezone.utc)
