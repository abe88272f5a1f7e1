"""
Timezone and date utilities.

Provides helpers for resolving calendar dates and chart labels.
"""

from datetime import date, datetime

import pytz
from dateutil import parser

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def today_in(timezone_str: str = "America/Santiago") -> date:
    """
    Get the current calendar date in a timezone.

    Args:
        timezone_str: Timezone string (e.g., "America/Santiago").

    Returns:
        Today's date as seen in that timezone.
    """
    tz = pytz.timezone(timezone_str)
    return datetime.now(tz).date()


def _calendar_date(value: datetime, timezone_str: str | None) -> date:
    if value.tzinfo is None or not timezone_str:
        return value.date()
    try:
        tz = pytz.timezone(timezone_str)
    except pytz.UnknownTimeZoneError as e:
        raise ValueError(f"Unknown timezone: {timezone_str}") from e
    return value.astimezone(tz).date()


def parse_date(value: str | date | datetime, timezone_str: str | None = None) -> date:
    """
    Parse a calendar date from an ISO string, a datetime or a date.

    Full ISO timestamps (as written by browser storage) carrying an offset
    are converted to ``timezone_str`` before the date is taken, so a local
    midnight stored as the previous day in UTC maps back to the local day.
    Without a timezone the timestamp's own calendar date is used.

    Args:
        value: Value to parse.
        timezone_str: Timezone to resolve offset-aware timestamps in.

    Returns:
        Calendar date.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return _calendar_date(value, timezone_str)

    if isinstance(value, date):
        return value

    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a date: {value!r}")

    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        pass

    try:
        parsed = parser.isoparse(value.strip())
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Not a date: {value!r}") from e

    return _calendar_date(parsed, timezone_str)


def short_label(value: date) -> str:
    """Short month+day label, e.g. "Jan 15"."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.day}"
