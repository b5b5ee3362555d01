# File: utils/dt_utils.py
"""Date utilities for Numu.

Pure Python calendar helpers. Everything the engines compare is a
`datetime.date` in the user's local calendar; these functions are the single
place where datetimes, ISO strings and "today" are turned into such dates.

Functions:
    - set_default_timezone / get_default_timezone: Local calendar configuration
    - dt_today_local: Today's date in the local timezone
    - dt_now_utc: Current UTC datetime
    - as_local: Convert a datetime into the local timezone
    - dt_parse_date: Parse date strings
    - to_local_date: Normalize date/datetime/ISO input to a local date
    - start_of_week / end_of_week: Monday-start week boundaries
    - days_between: Signed day difference
    - iter_days: Inclusive date range iteration
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Monday, as returned by date.weekday()
WEEK_START_WEEKDAY = 0


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this once during application setup with the user's timezone.
    Timezone changes in the middle of a history are not supported.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone.

    Returns:
        The configured default timezone (ZoneInfo object)
    """
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Today's date in the specified timezone.

    Example:
        datetime.date(2025, 4, 7)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object. Naive values are assumed to be local already.
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=tz_info)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Date Parsing / Normalization
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts an ISO date ("2025-04-07") or an ISO datetime
    ("2025-04-07T08:30:00+00:00"); datetimes are converted to the local
    calendar before the date is taken.

    Args:
        date_str: Date string to parse, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        return as_local(datetime.fromisoformat(date_str)).date()
    except ValueError:
        _LOGGER.warning("Unparseable date string: %s", date_str)
        return None


def to_local_date(value: date | datetime | str | None) -> date | None:
    """Normalize any supported date input to a local calendar date.

    Args:
        value: date, datetime (aware or naive), ISO string, or None

    Returns:
        The local calendar date, or None when the input is missing/invalid.

    Examples:
        to_local_date(date(2026, 1, 5)) → date(2026, 1, 5)
        to_local_date("2026-01-05") → date(2026, 1, 5)
        to_local_date(datetime(2026, 1, 5, 23, 30, tzinfo=UTC)) → local date
    """
    if value is None:
        return None
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return as_local(value).date()
    if isinstance(value, date):
        return value
    return dt_parse_date(value)


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def start_of_week(day: date) -> date:
    """Return the Monday on or before `day`."""
    return day - timedelta(days=(day.weekday() - WEEK_START_WEEKDAY) % 7)


def end_of_week(day: date) -> date:
    """Return the Sunday on or after `day`."""
    return start_of_week(day) + timedelta(days=6)


def days_between(start: date, end: date) -> int:
    """Return the signed number of days from `start` to `end`."""
    return (end - start).days


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from `start` through `end` inclusive.

    Yields nothing when `start` is after `end`.
    """
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
