"""Time and calendar utilities for entries and timesheet weeks.

This module provides the low-level helpers the rest of the engine relies on:
- Converting times of day to minutes and hours
- Parsing and formatting HH:MM strings
- Monday-aligned week arithmetic
- Naive UTC timestamps for persisted audit fields

Entries never span midnight, so durations are always end minus start.
"""

import datetime as dt
from typing import Optional, Union

WEEK_LENGTH_DAYS = 7


def convert_time_to_minutes(time: dt.time) -> int:
    """Convert a dt.time object to minutes since midnight.

    Args:
        time: The time to convert

    Returns:
        Number of minutes since midnight (0-1439)

    Example:
        >>> convert_time_to_minutes(dt.time(9, 30))
        570
    """
    return time.hour * 60 + time.minute


def calculate_duration_minutes(start_time: dt.time, end_time: dt.time) -> int:
    """Calculate the same-day duration in minutes between two times.

    The result is negative or zero when ``end_time`` is not after
    ``start_time``; callers validate ordering separately.

    Example:
        >>> calculate_duration_minutes(dt.time(9, 0), dt.time(17, 30))
        510
    """
    return convert_time_to_minutes(end_time) - convert_time_to_minutes(start_time)


def calculate_hours(start_time: dt.time, end_time: dt.time) -> float:
    """Hours between two times, rounded to two decimals.

    Example:
        >>> calculate_hours(dt.time(9, 0), dt.time(13, 30))
        4.5
    """
    return round(calculate_duration_minutes(start_time, end_time) / 60, 2)


def parse_time(value: Union[str, dt.time, None]) -> Optional[dt.time]:
    """Parse an HH:MM or HH:MM:SS string.

    Args:
        value: Time string, an existing time, or None/blank

    Returns:
        Parsed time, or None when value is empty

    Raises:
        ValueError: If the string is not a valid time of day
    """
    if value is None or isinstance(value, dt.time):
        return value
    text = str(value).strip()
    if not text:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return dt.datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time format: {value!r}")


def format_time(value: dt.time) -> str:
    """Format a time as HH:MM."""
    return value.strftime("%H:%M")


def get_week_start(day: dt.date) -> dt.date:
    """Return the Monday of the week containing ``day``.

    Example:
        >>> get_week_start(dt.date(2024, 1, 17))
        datetime.date(2024, 1, 15)
    """
    return day - dt.timedelta(days=day.weekday())


def get_week_end(week_starting: dt.date) -> dt.date:
    """Return the Sunday closing the week that starts on ``week_starting``."""
    return week_starting + dt.timedelta(days=WEEK_LENGTH_DAYS - 1)


def is_weekend(day: dt.date) -> bool:
    """True for Saturday and Sunday."""
    return day.weekday() >= 5


def utcnow() -> dt.datetime:
    """Current UTC time without tzinfo.

    Persisted timestamp columns are timezone-less ``DateTime`` and always
    hold UTC.
    """
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
