"""Calculator modules for the timekeeper engine."""

from timekeeper.calculators.time_utils import (
    calculate_duration_minutes,
    calculate_hours,
    convert_time_to_minutes,
    format_time,
    get_week_end,
    get_week_start,
    is_weekend,
    parse_time,
    utcnow,
)

__all__ = [
    "calculate_duration_minutes",
    "calculate_hours",
    "convert_time_to_minutes",
    "format_time",
    "get_week_end",
    "get_week_start",
    "is_weekend",
    "parse_time",
    "utcnow",
]
