"""
Time helpers for break scheduling.

All schedule times are 'HH:MM' or 'HH:MM:SS' strings on a 15-minute grid.
Seconds are accepted but ignored when comparing.
"""
import re

INTERVAL_MINUTES = 15
MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')


class TimeParseError(ValueError):
    """Raised when a time string is not a valid HH:MM[:SS] value."""
    pass


def time_to_minutes(value: str) -> int:
    """
    Convert a time string to minutes since midnight.

    Args:
        value: Time in 'HH:MM' or 'HH:MM:SS' format

    Returns:
        Minutes since midnight (seconds are dropped)

    Raises:
        TimeParseError: If value is not a string or is malformed
    """
    if not isinstance(value, str):
        raise TimeParseError(f"Expected a time string, got {value!r}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise TimeParseError(f"Invalid time format: {value!r} (expected HH:MM or HH:MM:SS)")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)

    if hours > 23 or minutes > 59 or seconds > 59:
        raise TimeParseError(f"Time out of range: {value!r}")

    return hours * 60 + minutes


def calculate_break_gap(first: str, second: str) -> int:
    """Signed gap in minutes from first to second (negative if second is earlier)."""
    return time_to_minutes(second) - time_to_minutes(first)


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to 'HH:MM'."""
    hours = minutes // 60
    mins = minutes % 60
    return f"{hours:02d}:{mins:02d}"


def normalize_time(value: str) -> str:
    """Validate a time string and return it as 'HH:MM'."""
    return minutes_to_time(time_to_minutes(value))
