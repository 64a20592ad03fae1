"""
Break extraction from raw interval lists.
"""
from typing import Iterable, List

from .models import BREAK_KINDS, BreakInterval, ExtractedBreaks
from .time_utils import INTERVAL_MINUTES, MINUTES_PER_DAY, minutes_to_time, normalize_time, time_to_minutes


def extract_break_times(intervals: Iterable[BreakInterval]) -> ExtractedBreaks:
    """
    Find the start of each break kind (HB1, B, HB2).

    The first interval of each kind, in input order, wins. Later intervals
    of the same kind (e.g. the second slot of B) are ignored here.

    Args:
        intervals: Intervals of one agent on one date, in any order

    Returns:
        ExtractedBreaks with 'HH:MM' start times or None

    Raises:
        TimeParseError: If a break interval has a malformed start time
    """
    breaks = ExtractedBreaks()

    for interval in intervals:
        if interval.break_type in BREAK_KINDS and breaks[interval.break_type] is None:
            breaks[interval.break_type] = normalize_time(interval.interval_start)

    return breaks


def break_slot_minutes(intervals: Iterable[BreakInterval], break_type: str) -> List[int]:
    """Sorted start minutes of every slot of the given break type."""
    return sorted(
        time_to_minutes(interval.interval_start)
        for interval in intervals
        if interval.break_type == break_type
    )


def complete_full_break(intervals: Iterable[BreakInterval]) -> List[BreakInterval]:
    """
    Add the second slot of B when only its first slot is given.

    A slot the caller already sent for that time (of any type) is kept
    as is, and B starting in the last interval of the day is left alone.
    """
    intervals = list(intervals)
    b_slots = [i for i in intervals if i.break_type == 'B']
    if len(b_slots) != 1:
        return intervals

    second_minutes = time_to_minutes(b_slots[0].interval_start) + INTERVAL_MINUTES
    if second_minutes >= MINUTES_PER_DAY:
        return intervals

    second_start = minutes_to_time(second_minutes)
    if any(normalize_time(i.interval_start) == second_start for i in intervals):
        return intervals

    return intervals + [BreakInterval(second_start, 'B')]
