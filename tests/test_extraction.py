import pytest

from break_scheduler.extraction import break_slot_minutes, complete_full_break, extract_break_times
from break_scheduler.models import BreakInterval
from break_scheduler.time_utils import TimeParseError


def test_extract_first_occurrence_wins_and_truncates_seconds():
    intervals = [
        BreakInterval("09:00:00", "IN"),
        BreakInterval("12:00:00", "B"),
        BreakInterval("12:15:00", "B"),
        BreakInterval("10:00:00", "HB1"),
        BreakInterval("14:00:00", "HB2"),
        BreakInterval("15:00:00", "HB1"),
    ]

    breaks = extract_break_times(intervals)

    assert breaks.hb1 == "10:00"
    assert breaks.b == "12:00"
    assert breaks.hb2 == "14:00"
    assert breaks["B"] == "12:00"
    assert breaks.to_dict() == {"HB1": "10:00", "B": "12:00", "HB2": "14:00"}


def test_extract_missing_breaks_are_none():
    breaks = extract_break_times([BreakInterval("09:00", "IN")])
    assert breaks.hb1 is None and breaks.b is None and breaks.hb2 is None


def test_extract_rejects_malformed_break_time():
    with pytest.raises(TimeParseError):
        extract_break_times([BreakInterval("noon", "HB1")])


def test_indexing_unknown_kind_raises_key_error():
    breaks = extract_break_times([])
    with pytest.raises(KeyError):
        breaks["IN"]


def test_break_slot_minutes_sorted():
    intervals = [BreakInterval("12:15", "B"), BreakInterval("12:00", "B"), BreakInterval("10:00", "HB1")]
    assert break_slot_minutes(intervals, "B") == [720, 735]


def test_complete_full_break_adds_second_slot():
    intervals = [BreakInterval("10:00", "HB1"), BreakInterval("12:00:00", "B")]
    assert complete_full_break(intervals)[-1] == BreakInterval("12:15", "B")


def test_complete_full_break_keeps_explicit_slots():
    both = [BreakInterval("12:00", "B"), BreakInterval("12:15", "B")]
    taken = [BreakInterval("12:00", "B"), BreakInterval("12:15", "IN")]
    late = [BreakInterval("23:45", "B")]

    assert complete_full_break(both) == both
    assert complete_full_break(taken) == taken
    assert complete_full_break(late) == late
