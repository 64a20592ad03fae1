import itertools

import pytest

from break_scheduler.evaluators import (
    validate_break_ordering,
    validate_break_timing,
    validate_full_break_duration,
    validate_minimum_break_spacing,
    validate_shift_boundary,
)
from break_scheduler.models import BreakInterval, ExtractedBreaks, ShiftHours, SiblingSchedule

AM = ShiftHours("09:00", "17:00")


# ----- ordering -----

def test_ordering_accepts_proper_order():
    assert validate_break_ordering(ExtractedBreaks("10:00", "12:00", "14:00")) is None


@pytest.mark.parametrize("times", [
    p for p in itertools.permutations(["10:00", "12:00", "14:00"]) if p != ("10:00", "12:00", "14:00")
])
def test_ordering_every_other_permutation_yields_exactly_one_violation(times):
    violation = validate_break_ordering(ExtractedBreaks(*times))
    assert violation is not None
    assert violation.rule_name == "break_ordering"
    assert violation.severity == "error"


def test_ordering_reports_first_violated_pair():
    violation = validate_break_ordering(ExtractedBreaks("14:00", "12:00", "10:00"))
    assert violation.message == "HB1 must come before B"
    assert violation.affected_intervals == ["14:00", "12:00"]

    violation = validate_break_ordering(ExtractedBreaks("10:00", "14:00", "12:00"))
    assert violation.message == "B must come before HB2"


def test_ordering_checks_hb1_hb2_when_b_missing():
    violation = validate_break_ordering(ExtractedBreaks(hb1="14:00", hb2="10:00"))
    assert violation.message == "HB1 must come before HB2"


def test_ordering_equal_times_violate():
    assert validate_break_ordering(ExtractedBreaks(hb1="12:00", b="12:00")) is not None


def test_ordering_ignores_absent_breaks():
    assert validate_break_ordering(ExtractedBreaks(b="12:00")) is None
    assert validate_break_ordering(ExtractedBreaks()) is None


# ----- timing -----

@pytest.mark.parametrize("gap", [90, 120, 270])
def test_timing_gap_within_window_passes(gap):
    hb1 = "08:00"
    b = f"{(480 + gap) // 60:02d}:{(480 + gap) % 60:02d}"
    assert validate_break_timing(ExtractedBreaks(hb1=hb1, b=b)) == []


def test_timing_short_gap_is_minimum_gap_error():
    violations = validate_break_timing(ExtractedBreaks(hb1="10:00", b="11:00"))
    assert len(violations) == 1
    assert violations[0].rule_name == "minimum_gap"
    assert violations[0].severity == "error"
    assert violations[0].message == "Gap between HB1 and B is 60 minutes (minimum 90 required)"


def test_timing_long_gap_is_maximum_gap_warning():
    violations = validate_break_timing(ExtractedBreaks(b="09:00", hb2="14:00"))
    assert len(violations) == 1
    assert violations[0].rule_name == "maximum_gap"
    assert violations[0].severity == "warning"
    assert violations[0].affected_intervals == ["09:00", "14:00"]


def test_timing_checks_both_pairs():
    violations = validate_break_timing(ExtractedBreaks("10:00", "10:30", "11:00"))
    assert [v.message for v in violations] == [
        "Gap between HB1 and B is 30 minutes (minimum 90 required)",
        "Gap between B and HB2 is 30 minutes (minimum 90 required)",
    ]


def test_timing_contradictory_limits_fire_both():
    violations = validate_break_timing(ExtractedBreaks(hb1="10:00", b="12:00"), min_minutes=200, max_minutes=100)
    assert sorted(v.rule_name for v in violations) == ["maximum_gap", "minimum_gap"]


def test_timing_out_of_order_pair_counts_as_short_gap():
    violations = validate_break_timing(ExtractedBreaks(hb1="12:00", b="10:00"))
    assert violations[0].rule_name == "minimum_gap"
    assert "-120 minutes" in violations[0].message


# ----- shift boundary -----

def test_boundary_flags_breaks_outside_shift():
    intervals = [
        BreakInterval("08:45", "HB1"),
        BreakInterval("09:00", "B"),
        BreakInterval("16:45", "HB2"),
        BreakInterval("17:00:00", "HB2"),
    ]
    violations = validate_shift_boundary(intervals, AM)
    assert [v.affected_intervals for v in violations] == [["08:45"], ["17:00"]]
    assert violations[1].message == "Break at 17:00 is outside shift hours (09:00-17:00)"


def test_boundary_ignores_in_slots():
    assert validate_shift_boundary([BreakInterval("07:00", "IN")], AM) == []


def test_boundary_without_shift_hours_is_noop():
    assert validate_shift_boundary([BreakInterval("03:00", "B")], None) == []


# ----- full break duration -----

def test_full_break_two_consecutive_slots_pass():
    intervals = [BreakInterval("12:15", "B"), BreakInterval("12:00", "B")]
    assert validate_full_break_duration(intervals) is None


def test_full_break_single_slot_fails_on_count():
    violation = validate_full_break_duration([BreakInterval("12:00", "B")])
    assert violation.message == "Full break (B) must be exactly 30 minutes (2 intervals)"


def test_full_break_three_slots_fail_once():
    intervals = [BreakInterval("12:00", "B"), BreakInterval("12:15", "B"), BreakInterval("12:30", "B")]
    violation = validate_full_break_duration(intervals)
    assert violation is not None
    assert violation.rule_name == "full_break_duration"


def test_full_break_non_consecutive_reports_spacing_only():
    violation = validate_full_break_duration([BreakInterval("12:00", "B"), BreakInterval("13:00", "B")])
    assert violation.message == "Full break (B) must span 2 consecutive 15-minute intervals (30 minutes total)"


def test_full_break_absent_is_not_assessed():
    assert validate_full_break_duration([BreakInterval("10:00", "HB1")]) is None


# ----- minimum break spacing -----

def test_spacing_flags_near_sibling_once_per_kind():
    siblings = [
        SiblingSchedule("U2", {"10:30": "HB1", "12:00": "B"}),
        SiblingSchedule("U3", {"10:15": "HB1"}),
    ]
    breaks = ExtractedBreaks(hb1="10:00", b="16:00")

    violations = validate_minimum_break_spacing(breaks, "U1", siblings)

    assert len(violations) == 1
    assert violations[0].message == "HB1 break is only 2 intervals away from another agent (minimum 10 required)"
    assert violations[0].severity == "warning"
    assert violations[0].affected_intervals == ["10:00"]


def test_spacing_identical_time_is_allowed():
    siblings = [SiblingSchedule("U2", {"10:00": "HB1"})]
    assert validate_minimum_break_spacing(ExtractedBreaks(hb1="10:00"), "U1", siblings) == []


def test_spacing_skips_own_schedule_and_other_kinds():
    siblings = [
        SiblingSchedule("U1", {"10:15": "HB1"}),
        SiblingSchedule("U2", {"10:15": "HB2"}),
    ]
    assert validate_minimum_break_spacing(ExtractedBreaks(hb1="10:00"), "U1", siblings) == []


def test_spacing_respects_applies_to_and_min_intervals():
    siblings = [SiblingSchedule("U2", {"10:45": "HB1", "12:30": "B"})]
    breaks = ExtractedBreaks(hb1="10:00", b="12:00")

    assert validate_minimum_break_spacing(breaks, "U1", siblings, min_intervals=2) == []
    violations = validate_minimum_break_spacing(breaks, "U1", siblings, applies_to=["B"])
    assert [v.message.split()[0] for v in violations] == ["B"]


def test_spacing_at_threshold_is_not_flagged():
    siblings = [SiblingSchedule("U2", {"12:30": "HB1"})]
    assert validate_minimum_break_spacing(ExtractedBreaks(hb1="10:00"), "U1", siblings) == []
