"""
Rule evaluators for break schedules.

Each evaluator is a pure function: it reads already-extracted break times
(and, for boundary and spacing checks, data passed in by the caller) and
returns violations. Severities set here are provisional; the dispatcher
re-stamps them from the rule's blocking flag.
"""
from typing import Iterable, List, Optional, Sequence

from .extraction import break_slot_minutes
from .models import (
    BREAK_KINDS,
    BreakInterval,
    ExtractedBreaks,
    ShiftHours,
    SiblingSchedule,
    ValidationViolation,
)
from .time_utils import INTERVAL_MINUTES, calculate_break_gap, normalize_time, time_to_minutes

DEFAULT_MIN_GAP_MINUTES = 90
DEFAULT_MAX_GAP_MINUTES = 270
DEFAULT_MIN_SPACING_INTERVALS = 10

# Checked in this order; the first violated pair is reported
ORDERED_PAIRS = (('HB1', 'B'), ('B', 'HB2'), ('HB1', 'HB2'))
# Consecutive pairs whose gap is measured
ADJACENT_PAIRS = (('HB1', 'B'), ('B', 'HB2'))


def validate_break_ordering(breaks: ExtractedBreaks) -> Optional[ValidationViolation]:
    """
    Enforce HB1 -> B -> HB2 for every pair of breaks that are both present.

    Equal start times count as out of order.

    Returns:
        The first violated pair as a violation, or None
    """
    for first, second in ORDERED_PAIRS:
        first_time = breaks[first]
        second_time = breaks[second]
        if first_time is None or second_time is None:
            continue

        if time_to_minutes(first_time) >= time_to_minutes(second_time):
            return ValidationViolation(
                rule_name='break_ordering',
                message=f'{first} must come before {second}',
                severity='error',
                affected_intervals=[first_time, second_time]
            )

    return None


def validate_break_timing(
    breaks: ExtractedBreaks,
    min_minutes: int = DEFAULT_MIN_GAP_MINUTES,
    max_minutes: int = DEFAULT_MAX_GAP_MINUTES
) -> List[ValidationViolation]:
    """
    Check the gap between consecutive breaks (HB1 -> B, B -> HB2).

    A gap below min_minutes is a 'minimum_gap' error, a gap above
    max_minutes is a 'maximum_gap' warning. The two checks are independent:
    with min_minutes > max_minutes both can fire for the same pair.
    """
    violations = []

    for first, second in ADJACENT_PAIRS:
        first_time = breaks[first]
        second_time = breaks[second]
        if first_time is None or second_time is None:
            continue

        gap = calculate_break_gap(first_time, second_time)

        if gap < min_minutes:
            violations.append(ValidationViolation(
                rule_name='minimum_gap',
                message=f'Gap between {first} and {second} is {gap} minutes (minimum {min_minutes} required)',
                severity='error',
                affected_intervals=[first_time, second_time]
            ))

        if gap > max_minutes:
            violations.append(ValidationViolation(
                rule_name='maximum_gap',
                message=f'Gap between {first} and {second} is {gap} minutes (maximum {max_minutes} allowed)',
                severity='warning',
                affected_intervals=[first_time, second_time]
            ))

    return violations


def validate_shift_boundary(
    intervals: Iterable[BreakInterval],
    shift_hours: Optional[ShiftHours]
) -> List[ValidationViolation]:
    """
    Flag every break slot that starts before the shift or at/after its end.

    IN slots are ignored. Without shift hours (e.g. OFF) nothing is checked.
    """
    violations = []
    if shift_hours is None:
        return violations

    shift_start = time_to_minutes(shift_hours.start)
    shift_end = time_to_minutes(shift_hours.end)

    for interval in intervals:
        if interval.break_type == 'IN':
            continue

        start = time_to_minutes(interval.interval_start)
        if start < shift_start or start >= shift_end:
            label = normalize_time(interval.interval_start)
            violations.append(ValidationViolation(
                rule_name='shift_boundary',
                message=f'Break at {label} is outside shift hours ({shift_hours.start}-{shift_hours.end})',
                severity='error',
                affected_intervals=[label]
            ))

    return violations


def validate_full_break_duration(intervals: Iterable[BreakInterval]) -> Optional[ValidationViolation]:
    """
    The full break (B) must be two consecutive 15-minute slots.

    Non-consecutive slots are reported before a wrong slot count, and only
    one of the two is reported. A schedule without B is not assessed.
    """
    slots = break_slot_minutes(intervals, 'B')
    if not slots:
        return None

    for current, following in zip(slots, slots[1:]):
        if following - current != INTERVAL_MINUTES:
            return ValidationViolation(
                rule_name='full_break_duration',
                message='Full break (B) must span 2 consecutive 15-minute intervals (30 minutes total)',
                severity='error'
            )

    if len(slots) != 2:
        return ValidationViolation(
            rule_name='full_break_duration',
            message='Full break (B) must be exactly 30 minutes (2 intervals)',
            severity='error'
        )

    return None


def validate_minimum_break_spacing(
    breaks: ExtractedBreaks,
    user_id: str,
    sibling_schedules: Iterable[SiblingSchedule],
    min_intervals: int = DEFAULT_MIN_SPACING_INTERVALS,
    applies_to: Sequence[str] = BREAK_KINDS
) -> List[ValidationViolation]:
    """
    Keep breaks of the same kind spread out across agents.

    For each applicable break kind, the first sibling break of that kind
    that is closer than min_intervals (but not at the same time) yields one
    warning. Breaks at the identical time are allowed. The requesting
    agent's own committed schedule is skipped.

    Args:
        breaks: Candidate break starts of the requesting agent
        user_id: Requesting agent
        sibling_schedules: Other agents' committed breaks for the date
        min_intervals: Minimum spacing in 15-minute intervals
        applies_to: Break kinds to check
    """
    violations = []
    siblings = [s for s in sibling_schedules if s.user_id != user_id]

    for break_type in applies_to:
        if break_type not in BREAK_KINDS:
            continue
        candidate = breaks[break_type]
        if candidate is None:
            continue

        candidate_minutes = time_to_minutes(candidate)
        spacing = _first_close_spacing(candidate_minutes, break_type, siblings, min_intervals)
        if spacing is not None:
            violations.append(ValidationViolation(
                rule_name='minimum_break_spacing',
                message=(
                    f'{break_type} break is only {spacing:g} intervals away from another agent '
                    f'(minimum {min_intervals} required)'
                ),
                severity='warning',
                affected_intervals=[candidate]
            ))

    return violations


def _first_close_spacing(
    candidate_minutes: int,
    break_type: str,
    siblings: List[SiblingSchedule],
    min_intervals: int
) -> Optional[float]:
    """Spacing (in intervals) to the first sibling break that is too close, if any."""
    for sibling in siblings:
        for start, sibling_type in sibling.intervals.items():
            if sibling_type != break_type:
                continue
            spacing = abs(candidate_minutes - time_to_minutes(start)) / INTERVAL_MINUTES
            if 0 < spacing < min_intervals:
                return spacing
    return None
