"""
Rule kinds and the rule dispatcher.

A configured BreakScheduleRule is turned into exactly one BreakRule
subclass by parse_rule(); that is the only place where rule_type and
rule_name strings are interpreted. Each subclass encapsulates one check.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Type

from .config import DEFAULT_SHIFT_HOURS
from .evaluators import (
    DEFAULT_MAX_GAP_MINUTES,
    DEFAULT_MIN_GAP_MINUTES,
    DEFAULT_MIN_SPACING_INTERVALS,
    validate_break_ordering,
    validate_break_timing,
    validate_full_break_duration,
    validate_minimum_break_spacing,
    validate_shift_boundary,
)
from .extraction import extract_break_times
from .models import (
    BREAK_KINDS,
    BreakScheduleRule,
    BreakScheduleUpdateRequest,
    ExtractedBreaks,
    ShiftHours,
    SiblingSchedule,
    ValidationViolation,
)

logger = logging.getLogger(__name__)

ShiftHoursMap = Mapping[str, Optional[ShiftHours]]


@dataclass
class ValidationContext:
    """Already-resolved inputs shared by every rule of one validation run."""
    request: BreakScheduleUpdateRequest
    shift_type: Optional[str]
    shift_hours: ShiftHoursMap = field(default_factory=lambda: DEFAULT_SHIFT_HOURS)
    sibling_schedules: Optional[List[SiblingSchedule]] = None
    breaks: Optional[ExtractedBreaks] = None

    def __post_init__(self):
        if self.breaks is None:
            self.breaks = extract_break_times(self.request.intervals)

    def shift_window(self) -> Optional[ShiftHours]:
        """Hours of the agent's shift, None if unknown or OFF."""
        if self.shift_type is None:
            return None
        return self.shift_hours.get(self.shift_type)


class BreakRule(ABC):
    """Base class for all rule kinds."""

    def __init__(self, rule: BreakScheduleRule):
        """
        Initialize rule kind with its configuration record.

        Args:
            rule: Configured rule (parameters, blocking flag, priority)
        """
        self.rule = rule

    @property
    def name(self) -> str:
        return self.rule.rule_name

    def param(self, key: str, default):
        """Read a numeric parameter; missing or falsy values fall back to default."""
        value = self.rule.parameters.get(key)
        return value if value else default

    @abstractmethod
    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        """
        Run this rule's check.

        Args:
            context: Request, shift and sibling data for this run

        Returns:
            Violations with provisional severities
        """
        pass


class OrderingRule(BreakRule):
    """HB1 before B before HB2."""

    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        violation = validate_break_ordering(context.breaks)
        return [violation] if violation else []


class GapRule(BreakRule):
    """Minimum or maximum gap between consecutive breaks (kind = rule name)."""

    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        violations = validate_break_timing(
            context.breaks,
            min_minutes=self.param('min_minutes', DEFAULT_MIN_GAP_MINUTES),
            max_minutes=self.param('max_minutes', DEFAULT_MAX_GAP_MINUTES)
        )
        # A minimum_gap rule only reports minimum gaps, and vice versa
        return [v for v in violations if v.rule_name == self.name]


class ShiftBoundaryRule(BreakRule):
    """Breaks must fall inside the agent's shift hours."""

    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        return validate_shift_boundary(context.request.intervals, context.shift_window())


class FullBreakDurationRule(BreakRule):
    """B spans exactly two consecutive slots."""

    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        violation = validate_full_break_duration(context.request.intervals)
        return [violation] if violation else []


class BreakSpacingRule(BreakRule):
    """Same-kind breaks of different agents must not be too close."""

    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        if context.sibling_schedules is None:
            logger.debug("Skipping %s: no sibling schedules supplied", self.name)
            return []

        # An empty list is a valid setting that checks no break kind
        applies_to: Optional[Sequence[str]] = self.rule.parameters.get('applies_to')
        if applies_to is None:
            applies_to = list(BREAK_KINDS)
        return validate_minimum_break_spacing(
            context.breaks,
            context.request.user_id,
            context.sibling_schedules,
            min_intervals=self.param('min_intervals', DEFAULT_MIN_SPACING_INTERVALS),
            applies_to=applies_to
        )


class DistributionRule(BreakRule):
    """Governs auto-distribution only; never produces validation violations."""

    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        return []


class InertRule(BreakRule):
    """A rule kind this engine does not recognize."""

    def evaluate(self, context: ValidationContext) -> List[ValidationViolation]:
        return []


# (rule_type, rule_name) -> kind; a None name matches any name of that type
RULE_KINDS: Dict[tuple, Type[BreakRule]] = {
    ('ordering', None): OrderingRule,
    ('timing', 'minimum_gap'): GapRule,
    ('timing', 'maximum_gap'): GapRule,
    ('timing', 'shift_boundary'): ShiftBoundaryRule,
    ('timing', 'full_break_duration'): FullBreakDurationRule,
    ('coverage', 'minimum_break_spacing'): BreakSpacingRule,
    ('distribution', None): DistributionRule,
}


def parse_rule(rule: BreakScheduleRule) -> BreakRule:
    """Map a configured rule onto its rule kind; unknown combinations are inert."""
    kind = RULE_KINDS.get((rule.rule_type, rule.rule_name)) or RULE_KINDS.get((rule.rule_type, None))
    if kind is None:
        logger.debug("Rule %r (%s) is not recognized; treating as inert", rule.rule_name, rule.rule_type)
        return InertRule(rule)
    return kind(rule)


def dispatch(
    request: BreakScheduleUpdateRequest,
    rule: BreakScheduleRule,
    shift_type: Optional[str],
    sibling_schedules: Optional[List[SiblingSchedule]] = None,
    shift_hours: Optional[ShiftHoursMap] = None,
    context: Optional[ValidationContext] = None
) -> List[ValidationViolation]:
    """
    Evaluate a single rule against a request.

    Args:
        request: Candidate schedule
        rule: Rule to apply
        shift_type: Agent's shift type for the date (e.g. 'AM', 'OFF')
        sibling_schedules: Other agents' committed breaks (coverage rules only)
        shift_hours: Shift type -> hours map (defaults to DEFAULT_SHIFT_HOURS)
        context: Prebuilt context to reuse across rules (overrides the above)

    Returns:
        Violations stamped 'error' if the rule is blocking, else 'warning'
    """
    if context is None:
        context = ValidationContext(
            request=request,
            shift_type=shift_type,
            shift_hours=shift_hours if shift_hours is not None else DEFAULT_SHIFT_HOURS,
            sibling_schedules=sibling_schedules
        )

    violations = parse_rule(rule).evaluate(context)
    return [v.with_severity(rule.severity) for v in violations]
