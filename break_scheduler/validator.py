"""
Rule aggregation and verdict resolution.

Runs every active rule in priority order, collects their violations,
removes duplicates and decides whether the schedule may be saved.
"""
import logging
from typing import Iterable, List, Optional

from .config import DEFAULT_SHIFT_HOURS, ValidationConfig
from .models import (
    BreakScheduleRule,
    BreakScheduleUpdateRequest,
    RuleViolations,
    SiblingSchedule,
    ValidationViolation,
)
from .rules import ShiftHoursMap, ValidationContext, dispatch

logger = logging.getLogger(__name__)


def validate_against_rules(
    request: BreakScheduleUpdateRequest,
    rules: Iterable[BreakScheduleRule],
    shift_type: Optional[str],
    sibling_schedules: Optional[List[SiblingSchedule]] = None,
    shift_hours: Optional[ShiftHoursMap] = None
) -> List[ValidationViolation]:
    """
    Validate a request against every active rule.

    Rules are evaluated in ascending priority; rules sharing a priority keep
    their input order. Violations are returned in evaluation order.

    Args:
        request: Candidate schedule
        rules: Configured rules (inactive ones are skipped)
        shift_type: Agent's shift type for the date
        sibling_schedules: Other agents' committed breaks, if available
        shift_hours: Shift type -> hours map (defaults to DEFAULT_SHIFT_HOURS)

    Returns:
        All violations, not deduplicated

    Raises:
        TimeParseError: If the request contains a malformed time
    """
    context = ValidationContext(
        request=request,
        shift_type=shift_type,
        shift_hours=shift_hours if shift_hours is not None else DEFAULT_SHIFT_HOURS,
        sibling_schedules=sibling_schedules
    )

    # sorted() is stable, so equal priorities keep input order
    ordered_rules = sorted((r for r in rules if r.is_active), key=lambda r: r.priority)

    violations = []
    for rule in ordered_rules:
        rule_violations = dispatch(request, rule, shift_type, context=context)
        logger.debug("Rule %s (priority %s): %d violation(s)", rule.rule_name, rule.priority, len(rule_violations))
        violations.extend(rule_violations)

    return violations


def deduplicate_violations(violations: Iterable[ValidationViolation]) -> List[ValidationViolation]:
    """Drop violations whose (rule_name, message) was already seen; first one wins."""
    seen = set()
    unique = []
    for violation in violations:
        key = (violation.rule_name, violation.message)
        if key in seen:
            continue
        seen.add(key)
        unique.append(violation)
    return unique


def get_rule_violations(
    request: BreakScheduleUpdateRequest,
    rules: Iterable[BreakScheduleRule],
    shift_type: Optional[str],
    sibling_schedules: Optional[List[SiblingSchedule]] = None,
    shift_hours: Optional[ShiftHoursMap] = None
) -> RuleViolations:
    """
    Validate a request and resolve the final verdict.

    Returns:
        RuleViolations with deduplicated violations and whether any of them
        is an error (which must block the save)
    """
    violations = deduplicate_violations(
        validate_against_rules(request, rules, shift_type, sibling_schedules, shift_hours)
    )
    has_blocking = any(v.severity == 'error' for v in violations)
    return RuleViolations(violations=violations, has_blocking_violations=has_blocking)


class BreakScheduleValidator:
    """
    High-level API for break schedule validation.

    Example usage:
        validator = BreakScheduleValidator.from_config('config/reglas.yaml')
        result = validator.validate(request, shift_type='AM')
        if result.has_blocking_violations:
            ...
    """

    def __init__(self, config: ValidationConfig):
        """
        Initialize validator with configuration.

        Args:
            config: Shift hours and rules to validate against
        """
        self.config = config

    @classmethod
    def from_config(cls, config_path: str = 'config/reglas.yaml') -> 'BreakScheduleValidator':
        """
        Create validator from configuration file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        return cls(ValidationConfig.from_yaml(config_path))

    def validate(
        self,
        request: BreakScheduleUpdateRequest,
        shift_type: Optional[str],
        sibling_schedules: Optional[List[SiblingSchedule]] = None
    ) -> RuleViolations:
        """Validate a request with the configured rules and shift hours."""
        return get_rule_violations(
            request,
            self.config.rules,
            shift_type,
            sibling_schedules,
            self.config.shift_hours
        )
