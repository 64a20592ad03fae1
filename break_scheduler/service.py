"""
Break schedule save workflow.

Validates a candidate schedule against the configured rules and the other
agents' committed schedules, and persists it only when no blocking
violation was found.
"""
import logging
import re
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from .extraction import complete_full_break
from .models import (
    BREAK_TYPES,
    BreakScheduleUpdateRequest,
    BreakScheduleUpdateResponse,
    RuleViolations,
    ValidationViolation,
)
from .store import BreakScheduleStore
from .time_utils import TimeParseError, time_to_minutes
from .validator import BreakScheduleValidator

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
# Stored slots always use two-digit hours
_INTERVAL_START_PATTERN = re.compile(r'^\d{2}:\d{2}(:\d{2})?$')


def _input_error(message: str, affected: Optional[List[str]] = None) -> ValidationViolation:
    return ValidationViolation(
        rule_name='input_validation',
        message=message,
        severity='error',
        affected_intervals=affected
    )


def _is_valid_interval_start(value) -> bool:
    if not isinstance(value, str) or not _INTERVAL_START_PATTERN.match(value):
        return False
    try:
        time_to_minutes(value)
    except TimeParseError:
        return False
    return True


def check_request_input(request: BreakScheduleUpdateRequest) -> Optional[ValidationViolation]:
    """
    Check request shape before running any rule.

    Returns:
        The first input problem as an 'input_validation' error, or None
    """
    if not isinstance(request.user_id, str) or not request.user_id.strip():
        return _input_error('user_id is required and must be a non-empty string')

    if not isinstance(request.schedule_date, str) or not _DATE_PATTERN.match(request.schedule_date):
        return _input_error('schedule_date must be a valid date string in YYYY-MM-DD format')

    if not request.intervals:
        return _input_error('intervals must be a non-empty array')

    for interval in request.intervals:
        if not _is_valid_interval_start(interval.interval_start):
            return _input_error(
                'interval_start must be a valid time string in HH:MM or HH:MM:SS format',
                [str(interval.interval_start)]
            )

        if interval.break_type not in BREAK_TYPES:
            return _input_error(
                'break_type must be one of: IN, HB1, B, HB2',
                [interval.interval_start]
            )

    return None


class BreakScheduleService:
    """Validates and saves break schedules."""

    def __init__(self, validator: BreakScheduleValidator, store: BreakScheduleStore):
        self.validator = validator
        self.store = store

    def resolve_shift_type(self, request: BreakScheduleUpdateRequest, shift_type: Optional[str]) -> Optional[str]:
        """Use the given shift type, else the one committed for this agent and date."""
        if shift_type is not None:
            return shift_type
        entry = self.store.get_schedule(request.user_id, request.schedule_date)
        return entry.get('shift_type') if entry else None

    def validate_break_schedule(
        self,
        request: BreakScheduleUpdateRequest,
        shift_type: Optional[str] = None
    ) -> RuleViolations:
        """Validate without saving, using committed schedules of the same date as siblings."""
        input_error = check_request_input(request)
        if input_error:
            return RuleViolations(violations=[input_error], has_blocking_violations=True)

        siblings = self.store.get_sibling_schedules(request.schedule_date, exclude_user_id=request.user_id)
        return self.validator.validate(
            self._with_full_break(request), self.resolve_shift_type(request, shift_type), siblings
        )

    @staticmethod
    def _with_full_break(request: BreakScheduleUpdateRequest) -> BreakScheduleUpdateRequest:
        """Request with the second B slot filled in when only the first was sent."""
        return replace(request, intervals=complete_full_break(request.intervals))

    def update_break_schedule(
        self,
        request: BreakScheduleUpdateRequest,
        shift_type: Optional[str] = None
    ) -> BreakScheduleUpdateResponse:
        """
        Validate and, unless blocked, save a break schedule.

        Args:
            request: Candidate schedule
            shift_type: Agent's shift type (falls back to the committed one)

        Returns:
            BreakScheduleUpdateResponse; success is False when an error
            violation blocked the save, warnings never block
        """
        shift_type = self.resolve_shift_type(request, shift_type)
        result = self.validate_break_schedule(request, shift_type)

        if result.has_blocking_violations:
            logger.info("Refused break schedule for %s on %s: %d error(s)",
                        request.user_id, request.schedule_date, len(result.errors))
            return BreakScheduleUpdateResponse(success=False, violations=result.violations)

        self.store.save_schedule(self._with_full_break(request), shift_type)
        if result.warnings:
            logger.info("Saved break schedule for %s on %s with %d warning(s)",
                        request.user_id, request.schedule_date, len(result.warnings))
        return BreakScheduleUpdateResponse(success=True, violations=result.violations)

    def bulk_update_break_schedules(
        self,
        updates: Iterable[Tuple[BreakScheduleUpdateRequest, Optional[str]]]
    ) -> BreakScheduleUpdateResponse:
        """Apply several updates in order; success only if every update succeeded."""
        responses = [self.update_break_schedule(request, shift_type) for request, shift_type in updates]
        return BreakScheduleUpdateResponse(
            success=all(r.success for r in responses),
            violations=[v for r in responses for v in r.violations]
        )
