"""
Break Scheduler - Validación de descansos para agentes de call center.

Este package contiene el motor de reglas que decide si una distribución de
descansos (HB1, B, HB2) dentro de un turno es aceptable.
"""

from .models import (
    BreakInterval,
    BreakScheduleRule,
    BreakScheduleUpdateRequest,
    BreakScheduleUpdateResponse,
    ExtractedBreaks,
    RuleViolations,
    ShiftHours,
    SiblingSchedule,
    ValidationViolation
)
from .config import ValidationConfig, DEFAULT_SHIFT_HOURS
from .time_utils import TimeParseError, time_to_minutes, calculate_break_gap
from .extraction import extract_break_times
from .rules import dispatch, parse_rule
from .validator import BreakScheduleValidator, validate_against_rules, get_rule_violations
from .store import BreakScheduleStore
from .service import BreakScheduleService

__version__ = '1.0.0'
__all__ = [
    'BreakInterval',
    'BreakScheduleRule',
    'BreakScheduleUpdateRequest',
    'BreakScheduleUpdateResponse',
    'ExtractedBreaks',
    'RuleViolations',
    'ShiftHours',
    'SiblingSchedule',
    'ValidationViolation',
    'ValidationConfig',
    'DEFAULT_SHIFT_HOURS',
    'TimeParseError',
    'time_to_minutes',
    'calculate_break_gap',
    'extract_break_times',
    'dispatch',
    'parse_rule',
    'BreakScheduleValidator',
    'validate_against_rules',
    'get_rule_violations',
    'BreakScheduleStore',
    'BreakScheduleService'
]
