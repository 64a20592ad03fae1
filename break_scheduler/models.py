"""
Data models for break schedule validation.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

BREAK_TYPES = ('IN', 'HB1', 'B', 'HB2')
BREAK_KINDS = ('HB1', 'B', 'HB2')  # IN is regular work, not a break
SEVERITIES = ('error', 'warning')


@dataclass
class BreakInterval:
    """One 15-minute slot of an agent's day."""
    interval_start: str  # 'HH:MM' or 'HH:MM:SS'
    break_type: str  # IN, HB1, B or HB2

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'BreakInterval':
        return BreakInterval(
            interval_start=data['interval_start'],
            break_type=data['break_type']
        )

    def to_dict(self) -> dict:
        return {'interval_start': self.interval_start, 'break_type': self.break_type}


@dataclass
class ExtractedBreaks:
    """Start time ('HH:MM') of the first slot of each break kind, if any."""
    hb1: Optional[str] = None
    b: Optional[str] = None
    hb2: Optional[str] = None

    def __getitem__(self, break_type: str) -> Optional[str]:
        if break_type not in BREAK_KINDS:
            raise KeyError(break_type)
        return getattr(self, break_type.lower())

    def __setitem__(self, break_type: str, value: Optional[str]) -> None:
        if break_type not in BREAK_KINDS:
            raise KeyError(break_type)
        setattr(self, break_type.lower(), value)

    def to_dict(self) -> dict:
        return {'HB1': self.hb1, 'B': self.b, 'HB2': self.hb2}


@dataclass
class BreakScheduleUpdateRequest:
    """Candidate break arrangement for one agent on one date."""
    user_id: str
    schedule_date: str  # 'YYYY-MM-DD'
    intervals: List[BreakInterval] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'BreakScheduleUpdateRequest':
        return BreakScheduleUpdateRequest(
            user_id=data['user_id'],
            schedule_date=data['schedule_date'],
            intervals=[BreakInterval.from_dict(i) for i in data.get('intervals', [])]
        )

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'schedule_date': self.schedule_date,
            'intervals': [i.to_dict() for i in self.intervals]
        }


@dataclass
class BreakScheduleRule:
    """
    Administrator-configured validation rule.

    Lower priority numbers are evaluated first. Blocking rules produce
    'error' violations, non-blocking rules produce 'warning' violations.
    """
    rule_name: str
    rule_type: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    is_blocking: bool = True
    priority: int = 0
    id: Optional[str] = None
    description: Optional[str] = None

    @property
    def severity(self) -> str:
        """Severity stamped on every violation this rule produces."""
        return 'error' if self.is_blocking else 'warning'

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'BreakScheduleRule':
        return BreakScheduleRule(
            rule_name=data['rule_name'],
            rule_type=data['rule_type'],
            parameters=dict(data.get('parameters') or {}),
            is_active=data.get('is_active', True),
            is_blocking=data.get('is_blocking', True),
            priority=data.get('priority', 0),
            id=data.get('id'),
            description=data.get('description')
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'rule_name': self.rule_name,
            'rule_type': self.rule_type,
            'description': self.description,
            'parameters': dict(self.parameters),
            'is_active': self.is_active,
            'is_blocking': self.is_blocking,
            'priority': self.priority
        }


@dataclass(frozen=True)
class ValidationViolation:
    """A single rule breach. Never raised, always returned."""
    rule_name: str
    message: str
    severity: str = 'error'
    affected_intervals: Optional[List[str]] = None

    def __post_init__(self):
        if self.severity not in SEVERITIES:
            raise ValueError(f"Invalid severity: {self.severity!r} (expected 'error' or 'warning')")

    def with_severity(self, severity: str) -> 'ValidationViolation':
        """Return a copy stamped with another severity."""
        return replace(self, severity=severity)

    def to_dict(self) -> dict:
        data = {
            'rule_name': self.rule_name,
            'message': self.message,
            'severity': self.severity
        }
        if self.affected_intervals is not None:
            data['affected_intervals'] = list(self.affected_intervals)
        return data


@dataclass
class SiblingSchedule:
    """Another agent's committed breaks for the same date."""
    user_id: str
    intervals: Dict[str, str] = field(default_factory=dict)  # 'HH:MM' -> break type

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'SiblingSchedule':
        return SiblingSchedule(user_id=data['user_id'], intervals=dict(data.get('intervals') or {}))


@dataclass(frozen=True)
class ShiftHours:
    """Working window of a shift type."""
    start: str  # 'HH:MM'
    end: str  # 'HH:MM'

    def to_dict(self) -> dict:
        return {'start': self.start, 'end': self.end}


@dataclass
class RuleViolations:
    """Deduplicated validation outcome."""
    violations: List[ValidationViolation]
    has_blocking_violations: bool

    @property
    def errors(self) -> List[ValidationViolation]:
        return [v for v in self.violations if v.severity == 'error']

    @property
    def warnings(self) -> List[ValidationViolation]:
        return [v for v in self.violations if v.severity == 'warning']

    def to_dict(self) -> dict:
        return {
            'violations': [v.to_dict() for v in self.violations],
            'has_blocking_violations': self.has_blocking_violations
        }


@dataclass
class BreakScheduleUpdateResponse:
    """Result of a save attempt."""
    success: bool
    violations: List[ValidationViolation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'violations': [v.to_dict() for v in self.violations]
        }
