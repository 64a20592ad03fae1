"""
Configuration management for break schedule validation.

Loads shift hours and validation rules from YAML files.
"""
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import BREAK_KINDS, BreakScheduleRule, ShiftHours
from .time_utils import TimeParseError, normalize_time

DEFAULT_CONFIG_PATH = 'config/reglas.yaml'

DEFAULT_SHIFT_HOURS: Dict[str, Optional[ShiftHours]] = {
    'AM': ShiftHours('09:00', '17:00'),
    'PM': ShiftHours('13:00', '21:00'),
    'BET': ShiftHours('11:00', '19:00'),
    'OFF': None  # Day off, no working hours
}

DEFAULT_RULES: List[Dict[str, Any]] = [
    {
        'rule_name': 'break_ordering',
        'rule_type': 'ordering',
        'description': 'HB1 must come before B, B before HB2',
        'parameters': {'sequence': ['HB1', 'B', 'HB2'], 'enforce_strict': True},
        'is_blocking': True,
        'priority': 1
    },
    {
        'rule_name': 'minimum_gap',
        'rule_type': 'timing',
        'description': 'Minimum time between consecutive breaks',
        'parameters': {'min_minutes': 90, 'applies_to': ['HB1-B', 'B-HB2']},
        'is_blocking': True,
        'priority': 2
    },
    {
        'rule_name': 'maximum_gap',
        'rule_type': 'timing',
        'description': 'Maximum time between consecutive breaks',
        'parameters': {'max_minutes': 270, 'applies_to': ['HB1-B', 'B-HB2']},
        'is_blocking': False,
        'priority': 3
    },
    {
        'rule_name': 'shift_boundary',
        'rule_type': 'timing',
        'description': 'Breaks must be within shift hours',
        'parameters': {'enforce_strict': True},
        'is_blocking': True,
        'priority': 4
    },
    {
        'rule_name': 'minimum_coverage',
        'rule_type': 'coverage',
        'description': 'Minimum agents required per interval',
        'parameters': {'min_agents': 3, 'alert_threshold': 5},
        'is_blocking': False,
        'priority': 5
    },
    {
        'rule_name': 'full_break_duration',
        'rule_type': 'timing',
        'description': 'Full break (B) spans two consecutive intervals',
        'parameters': {},
        'is_blocking': True,
        'priority': 6
    },
    {
        'rule_name': 'minimum_break_spacing',
        'rule_type': 'coverage',
        'description': 'Minimum intervals between agents taking the same break type',
        'parameters': {'min_intervals': 10, 'applies_to': ['HB1', 'B', 'HB2']},
        'is_blocking': False,
        'priority': 60
    }
]


@dataclass
class StorageConfig:
    """Where committed break schedules are kept."""
    schedules_path: str  # JSON file with committed schedules


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_rule_parameters(parameters: Dict[str, Any], rule_type: Optional[str]) -> Optional[str]:
    """
    Check rule parameters for the given rule type.

    Args:
        parameters: Rule parameters
        rule_type: Rule type (ordering, timing, coverage, distribution)

    Returns:
        Error message, or None if parameters are valid
    """
    if not rule_type:
        return None

    if rule_type == 'timing':
        for key in ('min_minutes', 'max_minutes'):
            if key in parameters and (not _is_number(parameters[key]) or parameters[key] < 0):
                return f'{key} must be a positive number'

        if (
            'min_minutes' in parameters and 'max_minutes' in parameters
            and parameters['min_minutes'] > parameters['max_minutes']
        ):
            return 'min_minutes cannot be greater than max_minutes'

    elif rule_type == 'coverage':
        for key in ('min_agents', 'alert_threshold'):
            if key in parameters and not _is_non_negative_int(parameters[key]):
                return f'{key} must be a positive integer'

        if 'min_intervals' in parameters:
            value = parameters['min_intervals']
            if not _is_non_negative_int(value) or value == 0:
                return 'min_intervals must be a positive integer'

        if 'applies_to' in parameters:
            applies_to = parameters['applies_to']
            if not isinstance(applies_to, list):
                return 'applies_to must be a list'
            for break_type in applies_to:
                if break_type not in BREAK_KINDS:
                    return f'Invalid break type in applies_to: {break_type}'

    elif rule_type == 'ordering':
        if 'sequence' in parameters:
            sequence = parameters['sequence']
            if not isinstance(sequence, list):
                return 'sequence must be an array'
            for break_type in sequence:
                if break_type not in BREAK_KINDS:
                    return f'Invalid break type in sequence: {break_type}'

    elif rule_type == 'distribution':
        if 'tolerance_percentage' in parameters:
            value = parameters['tolerance_percentage']
            if not _is_number(value) or value < 0 or value > 100:
                return 'tolerance_percentage must be between 0 and 100'

    return None


def parse_shift_hours(data: Dict[str, Any]) -> Dict[str, Optional[ShiftHours]]:
    """
    Parse the 'turnos' section.

    Each shift code maps to {inicio, fin} or null (no working hours).

    Raises:
        ValueError: If a time is malformed or a shift ends before it starts
    """
    shift_hours = {}
    for code, hours in data.items():
        if not hours:
            shift_hours[code] = None
            continue
        try:
            start = normalize_time(hours['inicio'])
            end = normalize_time(hours['fin'])
        except (KeyError, TypeError, TimeParseError) as e:
            raise ValueError(f"Invalid hours for shift {code}: {e}")
        if start >= end:
            raise ValueError(f"Shift {code} must end after it starts ({start}-{end})")
        shift_hours[code] = ShiftHours(start, end)
    return shift_hours


def parse_rules(data: List[Dict[str, Any]]) -> List[BreakScheduleRule]:
    """
    Parse the 'reglas' section into rule records.

    Raises:
        ValueError: If a rule is missing required fields or has invalid parameters
    """
    rules = []
    for index, rule_data in enumerate(data):
        try:
            rule = BreakScheduleRule.from_dict(rule_data)
        except (KeyError, TypeError) as e:
            raise ValueError(f"Rule #{index + 1}: missing field {e}")

        if not _is_non_negative_int(rule.priority):
            raise ValueError(f"Rule {rule.rule_name}: priority must be a non-negative integer")

        error = validate_rule_parameters(rule.parameters, rule.rule_type)
        if error:
            raise ValueError(f"Rule {rule.rule_name}: {error}")

        if rule.id is None:
            rule.id = rule.rule_name
        rules.append(rule)
    return rules


class ValidationConfig:
    """
    Main configuration class for break validation.

    Holds the shift hours map, the configured rules and storage settings.
    """

    def __init__(
        self,
        shift_hours: Dict[str, Optional[ShiftHours]],
        rules: List[BreakScheduleRule],
        storage: StorageConfig
    ):
        self.shift_hours = shift_hours
        self.rules = rules
        self.storage = storage

    @classmethod
    def default(cls) -> 'ValidationConfig':
        """Built-in shift hours and seed rules."""
        return cls(
            shift_hours=dict(DEFAULT_SHIFT_HOURS),
            rules=parse_rules(DEFAULT_RULES),
            storage=StorageConfig(schedules_path='output/break_schedules.json')
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValidationConfig':
        """Build configuration from parsed YAML data; missing sections use defaults."""
        data = data or {}

        turnos_data = data.get('turnos')
        shift_hours = parse_shift_hours(turnos_data) if turnos_data else dict(DEFAULT_SHIFT_HOURS)

        reglas_data = data.get('reglas')
        rules = parse_rules(reglas_data if reglas_data is not None else DEFAULT_RULES)

        storage_data = data.get('almacenamiento') or {}
        storage = StorageConfig(
            schedules_path=storage_data.get('schedules_path', 'output/break_schedules.json')
        )

        return cls(shift_hours, rules, storage)

    @classmethod
    def from_yaml(cls, config_path: str = DEFAULT_CONFIG_PATH) -> 'ValidationConfig':
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ValidationConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {config_path}: {e}")

        return cls.from_dict(data)

    def active_rules(self) -> List[BreakScheduleRule]:
        """Active rules ordered by priority."""
        return sorted((r for r in self.rules if r.is_active), key=lambda r: r.priority)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (YAML structure)."""
        return {
            'turnos': {
                code: ({'inicio': hours.start, 'fin': hours.end} if hours else None)
                for code, hours in self.shift_hours.items()
            },
            'reglas': [rule.to_dict() for rule in self.rules],
            'almacenamiento': {
                'schedules_path': self.storage.schedules_path
            }
        }

    def save_yaml(self, config_path: str = DEFAULT_CONFIG_PATH) -> None:
        """Write configuration back to a YAML file."""
        path = Path(config_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, allow_unicode=True, default_flow_style=False, sort_keys=False)
