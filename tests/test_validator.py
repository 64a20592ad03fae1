from break_scheduler.config import ValidationConfig
from break_scheduler.models import (
    BreakInterval,
    BreakScheduleRule,
    BreakScheduleUpdateRequest,
    RuleViolations,
    SiblingSchedule,
    ValidationViolation,
)
from break_scheduler.validator import (
    BreakScheduleValidator,
    deduplicate_violations,
    get_rule_violations,
    validate_against_rules,
)


def make_request(*slots, user_id="U1"):
    return BreakScheduleUpdateRequest(
        user_id=user_id,
        schedule_date="2026-10-19",
        intervals=[BreakInterval(start, kind) for start, kind in slots],
    )


ORDERING = BreakScheduleRule("break_ordering", "ordering", is_blocking=True, priority=1)


def test_well_ordered_schedule_has_no_violations():
    request = make_request(("10:00", "HB1"), ("12:00", "B"), ("14:00", "HB2"))
    assert get_rule_violations(request, [ORDERING], "AM") == RuleViolations([], False)


def test_reversed_schedule_is_blocked_by_ordering():
    request = make_request(("14:00", "HB1"), ("12:00", "B"), ("10:00", "HB2"))

    result = get_rule_violations(request, [ORDERING], "AM")

    assert result.has_blocking_violations is True
    assert len(result.violations) == 1
    assert result.violations[0].rule_name == "break_ordering"
    assert result.violations[0].message == "HB1 must come before B"
    assert result.errors == result.violations
    assert result.warnings == []


def test_rules_evaluated_in_priority_order():
    # Each rule fires; the output order must follow priority, not input order
    request = make_request(("08:15", "HB1"), ("08:00", "B"), ("14:00", "HB2"))
    rules = [
        BreakScheduleRule("shift_boundary", "timing", priority=3),
        BreakScheduleRule("break_ordering", "ordering", priority=1),
        BreakScheduleRule("minimum_gap", "timing", {"min_minutes": 90}, priority=2),
    ]

    violations = validate_against_rules(request, rules, "AM")

    assert [v.rule_name for v in violations] == [
        "break_ordering", "minimum_gap", "shift_boundary", "shift_boundary"
    ]


def test_equal_priorities_keep_input_order():
    request = make_request(("10:00", "HB1"), ("10:30", "B"), ("20:00", "HB2"))
    rules = [
        BreakScheduleRule("shift_boundary", "timing", priority=1),
        BreakScheduleRule("minimum_gap", "timing", priority=1),
    ]

    violations = validate_against_rules(request, rules, "AM")

    assert [v.rule_name for v in violations] == ["shift_boundary", "minimum_gap"]


def test_inactive_rules_are_skipped():
    request = make_request(("14:00", "HB1"), ("12:00", "B"))
    rule = BreakScheduleRule("break_ordering", "ordering", is_active=False)
    assert get_rule_violations(request, [rule], "AM") == RuleViolations([], False)


def test_warnings_alone_do_not_block():
    request = make_request(("09:00", "B"), ("14:00", "HB2"))
    rule = BreakScheduleRule("maximum_gap", "timing", {"max_minutes": 270}, is_blocking=False)

    result = get_rule_violations(request, [rule], "AM")

    assert result.has_blocking_violations is False
    assert [v.severity for v in result.violations] == ["warning"]


def test_duplicated_rule_is_reported_once():
    request = make_request(("14:00", "HB1"), ("12:00", "B"))
    result = get_rule_violations(request, [ORDERING, ORDERING], "AM")
    assert len(result.violations) == 1


def test_deduplicate_keeps_first_and_is_idempotent():
    first = ValidationViolation("minimum_gap", "same", "error")
    second = ValidationViolation("minimum_gap", "same", "warning")
    other = ValidationViolation("maximum_gap", "same", "warning")

    unique = deduplicate_violations([first, second, other])

    assert unique == [first, other]
    assert deduplicate_violations(unique) == unique


def test_same_rule_name_different_messages_are_kept():
    request = make_request(("07:00", "HB1"), ("22:00", "HB2"))
    rule = BreakScheduleRule("shift_boundary", "timing")
    assert len(get_rule_violations(request, [rule], "AM").violations) == 2


def test_validator_uses_configured_rules_and_siblings():
    validator = BreakScheduleValidator(ValidationConfig.default())
    request = make_request(("10:00", "HB1"), ("12:00", "B"), ("12:15", "B"), ("14:00", "HB2"))
    siblings = [SiblingSchedule("U2", {"10:30": "HB1"})]

    clean = validator.validate(request, "AM")
    advised = validator.validate(request, "AM", siblings)

    assert clean.violations == []
    assert [v.rule_name for v in advised.violations] == ["minimum_break_spacing"]
    assert advised.has_blocking_violations is False


def test_validator_default_rules_block_bad_schedule():
    validator = BreakScheduleValidator(ValidationConfig.default())
    request = make_request(("10:00", "HB1"), ("10:30", "B"), ("18:00", "HB2"))

    result = validator.validate(request, "AM")

    assert result.has_blocking_violations is True
    names = [v.rule_name for v in result.violations]
    assert names[0] == "minimum_gap"
    assert "shift_boundary" in names
    assert "full_break_duration" in names
