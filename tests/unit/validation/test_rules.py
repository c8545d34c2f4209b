"""Test declarative rule models and rule-table loading."""

import re
from datetime import date

import pytest
from pydantic import ValidationError

from trialforms.utils.exceptions import RuleConfigurationError
from trialforms.validation import field_validator
from trialforms.validation.rules import (
    RULE_CLASSES,
    AgeRule,
    CustomRule,
    DateRule,
    EmailRule,
    IntegerRule,
    PercentageRule,
    PhoneRule,
    RuleKind,
    TextRule,
    is_rule,
    rule_from_mapping,
    rules_from_mapping,
)


class TestRuleModels:
    """Test construction of individual rule kinds."""

    def test_defaults(self):
        """Test a bare text rule is optional and not allow_empty."""
        rule = TextRule()

        assert rule.kind == "text"
        assert rule.rule_kind is RuleKind.TEXT
        assert rule.required is False
        assert rule.allow_empty is False
        assert rule.message is None

    def test_required_and_allow_empty_are_exclusive(self):
        """Test a rule cannot be both required and allow_empty."""
        with pytest.raises(ValidationError):
            TextRule(required=True, allow_empty=True)

    def test_age_and_percentage_default_bounds(self):
        """Test the built-in bounds of age and percentage."""
        assert (AgeRule().min, AgeRule().max) == (1, 120)
        assert (PercentageRule().min, PercentageRule().max) == (0, 100)

    def test_inverted_numeric_bounds_rejected(self):
        """Test min greater than max fails construction."""
        with pytest.raises(ValidationError):
            IntegerRule(min=10, max=5)

    def test_inverted_length_bounds_rejected(self):
        """Test min_length greater than max_length fails construction."""
        with pytest.raises(ValidationError):
            TextRule(min_length=5, max_length=2)

    def test_inverted_date_bounds_rejected(self):
        """Test min_date after max_date fails construction."""
        with pytest.raises(ValidationError):
            DateRule(min_date=date(2025, 1, 1), max_date=date(2024, 1, 1))

    def test_kind_specific_attributes_rejected(self):
        """Test attributes foreign to a kind are refused."""
        with pytest.raises(ValidationError):
            IntegerRule(min_length=2)
        with pytest.raises(ValidationError):
            DateRule(pattern="^x$")

    def test_pattern_compiled_from_string(self):
        """Test patterns given as strings are compiled."""
        rule = TextRule(pattern=r"^P\d{3}$")

        assert isinstance(rule.pattern, re.Pattern)
        assert rule.pattern.search("P123")

    def test_custom_rule_requires_predicate(self):
        """Test a custom rule without a predicate is refused."""
        with pytest.raises(ValidationError):
            CustomRule()

    def test_rules_are_frozen(self):
        """Test rules cannot be mutated after construction."""
        rule = TextRule(min_length=2)

        with pytest.raises(ValidationError):
            rule.min_length = 3

    def test_camel_case_aliases(self):
        """Test camelCase attribute names are accepted."""
        rule = TextRule(minLength=2, allowEmpty=True)

        assert rule.min_length == 2
        assert rule.allow_empty is True

    def test_is_rule(self):
        """Test is_rule recognises rule models only."""
        assert is_rule(EmailRule())
        assert is_rule(PhoneRule())
        assert not is_rule({"kind": "email"})


class TestRuleFromMapping:
    """Test building rules from plain mappings."""

    def test_explicit_kind(self):
        """Test the kind selects the rule class."""
        rule = rule_from_mapping({"kind": "age", "required": True})

        assert isinstance(rule, AgeRule)
        assert rule.required is True

    def test_enum_kind(self):
        """Test a RuleKind member is accepted as kind."""
        rule = rule_from_mapping({"kind": RuleKind.EMAIL})

        assert isinstance(rule, EmailRule)

    def test_legacy_flags(self):
        """Test legacy boolean flags select the kind."""
        assert isinstance(rule_from_mapping({"date": True, "required": True}), DateRule)
        assert isinstance(rule_from_mapping({"email": True}), EmailRule)
        assert isinstance(rule_from_mapping({"phone": True}), PhoneRule)

    def test_false_legacy_flags_ignored(self):
        """Test false legacy flags are dropped rather than rejected."""
        rule = rule_from_mapping({"email": False, "minLength": 2})

        assert isinstance(rule, TextRule)
        assert rule.min_length == 2

    def test_bounds_infer_integer(self):
        """Test min/max without a kind build an integer rule."""
        rule = rule_from_mapping({"min": 0, "max": 20, "message": "0-20"})

        assert isinstance(rule, IntegerRule)
        assert (rule.min, rule.max) == (0, 20)

    def test_number_kind_builds_integer(self):
        """Test the number kind is an integer rule with its bounds."""
        rule = rule_from_mapping(
            {"kind": "number", "required": True, "min": 0, "max": 20}
        )

        assert isinstance(rule, IntegerRule)
        assert rule.rule_kind is RuleKind.INTEGER
        assert (rule.min, rule.max) == (0, 20)

    def test_empty_mapping_is_optional_text(self):
        """Test an empty mapping builds an optional text rule."""
        rule = rule_from_mapping({})

        assert isinstance(rule, TextRule)
        assert rule.required is False

    def test_unknown_kind_falls_back_to_text(self):
        """Test an unknown kind becomes text and drops foreign attributes."""
        rule = rule_from_mapping(
            {"kind": "postcode", "required": True, "min": 3, "maxLength": 8},
            field="zip",
        )

        assert isinstance(rule, TextRule)
        assert rule.required is True
        assert rule.max_length == 8

    def test_contradictory_rule_raises(self):
        """Test contradictions surface as RuleConfigurationError."""
        with pytest.raises(RuleConfigurationError) as exc_info:
            rule_from_mapping({"required": True, "allowEmpty": True}, field="age")

        assert exc_info.value.field == "age"
        assert exc_info.value.code == "RULE_CONFIGURATION_ERROR"

    def test_unknown_attribute_raises(self):
        """Test unknown attributes on a known kind are refused."""
        with pytest.raises(RuleConfigurationError):
            rule_from_mapping({"kind": "integer", "minLength": 2})


class TestRulesFromMapping:
    """Test building whole rule tables."""

    def test_mixed_models_and_mappings(self):
        """Test models pass through and mappings are built."""
        age = AgeRule(required=True)
        rules = rules_from_mapping({"age": age, "email": {"kind": "email"}})

        assert rules["age"] is age
        assert isinstance(rules["email"], EmailRule)

    def test_invalid_entry_raises(self):
        """Test non-rule entries are refused."""
        with pytest.raises(RuleConfigurationError) as exc_info:
            rules_from_mapping({"age": "required"})

        assert exc_info.value.field == "age"


class TestRuleKindCoverage:
    """Test every kind is wired to a rule class and a checker."""

    def test_every_kind_has_rule_class(self):
        """Test the rule class table covers RuleKind exactly."""
        assert set(RULE_CLASSES) == set(RuleKind)
        for kind, rule_class in RULE_CLASSES.items():
            assert rule_class.model_fields["kind"].default == kind.value

    def test_every_kind_has_checker(self):
        """Test the checker table covers RuleKind exactly."""
        assert set(field_validator._CHECKERS) == set(RuleKind)
