"""Validation Module.

Declarative field rules, single-value and whole-form validation, and the
record helpers used to decide whether a form can be saved.
"""

from .common_rules import COMMON_RULES, required_choice
from .field_validator import is_empty_value, parse_ui_date, validate_value
from .form_validator import (
    ConditionalRules,
    FormValidator,
    ValidationSummary,
    merge_rules,
    validate_form,
    validation_summary,
)
from .record import (
    empty_required_fields,
    filled_field_count,
    has_form_data,
    has_required_data,
    sanitize_record,
)
from .results import ErrorKind, FieldResult, ValidationResult
from .rules import (
    AgeRule,
    CurrencyRule,
    CustomRule,
    DateRule,
    DecimalRule,
    EmailRule,
    IntegerRule,
    PercentageRule,
    PhoneRule,
    RuleKind,
    RuleSpec,
    TextRule,
    rule_from_mapping,
    rules_from_mapping,
)

__all__ = [
    # Rules
    "RuleKind",
    "RuleSpec",
    "TextRule",
    "IntegerRule",
    "DecimalRule",
    "CurrencyRule",
    "AgeRule",
    "PercentageRule",
    "EmailRule",
    "PhoneRule",
    "DateRule",
    "CustomRule",
    "rule_from_mapping",
    "rules_from_mapping",
    "COMMON_RULES",
    "required_choice",
    # Results
    "ErrorKind",
    "FieldResult",
    "ValidationResult",
    "ValidationSummary",
    # Validation
    "validate_value",
    "validate_form",
    "validation_summary",
    "merge_rules",
    "FormValidator",
    "ConditionalRules",
    "is_empty_value",
    "parse_ui_date",
    # Record helpers
    "has_form_data",
    "has_required_data",
    "empty_required_fields",
    "filled_field_count",
    "sanitize_record",
]
