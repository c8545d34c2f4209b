"""Form-level validation with conditional rules.

The rule map is the single source of truth for which fields are checked:
fields present in the record but absent from the effective rules are never
validated. Conditional rules are computed from the current record and
replace base rules of the same name, so a field that becomes required
through a condition behaves exactly like a statically required one.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from trialforms.utils.logging import get_logger
from trialforms.validation.field_validator import validate_value
from trialforms.validation.record import (
    empty_required_fields,
    filled_field_count,
    has_form_data,
)
from trialforms.validation.results import ErrorKind, FieldResult, ValidationResult
from trialforms.validation.rules import rules_from_mapping

logger = get_logger(__name__)

ConditionalRules = Callable[[Mapping[str, Any]], Mapping[str, Any]]


def merge_rules(
    base_rules: Mapping[str, Any],
    conditional_rules: Optional[ConditionalRules],
    record: Mapping[str, Any],
) -> Dict[str, Any]:
    """Overlay the rules computed from ``record`` onto the base rules."""
    effective = dict(base_rules)
    if conditional_rules is not None:
        effective.update(rules_from_mapping(conditional_rules(record)))
    return effective


@dataclass(frozen=True)
class ValidationSummary:
    """Save-readiness overview of a record, without interaction state."""

    has_data: bool
    has_required: bool
    result: ValidationResult
    empty_fields: List[str] = field(default_factory=list)
    total_fields: int = 0
    filled_fields: int = 0

    @property
    def is_valid(self) -> bool:
        """Whether the record passed validation."""
        return self.result.is_valid

    @property
    def can_save(self) -> bool:
        """Whether the record has data, all required values and no errors."""
        return self.has_data and self.has_required and self.result.is_valid


class FormValidator:
    """Validates records against base rules plus conditional rules."""

    def __init__(
        self,
        base_rules: Mapping[str, Any],
        conditional_rules: Optional[ConditionalRules] = None,
        allow_empty_defaults: Optional[Mapping[str, bool]] = None,
    ):
        """Initialize form validator.

        Args:
            base_rules: Field name -> rule model or rule mapping
            conditional_rules: Function computing extra rules from the record
            allow_empty_defaults: Field name -> allow_empty applied to optional rules
        """
        self.base_rules: Mapping[str, Any] = MappingProxyType(
            rules_from_mapping(base_rules)
        )
        self.conditional_rules = conditional_rules
        self.allow_empty_defaults: Mapping[str, bool] = MappingProxyType(
            dict(allow_empty_defaults or {})
        )

    def effective_rules(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the rules that apply to ``record``."""
        effective = merge_rules(self.base_rules, self.conditional_rules, record)
        for name, allow_empty in self.allow_empty_defaults.items():
            rule = effective.get(name)
            # Defaults never weaken a required rule
            if rule is None or rule.required or rule.allow_empty == allow_empty:
                continue
            effective[name] = rule.model_copy(update={"allow_empty": allow_empty})
        return effective

    def validate(self, record: Mapping[str, Any]) -> ValidationResult:
        """Validate every field named by the effective rules."""
        errors: Dict[str, str] = {}
        error_kinds: Dict[str, ErrorKind] = {}

        for name, rule in self.effective_rules(record).items():
            result = validate_value(record.get(name), rule, record)
            if not result.ok:
                errors[name] = result.error or "Invalid value"
                if result.kind is not None:
                    error_kinds[name] = result.kind

        logger.debug(
            "form_validated",
            field_count=len(record),
            error_count=len(errors),
            failed_fields=sorted(errors),
        )
        return ValidationResult(errors=errors, error_kinds=error_kinds)

    def validate_field(self, record: Mapping[str, Any], field_name: str) -> FieldResult:
        """Validate one field for real-time feedback while typing.

        Conditional rules are still derived from the whole record, so e.g.
        answering "Yes" to a practice question makes its follow-up required
        immediately. Fields without a rule always pass.
        """
        rule = self.effective_rules(record).get(field_name)
        if rule is None:
            return FieldResult.passed()
        return validate_value(record.get(field_name), rule, record)

    def required_fields(self, record: Mapping[str, Any]) -> List[str]:
        """Names of the fields that are required for ``record``."""
        return [
            name for name, rule in self.effective_rules(record).items() if rule.required
        ]

    def summarize(self, record: Mapping[str, Any]) -> ValidationSummary:
        """Build a save-readiness summary for ``record``."""
        empty_fields = empty_required_fields(record, self.required_fields(record))
        return ValidationSummary(
            has_data=has_form_data(record),
            has_required=not empty_fields,
            result=self.validate(record),
            empty_fields=empty_fields,
            total_fields=len(record),
            filled_fields=filled_field_count(record),
        )


def validate_form(
    record: Mapping[str, Any],
    base_rules: Mapping[str, Any],
    conditional_rules: Optional[ConditionalRules] = None,
) -> ValidationResult:
    """Validate ``record`` against base rules merged with conditional rules."""
    return FormValidator(base_rules, conditional_rules).validate(record)


def validation_summary(
    record: Mapping[str, Any],
    base_rules: Mapping[str, Any],
    conditional_rules: Optional[ConditionalRules] = None,
) -> ValidationSummary:
    """Save-readiness summary of ``record`` for the given rules."""
    return FormValidator(base_rules, conditional_rules).summarize(record)
