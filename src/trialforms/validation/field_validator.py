"""Single-value validation.

``validate_value`` runs one value through one rule in a fixed order:
emptiness policy, kind-specific checks, the optional pattern, then the
optional custom predicate. It is a pure function and reports every data
problem as a ``FieldResult`` instead of raising.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping, Optional, Union

from trialforms.validation.results import ErrorKind, FieldResult
from trialforms.validation.rules import RuleKind

REQUIRED_MESSAGE = "This field is required"

INTEGER_RE = re.compile(r"^\d+$")
DECIMAL_RE = re.compile(r"^\d*\.?\d+$")
CURRENCY_RE = re.compile(r"^\d+(\.\d{1,2})?$")
PERCENTAGE_RE = re.compile(r"^\d+(\.\d+)?$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[A-Za-z]{2,}$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{6,14}$")
PHONE_SEPARATORS_RE = re.compile(r"[\s\-().]")
DATE_RE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")

Checker = Callable[[Any, Any], Optional[FieldResult]]


def is_empty_value(value: Any) -> bool:
    """Return True for None, blank strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def _normalize(value: Any) -> Any:
    """Trim strings and stringify scalars; collections pass through."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _fail(rule: Any, kind: ErrorKind, default: str) -> FieldResult:
    return FieldResult.failed(kind, rule.message or default)


def _as_decimal(bound: Union[int, float]) -> Decimal:
    return Decimal(str(bound))


def _check_range(rule: Any, number: Decimal) -> Optional[FieldResult]:
    if rule.min is not None and number < _as_decimal(rule.min):
        return _fail(rule, ErrorKind.OUT_OF_RANGE, f"Minimum value is {rule.min}")
    if rule.max is not None and number > _as_decimal(rule.max):
        return _fail(rule, ErrorKind.OUT_OF_RANGE, f"Maximum value is {rule.max}")
    return None


def _check_numeric(
    rule: Any, text: str, shape: "re.Pattern[str]", shape_message: str
) -> Optional[FieldResult]:
    if not shape.match(text):
        return _fail(rule, ErrorKind.TYPE_MISMATCH, shape_message)
    try:
        number = Decimal(text)
    except InvalidOperation:
        return _fail(rule, ErrorKind.TYPE_MISMATCH, shape_message)
    return _check_range(rule, number)


def _check_integer(rule: Any, text: str) -> Optional[FieldResult]:
    return _check_numeric(rule, text, INTEGER_RE, "Please enter numbers only")


def _check_decimal(rule: Any, text: str) -> Optional[FieldResult]:
    return _check_numeric(rule, text, DECIMAL_RE, "Please enter a valid decimal number")


def _check_currency(rule: Any, text: str) -> Optional[FieldResult]:
    return _check_numeric(rule, text, CURRENCY_RE, "Please enter a valid currency amount")


def _check_labelled_range(rule: Any, number: Decimal, label: str) -> Optional[FieldResult]:
    if rule.min is None or rule.max is None:
        return _check_range(rule, number)
    if number < _as_decimal(rule.min) or number > _as_decimal(rule.max):
        return _fail(
            rule,
            ErrorKind.OUT_OF_RANGE,
            f"{label} must be between {rule.min} and {rule.max}",
        )
    return None


def _check_age(rule: Any, text: str) -> Optional[FieldResult]:
    if not INTEGER_RE.match(text):
        return _fail(rule, ErrorKind.TYPE_MISMATCH, "Please enter numbers only")
    return _check_labelled_range(rule, Decimal(text), "Age")


def _check_percentage(rule: Any, text: str) -> Optional[FieldResult]:
    if not PERCENTAGE_RE.match(text):
        return _fail(rule, ErrorKind.TYPE_MISMATCH, "Please enter a valid percentage")
    return _check_labelled_range(rule, Decimal(text), "Percentage")


def _check_email(rule: Any, text: str) -> Optional[FieldResult]:
    if not EMAIL_RE.match(text):
        return _fail(rule, ErrorKind.TYPE_MISMATCH, "Please enter a valid email address")
    return None


def _check_phone(rule: Any, text: str) -> Optional[FieldResult]:
    if not PHONE_RE.match(PHONE_SEPARATORS_RE.sub("", text)):
        return _fail(rule, ErrorKind.TYPE_MISMATCH, "Please enter a valid phone number")
    return None


def parse_ui_date(text: str) -> Optional[date]:
    """Parse DD-MM-YYYY into a date, or None if it is not a real calendar day."""
    match = DATE_RE.match(text)
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _check_date(rule: Any, text: str) -> Optional[FieldResult]:
    if not DATE_RE.match(text):
        return _fail(
            rule, ErrorKind.TYPE_MISMATCH, "Please enter date in DD-MM-YYYY format"
        )
    parsed = parse_ui_date(text)
    if parsed is None:
        return _fail(rule, ErrorKind.TYPE_MISMATCH, "Please enter a valid date")
    if rule.min_date and parsed < rule.min_date:
        return _fail(
            rule,
            ErrorKind.OUT_OF_RANGE,
            f"Date must be on or after {rule.min_date.strftime('%d-%m-%Y')}",
        )
    if rule.max_date and parsed > rule.max_date:
        return _fail(
            rule,
            ErrorKind.OUT_OF_RANGE,
            f"Date must be on or before {rule.max_date.strftime('%d-%m-%Y')}",
        )
    return None


def _check_text(rule: Any, value: Any) -> Optional[FieldResult]:
    length = len(value)
    unit = "items" if isinstance(value, (list, tuple, set, frozenset)) else "characters"
    if rule.min_length is not None and length < rule.min_length:
        return _fail(
            rule,
            ErrorKind.LENGTH_OUT_OF_RANGE,
            f"Minimum length is {rule.min_length} {unit}",
        )
    if rule.max_length is not None and length > rule.max_length:
        return _fail(
            rule,
            ErrorKind.LENGTH_OUT_OF_RANGE,
            f"Maximum length is {rule.max_length} {unit}",
        )
    return None


def _check_custom_kind(rule: Any, value: Any) -> Optional[FieldResult]:
    return None


_CHECKERS: Dict[RuleKind, Checker] = {
    RuleKind.TEXT: _check_text,
    RuleKind.INTEGER: _check_integer,
    RuleKind.DECIMAL: _check_decimal,
    RuleKind.CURRENCY: _check_currency,
    RuleKind.AGE: _check_age,
    RuleKind.PERCENTAGE: _check_percentage,
    RuleKind.EMAIL: _check_email,
    RuleKind.PHONE: _check_phone,
    RuleKind.DATE: _check_date,
    RuleKind.CUSTOM: _check_custom_kind,
}

if set(_CHECKERS) != set(RuleKind):
    raise RuntimeError("Every RuleKind needs a checker")

# Kinds whose checker understands collection values
_COLLECTION_KINDS = frozenset({RuleKind.TEXT, RuleKind.CUSTOM})


def _run_custom(
    rule: Any, value: Any, record: Mapping[str, Any]
) -> Optional[FieldResult]:
    if rule.custom is None:
        return None
    custom_error = rule.custom(value, record)
    if custom_error:
        return FieldResult.failed(ErrorKind.CUSTOM_REJECTED, custom_error)
    return None


def validate_value(
    value: Any, rule: Any, record: Optional[Mapping[str, Any]] = None
) -> FieldResult:
    """Validate one value against one rule.

    Args:
        value: Raw value from the record
        rule: Any rule model from ``trialforms.validation.rules``
        record: The whole record, handed to the custom predicate

    Returns:
        FieldResult
    """
    context: Mapping[str, Any] = record if record is not None else {}

    if is_empty_value(value):
        if rule.allow_empty:
            return FieldResult.passed()
        if rule.required:
            return _fail(rule, ErrorKind.REQUIRED, REQUIRED_MESSAGE)
        # Optional and blank: type checks do not apply, cross-field predicates still do
        blank = "" if value is None or isinstance(value, str) else value
        return _run_custom(rule, blank, context) or FieldResult.passed()

    normalized = _normalize(value)
    kind = rule.rule_kind

    if not isinstance(normalized, str) and kind not in _COLLECTION_KINDS:
        return _fail(rule, ErrorKind.TYPE_MISMATCH, "Please enter a single value")

    failure = _CHECKERS[kind](rule, normalized)
    if failure is not None:
        return failure

    pattern = getattr(rule, "pattern", None)
    if pattern is not None and isinstance(normalized, str) and not pattern.search(normalized):
        return _fail(rule, ErrorKind.INVALID_FORMAT, "Invalid format")

    return _run_custom(rule, normalized, context) or FieldResult.passed()
