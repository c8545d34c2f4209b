"""Declarative field rules.

Each rule kind is its own frozen pydantic model carrying only the attributes
that make sense for that kind, so a ``pattern`` on a date rule or a
``min_length`` on an integer rule is rejected when the rule is built rather
than silently ignored at validation time. ``RuleSpec`` is the closed union of
all variants, discriminated on ``kind``.

Rules can be written with snake_case or camelCase attribute names, which lets
rule tables exported by the mobile client be loaded as-is::

    rules_from_mapping({
        "age": {"kind": "age", "required": True},
        "religionSpecify": {"kind": "text", "allowEmpty": True},
    })
"""

import re
from datetime import date
from enum import Enum
from typing import Annotated, Any, Callable, Dict, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from trialforms.utils.exceptions import RuleConfigurationError
from trialforms.utils.logging import get_logger

logger = get_logger(__name__)

Number = Union[int, float]
Record = Mapping[str, Any]
CustomPredicate = Callable[[Any, Record], Optional[str]]


class RuleKind(str, Enum):
    """Kinds of field rules. The kind selects the type-specific checks."""

    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    AGE = "age"
    PERCENTAGE = "percentage"
    CURRENCY = "currency"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    CUSTOM = "custom"


class _BaseRule(BaseModel):
    """Attributes shared by every rule kind."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    required: bool = False
    allow_empty: bool = False
    message: Optional[str] = None
    custom: Optional[CustomPredicate] = None

    @model_validator(mode="after")
    def check_empty_policy(self) -> "_BaseRule":
        if self.required and self.allow_empty:
            raise ValueError("a rule cannot be both required and allow_empty")
        return self

    @property
    def rule_kind(self) -> RuleKind:
        """The kind as an enum member."""
        return RuleKind(getattr(self, "kind"))


class _PatternRule(_BaseRule):
    """Kinds that accept an extra pattern on the trimmed value."""

    pattern: Optional[re.Pattern] = None


class _BoundedRule(_PatternRule):
    """Numeric kinds: bounds apply to the parsed magnitude."""

    min: Optional[Number] = None
    max: Optional[Number] = None

    @model_validator(mode="after")
    def check_bounds(self) -> "_BoundedRule":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) is greater than max ({self.max})")
        return self


class TextRule(_PatternRule):
    """Free text; only length bounds apply."""

    kind: Literal["text"] = "text"
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_lengths(self) -> "TextRule":
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(
                f"min_length ({self.min_length}) is greater than max_length ({self.max_length})"
            )
        return self


class IntegerRule(_BoundedRule):
    """Whole non-negative numbers."""

    kind: Literal["integer"] = "integer"


class DecimalRule(_BoundedRule):
    """Numbers with an optional fractional part."""

    kind: Literal["decimal"] = "decimal"


class CurrencyRule(_BoundedRule):
    """Amounts with at most two fractional digits."""

    kind: Literal["currency"] = "currency"


class AgeRule(_BoundedRule):
    """Age in whole years, bounded to 1-120 unless overridden."""

    kind: Literal["age"] = "age"
    min: Optional[Number] = 1
    max: Optional[Number] = 120


class PercentageRule(_BoundedRule):
    """Percentage, bounded to 0-100 unless overridden."""

    kind: Literal["percentage"] = "percentage"
    min: Optional[Number] = 0
    max: Optional[Number] = 100


class EmailRule(_PatternRule):
    kind: Literal["email"] = "email"


class PhoneRule(_PatternRule):
    kind: Literal["phone"] = "phone"


class DateRule(_BaseRule):
    """Calendar date entered as DD-MM-YYYY."""

    kind: Literal["date"] = "date"
    min_date: Optional[date] = None
    max_date: Optional[date] = None

    @model_validator(mode="after")
    def check_date_bounds(self) -> "DateRule":
        if self.min_date and self.max_date and self.min_date > self.max_date:
            raise ValueError(
                f"min_date ({self.min_date}) is after max_date ({self.max_date})"
            )
        return self


class CustomRule(_BaseRule):
    """No type checks; the predicate decides."""

    kind: Literal["custom"] = "custom"
    custom: CustomPredicate


RuleSpec = Annotated[
    Union[
        TextRule,
        IntegerRule,
        DecimalRule,
        CurrencyRule,
        AgeRule,
        PercentageRule,
        EmailRule,
        PhoneRule,
        DateRule,
        CustomRule,
    ],
    Field(discriminator="kind"),
]

RULE_CLASSES: Dict[RuleKind, type] = {
    RuleKind.TEXT: TextRule,
    RuleKind.INTEGER: IntegerRule,
    RuleKind.DECIMAL: DecimalRule,
    RuleKind.CURRENCY: CurrencyRule,
    RuleKind.AGE: AgeRule,
    RuleKind.PERCENTAGE: PercentageRule,
    RuleKind.EMAIL: EmailRule,
    RuleKind.PHONE: PhoneRule,
    RuleKind.DATE: DateRule,
    RuleKind.CUSTOM: CustomRule,
}

if set(RULE_CLASSES) != set(RuleKind):
    raise RuntimeError("Every RuleKind needs a rule class")

_rule_adapter: TypeAdapter = TypeAdapter(RuleSpec)

# Boolean flags used by older rule tables in place of an explicit kind
_LEGACY_KIND_FLAGS = ("email", "phone", "date")
_KIND_VALUES = frozenset(kind.value for kind in RuleKind)
# Kind names used by older rule tables
_KIND_ALIASES = {"number": RuleKind.INTEGER.value}


def _infer_kind(data: Dict[str, Any]) -> str:
    flagged = [flag for flag in _LEGACY_KIND_FLAGS if data.pop(flag, False) is True]
    if flagged:
        return flagged[0]
    if "min" in data or "max" in data:
        return RuleKind.INTEGER.value
    return RuleKind.TEXT.value


def _accepted_keys(rule_class: type) -> set:
    keys = set()
    for name, info in rule_class.model_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
    return keys


def rule_from_mapping(data: Mapping[str, Any], field: Optional[str] = None) -> Any:
    """Build a rule from a plain mapping.

    A missing ``kind`` is inferred from legacy flags (``email``/``phone``/
    ``date``) or numeric bounds, and ``number`` builds an integer rule. An
    unrecognised ``kind`` falls back to ``text``: attributes the text rule
    does not understand are dropped with a warning instead of failing the
    whole form definition.

    Raises:
        RuleConfigurationError: If the rule is contradictory or malformed
    """
    payload = dict(data)
    raw_kind = payload.get("kind")
    if isinstance(raw_kind, RuleKind):
        raw_kind = raw_kind.value
    if isinstance(raw_kind, str):
        raw_kind = _KIND_ALIASES.get(raw_kind, raw_kind)

    if raw_kind is None:
        payload["kind"] = _infer_kind(payload)
    elif str(raw_kind) not in _KIND_VALUES:
        accepted = _accepted_keys(TextRule)
        dropped = sorted(key for key in payload if key not in accepted and key != "kind")
        logger.warning(
            "unknown_rule_kind",
            field=field,
            kind=str(raw_kind),
            fallback=RuleKind.TEXT.value,
            dropped=dropped,
        )
        payload = {key: value for key, value in payload.items() if key in accepted}
        payload["kind"] = RuleKind.TEXT.value
    else:
        payload["kind"] = str(raw_kind)

    try:
        return _rule_adapter.validate_python(payload)
    except ValidationError as e:
        raise RuleConfigurationError(
            f"Invalid rule for field '{field}': {e}", field=field
        ) from e


def rules_from_mapping(rules: Mapping[str, Any]) -> Dict[str, Any]:
    """Build a rule map; values may be rule models or plain mappings."""
    built: Dict[str, Any] = {}
    for field_name, spec in rules.items():
        if isinstance(spec, _BaseRule):
            built[field_name] = spec
        elif isinstance(spec, Mapping):
            built[field_name] = rule_from_mapping(spec, field=field_name)
        else:
            raise RuleConfigurationError(
                f"Rule for field '{field_name}' must be a rule or a mapping, "
                f"got {type(spec).__name__}",
                field=field_name,
            )
    return built


def is_rule(value: Any) -> bool:
    """Return True for any rule model."""
    return isinstance(value, _BaseRule)

