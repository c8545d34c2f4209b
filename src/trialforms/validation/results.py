"""Validation result types and the field-level error taxonomy."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ErrorKind(Enum):
    """Kinds of field-level validation failures."""

    REQUIRED = "required"  # Value missing where mandatory
    TYPE_MISMATCH = "type_mismatch"  # Fails the kind-specific shape
    OUT_OF_RANGE = "out_of_range"  # Numeric or date bound violated
    LENGTH_OUT_OF_RANGE = "length_out_of_range"
    INVALID_FORMAT = "invalid_format"  # Explicit pattern not matched
    CUSTOM_REJECTED = "custom_rejected"


@dataclass(frozen=True)
class FieldResult:
    """Outcome of validating one value against one rule."""

    ok: bool
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None

    @classmethod
    def passed(cls) -> "FieldResult":
        """Build a passing result."""
        return cls(ok=True)

    @classmethod
    def failed(cls, kind: ErrorKind, error: str) -> "FieldResult":
        """Build a failing result."""
        return cls(ok=False, error=error, kind=kind)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a whole record.

    ``is_valid`` is derived from ``errors`` so the two can never disagree.
    """

    errors: Mapping[str, str] = field(default_factory=dict)
    error_kinds: Mapping[str, ErrorKind] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """Whether no field failed."""
        return not self.errors

    def error_for(self, field_name: str) -> Optional[str]:
        """Return the error message for a field, if any."""
        return self.errors.get(field_name)

    def has_error(self, field_name: Optional[str] = None) -> bool:
        """Check one field, or the whole record when no field is given."""
        if field_name is None:
            return bool(self.errors)
        return field_name in self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "is_valid": self.is_valid,
            "errors": dict(self.errors),
            "error_kinds": {name: kind.value for name, kind in self.error_kinds.items()},
        }
