"""Whole-record helpers used around validation.

These mirror what a data-capture screen needs besides per-field errors:
whether anything was entered at all, which mandatory fields are still
blank, and a trimmed copy of the record to hand to an API client.
"""

from typing import Any, Dict, Iterable, List, Mapping

from trialforms.validation.field_validator import is_empty_value


def has_form_data(record: Mapping[str, Any]) -> bool:
    """Return True if at least one value in the record is non-empty.

    ``0`` and ``False`` count as data; only None, blank strings and empty
    collections are treated as missing.
    """
    return any(not is_empty_value(value) for value in record.values())


def empty_required_fields(
    record: Mapping[str, Any], required_fields: Iterable[str]
) -> List[str]:
    """Return the required fields whose value is missing, in the given order."""
    return [name for name in required_fields if is_empty_value(record.get(name))]


def has_required_data(record: Mapping[str, Any], required_fields: Iterable[str]) -> bool:
    """Return True if every required field has a value."""
    return not empty_required_fields(record, required_fields)


def filled_field_count(record: Mapping[str, Any]) -> int:
    """Count the fields that hold a value."""
    return sum(1 for value in record.values() if not is_empty_value(value))


def sanitize_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Trim string values and drop None values.

    Callers run this on a record the submission gate accepted, before
    forwarding it to storage or an API client.
    """
    sanitized: Dict[str, Any] = {}
    for key, value in record.items():
        if value is None:
            continue
        sanitized[key] = value.strip() if isinstance(value, str) else value
    return sanitized
