"""Reusable rules for fields that recur across assessment forms.

Rules are frozen models inside a read-only mapping; form definitions pick
from them explicitly and use ``model_copy(update=...)`` to specialise.
"""

from types import MappingProxyType
from typing import Any, Mapping

from trialforms.validation.rules import (
    AgeRule,
    DateRule,
    EmailRule,
    IntegerRule,
    PhoneRule,
    TextRule,
)

COMMON_RULES: Mapping[str, Any] = MappingProxyType(
    {
        "required": TextRule(required=True, message="This field is required"),
        "email": EmailRule(message="Please enter a valid email address"),
        "phone": PhoneRule(message="Please enter a valid phone number"),
        "age": AgeRule(required=True, message="Age must be between 1 and 120"),
        "participant_id": IntegerRule(
            required=True, min=1, message="Participant ID must be a positive number"
        ),
        "date": DateRule(
            required=True, message="Please enter a valid date (DD-MM-YYYY)"
        ),
        "name": TextRule(
            required=True,
            min_length=2,
            max_length=50,
            message="Name must be between 2 and 50 characters",
        ),
        "text": TextRule(
            required=True,
            min_length=1,
            max_length=500,
            message="Text must be between 1 and 500 characters",
        ),
        "number": IntegerRule(
            required=True, min=0, message="Please enter a valid number"
        ),
        "children": IntegerRule(
            min=0, max=20, message="Number of children must be between 0 and 20"
        ),
        "treatment_duration": IntegerRule(
            min=0,
            max=120,
            message="Treatment duration must be between 0 and 120 months",
        ),
    }
)


def required_choice(message: str) -> TextRule:
    """Rule for a mandatory single-choice question (pill group, dropdown)."""
    return TextRule(required=True, message=message)
