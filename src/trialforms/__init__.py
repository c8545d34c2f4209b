"""trialforms: data-capture validation engine for clinical trial questionnaires.

Declarative field rules, conditional form validation, interaction tracking
and the submission gate that decides whether a record may be saved.
"""

from trialforms.config import FormConfig
from trialforms.forms import (
    SOCIO_DEMOGRAPHIC_FORM,
    FormDefinition,
    FormSession,
    InteractionTracker,
    Ready,
    Rejected,
    RejectionReason,
    SubmissionGate,
    evaluate_submission,
)
from trialforms.utils.logging import get_logger, setup_logging
from trialforms.validation import (
    FormValidator,
    RuleKind,
    ValidationResult,
    rules_from_mapping,
    validate_form,
    validate_value,
)

__version__ = "1.0.0"

__all__ = [
    "FormConfig",
    "FormDefinition",
    "FormSession",
    "FormValidator",
    "InteractionTracker",
    "Ready",
    "Rejected",
    "RejectionReason",
    "RuleKind",
    "SOCIO_DEMOGRAPHIC_FORM",
    "SubmissionGate",
    "ValidationResult",
    "evaluate_submission",
    "get_logger",
    "rules_from_mapping",
    "setup_logging",
    "validate_form",
    "validate_value",
]
