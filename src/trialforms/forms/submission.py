"""Submission gate.

Combines three checks into one save decision, evaluated in a fixed order
where the first failure wins:

1. the record holds at least one value (``NO_DATA``),
2. the user interacted within the timeout window (``STALE_INTERACTION``),
3. the record passes base + conditional rules (``VALIDATION_FAILED``).

Emptiness is checked first so a blank form never produces a wall of
field-level errors; a validation rejection carries every field error at once.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from trialforms.config import DEFAULT_INTERACTION_TIMEOUT_MS
from trialforms.forms.interaction import InteractionTracker
from trialforms.utils.logging import get_logger
from trialforms.validation.form_validator import ConditionalRules, FormValidator
from trialforms.validation.record import has_form_data

logger = get_logger(__name__)


class RejectionReason(Enum):
    """Why the gate refused a save."""

    NO_DATA = "NO_DATA"
    STALE_INTERACTION = "STALE_INTERACTION"
    VALIDATION_FAILED = "VALIDATION_FAILED"


NO_DATA_TITLE = "No Data Entered"
NO_DATA_MESSAGE = "Please fill in at least one field before submitting the form."
STALE_TITLE = "No Recent Activity"
STALE_MESSAGE = (
    "Please interact with the form before submitting. Your session may have expired."
)
VALIDATION_TITLE = "Validation Error"


@dataclass(frozen=True)
class Ready:
    """The record may be saved."""

    is_ready = True


@dataclass(frozen=True)
class Rejected:
    """The record may not be saved.

    Attributes:
        reason: Which check failed
        title: Short heading for an alert or toast
        message: Summary text for the user
        errors: Field errors, only populated for ``VALIDATION_FAILED``
    """

    reason: RejectionReason
    title: str
    message: str
    errors: Mapping[str, str] = field(default_factory=dict)

    is_ready = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "reason": self.reason.value,
            "title": self.title,
            "message": self.message,
            "errors": dict(self.errors),
        }


SubmissionDecision = Union[Ready, Rejected]


def _validation_message(errors: Mapping[str, str]) -> str:
    lines = "\n".join(message for message in errors.values() if message)
    return f"Please fix the following errors:\n\n{lines}"


class SubmissionGate:
    """Authorises or rejects a save for one form definition."""

    def __init__(
        self,
        validator: FormValidator,
        timeout_ms: float = DEFAULT_INTERACTION_TIMEOUT_MS,
    ):
        """Initialize submission gate.

        Args:
            validator: Validator holding the form's base and conditional rules
            timeout_ms: Freshness window applied to the interaction tracker
        """
        self.validator = validator
        self.timeout_ms = timeout_ms

    def evaluate(
        self,
        record: Mapping[str, Any],
        interaction: InteractionTracker,
        now: Optional[float] = None,
    ) -> SubmissionDecision:
        """Decide whether ``record`` may be saved."""
        if not has_form_data(record):
            logger.info("submission_rejected", reason=RejectionReason.NO_DATA.value)
            return Rejected(RejectionReason.NO_DATA, NO_DATA_TITLE, NO_DATA_MESSAGE)

        if not interaction.is_fresh(now, self.timeout_ms):
            logger.info(
                "submission_rejected",
                reason=RejectionReason.STALE_INTERACTION.value,
                last_touch_at=interaction.last_touch_at,
                timeout_ms=self.timeout_ms,
            )
            return Rejected(
                RejectionReason.STALE_INTERACTION, STALE_TITLE, STALE_MESSAGE
            )

        result = self.validator.validate(record)
        if not result.is_valid:
            logger.info(
                "submission_rejected",
                reason=RejectionReason.VALIDATION_FAILED.value,
                failed_fields=sorted(result.errors),
            )
            return Rejected(
                RejectionReason.VALIDATION_FAILED,
                VALIDATION_TITLE,
                _validation_message(result.errors),
                errors=dict(result.errors),
            )

        logger.info("submission_ready", field_count=len(record))
        return Ready()


def evaluate_submission(
    record: Mapping[str, Any],
    base_rules: Mapping[str, Any],
    conditional_rules: Optional[ConditionalRules],
    interaction: InteractionTracker,
    now: Optional[float] = None,
    timeout_ms: float = DEFAULT_INTERACTION_TIMEOUT_MS,
) -> SubmissionDecision:
    """One-shot gate evaluation without keeping a ``SubmissionGate`` around."""
    gate = SubmissionGate(FormValidator(base_rules, conditional_rules), timeout_ms)
    return gate.evaluate(record, interaction, now)
