"""Forms Module.

Interaction tracking, the submission gate and stateful form sessions, plus
the questionnaire definitions built on them.
"""

from .interaction import InteractionState, InteractionTracker, monotonic_ms
from .session import (
    FormDefinition,
    FormSession,
    SubmissionOutcome,
    SubmissionStatus,
)
from .socio_demographic import SOCIO_DEMOGRAPHIC_FORM
from .submission import (
    Ready,
    Rejected,
    RejectionReason,
    SubmissionDecision,
    SubmissionGate,
    evaluate_submission,
)

__all__ = [
    "InteractionState",
    "InteractionTracker",
    "monotonic_ms",
    "Ready",
    "Rejected",
    "RejectionReason",
    "SubmissionDecision",
    "SubmissionGate",
    "evaluate_submission",
    "FormDefinition",
    "FormSession",
    "SubmissionOutcome",
    "SubmissionStatus",
    "SOCIO_DEMOGRAPHIC_FORM",
]
