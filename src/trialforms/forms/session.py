"""
Form Session.

A ``FormSession`` owns the mutable state of one open form: the record being
edited, its interaction tracker, the live field errors and the submit flag.
Validation and the save decision are delegated to ``FormValidator`` and
``SubmissionGate``, which stay stateless and shareable between sessions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from trialforms.config import FormConfig
from trialforms.forms.interaction import Clock, InteractionTracker, monotonic_ms
from trialforms.forms.submission import Rejected, SubmissionDecision, SubmissionGate
from trialforms.utils.debounce import Debouncer
from trialforms.utils.exceptions import SubmissionInProgressError
from trialforms.utils.logging import get_logger
from trialforms.validation.form_validator import ConditionalRules, FormValidator
from trialforms.validation.record import has_form_data, sanitize_record
from trialforms.validation.results import ValidationResult

logger = get_logger(__name__)

SubmitHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class SubmissionStatus(Enum):
    """Final state of a submit attempt."""

    SAVED = "saved"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of ``FormSession.submit``.

    Attributes:
        status: Whether the record was saved, rejected by the gate, or the
            save handler raised
        decision: Gate decision that led here
        result: Return value of the save handler when saved
        error: Exception raised by the save handler when failed
    """

    status: SubmissionStatus
    decision: SubmissionDecision
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        """Whether the record was saved."""
        return self.status is SubmissionStatus.SAVED

    @property
    def rejection(self) -> Optional[Rejected]:
        """The gate rejection, if the gate refused the save."""
        if isinstance(self.decision, Rejected):
            return self.decision
        return None


@dataclass
class _SessionErrors:
    messages: Dict[str, str] = field(default_factory=dict)

    def set(self, name: str, message: Optional[str]) -> None:
        if message:
            self.messages[name] = message
        else:
            self.messages.pop(name, None)


class FormSession:
    """Stateful editing session for one form instance."""

    def __init__(
        self,
        initial_data: Mapping[str, Any],
        base_rules: Mapping[str, Any],
        conditional_rules: Optional[ConditionalRules] = None,
        config: Optional[FormConfig] = None,
        clock: Clock = monotonic_ms,
    ):
        """Initialize form session.

        Args:
            initial_data: Record the form starts from and returns to on reset
            base_rules: Field name -> rule model or rule mapping
            conditional_rules: Function computing extra rules from the record
            config: Per-form behaviour; defaults apply when omitted
            clock: Millisecond clock for interaction tracking
        """
        self.config = config or FormConfig()
        self.initial_data: Mapping[str, Any] = dict(initial_data)
        self.validator = FormValidator(
            base_rules, conditional_rules, self.config.allow_empty_defaults
        )
        self.gate = SubmissionGate(self.validator, self.config.interaction_timeout_ms)
        self.interaction = InteractionTracker(
            self.config.interaction_timeout_ms, clock=clock
        )
        self._data: Dict[str, Any] = dict(initial_data)
        self._errors = _SessionErrors()
        self._submitting = False
        self._field_debouncers: Dict[str, Debouncer] = {}

    @property
    def data(self) -> Dict[str, Any]:
        """Copy of the current record."""
        return dict(self._data)

    @property
    def errors(self) -> Dict[str, str]:
        """Current non-empty field errors."""
        return dict(self._errors.messages)

    @property
    def is_submitting(self) -> bool:
        """Whether a save handler is running."""
        return self._submitting

    @property
    def is_modified(self) -> bool:
        """Whether the record differs from the initial data."""
        return self._data != dict(self.initial_data)

    @property
    def has_any_data(self) -> bool:
        """Whether any field holds a value."""
        return has_form_data(self._data)

    def handle_input_change(
        self, field_name: str, value: Any, validate_on_change: bool = True
    ) -> Optional[str]:
        """Apply a user edit to one field.

        Every edit refreshes the interaction tracker. When
        ``validate_on_change`` is set the field is re-validated against the
        updated record and its error (or None) is returned.
        """
        self._data[field_name] = value
        self.interaction.touch(field_name)
        if not validate_on_change:
            return self._errors.messages.get(field_name)
        return self.validate_field(field_name)

    def handle_input_change_debounced(self, field_name: str, value: Any) -> None:
        """Apply an edit now and validate the field once typing pauses.

        Each field has its own debouncer, so editing one field never
        supersedes the pending validation of another. Must be called from a
        running event loop.
        """
        self.handle_input_change(field_name, value, validate_on_change=False)
        debouncer = self._field_debouncers.get(field_name)
        if debouncer is None:
            debouncer = Debouncer(self.config.debounce_ms)
            self._field_debouncers[field_name] = debouncer
        debouncer.schedule(self.validate_field, (field_name,))

    def validate_field(self, field_name: str) -> Optional[str]:
        """Re-validate one field against the current record."""
        result = self.validator.validate_field(self._data, field_name)
        self._errors.set(field_name, result.error)
        return result.error

    def cancel_pending_validation(self) -> None:
        """Drop every debounced field validation that has not fired yet."""
        for debouncer in self._field_debouncers.values():
            debouncer.cancel()

    def close(self) -> None:
        """Dispose the session's debouncers."""
        for debouncer in self._field_debouncers.values():
            debouncer.close()
        self._field_debouncers.clear()

    def set_fields(self, values: Mapping[str, Any]) -> None:
        """Apply several edits at once without per-field validation."""
        for name, value in values.items():
            self._data[name] = value
            self.interaction.touch(name)

    def validate(self) -> ValidationResult:
        """Validate the whole record and replace the field errors."""
        result = self.validator.validate(self._data)
        self._errors = _SessionErrors(dict(result.errors))
        return result

    def get_field_error(self, field_name: str) -> Optional[str]:
        """Error currently shown for ``field_name``."""
        return self._errors.messages.get(field_name)

    def has_field_error(self, field_name: str) -> bool:
        """Whether ``field_name`` currently shows an error."""
        return field_name in self._errors.messages

    def clear_field_error(self, field_name: str) -> None:
        """Hide the error for ``field_name`` until it is validated again."""
        self._errors.set(field_name, None)

    def has_recent_interaction(self, now: Optional[float] = None) -> bool:
        """Whether the user touched the form within the timeout window."""
        return self.interaction.is_fresh(now)

    def evaluate(self, now: Optional[float] = None) -> SubmissionDecision:
        """Ask the gate about the current record without submitting."""
        return self.gate.evaluate(self._data, self.interaction, now)

    def is_ready_to_submit(self, now: Optional[float] = None) -> bool:
        """Whether a submit would reach the save handler right now."""
        if self._submitting:
            return False
        return self.evaluate(now).is_ready

    async def submit(
        self, on_submit: SubmitHandler, now: Optional[float] = None
    ) -> SubmissionOutcome:
        """Run the gate and, when it passes, hand the sanitised record to ``on_submit``.

        A rejection populates the field errors for ``VALIDATION_FAILED``.
        An exception from ``on_submit`` is logged and returned as a
        ``FAILED`` outcome carrying the exception.

        Raises:
            SubmissionInProgressError: If another submit is still running
        """
        if self._submitting:
            raise SubmissionInProgressError()

        decision = self.evaluate(now)
        if isinstance(decision, Rejected):
            if decision.errors:
                self._errors = _SessionErrors(dict(decision.errors))
            return SubmissionOutcome(SubmissionStatus.REJECTED, decision)

        payload = sanitize_record(self._data)
        self._submitting = True
        try:
            result = await on_submit(payload)
        except Exception as e:
            logger.error(
                "submission_failed", error=str(e), error_type=type(e).__name__
            )
            return SubmissionOutcome(SubmissionStatus.FAILED, decision, error=e)
        finally:
            self._submitting = False

        self._errors = _SessionErrors()
        logger.info("submission_saved", field_count=len(payload))
        return SubmissionOutcome(SubmissionStatus.SAVED, decision, result=result)

    def clear(self) -> None:
        """Return to the initial data and forget all interaction."""
        self.cancel_pending_validation()
        self._data = dict(self.initial_data)
        self._errors = _SessionErrors()
        self.interaction.reset()

    def reset(self) -> None:
        """Return to the initial data, keeping interaction history."""
        self.cancel_pending_validation()
        self._data = dict(self.initial_data)
        self._errors = _SessionErrors()


@dataclass(frozen=True)
class FormDefinition:
    """Static description of a form: its blank record and its rules."""

    name: str
    initial_data: Mapping[str, Any]
    base_rules: Mapping[str, Any]
    conditional_rules: Optional[ConditionalRules] = None

    @property
    def total_fields(self) -> int:
        """Number of fields on the form."""
        return len(self.initial_data)

    def validator(self, config: Optional[FormConfig] = None) -> FormValidator:
        """Validator for this form."""
        defaults = config.allow_empty_defaults if config is not None else None
        return FormValidator(self.base_rules, self.conditional_rules, defaults)

    def create_session(
        self, config: Optional[FormConfig] = None, clock: Clock = monotonic_ms
    ) -> FormSession:
        """Open a new editing session starting from the blank record."""
        logger.debug("form_session_created", form=self.name)
        return FormSession(
            self.initial_data,
            self.base_rules,
            self.conditional_rules,
            config=config,
            clock=clock,
        )
