"""Custom exceptions for the trialforms engine.

Invalid participant input is never an exception: it is reported through
``FieldResult`` / ``ValidationResult`` / ``SubmissionDecision`` values. The
classes below are reserved for programmer errors and lifecycle misuse.
"""

from typing import Optional


class TrialFormsException(Exception):
    """Base exception for all trialforms exceptions."""

    def __init__(self, message: str, code: Optional[str] = None):
        """Initialize exception.

        Args:
            message: Error message
            code: Optional error code
        """
        super().__init__(message)
        self.code = code


class RuleConfigurationError(TrialFormsException):
    """Raised when a rule definition is contradictory or malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        """Initialize RuleConfigurationError."""
        super().__init__(message, "RULE_CONFIGURATION_ERROR")
        self.field = field


class DebounceException(TrialFormsException):
    """Base exception for debounce-related errors."""


class DebouncerClosedError(DebounceException):
    """Raised when scheduling on a debouncer that was already closed."""

    def __init__(self, message: str = "Debouncer has been closed"):
        """Initialize DebouncerClosedError."""
        super().__init__(message, "DEBOUNCER_CLOSED")


class DebounceCancelledError(DebounceException):
    """Raised to callers awaiting a debounced call that was cancelled."""

    def __init__(self, message: str = "Debounced call was cancelled"):
        """Initialize DebounceCancelledError."""
        super().__init__(message, "DEBOUNCE_CANCELLED")


class SubmissionInProgressError(TrialFormsException):
    """Raised when a form is submitted while a previous save is running."""

    def __init__(self, message: str = "A submission is already in progress"):
        """Initialize SubmissionInProgressError."""
        super().__init__(message, "SUBMISSION_IN_PROGRESS")
