"""Test stateful form sessions."""

import asyncio

import pytest

from trialforms.config import FormConfig
from trialforms.forms.session import FormSession, SubmissionStatus
from trialforms.forms.submission import RejectionReason
from trialforms.utils.exceptions import SubmissionInProgressError
from trialforms.validation.rules import AgeRule, TextRule

INITIAL = {"age": "", "gender": "", "notes": ""}
RULES = {
    "age": AgeRule(required=True),
    "gender": TextRule(required=True, message="Please select your gender"),
    "notes": TextRule(max_length=10),
}


def make_session(clock, **config):
    """Build a session with a 1s interaction window."""
    return FormSession(
        INITIAL,
        RULES,
        config=FormConfig(interaction_timeout_ms=1000, **config),
        clock=clock,
    )


class TestFormSessionEditing:
    """Test edits, field errors and dirty tracking."""

    def test_initial_state(self, clock):
        """Test a new session is clean and untouched."""
        session = make_session(clock)

        assert session.data == INITIAL
        assert not session.is_modified
        assert not session.has_any_data
        assert not session.has_recent_interaction()
        assert session.errors == {}

    def test_handle_input_change_validates(self, clock):
        """Test edits are validated as they happen."""
        session = make_session(clock)

        error = session.handle_input_change("age", "130")

        assert error == "Age must be between 1 and 120"
        assert session.get_field_error("age") == error
        assert session.has_field_error("age")
        assert session.is_modified
        assert session.has_any_data
        assert session.has_recent_interaction()

        assert session.handle_input_change("age", "34") is None
        assert not session.has_field_error("age")

    def test_handle_input_change_without_validation(self, clock):
        """Test edits can skip validation but still count as interaction."""
        session = make_session(clock)

        assert session.handle_input_change("age", "x", validate_on_change=False) is None
        assert session.errors == {}
        assert session.interaction.touched_fields == frozenset({"age"})

    def test_clear_field_error(self, clock):
        """Test a field error can be hidden."""
        session = make_session(clock)
        session.handle_input_change("notes", "far too long text")

        session.clear_field_error("notes")

        assert session.get_field_error("notes") is None

    def test_set_fields_and_validate(self, clock):
        """Test bulk edits followed by whole-form validation."""
        session = make_session(clock)
        session.set_fields({"age": "34", "notes": "ok"})

        result = session.validate()

        assert result.errors == {"gender": "Please select your gender"}
        assert session.errors == {"gender": "Please select your gender"}

    def test_reset_keeps_interaction(self, clock):
        """Test reset restores data only."""
        session = make_session(clock)
        session.handle_input_change("age", "200")

        session.reset()

        assert session.data == INITIAL
        assert session.errors == {}
        assert session.interaction.is_touched

    def test_clear_forgets_interaction(self, clock):
        """Test clear restores data and interaction."""
        session = make_session(clock)
        session.handle_input_change("age", "34")

        session.clear()

        assert session.data == INITIAL
        assert not session.interaction.is_touched

    def test_ready_to_submit(self, clock):
        """Test readiness follows the gate."""
        session = make_session(clock)
        assert not session.is_ready_to_submit()

        session.handle_input_change("age", "34")
        session.handle_input_change("gender", "F")
        assert session.is_ready_to_submit()

        clock.advance(1001)
        assert not session.is_ready_to_submit()


class TestFormSessionSubmit:
    """Test submitting through the gate."""

    @pytest.mark.asyncio
    async def test_submit_saves_sanitised_record(self, clock):
        """Test a valid record reaches the handler trimmed."""
        session = make_session(clock)
        session.handle_input_change("age", " 34 ")
        session.handle_input_change("gender", "F")
        received = {}

        async def save(record):
            received.update(record)
            return "row-1"

        outcome = await session.submit(save)

        assert outcome.status is SubmissionStatus.SAVED
        assert outcome.success
        assert outcome.result == "row-1"
        assert received == {"age": "34", "gender": "F", "notes": ""}
        assert not session.is_submitting

    @pytest.mark.asyncio
    async def test_submit_rejected(self, clock):
        """Test a rejection never calls the handler and fills field errors."""
        session = make_session(clock)
        session.handle_input_change("age", "500", validate_on_change=False)

        async def save(record):
            raise AssertionError("handler must not run")

        outcome = await session.submit(save)

        assert outcome.status is SubmissionStatus.REJECTED
        assert outcome.rejection.reason is RejectionReason.VALIDATION_FAILED
        assert set(session.errors) == {"age", "gender"}

    @pytest.mark.asyncio
    async def test_submit_failure_reported(self, clock):
        """Test a handler exception becomes a FAILED outcome."""
        session = make_session(clock)
        session.set_fields({"age": "34", "gender": "M"})
        failure = RuntimeError("network down")

        async def save(record):
            raise failure

        outcome = await session.submit(save)

        assert outcome.status is SubmissionStatus.FAILED
        assert outcome.error is failure
        assert not session.is_submitting

    @pytest.mark.asyncio
    async def test_submit_reentry_refused(self, clock):
        """Test a second submit while the first is running raises."""
        session = make_session(clock)
        session.set_fields({"age": "34", "gender": "M"})
        release = asyncio.Event()

        async def save(record):
            await release.wait()
            return True

        first = asyncio.create_task(session.submit(save))
        await asyncio.sleep(0)

        assert session.is_submitting
        assert not session.is_ready_to_submit()
        with pytest.raises(SubmissionInProgressError):
            await session.submit(save)

        release.set()
        outcome = await first
        assert outcome.success


class TestFormSessionDebouncedValidation:
    """Test validate-as-you-type with debouncing."""

    @pytest.mark.asyncio
    async def test_validation_waits_for_pause(self, clock):
        """Test only the last edit is validated once typing stops."""
        session = make_session(clock, debounce_ms=20)

        session.handle_input_change_debounced("age", "1")
        session.handle_input_change_debounced("age", "13")
        session.handle_input_change_debounced("age", "130")
        assert session.errors == {}

        await asyncio.sleep(0.06)

        assert session.get_field_error("age") == "Age must be between 1 and 120"
        session.close()

    @pytest.mark.asyncio
    async def test_fields_debounce_independently(self, clock):
        """Test editing one field keeps another field's pending validation."""
        session = make_session(clock, debounce_ms=20)

        session.handle_input_change_debounced("age", "500")
        session.handle_input_change_debounced("notes", "much too long")
        await asyncio.sleep(0.06)

        assert set(session.errors) == {"age", "notes"}
        session.close()

    @pytest.mark.asyncio
    async def test_reset_cancels_pending_validation(self, clock):
        """Test no stale error appears after a reset."""
        session = make_session(clock, debounce_ms=20)

        session.handle_input_change_debounced("age", "500")
        session.reset()
        await asyncio.sleep(0.06)

        assert session.errors == {}
        session.close()
