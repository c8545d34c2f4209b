"""Test record helpers and validation results."""

from trialforms.validation.record import (
    empty_required_fields,
    filled_field_count,
    has_form_data,
    has_required_data,
    sanitize_record,
)
from trialforms.validation.results import ErrorKind, FieldResult, ValidationResult


class TestRecordHelpers:
    """Test whole-record helpers."""

    def test_has_form_data(self):
        """Test any non-empty value counts as data."""
        assert not has_form_data({})
        assert not has_form_data({"a": "", "b": None, "c": "  ", "d": []})
        assert has_form_data({"a": "", "b": 0})
        assert has_form_data({"a": False})

    def test_empty_required_fields(self):
        """Test missing required fields are listed in order."""
        record = {"age": "", "gender": "F", "consentDate": None}

        assert empty_required_fields(record, ["consentDate", "gender", "age"]) == [
            "consentDate",
            "age",
        ]
        assert not has_required_data(record, ["age"])
        assert has_required_data(record, ["gender"])

    def test_filled_field_count(self):
        """Test filled fields are counted."""
        assert filled_field_count({"a": "x", "b": "", "c": 0}) == 2

    def test_sanitize_record(self):
        """Test strings are trimmed and None is dropped."""
        assert sanitize_record({"a": " x ", "b": None, "c": 3, "d": ""}) == {
            "a": "x",
            "c": 3,
            "d": "",
        }


class TestResults:
    """Test result value objects."""

    def test_field_result(self):
        """Test passing and failing constructors."""
        assert FieldResult.passed() == FieldResult(ok=True)
        failed = FieldResult.failed(ErrorKind.REQUIRED, "Required")
        assert not failed.ok
        assert failed.kind is ErrorKind.REQUIRED

    def test_validation_result(self):
        """Test validity derives from the error map."""
        result = ValidationResult(
            errors={"age": "Too old"}, error_kinds={"age": ErrorKind.OUT_OF_RANGE}
        )

        assert not result.is_valid
        assert result.has_error()
        assert result.has_error("age")
        assert not result.has_error("gender")
        assert result.error_for("age") == "Too old"
        assert result.to_dict() == {
            "is_valid": False,
            "errors": {"age": "Too old"},
            "error_kinds": {"age": "out_of_range"},
        }
        assert ValidationResult().is_valid
