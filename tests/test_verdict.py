"""
Tests for verdicts and failure trails.
"""

import pytest

from backend.shep.exceptions import InvalidPatternError, UnresolvedReferenceError
from backend.shep.validator import Failure, Verdict


class TestFailure:
    """Tests for Failure records."""

    def test_location_and_pointer(self):
        """Test path renderings."""
        failure = Failure(("address", 0, "street"), "minLength", "Value too short: 0 < 1")
        assert failure.location == "address[0].street"
        assert failure.pointer == "/address/0/street"

    def test_str(self):
        """Test string rendering, including the root."""
        assert str(Failure(("a",), "enum", "bad")) == "a: enum: bad"
        assert str(Failure((), "required", "missing")) == "<root>: required: missing"

    def test_to_dict(self):
        """Test conversion to dictionary."""
        data = Failure((1,), "maxLength", "too long").to_dict()
        assert data == {
            "path": [1],
            "location": "[1]",
            "keyword": "maxLength",
            "message": "too long",
        }


class TestVerdict:
    """Tests for Verdict."""

    def test_success(self):
        """Test the valid verdict."""
        verdict = Verdict.success()
        assert verdict.valid is True
        assert bool(verdict) is True
        assert verdict.trail == []
        assert verdict.first is None
        assert verdict.is_schema_error is False

    def test_failure(self):
        """Test a single-record failing verdict."""
        verdict = Verdict.failure(["name"], "maxLength", "too long")
        assert verdict.valid is False
        assert bool(verdict) is False
        assert verdict.first.path == ("name",)
        assert verdict.keywords == ["maxLength"]

    def test_from_trail(self):
        """Test building a verdict from a trail."""
        assert Verdict.from_trail([]).valid is True
        verdict = Verdict.from_trail([Failure((), "enum", "bad")])
        assert verdict.valid is False

    def test_with_context_appends(self):
        """Test that context records follow the leaf failure."""
        verdict = Verdict.failure(("a",), "minimum", "too small")
        wrapped = verdict.with_context((), "properties", "Property 'a' is invalid")
        assert wrapped.keywords == ["minimum", "properties"]
        assert verdict.keywords == ["minimum"]

    def test_with_context_keeps_success(self):
        """Test that context is not added to a valid verdict."""
        verdict = Verdict.success()
        assert verdict.with_context((), "items", "x") is verdict

    def test_schema_error(self):
        """Test a verdict carrying a schema error."""
        error = UnresolvedReferenceError("#/definitions/x", "Definition not found")
        verdict = Verdict.from_schema_error(error)
        assert verdict.valid is False
        assert verdict.is_schema_error is True
        assert verdict.trail == []
        with pytest.raises(UnresolvedReferenceError):
            verdict.raise_for_schema_error()

    def test_raise_for_schema_error_noop(self):
        """Test that ordinary verdicts do not raise."""
        Verdict.success().raise_for_schema_error()
        Verdict.failure((), "enum", "bad").raise_for_schema_error()

    def test_summary(self):
        """Test summaries for each outcome."""
        assert Verdict.success().summary() == "Validation PASSED"

        failed = Verdict.failure(("firstName",), "maxLength", "Value too long: 4 > 1")
        summary = failed.summary()
        assert summary.startswith("Validation FAILED")
        assert "firstName: maxLength: Value too long: 4 > 1" in summary

        broken = Verdict.from_schema_error(InvalidPatternError("(", "missing )"))
        assert "InvalidPatternError" in broken.summary()

    def test_to_dict(self):
        """Test conversion to dictionary for JSON output."""
        data = Verdict.failure((0,), "minItems", "Too few items").to_dict()
        assert data["valid"] is False
        assert data["trail"][0]["keyword"] == "minItems"
        assert data["schema_error"] is None

        error = InvalidPatternError("(", "missing )")
        data = Verdict.from_schema_error(error).to_dict()
        assert data["schema_error"]["error"] == "InvalidPatternError"
        assert data["schema_error"]["keyword"] == "pattern"
