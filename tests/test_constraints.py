"""
Tests for kind-specific constraint checks.
"""

from decimal import Decimal

import pytest

from backend.shep.exceptions import InvalidPatternError
from backend.shep.models import new_array, new_integer, new_number, new_record, new_string
from backend.shep.validator import ConstraintChecker, compile_pattern, is_multiple_of


@pytest.fixture
def checker():
    return ConstraintChecker()


class TestStringConstraints:
    """Tests for minLength, maxLength and pattern."""

    def test_no_constraints(self, checker):
        """Test that an unconstrained string node accepts any string."""
        assert checker.check_string(new_string(), "", ()).valid is True

    def test_value_too_short(self, checker):
        """Test detection of a value shorter than minLength."""
        node = new_string(min_length=2, max_length=3)
        verdict = checker.check_string(node, "a", ())
        assert verdict.valid is False
        assert verdict.first.keyword == "minLength"
        assert verdict.first.message.startswith("Value too short")

    def test_value_too_long(self, checker):
        """Test detection of a value longer than maxLength."""
        node = new_string(min_length=2, max_length=3)
        verdict = checker.check_string(node, "abcd", ())
        assert verdict.valid is False
        assert verdict.first.keyword == "maxLength"

    def test_zero_max_length_is_unbounded(self, checker):
        """Test that maxLength 0 means no upper bound."""
        node = new_string(max_length=0)
        assert checker.check_string(node, "any length at all", ()).valid is True

    def test_length_counts_code_points(self, checker):
        """Test that length is measured in characters, not bytes."""
        node = new_string(max_length=2)
        assert checker.check_string(node, "éé", ()).valid is True

    def test_pattern_contains_match(self, checker):
        """Test that a pattern only needs to match somewhere in the value."""
        node = new_string(pattern="es")
        assert checker.check_string(node, "test", ()).valid is True

    def test_anchored_pattern(self, checker):
        """Test that anchors in the pattern enforce a full match."""
        node = new_string(pattern=r"^(\([0-9]{3}\))?[0-9]{3}-[0-9]{4}$")
        assert checker.check_string(node, "(888)555-1212", ()).valid is True
        verdict = checker.check_string(node, "(888)555-1212 ext. 532", ())
        assert verdict.valid is False
        assert verdict.first.keyword == "pattern"

    def test_invalid_pattern(self, checker):
        """Test that a broken regex is a schema error."""
        node = new_string(pattern=r"[invalid(")
        with pytest.raises(InvalidPatternError) as exc_info:
            checker.check_string(node, "x", ())
        assert exc_info.value.pattern == r"[invalid("

    def test_compile_pattern(self):
        """Test compiling a valid pattern."""
        assert compile_pattern(r"^[a-z]+$").search("abc")


class TestNumberConstraints:
    """Tests for multipleOf, minimum and maximum."""

    def test_multiple_of_integer(self, checker):
        """Test integer divisibility."""
        node = new_integer(multiple_of=5)
        assert checker.check_number(node, 45, ()).valid is True
        verdict = checker.check_number(node, 42, ())
        assert verdict.first.keyword == "multipleOf"

    @pytest.mark.parametrize("value,divisor,expected", [
        (0.3, 0.1, True),
        (0.35, 0.1, False),
        (1.1, 0.01, True),
        (10, 2.5, True),
        (Decimal("0.9"), 0.3, True),
        (7, 2, False),
        (float("inf"), 1, False),
        (float("nan"), 1, False),
    ])
    def test_exact_multiple_of(self, value, divisor, expected):
        """Test that divisibility is exact rather than float-based."""
        assert is_multiple_of(value, divisor) is expected

    def test_maximum(self, checker):
        """Test inclusive maximum."""
        node = new_integer(multiple_of=5, maximum=40)
        assert checker.check_number(node, 40, ()).valid is True
        verdict = checker.check_number(node, 45, ())
        assert verdict.valid is False
        assert verdict.first.keyword == "maximum"

    def test_exclusive_maximum(self, checker):
        """Test strict maximum."""
        node = new_number(maximum=10, exclusive_maximum=True)
        assert checker.check_number(node, 9.99, ()).valid is True
        verdict = checker.check_number(node, 10, ())
        assert verdict.first.keyword == "exclusiveMaximum"

    def test_minimum(self, checker):
        """Test inclusive minimum."""
        node = new_integer(minimum=0)
        assert checker.check_number(node, 0, ()).valid is True
        assert checker.check_number(node, -1, ()).first.keyword == "minimum"

    def test_exclusive_minimum(self, checker):
        """Test strict minimum."""
        node = new_integer(minimum=0, exclusive_minimum=True)
        assert checker.check_number(node, 1, ()).valid is True
        assert checker.check_number(node, 0, ()).first.keyword == "exclusiveMinimum"

    def test_zero_maximum_is_a_bound(self, checker):
        """Test that maximum 0 is enforced, not treated as unset."""
        node = new_integer(maximum=0)
        assert checker.check_number(node, 1, ()).valid is False

    def test_nan_fails_bounds(self, checker):
        """Test that NaN satisfies no bound."""
        node = new_number(minimum=0)
        assert checker.check_number(node, float("nan"), ()).valid is False


class TestRecordConstraints:
    """Tests for minProperties, maxProperties and required."""

    def test_min_properties(self, checker):
        """Test too few properties."""
        node = new_record(min_properties=2)
        verdict = checker.check_record(node, {"a": 1}, ())
        assert verdict.first.keyword == "minProperties"

    def test_max_properties(self, checker):
        """Test too many properties."""
        node = new_record(max_properties=1)
        verdict = checker.check_record(node, {"a": 1, "b": 2}, ())
        assert verdict.first.keyword == "maxProperties"

    def test_required(self, checker):
        """Test missing required properties are all named."""
        node = new_record(required=["firstName", "lastName", "age"])
        verdict = checker.check_record(node, {"firstName": "John"}, ("person",))
        assert verdict.valid is False
        assert verdict.first.keyword == "required"
        assert verdict.first.path == ("person",)
        assert "lastName" in verdict.first.message
        assert "age" in verdict.first.message

    def test_required_present(self, checker):
        """Test that present required properties pass."""
        node = new_record(required=["a"])
        assert checker.check_record(node, {"a": None}, ()).valid is True


class TestArrayConstraints:
    """Tests for minItems, maxItems and uniqueItems."""

    def test_min_items(self, checker):
        """Test too few items."""
        node = new_array(min_items=1)
        assert checker.check_array(node, [], ()).first.keyword == "minItems"

    def test_max_items(self, checker):
        """Test too many items."""
        node = new_array(max_items=2)
        assert checker.check_array(node, [1, 2, 3], ()).first.keyword == "maxItems"

    def test_unique_items(self, checker):
        """Test that structurally equal items are duplicates."""
        node = new_array(unique_items=True)
        verdict = checker.check_array(node, [{"a": [1]}, 2, {"a": [1.0]}], ())
        assert verdict.valid is False
        assert verdict.first.keyword == "uniqueItems"
        assert "[0] and [2]" in verdict.first.message

    def test_unique_items_bool_and_number_differ(self, checker):
        """Test that True and 1 are distinct items."""
        node = new_array(unique_items=True)
        assert checker.check_array(node, [True, 1, "1"], ()).valid is True
