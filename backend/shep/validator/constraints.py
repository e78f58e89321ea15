"""
Kind-Specific Constraint Checks.

Checks the non-recursive keywords of each node variant against an
instance of the matching kind:
- string: minLength / maxLength / pattern
- number and integer: multipleOf / minimum / maximum
- object: minProperties / maxProperties / required
- array: minItems / maxItems / uniqueItems

Each check returns the first violation as a failing Verdict, or a passing
one. The recursive keywords (properties, items, additionalItems, contains)
belong to the engine.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping

from ..exceptions import InvalidPatternError
from ..instance import InstancePath, instances_equal, to_fraction
from ..models import ArraySchema, IntegerSchema, RecordSchema, StringSchema
from .verdict import Verdict


def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """
    Compile a `pattern` keyword.

    Raises:
        InvalidPatternError: If the pattern is not a valid regex.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


def is_multiple_of(value: Any, divisor: Any) -> bool:
    """
    Exact divisibility test.

    Uses rational arithmetic so that values such as 0.3 and 0.1 are not
    misclassified by binary floating point remainders.
    """
    try:
        quotient = to_fraction(value) / to_fraction(divisor)
    except (ValueError, ZeroDivisionError):
        return False
    return quotient.denominator == 1


class ConstraintChecker:
    """Checks kind-specific keywords of a single node."""

    def check_string(self, node: StringSchema, value: str, path: InstancePath) -> Verdict:
        """Check minLength, maxLength and pattern."""
        length = len(value)

        if length < node.min_length:
            return Verdict.failure(
                path, "minLength",
                f"Value too short: {length} < {node.min_length}",
            )

        if node.max_length and length > node.max_length:
            return Verdict.failure(
                path, "maxLength",
                f"Value too long: {length} > {node.max_length}",
            )

        if node.pattern:
            if not compile_pattern(node.pattern).search(value):
                return Verdict.failure(
                    path, "pattern",
                    f"Value does not match pattern: {node.pattern}",
                )

        return Verdict.success()

    def check_number(self, node: IntegerSchema, value: Any, path: InstancePath) -> Verdict:
        """Check multipleOf, minimum and maximum."""
        if node.multiple_of is not None and node.multiple_of > 0:
            if not is_multiple_of(value, node.multiple_of):
                return Verdict.failure(
                    path, "multipleOf",
                    f"Value {value} is not a multiple of {node.multiple_of}",
                )

        if node.minimum is not None:
            if node.exclusive_minimum:
                if not value > node.minimum:
                    return Verdict.failure(
                        path, "exclusiveMinimum",
                        f"Value {value} is not greater than {node.minimum}",
                    )
            elif not value >= node.minimum:
                return Verdict.failure(
                    path, "minimum",
                    f"Value {value} is less than minimum {node.minimum}",
                )

        if node.maximum is not None:
            if node.exclusive_maximum:
                if not value < node.maximum:
                    return Verdict.failure(
                        path, "exclusiveMaximum",
                        f"Value {value} is not less than {node.maximum}",
                    )
            elif not value <= node.maximum:
                return Verdict.failure(
                    path, "maximum",
                    f"Value {value} is greater than maximum {node.maximum}",
                )

        return Verdict.success()

    def check_record(self, node: RecordSchema, value: Mapping[str, Any], path: InstancePath) -> Verdict:
        """Check minProperties, maxProperties and required."""
        count = len(value)

        if count < node.min_properties:
            return Verdict.failure(
                path, "minProperties",
                f"Too few properties: {count} < {node.min_properties}",
            )

        if node.max_properties and count > node.max_properties:
            return Verdict.failure(
                path, "maxProperties",
                f"Too many properties: {count} > {node.max_properties}",
            )

        missing = [name for name in node.required or [] if name not in value]
        if missing:
            return Verdict.failure(
                path, "required",
                f"Missing required properties: {', '.join(missing)}",
            )

        return Verdict.success()

    def check_array(self, node: ArraySchema, value: List[Any], path: InstancePath) -> Verdict:
        """Check minItems, maxItems and uniqueItems."""
        count = len(value)

        if count < node.min_items:
            return Verdict.failure(
                path, "minItems",
                f"Too few items: {count} < {node.min_items}",
            )

        if node.max_items and count > node.max_items:
            return Verdict.failure(
                path, "maxItems",
                f"Too many items: {count} > {node.max_items}",
            )

        if node.unique_items:
            for i in range(count):
                for j in range(i + 1, count):
                    if instances_equal(value[i], value[j]):
                        return Verdict.failure(
                            path, "uniqueItems",
                            f"Items at [{i}] and [{j}] are equal",
                        )

        return Verdict.success()
