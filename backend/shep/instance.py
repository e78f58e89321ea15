"""
Instance Model.

Classifies native Python values into the closed set of instance kinds the
validator matches against, and provides deep structural equality and
instance path rendering.

Mapping of Python types to kinds:
- None -> null
- bool -> boolean
- int, float, Decimal, Fraction -> number (integral values are also integer)
- str -> string
- list, tuple -> array
- Mapping -> object
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Sequence, Tuple, Union

PathElement = Union[str, int]
InstancePath = Tuple[PathElement, ...]

_NUMBER_TYPES = (int, float, Decimal, Fraction)


class InstanceKind(str, Enum):
    """Runtime kinds of instance values."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class InstanceTypeError(TypeError):
    """Raised when a Python value has no instance kind."""
    pass


def kind_of(value: Any) -> InstanceKind:
    """
    Classify a value into its instance kind.

    Raises:
        InstanceTypeError: If the value's type is not part of the model.
    """
    if value is None:
        return InstanceKind.NULL
    # bool is a subclass of int, so it must be tested first
    if isinstance(value, bool):
        return InstanceKind.BOOLEAN
    if isinstance(value, _NUMBER_TYPES):
        return InstanceKind.NUMBER
    if isinstance(value, str):
        return InstanceKind.STRING
    if isinstance(value, (list, tuple)):
        return InstanceKind.ARRAY
    if isinstance(value, Mapping):
        return InstanceKind.OBJECT
    raise InstanceTypeError(
        f"Unsupported instance type: {type(value).__name__}"
    )


def check_instance(value: Any) -> None:
    """
    Check that a value and everything nested in it has an instance kind.

    Raises:
        InstanceTypeError: On the first value outside the model.
    """
    pending = [value]
    while pending:
        current = pending.pop()
        kind = kind_of(current)
        if kind == InstanceKind.ARRAY:
            pending.extend(current)
        elif kind == InstanceKind.OBJECT:
            pending.extend(current.values())


def is_number(value: Any) -> bool:
    """Check whether a value is a number (never a boolean)."""
    return isinstance(value, _NUMBER_TYPES) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    """Check whether a value is an integral number."""
    if not is_number(value):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    return value.denominator == 1


def to_fraction(value: Any) -> Fraction:
    """
    Convert a finite number to an exact fraction.

    Floats go through their shortest decimal repr so that 0.1 becomes
    1/10 rather than its binary approximation.

    Raises:
        ValueError: If the value is infinite or NaN.
    """
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Cannot convert {value!r} to a fraction")
        return Fraction(repr(value))
    if isinstance(value, Decimal) and not value.is_finite():
        raise ValueError(f"Cannot convert {value!r} to a fraction")
    return Fraction(value)


def instances_equal(left: Any, right: Any) -> bool:
    """
    Deep structural equality between two instances.

    Numbers compare by value regardless of representation, booleans never
    equal numbers, arrays compare positionally and objects compare by key
    set and per-key value.
    """
    left_kind = kind_of(left)
    if left_kind != kind_of(right):
        return False

    if left_kind == InstanceKind.ARRAY:
        if len(left) != len(right):
            return False
        return all(instances_equal(a, b) for a, b in zip(left, right))

    if left_kind == InstanceKind.OBJECT:
        if set(left.keys()) != set(right.keys()):
            return False
        return all(instances_equal(left[key], right[key]) for key in left)

    return left == right


def contains_instance(values: Sequence[Any], value: Any) -> bool:
    """Check whether any of the values is structurally equal to value."""
    return any(instances_equal(candidate, value) for candidate in values)


def format_path(path: Sequence[PathElement]) -> str:
    """
    Render an instance path in dotted notation.

    Examples:
        ("firstName",) -> "firstName"
        (1,) -> "[1]"
        ("items", 2, "name") -> "items[2].name"
    """
    parts = []
    for element in path:
        if isinstance(element, int):
            parts.append(f"[{element}]")
        elif parts:
            parts.append(f".{element}")
        else:
            parts.append(element)
    return "".join(parts)


def format_pointer(path: Sequence[PathElement]) -> str:
    """Render an instance path as a JSON pointer ("" for the root)."""
    return "".join(
        "/" + str(element).replace("~", "~0").replace("/", "~1")
        for element in path
    )
