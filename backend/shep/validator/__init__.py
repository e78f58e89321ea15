"""
Shep Validation Engine.

This package validates instances against schema node graphs:
- Verdicts: valid, invalid with a failure trail, or schema error
- Reference resolution against definitions tables
- Kind-specific constraint checks (string, number, object, array)
- The recursive engine tying them together
"""

from .verdict import Failure, Verdict
from .resolver import parse_pointer, resolve, resolve_in_scopes
from .constraints import ConstraintChecker, compile_pattern, is_multiple_of
from .engine import DEFAULT_MAX_DEPTH, ValidationEngine, validate, validate_all

__all__ = [
    # Verdicts
    "Failure",
    "Verdict",
    # References
    "parse_pointer",
    "resolve",
    "resolve_in_scopes",
    # Constraints
    "ConstraintChecker",
    "compile_pattern",
    "is_multiple_of",
    # Engine
    "DEFAULT_MAX_DEPTH",
    "ValidationEngine",
    "validate",
    "validate_all",
]
