"""Custom exceptions for Shep schemas."""

from __future__ import annotations

from typing import Optional


class ShepError(Exception):
    """Base exception for all Shep errors."""
    pass


class SchemaError(ShepError):
    """
    A defect in the schema itself, as opposed to an invalid instance.

    Raised while a schema is being evaluated or decoded. The validation
    engine converts these into a verdict rather than letting them escape.
    """

    keyword: str = "schema"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "error": type(self).__name__,
            "keyword": self.keyword,
            "message": str(self),
        }


class InvalidPatternError(SchemaError):
    """A `pattern` keyword is not a valid regular expression."""

    keyword = "pattern"

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid regex pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class InvalidLiteralError(SchemaError):
    """An `enum` or `const` value is not a JSON-like value."""

    def __init__(self, keyword: str, reason: str):
        super().__init__(f"Invalid {keyword} value: {reason}")
        self.keyword = keyword
        self.reason = reason


class ResolutionError(SchemaError):
    """A `$ref` pointer could not be resolved."""

    keyword = "$ref"

    def __init__(self, ref: str, message: str):
        super().__init__(message)
        self.ref = ref


class MalformedReferenceError(ResolutionError):
    """The pointer string is not a supported same-document pointer."""
    pass


class UnresolvedReferenceError(ResolutionError):
    """The pointer names a definition that does not exist."""
    pass


class ReferenceCycleError(ResolutionError):
    """A chain of references loops without consuming instance structure."""
    pass


class BudgetExceededError(SchemaError):
    """Evaluation exceeded the engine's depth or step budget."""

    keyword = "budget"

    def __init__(self, limit_name: str, limit: int):
        super().__init__(f"Evaluation exceeded {limit_name} budget of {limit}")
        self.limit_name = limit_name
        self.limit = limit


class SchemaDocumentError(SchemaError):
    """A schema document could not be decoded into schema nodes."""

    def __init__(self, message: str, location: Optional[str] = None):
        if location:
            message = f"{location}: {message}"
        super().__init__(message)
        self.location = location


class UnsupportedKeywordError(SchemaDocumentError):
    """A schema document uses a keyword the engine does not enforce."""

    def __init__(self, keyword: str, location: Optional[str] = None):
        super().__init__(f"Unsupported keyword: {keyword}", location)
        self.keyword = keyword
