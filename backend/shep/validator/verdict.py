"""
Verdicts and failure trails.

A verdict is one of:
- valid (empty trail)
- invalid (non-empty trail of failures)
- schema error (the schema itself is broken)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import SchemaError
from ..instance import InstancePath, format_path, format_pointer


@dataclass(frozen=True)
class Failure:
    """One record of a failure trail."""

    path: InstancePath
    keyword: str
    message: str

    @property
    def location(self) -> str:
        """Dotted rendering of the instance path."""
        return format_path(self.path)

    @property
    def pointer(self) -> str:
        """JSON pointer rendering of the instance path."""
        return format_pointer(self.path)

    def __str__(self) -> str:
        location = self.location or "<root>"
        return f"{location}: {self.keyword}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": list(self.path),
            "location": self.location,
            "keyword": self.keyword,
            "message": self.message,
        }


@dataclass
class Verdict:
    """Result of validating one instance against one schema node."""

    valid: bool
    trail: List[Failure] = field(default_factory=list)
    schema_error: Optional[SchemaError] = None

    @classmethod
    def success(cls) -> "Verdict":
        return cls(valid=True)

    @classmethod
    def failure(cls, path: InstancePath, keyword: str, message: str) -> "Verdict":
        return cls(valid=False, trail=[Failure(tuple(path), keyword, message)])

    @classmethod
    def from_trail(cls, trail: Iterable[Failure]) -> "Verdict":
        trail = list(trail)
        return cls(valid=not trail, trail=trail)

    @classmethod
    def from_schema_error(cls, error: SchemaError) -> "Verdict":
        return cls(valid=False, schema_error=error)

    def __bool__(self) -> bool:
        return self.valid

    @property
    def is_schema_error(self) -> bool:
        """True when the schema, not the instance, is at fault."""
        return self.schema_error is not None

    @property
    def keywords(self) -> List[str]:
        """Violated keywords in trail order."""
        return [f.keyword for f in self.trail]

    @property
    def first(self) -> Optional[Failure]:
        """The leading failure record, if any."""
        return self.trail[0] if self.trail else None

    def with_context(self, path: InstancePath, keyword: str, message: str) -> "Verdict":
        """Append an enclosing-keyword record to a failing verdict."""
        if self.valid:
            return self
        return Verdict(
            valid=False,
            trail=self.trail + [Failure(tuple(path), keyword, message)],
        )

    def raise_for_schema_error(self) -> None:
        """Re-raise the schema error carried by this verdict, if any."""
        if self.schema_error is not None:
            raise self.schema_error

    def summary(self) -> str:
        """Generate a summary of the verdict."""
        if self.valid:
            return "Validation PASSED"
        if self.schema_error is not None:
            return f"Schema ERROR\n  {type(self.schema_error).__name__}: {self.schema_error}"
        lines = ["Validation FAILED"]
        lines.extend(f"  {failure}" for failure in self.trail)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "trail": [f.to_dict() for f in self.trail],
            "schema_error": self.schema_error.to_dict() if self.schema_error else None,
        }
