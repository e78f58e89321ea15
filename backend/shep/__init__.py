"""
Shep: declarative schema validation.

This package provides a schema node model, a recursive validation engine
and a loader for schema documents, for checking the structure of JSON-like
data at configuration, API and messaging boundaries.
"""

from .models import (
    SchemaModel,
    Primitive,
    StringSchema,
    IntegerSchema,
    NumberSchema,
    RecordSchema,
    ArraySchema,
    BooleanSchema,
    NullSchema,
    ReferenceSchema,
    SchemaNode,
    Properties,
    Definitions,
    with_fields,
    new_primitive,
    new_string,
    new_integer,
    new_number,
    new_record,
    new_array,
    new_boolean,
    new_null,
    new_reference,
    node_kind,
)
from .instance import InstanceKind, InstanceTypeError, kind_of, check_instance, instances_equal, format_path
from .exceptions import (
    ShepError,
    SchemaError,
    InvalidPatternError,
    InvalidLiteralError,
    ResolutionError,
    MalformedReferenceError,
    UnresolvedReferenceError,
    ReferenceCycleError,
    BudgetExceededError,
    SchemaDocumentError,
    UnsupportedKeywordError,
)
from .validator import Failure, Verdict, ValidationEngine, validate
from .loader import SchemaLoader, UNSUPPORTED_KEYWORDS, load_schema, load_schema_file

__version__ = "1.0.0"
__all__ = [
    # Node model
    "SchemaModel",
    "Primitive",
    "StringSchema",
    "IntegerSchema",
    "NumberSchema",
    "RecordSchema",
    "ArraySchema",
    "BooleanSchema",
    "NullSchema",
    "ReferenceSchema",
    "SchemaNode",
    "Properties",
    "Definitions",
    "with_fields",
    "new_primitive",
    "new_string",
    "new_integer",
    "new_number",
    "new_record",
    "new_array",
    "new_boolean",
    "new_null",
    "new_reference",
    "node_kind",
    # Instance model
    "InstanceKind",
    "InstanceTypeError",
    "kind_of",
    "check_instance",
    "instances_equal",
    "format_path",
    # Errors
    "ShepError",
    "SchemaError",
    "InvalidPatternError",
    "InvalidLiteralError",
    "ResolutionError",
    "MalformedReferenceError",
    "UnresolvedReferenceError",
    "ReferenceCycleError",
    "BudgetExceededError",
    "SchemaDocumentError",
    "UnsupportedKeywordError",
    # Validation
    "Failure",
    "Verdict",
    "ValidationEngine",
    "validate",
    # Loader
    "SchemaLoader",
    "UNSUPPORTED_KEYWORDS",
    "load_schema",
    "load_schema_file",
]
