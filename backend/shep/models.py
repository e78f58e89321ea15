"""
Shep Pydantic models.

The schema node model: a closed set of frozen node variants carrying the
shared annotation fields, the generic keywords and the keywords specific
to each kind. Nodes hold data only; the validation engine decides what
they mean.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag


class SchemaModel(BaseModel):
    """Base configuration shared by every schema node."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="forbid",
    )

    title: Optional[str] = None
    description: Optional[str] = None
    default: Any = None
    examples: Optional[List[Any]] = None
    definitions: Optional[Dict[str, "SchemaNode"]] = None

    def has_keyword(self, name: str) -> bool:
        """Check whether a field was explicitly set, by field or alias name."""
        field_name = _ALIASES.get(name, name)
        return field_name in self.model_fields_set


class Primitive(SchemaModel):
    """Untyped node carrying only the generic keywords."""

    enum: Optional[List[Any]] = None
    const: Any = None
    type: Optional[Union[str, List[str]]] = None
    all_of: Optional[List["SchemaNode"]] = Field(default=None, alias="allOf")
    any_of: Optional[List["SchemaNode"]] = Field(default=None, alias="anyOf")
    one_of: Optional[List["SchemaNode"]] = Field(default=None, alias="oneOf")
    not_: Optional["SchemaNode"] = Field(default=None, alias="not")


class StringSchema(Primitive):
    """String node."""

    min_length: int = Field(default=0, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None


class IntegerSchema(Primitive):
    """Integer node. Matches integral numbers only."""

    multiple_of: Optional[Union[int, float]] = Field(default=None, alias="multipleOf")
    minimum: Optional[Union[int, float]] = None
    exclusive_minimum: bool = Field(default=False, alias="exclusiveMinimum")
    maximum: Optional[Union[int, float]] = None
    exclusive_maximum: bool = Field(default=False, alias="exclusiveMaximum")


class NumberSchema(IntegerSchema):
    """Number node. Matches any number."""
    pass


class RecordSchema(Primitive):
    """Object node."""

    min_properties: int = Field(default=0, alias="minProperties")
    max_properties: Optional[int] = Field(default=None, alias="maxProperties")
    required: Optional[List[str]] = None
    properties: Optional[Dict[str, "SchemaNode"]] = None


class ArraySchema(Primitive):
    """
    Array node.

    `items` is either one schema applied to every element or a list of
    schemas applied by position. `additional_items` governs elements past
    a positional list: a schema, False for "none allowed", True or None
    for unconstrained.
    """

    items: Optional[Union["SchemaNode", List["SchemaNode"]]] = None
    additional_items: Optional[Union[bool, "SchemaNode"]] = Field(
        default=None, alias="additionalItems"
    )
    min_items: int = Field(default=0, alias="minItems")
    max_items: Optional[int] = Field(default=None, alias="maxItems")
    unique_items: bool = Field(default=False, alias="uniqueItems")
    contains: Optional["SchemaNode"] = None


class BooleanSchema(Primitive):
    """Boolean node."""
    pass


class NullSchema(Primitive):
    """Null node."""
    pass


class ReferenceSchema(SchemaModel):
    """Node that stands for the definition its pointer designates."""

    ref: str = Field(alias="$ref")


_MODEL_TAGS = {
    ReferenceSchema: "reference",
    StringSchema: "string",
    NumberSchema: "number",
    IntegerSchema: "integer",
    RecordSchema: "object",
    ArraySchema: "array",
    BooleanSchema: "boolean",
    NullSchema: "null",
    Primitive: "primitive",
}

_KIND_TAGS = frozenset(_MODEL_TAGS.values()) - {"reference", "primitive"}


def _node_tag(value: Any) -> Optional[str]:
    """
    Pick the node variant for a union member.

    Built nodes keep their own class. Raw mappings are dispatched on their
    `type` tag: `$ref` selects a reference, a single known kind selects that
    variant, and anything else is an untyped node.
    """
    if isinstance(value, SchemaModel):
        for cls in type(value).__mro__:
            if cls in _MODEL_TAGS:
                return _MODEL_TAGS[cls]
        return None
    if not isinstance(value, dict):
        return None
    if "$ref" in value or "ref" in value:
        return "reference"
    declared = value.get("type")
    if isinstance(declared, str) and declared in _KIND_TAGS:
        return declared
    return "primitive"


SchemaNode = Annotated[
    Union[
        Annotated[ReferenceSchema, Tag("reference")],
        Annotated[StringSchema, Tag("string")],
        Annotated[NumberSchema, Tag("number")],
        Annotated[IntegerSchema, Tag("integer")],
        Annotated[RecordSchema, Tag("object")],
        Annotated[ArraySchema, Tag("array")],
        Annotated[BooleanSchema, Tag("boolean")],
        Annotated[NullSchema, Tag("null")],
        Annotated[Primitive, Tag("primitive")],
    ],
    Discriminator(_node_tag),
]

Properties = Dict[str, SchemaNode]
Definitions = Dict[str, SchemaNode]

_ALIASES = {
    "allOf": "all_of",
    "anyOf": "any_of",
    "oneOf": "one_of",
    "not": "not_",
    "minLength": "min_length",
    "maxLength": "max_length",
    "multipleOf": "multiple_of",
    "exclusiveMinimum": "exclusive_minimum",
    "exclusiveMaximum": "exclusive_maximum",
    "minProperties": "min_properties",
    "maxProperties": "max_properties",
    "additionalItems": "additional_items",
    "minItems": "min_items",
    "maxItems": "max_items",
    "uniqueItems": "unique_items",
    "$ref": "ref",
}

for _model in (
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
):
    _model.model_rebuild()


# Builder helpers

Option = Callable[[Dict[str, Any]], None]
NodeT = TypeVar("NodeT", bound=SchemaModel)


def with_fields(**fields: Any) -> Option:
    """Create an option that sets the given fields."""

    def option(values: Dict[str, Any]) -> None:
        values.update(fields)

    return option


def _build(
    model: Type[NodeT],
    kind: Optional[str],
    options: tuple,
    fields: Dict[str, Any],
) -> NodeT:
    values: Dict[str, Any] = {}
    for option in options:
        option(values)
    values.update(fields)
    if kind is not None:
        values["type"] = kind
    return model(**values)


def new_primitive(*options: Option, **fields: Any) -> Primitive:
    """Build an untyped node."""
    return _build(Primitive, None, options, fields)


def new_string(*options: Option, **fields: Any) -> StringSchema:
    """Build a string node."""
    return _build(StringSchema, "string", options, fields)


def new_integer(*options: Option, **fields: Any) -> IntegerSchema:
    """Build an integer node."""
    return _build(IntegerSchema, "integer", options, fields)


def new_number(*options: Option, **fields: Any) -> NumberSchema:
    """Build a number node."""
    return _build(NumberSchema, "number", options, fields)


def new_record(*options: Option, **fields: Any) -> RecordSchema:
    """Build an object node."""
    return _build(RecordSchema, "object", options, fields)


def new_array(*options: Option, **fields: Any) -> ArraySchema:
    """Build an array node."""
    return _build(ArraySchema, "array", options, fields)


def new_boolean(*options: Option, **fields: Any) -> BooleanSchema:
    """Build a boolean node."""
    return _build(BooleanSchema, "boolean", options, fields)


def new_null(*options: Option, **fields: Any) -> NullSchema:
    """Build a null node."""
    return _build(NullSchema, "null", options, fields)


def new_reference(ref: str, *options: Option, **fields: Any) -> ReferenceSchema:
    """Build a reference node pointing at `ref`."""
    fields["ref"] = ref
    return _build(ReferenceSchema, None, options, fields)


def node_kind(node: SchemaModel) -> Optional[str]:
    """Return the declared kind tag of a node ("reference" for references)."""
    if isinstance(node, ReferenceSchema):
        return "reference"
    declared = getattr(node, "type", None)
    return declared if isinstance(declared, str) else None
