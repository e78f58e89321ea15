"""
Schema Document Loader.

Decodes schema documents (already-parsed mappings, JSON or YAML text, or
files) into the schema node model. The engine never sees documents, only
nodes.

Keywords that the engine does not enforce are listed in
UNSUPPORTED_KEYWORDS. They are rejected in strict mode and dropped with a
warning otherwise, never half-applied.
"""

from __future__ import annotations

import json
import logging
import operator
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

import yaml
from pydantic import ValidationError

from .exceptions import SchemaDocumentError, UnsupportedKeywordError
from .instance import InstanceTypeError, check_instance, is_number
from .models import (
    ArraySchema,
    BooleanSchema,
    IntegerSchema,
    NullSchema,
    NumberSchema,
    Primitive,
    RecordSchema,
    ReferenceSchema,
    SchemaNode,
    StringSchema,
)

logger = logging.getLogger(__name__)

UNSUPPORTED_KEYWORDS = {
    "patternProperties": "properties matched by name pattern are not checked",
    "additionalProperties": "object keys outside `properties` are always allowed",
    "dependencies": "property dependencies are not checked",
    "propertyNames": "property names are not checked",
}

ANNOTATION_KEYWORDS = ("title", "description", "default", "examples")

KIND_KEYWORDS: Dict[str, tuple] = {
    "string": ("minLength", "maxLength", "pattern"),
    "integer": ("multipleOf", "minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"),
    "number": ("multipleOf", "minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"),
    "object": ("minProperties", "maxProperties", "required", "properties"),
    "array": ("items", "additionalItems", "minItems", "maxItems", "uniqueItems", "contains"),
    "boolean": (),
    "null": (),
}

KIND_MODELS = {
    "string": StringSchema,
    "integer": IntegerSchema,
    "number": NumberSchema,
    "object": RecordSchema,
    "array": ArraySchema,
    "boolean": BooleanSchema,
    "null": NullSchema,
}

# Keywords that carry no validation meaning for this engine
IGNORED_KEYWORDS = ("$schema", "$id", "id", "$comment", "format")


class SchemaLoader:
    """
    Decodes schema documents into schema nodes.

    Handles:
    - boolean schemas (true accepts everything, false nothing)
    - `$ref` nodes
    - single and multiple `type` declarations
    - kind inference from keywords when `type` is absent
    - draft 4 boolean and draft 6 numeric exclusive bounds
    """

    def __init__(self, strict: bool = True):
        """
        Initialize the loader.

        Args:
            strict: If True, unsupported keywords raise
                UnsupportedKeywordError; otherwise they are dropped with a
                warning.
        """
        self.strict = strict

    def load(self, document: Union[Mapping[str, Any], bool]) -> SchemaNode:
        """
        Decode a parsed document into a schema node.

        Raises:
            SchemaDocumentError: If the document is malformed.
        """
        return self._decode(document, "#")

    def loads(self, text: str) -> SchemaNode:
        """
        Decode JSON or YAML text into a schema node.

        Text is read as JSON first. YAML 1.1 reads JSON numbers such as
        `1e5` as strings, so YAML is only the fallback.
        """
        try:
            document = json.loads(text)
        except json.JSONDecodeError:
            try:
                document = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise SchemaDocumentError(f"YAML parse error: {e}") from e
        if document is None:
            raise SchemaDocumentError("Document is empty")
        return self.load(document)

    def load_file(self, path: Path) -> SchemaNode:
        """Decode a .json, .yaml or .yml schema file."""
        path = Path(path)
        if not path.exists():
            raise SchemaDocumentError(f"File not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            text = f.read()

        if path.suffix == ".json":
            try:
                document = json.loads(text)
            except json.JSONDecodeError as e:
                raise SchemaDocumentError(f"JSON parse error: {e}", str(path)) from e
            return self.load(document)

        return self.loads(text)

    def _decode(self, document: Any, location: str) -> SchemaNode:
        if isinstance(document, bool):
            if document:
                return Primitive()
            return Primitive(not_=Primitive())

        if not isinstance(document, Mapping):
            raise SchemaDocumentError(
                f"Schema must be an object or boolean, got {type(document).__name__}",
                location,
            )

        document = self._drop_unsupported(document, location)

        common = self._decode_common(document, location)

        if "$ref" in document:
            ignored = [k for k in document if k not in ("$ref", "definitions") + ANNOTATION_KEYWORDS + IGNORED_KEYWORDS]
            if ignored:
                logger.debug("%s: keywords beside $ref are ignored: %s", location, ", ".join(ignored))
            ref = document["$ref"]
            if not isinstance(ref, str):
                raise SchemaDocumentError("$ref must be a string", location)
            return self._construct(ReferenceSchema, location, ref=ref, **common)

        common.update(self._decode_generic(document, location))

        declared = document.get("type")
        if declared is None:
            kinds = self._infer_kinds(document)
        elif isinstance(declared, str):
            kinds = [declared]
        elif isinstance(declared, list) and all(isinstance(k, str) for k in declared):
            kinds = list(declared)
        else:
            raise SchemaDocumentError("type must be a string or list of strings", location)

        for kind in kinds:
            if kind not in KIND_MODELS:
                raise SchemaDocumentError(f"Unknown type: {kind}", location)

        if len(kinds) == 1:
            kind = kinds[0]
            fields = self._decode_kind(kind, document, location)
            return self._construct(KIND_MODELS[kind], location, type=kind, **common, **fields)

        # Zero or several kinds: one variant node per kind under allOf.
        # Each variant exempts instances of other kinds, so the conjunction
        # applies exactly the keywords that match the instance's kind.
        variants = []
        for kind in kinds:
            fields = self._decode_kind(kind, document, location)
            if fields:
                variants.append(self._construct(KIND_MODELS[kind], location, type=kind, **fields))
        if variants:
            common["all_of"] = list(common.get("all_of") or []) + variants
        if declared is not None:
            common["type"] = kinds
        return self._construct(Primitive, location, **common)

    def _drop_unsupported(self, document: Mapping[str, Any], location: str) -> Mapping[str, Any]:
        found = [k for k in document if k in UNSUPPORTED_KEYWORDS]
        if not found:
            return document
        if self.strict:
            raise UnsupportedKeywordError(found[0], location)
        for keyword in found:
            logger.warning(
                "%s: dropping unsupported keyword %s (%s)",
                location, keyword, UNSUPPORTED_KEYWORDS[keyword],
            )
        return {k: v for k, v in document.items() if k not in UNSUPPORTED_KEYWORDS}

    def _decode_common(self, document: Mapping[str, Any], location: str) -> Dict[str, Any]:
        fields: Dict[str, Any] = {k: document[k] for k in ANNOTATION_KEYWORDS if k in document}
        if "definitions" in document:
            fields["definitions"] = self._decode_table(
                document["definitions"], f"{location}/definitions"
            )
        return fields

    def _decode_generic(self, document: Mapping[str, Any], location: str) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}

        if "enum" in document:
            if not isinstance(document["enum"], list):
                raise SchemaDocumentError("enum must be a list", location)
            self._check_literal(document["enum"], "enum", location)
            fields["enum"] = document["enum"]
        if "const" in document:
            self._check_literal(document["const"], "const", location)
            fields["const"] = document["const"]

        for keyword, name in (("allOf", "all_of"), ("anyOf", "any_of"), ("oneOf", "one_of")):
            if keyword in document:
                fields[name] = self._decode_list(document[keyword], f"{location}/{keyword}")

        if "not" in document:
            fields["not_"] = self._decode(document["not"], f"{location}/not")

        return fields

    def _decode_kind(self, kind: str, document: Mapping[str, Any], location: str) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}

        if kind == "string":
            self._copy(document, fields, {
                "minLength": "min_length",
                "maxLength": "max_length",
                "pattern": "pattern",
            })

        elif kind in ("integer", "number"):
            self._copy(document, fields, {
                "multipleOf": "multiple_of",
                "minimum": "minimum",
                "maximum": "maximum",
            })
            for keyword, bound, flag, tighter in (
                ("exclusiveMinimum", "minimum", "exclusive_minimum", operator.ge),
                ("exclusiveMaximum", "maximum", "exclusive_maximum", operator.le),
            ):
                if keyword not in document:
                    continue
                value = document[keyword]
                if isinstance(value, bool):
                    fields[flag] = value
                    continue
                if not is_number(value):
                    raise SchemaDocumentError(f"{keyword} must be a number or boolean", location)
                # Numeric form is itself a strict bound; the stricter of it
                # and the inclusive bound wins.
                current = fields.get(bound)
                if current is None or (is_number(current) and tighter(value, current)):
                    fields[bound] = value
                    fields[flag] = True

        elif kind == "object":
            self._copy(document, fields, {
                "minProperties": "min_properties",
                "maxProperties": "max_properties",
                "required": "required",
            })
            if "properties" in document:
                fields["properties"] = self._decode_table(
                    document["properties"], f"{location}/properties"
                )

        elif kind == "array":
            self._copy(document, fields, {
                "minItems": "min_items",
                "maxItems": "max_items",
                "uniqueItems": "unique_items",
            })
            if "items" in document:
                items = document["items"]
                if isinstance(items, list):
                    fields["items"] = self._decode_list(items, f"{location}/items")
                else:
                    fields["items"] = self._decode(items, f"{location}/items")
            if "additionalItems" in document:
                extra = document["additionalItems"]
                if isinstance(extra, bool):
                    fields["additional_items"] = extra
                else:
                    fields["additional_items"] = self._decode(extra, f"{location}/additionalItems")
            if "contains" in document:
                fields["contains"] = self._decode(document["contains"], f"{location}/contains")

        return fields

    def _infer_kinds(self, document: Mapping[str, Any]) -> List[str]:
        kinds = []
        for kind, keywords in KIND_KEYWORDS.items():
            if kind == "integer":
                continue
            if any(k in document for k in keywords):
                kinds.append(kind)
        return kinds

    def _decode_list(self, documents: Any, location: str) -> List[SchemaNode]:
        if not isinstance(documents, list):
            raise SchemaDocumentError("Expected a list of schemas", location)
        return [self._decode(d, f"{location}/{i}") for i, d in enumerate(documents)]

    def _decode_table(self, documents: Any, location: str) -> Dict[str, SchemaNode]:
        if not isinstance(documents, Mapping):
            raise SchemaDocumentError("Expected an object of schemas", location)
        return {
            name: self._decode(d, f"{location}/{name}")
            for name, d in documents.items()
        }

    @staticmethod
    def _check_literal(value: Any, keyword: str, location: str) -> None:
        try:
            check_instance(value)
        except InstanceTypeError as e:
            raise SchemaDocumentError(f"{keyword} value is not JSON-like: {e}", location) from e

    @staticmethod
    def _copy(document: Mapping[str, Any], fields: Dict[str, Any], names: Dict[str, str]) -> None:
        for keyword, name in names.items():
            if keyword in document:
                fields[name] = document[keyword]

    @staticmethod
    def _construct(model: type, location: str, **fields: Any) -> SchemaNode:
        try:
            return model(**fields)
        except ValidationError as e:
            raise SchemaDocumentError(f"Invalid schema keywords: {e}", location) from e


def load_schema(
    document: Union[Mapping[str, Any], bool, str],
    strict: bool = True,
) -> SchemaNode:
    """
    Convenience function to decode a schema document.

    Args:
        document: Parsed mapping, boolean schema, or JSON/YAML text.
        strict: Reject unsupported keywords instead of dropping them.

    Returns:
        Root schema node.
    """
    loader = SchemaLoader(strict=strict)
    if isinstance(document, str):
        return loader.loads(document)
    return loader.load(document)


def load_schema_file(path: Path, strict: bool = True) -> SchemaNode:
    """Convenience function to decode a schema file."""
    return SchemaLoader(strict=strict).load_file(path)
