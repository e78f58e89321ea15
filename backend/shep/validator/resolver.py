"""
Reference Resolution.

Maps `$ref` pointer strings onto the definitions they designate. Only
same-document pointers such as "#/definitions/address" are supported;
fetching external documents is not.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence
from urllib.parse import unquote, urlsplit

from ..exceptions import MalformedReferenceError, UnresolvedReferenceError
from ..models import SchemaNode

logger = logging.getLogger(__name__)


def parse_pointer(ref: str) -> str:
    """
    Parse a pointer and return the definition name it designates.

    Args:
        ref: Pointer string, e.g. "#/definitions/address".

    Returns:
        The decoded final segment of the pointer.

    Raises:
        MalformedReferenceError: If the pointer is not a same-document
            fragment pointer or has an empty final segment.
    """
    if not isinstance(ref, str) or not ref:
        raise MalformedReferenceError(str(ref), "Reference must be a non-empty string")

    try:
        parts = urlsplit(ref)
    except ValueError as e:
        raise MalformedReferenceError(ref, f"Malformed reference {ref!r}: {e}") from e

    if parts.scheme or parts.netloc or parts.path or parts.query:
        raise MalformedReferenceError(
            ref, f"Only same-document references are supported: {ref!r}"
        )

    fragment = parts.fragment
    if not fragment.startswith("/"):
        raise MalformedReferenceError(
            ref, f"Reference fragment must be a JSON pointer: {ref!r}"
        )

    segment = fragment.rsplit("/", 1)[-1]
    name = unquote(segment).replace("~1", "/").replace("~0", "~")
    if not name:
        raise MalformedReferenceError(ref, f"Reference has an empty name: {ref!r}")
    return name


def resolve(ref: str, definitions: Optional[Mapping[str, SchemaNode]]) -> SchemaNode:
    """
    Resolve a pointer against one definitions table.

    Raises:
        MalformedReferenceError: If the pointer cannot be parsed.
        UnresolvedReferenceError: If the definition does not exist.
    """
    name = parse_pointer(ref)
    if definitions and name in definitions:
        return definitions[name]
    raise UnresolvedReferenceError(ref, f"Definition not found: {ref!r}")


def resolve_in_scopes(
    ref: str,
    scopes: Sequence[Mapping[str, SchemaNode]],
) -> SchemaNode:
    """
    Resolve a pointer against a stack of definitions tables.

    The innermost (last) table is searched first.

    Raises:
        MalformedReferenceError: If the pointer cannot be parsed.
        UnresolvedReferenceError: If no table holds the definition.
    """
    name = parse_pointer(ref)
    for definitions in reversed(scopes):
        if name in definitions:
            logger.debug("Resolved %s in scope of %d definitions", ref, len(definitions))
            return definitions[name]
    raise UnresolvedReferenceError(ref, f"Definition not found: {ref!r}")
