"""
Validation Engine.

Walks a schema node graph against an instance and produces a Verdict.

Per node, evaluation runs in this order and stops at the first failure:
- generic keywords: enum, const, allOf, not
- kind-specific keywords (only when the instance kind matches the variant)
- anyOf, oneOf

Reference nodes are resolved against the stack of enclosing definitions
tables and validated in place of the reference.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..exceptions import (
    BudgetExceededError,
    InvalidLiteralError,
    ReferenceCycleError,
    SchemaError,
)
from ..instance import (
    InstanceKind,
    InstancePath,
    InstanceTypeError,
    check_instance,
    contains_instance,
    format_path,
    instances_equal,
    is_integer,
    is_number,
    kind_of,
)
from ..models import (
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
from .constraints import ConstraintChecker
from .resolver import resolve_in_scopes
from .verdict import Failure, Verdict

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200


@dataclass
class _Context:
    """Per-call evaluation state."""

    max_depth: int
    max_steps: Optional[int]
    scopes: List[Mapping[str, SchemaNode]] = field(default_factory=list)
    active_refs: Set[Tuple[int, str, InstancePath]] = field(default_factory=set)
    depth: int = 0
    steps: int = 0


class ValidationEngine:
    """
    Recursive schema validation engine.

    The engine holds configuration only; every call to `validate` gets its
    own evaluation context, so one engine can be shared across threads.
    """

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_steps: Optional[int] = None,
    ):
        """
        Initialize the validation engine.

        Args:
            max_depth: Maximum nesting of node evaluations in one call.
            max_steps: Maximum number of node evaluations in one call,
                or None for no limit.
        """
        self.max_depth = max_depth
        self.max_steps = max_steps
        self.checker = ConstraintChecker()

    def validate(
        self,
        node: SchemaNode,
        instance: Any,
        path: InstancePath = (),
    ) -> Verdict:
        """
        Validate an instance against a schema node.

        Args:
            node: Root schema node.
            instance: The value to check.
            path: Instance path of `instance` relative to the document root.

        Returns:
            Verdict: valid, invalid with a failure trail, or carrying the
            schema error that stopped evaluation.

        Raises:
            InstanceTypeError: If the instance holds a value with no
                instance kind, wherever it is nested.
        """
        check_instance(instance)
        context = _Context(max_depth=self.max_depth, max_steps=self.max_steps)
        try:
            return self._validate(node, instance, tuple(path), context)
        except SchemaError as e:
            logger.debug("Schema error at %r: %s", format_path(path), e)
            return Verdict.from_schema_error(e)

    def is_valid(self, node: SchemaNode, instance: Any) -> bool:
        """Quick boolean check. Schema errors count as invalid."""
        return self.validate(node, instance).valid

    def _validate(
        self,
        node: SchemaNode,
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        context.steps += 1
        if context.max_steps is not None and context.steps > context.max_steps:
            raise BudgetExceededError("max_steps", context.max_steps)
        if context.depth >= context.max_depth:
            raise BudgetExceededError("max_depth", context.max_depth)

        context.depth += 1
        pushed = bool(node.definitions)
        if pushed:
            context.scopes.append(node.definitions)
        try:
            if isinstance(node, ReferenceSchema):
                return self._validate_reference(node, instance, path, context)
            return self._validate_node(node, instance, path, context)
        finally:
            if pushed:
                context.scopes.pop()
            context.depth -= 1

    def _validate_node(
        self,
        node: Primitive,
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        verdict = self._check_generic(node, instance, path, context)
        if not verdict.valid:
            return verdict

        verdict = self._check_kind(node, instance, path, context)
        if not verdict.valid:
            return verdict

        if node.any_of is not None:
            verdict = self._check_any_of(node, instance, path, context)
            if not verdict.valid:
                return verdict

        if node.one_of is not None:
            verdict = self._check_one_of(node, instance, path, context)
            if not verdict.valid:
                return verdict

        return Verdict.success()

    # Generic keywords

    def _check_generic(
        self,
        node: Primitive,
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        # The instance was checked up front, so a kind error here comes
        # from the schema's own literals.
        if node.enum is not None:
            try:
                allowed = contains_instance(node.enum, instance)
            except InstanceTypeError as e:
                raise InvalidLiteralError("enum", str(e)) from e
            if not allowed:
                return Verdict.failure(
                    path, "enum",
                    "Value not in allowed values: "
                    + ", ".join(repr(v) for v in node.enum),
                )

        if node.has_keyword("const"):
            try:
                differs = (
                    kind_of(instance) == kind_of(node.const)
                    and not instances_equal(instance, node.const)
                )
            except InstanceTypeError as e:
                raise InvalidLiteralError("const", str(e)) from e
            if differs:
                return Verdict.failure(
                    path, "const", f"Value does not equal {node.const!r}",
                )

        for index, branch in enumerate(node.all_of or []):
            verdict = self._validate(branch, instance, path, context)
            if not verdict.valid:
                return verdict.with_context(
                    path, "allOf", f"Value does not match allOf[{index}]",
                )

        if node.not_ is not None:
            verdict = self._validate(node.not_, instance, path, context)
            if verdict.valid:
                return Verdict.failure(
                    path, "not", "Value must not match the negated schema",
                )

        return Verdict.success()

    # Kind-specific keywords

    def _check_kind(
        self,
        node: Primitive,
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        # Order matters: NumberSchema subclasses IntegerSchema
        if isinstance(node, StringSchema):
            if isinstance(instance, str):
                return self.checker.check_string(node, instance, path)
        elif isinstance(node, NumberSchema):
            if is_number(instance):
                return self.checker.check_number(node, instance, path)
        elif isinstance(node, IntegerSchema):
            if is_integer(instance):
                return self.checker.check_number(node, instance, path)
        elif isinstance(node, RecordSchema):
            if kind_of(instance) == InstanceKind.OBJECT:
                return self._check_record(node, instance, path, context)
        elif isinstance(node, ArraySchema):
            if kind_of(instance) == InstanceKind.ARRAY:
                return self._check_array(node, instance, path, context)
        elif isinstance(node, (BooleanSchema, NullSchema)):
            # No keywords beyond the generic ones
            pass
        return Verdict.success()

    def _check_record(
        self,
        node: RecordSchema,
        instance: Mapping[str, Any],
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        verdict = self.checker.check_record(node, instance, path)
        if not verdict.valid:
            return verdict

        if node.properties:
            for name, member in instance.items():
                if name not in node.properties:
                    continue
                verdict = self._validate(
                    node.properties[name], member, path + (name,), context
                )
                if not verdict.valid:
                    return verdict.with_context(
                        path, "properties", f"Property {name!r} is invalid",
                    )

        return Verdict.success()

    def _check_array(
        self,
        node: ArraySchema,
        instance: List[Any],
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        verdict = self.checker.check_array(node, instance, path)
        if not verdict.valid:
            return verdict

        if isinstance(node.items, list):
            positional = node.items
            for index, element in enumerate(instance[:len(positional)]):
                verdict = self._validate(
                    positional[index], element, path + (index,), context
                )
                if not verdict.valid:
                    return verdict.with_context(
                        path, "items", f"Item [{index}] is invalid",
                    )

            extra = node.additional_items
            if extra is False and len(instance) > len(positional):
                return Verdict.failure(
                    path, "additionalItems",
                    f"Too many items: {len(instance)} > {len(positional)}, "
                    "additional items are not allowed",
                )
            if extra is not None and not isinstance(extra, bool):
                for index in range(len(positional), len(instance)):
                    verdict = self._validate(
                        extra, instance[index], path + (index,), context
                    )
                    if not verdict.valid:
                        return verdict.with_context(
                            path, "additionalItems", f"Item [{index}] is invalid",
                        )
        elif node.items is not None:
            for index, element in enumerate(instance):
                verdict = self._validate(node.items, element, path + (index,), context)
                if not verdict.valid:
                    return verdict.with_context(
                        path, "items", f"Item [{index}] is invalid",
                    )

        if node.contains is not None:
            matched = False
            for index, element in enumerate(instance):
                if self._validate(node.contains, element, path + (index,), context).valid:
                    matched = True
                    break
            if not matched:
                return Verdict.failure(
                    path, "contains", "No item matches the contains schema",
                )

        return Verdict.success()

    # Combinators

    def _evaluate_branches(
        self,
        branches: List[SchemaNode],
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> List[Verdict]:
        return [self._validate(branch, instance, path, context) for branch in branches]

    def _check_any_of(
        self,
        node: Primitive,
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        verdicts = self._evaluate_branches(node.any_of, instance, path, context)
        if any(v.valid for v in verdicts):
            return Verdict.success()

        trail = [Failure(path, "anyOf", f"No branch matched out of {len(verdicts)}")]
        for verdict in verdicts:
            trail.extend(verdict.trail)
        return Verdict(valid=False, trail=trail)

    def _check_one_of(
        self,
        node: Primitive,
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        verdicts = self._evaluate_branches(node.one_of, instance, path, context)
        matched = [index for index, v in enumerate(verdicts) if v.valid]
        if len(matched) == 1:
            return Verdict.success()

        if not matched:
            trail = [Failure(path, "oneOf", "No branch matched")]
            for verdict in verdicts:
                trail.extend(verdict.trail)
            return Verdict(valid=False, trail=trail)

        branches = ", ".join(str(i) for i in matched)
        return Verdict.failure(
            path, "oneOf",
            f"Ambiguous: {len(matched)} branches matched ({branches})",
        )

    # References

    def _validate_reference(
        self,
        node: ReferenceSchema,
        instance: Any,
        path: InstancePath,
        context: _Context,
    ) -> Verdict:
        target = resolve_in_scopes(node.ref, context.scopes)

        key = (id(target), node.ref, path)
        if key in context.active_refs:
            raise ReferenceCycleError(
                node.ref,
                f"Reference cycle at {node.ref!r} without consuming instance structure",
            )

        context.active_refs.add(key)
        try:
            verdict = self._validate(target, instance, path, context)
        finally:
            context.active_refs.discard(key)

        return verdict.with_context(path, "$ref", f"Value does not match {node.ref}")


_default_engine = ValidationEngine()


def validate(
    node: SchemaNode,
    instance: Any,
    path: InstancePath = (),
) -> Verdict:
    """
    Convenience function to validate with a default engine.

    Args:
        node: Root schema node.
        instance: The value to check.
        path: Instance path of `instance`.

    Returns:
        Verdict for the instance.
    """
    return _default_engine.validate(node, instance, path)


def validate_all(
    node: SchemaNode,
    instances: List[Any],
    engine: Optional[ValidationEngine] = None,
) -> Dict[int, Verdict]:
    """
    Validate several independent instances against one schema.

    Returns:
        Mapping of instance index to its verdict.
    """
    engine = engine or _default_engine
    return {index: engine.validate(node, instance) for index, instance in enumerate(instances)}
