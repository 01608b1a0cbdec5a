# File: convexgen/serializer.py
"""
convexgen - Validation-Rule Serializer
=======================================
Walks a ``RuleNode`` tree and emits the equivalent zod construction source,
e.g. ``z.number().nonnegative("Price must be non-negative").optional()``.

The serializer is the mirror image of the type-expression parser: parser
goes text -> tree, this module goes tree -> text over the same recursive
shape (wrappers, arrays, unions, refinement chains).

Degradation policy:
    - Rules that cannot be rebuilt from text (object bodies, discriminated
      unions, maps, native enums, function defaults, catch values) render a
      documented placeholder and emit a warning.
    - Unknown kinds use ``SerializeOptions.custom_kind_overrides`` or fall
      back to ``z.any()`` with a warning.
    - A node without a string ``kind``, or one missing the attributes its
      kind needs, is a hard failure (``RuleSerializationError``).

Recursion guard:
    Single-child wrappers (optional, nullable, readonly, default, catch,
    branded, promise) record their class in a per-call visited set while
    their subtree is serialized.  Meeting the same wrapper class again
    inside that subtree renders ``z.any()`` instead of descending, which
    bounds self-referential wrapper chains.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from convexgen.diagnostics import Diagnostics, report_warning
from convexgen.errors import ErrorCode, RuleSerializationError
from convexgen.models import SerializeOptions
from convexgen.rules import WRAPPER_KINDS, Refinement, RuleNode, regex_source

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.serializer")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ANY_PLACEHOLDER: str = "z.any()"

_LEAF_OUTPUT: Dict[str, str] = {
    "boolean": "z.boolean()",
    "date": "z.date()",
    "bigint": "z.bigint()",
    "symbol": "z.symbol()",
    "undefined": "z.undefined()",
    "null": "z.null()",
    "void": "z.void()",
    "any": "z.any()",
    "unknown": "z.unknown()",
    "never": "z.never()",
    "function": "z.function()",
    "lazy": "z.lazy(() => z.any())",
}

# refinement check -> zod method taking one numeric argument
_NUMERIC_ARG_CHECKS: Dict[str, str] = {
    "min_length": "min",
    "min": "min",
    "max_length": "max",
    "max": "max",
    "length": "length",
    "multiple_of": "multipleOf",
}

# refinement check -> zod method taking one string argument
_STRING_ARG_CHECKS: Dict[str, str] = {
    "includes": "includes",
    "starts_with": "startsWith",
    "ends_with": "endsWith",
}

# refinement check -> zod method taking no argument
_FLAG_CHECKS: Dict[str, str] = {
    "email": "email",
    "url": "url",
    "emoji": "emoji",
    "uuid": "uuid",
    "cuid": "cuid",
    "cuid2": "cuid2",
    "ulid": "ulid",
    "datetime": "datetime",
    "ip": "ip",
    "int": "int",
    "finite": "finite",
    "safe": "safe",
}

# Order matters: backslash first so later escapes are not doubled
_ESCAPES: List[Tuple[str, str]] = [
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
]


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def escape_string(value: str) -> str:
    """
    Escape *value* for a double-quoted JS string literal.

    Examples:
        >>> escape_string('say "hi"')
        'say \\\\"hi\\\\"'
    """
    for raw, escaped in _ESCAPES:
        value = value.replace(raw, escaped)
    return value


def _quote(value: str) -> str:
    return f'"{escape_string(value)}"'


def _format_number(value: Any) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Serializer
# ---------------------------------------------------------------------------


class RuleSerializer:
    """
    Stateful walker for one or more ``serialize`` calls.

    The visited set is reset at the start of every ``serialize`` call, so a
    single instance can be reused across fields of a table.
    """

    def __init__(
        self,
        options: Optional[SerializeOptions] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.options: SerializeOptions = options or SerializeOptions()
        self.diagnostics: Optional[Diagnostics] = diagnostics
        self._visited: Set[type] = set()
        self._handlers: Dict[str, Callable[[Any], str]] = {
            "string": self._serialize_string,
            "number": self._serialize_number,
            "array": self._serialize_array,
            "object": self._serialize_object,
            "union": self._serialize_union,
            "discriminated_union": self._serialize_discriminated_union,
            "intersection": self._serialize_intersection,
            "tuple": self._serialize_tuple,
            "record": self._serialize_record,
            "map": self._serialize_map,
            "set": self._serialize_set,
            "literal": self._serialize_literal,
            "enum": self._serialize_enum,
            "native_enum": self._serialize_native_enum,
            "promise": self._serialize_promise,
            "branded": self._serialize_branded,
            "pipeline": self._serialize_pipeline,
            "readonly": self._serialize_readonly,
            "optional": self._serialize_optional,
            "nullable": self._serialize_nullable,
            "default": self._serialize_default,
            "catch": self._serialize_catch,
        }

    # -- Public API ---------------------------------------------------------

    def serialize(self, node: Optional[RuleNode]) -> str:
        """Serialize *node* to zod source text."""
        self._visited = set()
        return self._visit(node)

    # -- Dispatch -----------------------------------------------------------

    def _warn(self, code: ErrorCode, message: str, **context: Any) -> None:
        report_warning(self.diagnostics, logger, code, message, **context)

    def _visit(self, node: Optional[RuleNode]) -> str:
        if node is None:
            self._warn(ErrorCode.MISSING_RULE, "No rule supplied; using z.any()")
            return ANY_PLACEHOLDER

        kind = getattr(node, "kind", None)
        if not isinstance(kind, str):
            raise RuleSerializationError(
                ErrorCode.RULE_EXTRACT_ERROR,
                type(node).__name__,
                f"Object of type {type(node).__name__} has no string 'kind' tag",
            )

        leaf: Optional[str] = _LEAF_OUTPUT.get(kind)
        if leaf is not None:
            return leaf

        handler = self._handlers.get(kind)
        if handler is None:
            override: Optional[str] = self.options.custom_kind_overrides.get(kind)
            if override is not None:
                return override
            self._warn(
                ErrorCode.UNSUPPORTED_RULE_KIND,
                f"Unsupported rule kind '{kind}'; using z.any()",
                kind=kind,
            )
            return ANY_PLACEHOLDER

        if kind not in WRAPPER_KINDS:
            return self._dispatch(handler, node, kind)

        node_type: type = type(node)
        if node_type in self._visited:
            self._warn(
                ErrorCode.CIRCULAR_RULE,
                f"Recursive {node_type.__name__} chain; using z.any()",
                kind=kind,
            )
            return ANY_PLACEHOLDER
        self._visited.add(node_type)
        try:
            return self._dispatch(handler, node, kind)
        finally:
            self._visited.discard(node_type)

    def _dispatch(self, handler: Callable[[Any], str], node: Any, kind: str) -> str:
        try:
            return handler(node)
        except (AttributeError, TypeError) as exc:
            raise RuleSerializationError(
                ErrorCode.CODE_GENERATION_ERROR,
                type(node).__name__,
                f"Cannot serialize {type(node).__name__} as '{kind}': {exc}",
            ) from exc

    def _visit_or_any(self, node: Optional[RuleNode]) -> str:
        """Child that zod treats as optional: absent means ``z.any()``, silently."""
        return ANY_PLACEHOLDER if node is None else self._visit(node)

    # -- Refinement chains --------------------------------------------------

    def _call(self, method: str, args: List[str], message: Optional[str]) -> str:
        if message and self.options.include_error_messages:
            args = args + [_quote(message)]
        return f".{method}({', '.join(args)})"

    def _render_refinement(self, refinement: Refinement) -> Optional[str]:
        check: str = refinement.check
        value: Any = refinement.value
        message: Optional[str] = refinement.message

        if check in _NUMERIC_ARG_CHECKS:
            return self._call(_NUMERIC_ARG_CHECKS[check], [_format_number(value)], message)
        if check in _STRING_ARG_CHECKS:
            return self._call(_STRING_ARG_CHECKS[check], [_quote(str(value))], message)
        if check in _FLAG_CHECKS:
            return self._call(_FLAG_CHECKS[check], [], message)
        if check == "regex":
            return self._call("regex", [regex_source(value)], message)
        if check == "greater_than":
            if _is_number(value) and value == 0:
                return self._call(
                    "nonnegative" if refinement.inclusive else "positive", [], message
                )
            method = "gte" if refinement.inclusive else "gt"
            return self._call(method, [_format_number(value)], message)
        if check == "less_than":
            method = "lte" if refinement.inclusive else "lt"
            return self._call(method, [_format_number(value)], message)

        logger.debug("Skipping unrecognised refinement '%s'.", check)
        return None

    def _serialize_refined(self, base: str, node: Any) -> str:
        parts: List[str] = [base]
        for refinement in getattr(node, "refinements", ()):
            rendered: Optional[str] = self._render_refinement(refinement)
            if rendered is not None:
                parts.append(rendered)
        return "".join(parts)

    def _serialize_string(self, node: Any) -> str:
        return self._serialize_refined("z.string()", node)

    def _serialize_number(self, node: Any) -> str:
        return self._serialize_refined("z.number()", node)

    # -- Containers ---------------------------------------------------------

    def _serialize_array(self, node: Any) -> str:
        parts: List[str] = [f"z.array({self._visit_or_any(node.item)})"]
        if node.min_length is not None:
            parts.append(f".min({node.min_length})")
        if node.max_length is not None:
            parts.append(f".max({node.max_length})")
        if node.exact_length is not None:
            parts.append(f".length({node.exact_length})")
        return "".join(parts)

    def _serialize_object(self, node: Any) -> str:
        self._warn(
            ErrorCode.PLACEHOLDER_RULE,
            "Object rules are emitted as z.object({}) without their shape",
            kind="object",
        )
        return "z.object({})"

    def _serialize_union(self, node: Any) -> str:
        if not node.options:
            return ANY_PLACEHOLDER
        options: List[str] = [self._visit(option) for option in node.options]
        return f"z.union([{', '.join(options)}])"

    def _serialize_discriminated_union(self, node: Any) -> str:
        self._warn(
            ErrorCode.PLACEHOLDER_RULE,
            "Discriminated unions are emitted as z.any()",
            kind="discriminated_union",
        )
        return ANY_PLACEHOLDER

    def _serialize_intersection(self, node: Any) -> str:
        return f"{self._visit_or_any(node.left)}.and({self._visit_or_any(node.right)})"

    def _serialize_tuple(self, node: Any) -> str:
        items: List[str] = [self._visit(item) for item in node.items]
        return f"z.tuple([{', '.join(items)}])"

    def _serialize_record(self, node: Any) -> str:
        return f"z.record({self._visit_or_any(node.value_type)})"

    def _serialize_map(self, node: Any) -> str:
        self._warn(
            ErrorCode.PLACEHOLDER_RULE,
            "Map rules are emitted as z.map(z.any(), z.any())",
            kind="map",
        )
        return "z.map(z.any(), z.any())"

    def _serialize_set(self, node: Any) -> str:
        return f"z.set({self._visit_or_any(node.value_type)})"

    # -- Values -------------------------------------------------------------

    def _serialize_literal(self, node: Any) -> str:
        value: Any = node.value
        if isinstance(value, str):
            return f"z.literal({_quote(value)})"
        if isinstance(value, bool):
            return f"z.literal({'true' if value else 'false'})"
        if _is_number(value):
            return f"z.literal({_format_number(value)})"
        self._warn(
            ErrorCode.PLACEHOLDER_RULE,
            f"Literal of type {type(value).__name__} is emitted as z.any()",
            kind="literal",
        )
        return ANY_PLACEHOLDER

    def _serialize_enum(self, node: Any) -> str:
        if not node.values:
            return ANY_PLACEHOLDER
        values: List[str] = [_quote(str(v)) for v in node.values]
        return f"z.enum([{', '.join(values)}])"

    def _serialize_native_enum(self, node: Any) -> str:
        self._warn(
            ErrorCode.PLACEHOLDER_RULE,
            "Native enums are emitted as z.any()",
            kind="native_enum",
        )
        return ANY_PLACEHOLDER

    # -- Wrappers -----------------------------------------------------------

    def _serialize_promise(self, node: Any) -> str:
        return f"z.promise({self._visit_or_any(node.inner)})"

    def _serialize_branded(self, node: Any) -> str:
        return self._visit_or_any(node.inner)

    def _serialize_pipeline(self, node: Any) -> str:
        return f"{self._visit_or_any(node.input)}.pipe({self._visit_or_any(node.output)})"

    def _serialize_readonly(self, node: Any) -> str:
        return f"{self._visit_or_any(node.inner)}.readonly()"

    def _serialize_optional(self, node: Any) -> str:
        return f"{self._visit_or_any(node.inner)}.optional()"

    def _serialize_nullable(self, node: Any) -> str:
        return f"{self._visit_or_any(node.inner)}.nullable()"

    def _serialize_default(self, node: Any) -> str:
        inner: str = self._visit_or_any(node.inner)
        return f"{inner}.default({self._render_default(node.default_value)})"

    def _render_default(self, value: Any) -> str:
        if callable(value):
            self._warn(
                ErrorCode.PLACEHOLDER_RULE,
                "Function defaults are emitted as a placeholder arrow function",
                kind="default",
            )
            return "() => /* default value */"
        if isinstance(value, str):
            return _quote(value)
        if isinstance(value, bool):
            return "true" if value else "false"
        if _is_number(value):
            return _format_number(value)
        if value is None:
            return "null"
        return "undefined"

    def _serialize_catch(self, node: Any) -> str:
        self._warn(
            ErrorCode.PLACEHOLDER_RULE,
            "Catch values are emitted as a placeholder comment",
            kind="catch",
        )
        return f"{self._visit_or_any(node.inner)}.catch(/* catch value */)"


def serialize_rule(
    node: Optional[RuleNode],
    options: Optional[SerializeOptions] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> str:
    """
    Serialize one rule tree with a fresh ``RuleSerializer``.

    Examples:
        >>> from convexgen.rules import z
        >>> serialize_rule(z.string().min(1).optional())
        'z.string().min(1).optional()'
    """
    return RuleSerializer(options, diagnostics).serialize(node)


__all__: List[str] = [
    "ANY_PLACEHOLDER",
    "escape_string",
    "RuleSerializer",
    "serialize_rule",
]
