# File: convexgen/rules.py
"""
convexgen - Validation Rule Nodes
==================================
In-memory tree of composable validation rules, the input of the serializer.

Each variant is an immutable dataclass with a ``kind`` tag and a small read
interface (``children()``, ``refinements``, literal / enum values).  The
serializer only ever reads these attributes; it never reaches into private
state, so new variants can be added without touching it beyond one handler.

Rules are normally assembled through the zod-flavoured factory ``z``::

    from convexgen.rules import z

    rule = z.string().min(1, "Required").email("Invalid email address")
    price = z.number().nonnegative("Price must be non-negative")
    tags = z.array(z.string()).max(10).optional()

Every fluent call returns a *new* node; existing nodes are never mutated.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, List, Optional, Pattern, Sequence, Tuple, Union

# ---------------------------------------------------------------------------
# Refinement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Refinement:
    """One chained check on a string or number rule, e.g. ``.min(3)``."""

    check: str
    value: Any = None
    inclusive: bool = True
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Base node
# ---------------------------------------------------------------------------


class RuleNode:
    """
    Base class of every rule variant.

    Subclasses set ``kind``; nodes carrying children override ``children``.
    A custom subclass with an unrecognised ``kind`` is legal: the serializer
    falls back to ``SerializeOptions.custom_kind_overrides`` for it.
    """

    kind: ClassVar[str] = "any"

    def children(self) -> Tuple["RuleNode", ...]:
        return ()

    # -- Wrapping modifiers (shared by all variants) ------------------------

    def optional(self) -> "OptionalRule":
        return OptionalRule(self)

    def nullable(self) -> "NullableRule":
        return NullableRule(self)

    def readonly(self) -> "ReadonlyRule":
        return ReadonlyRule(self)

    def default(self, value: Any) -> "DefaultRule":
        return DefaultRule(self, value)

    def catch(self, value: Any) -> "CatchRule":
        return CatchRule(self, value)

    def brand(self, name: str) -> "BrandedRule":
        return BrandedRule(self, name)

    def promise(self) -> "PromiseRule":
        return PromiseRule(self)

    def and_(self, other: "RuleNode") -> "IntersectionRule":
        return IntersectionRule(self, other)

    def or_(self, other: "RuleNode") -> "UnionRule":
        return UnionRule((self, other))

    def pipe(self, other: "RuleNode") -> "PipelineRule":
        return PipelineRule(self, other)

    def array(self) -> "ArrayRule":
        return ArrayRule(self)


def _present(*nodes: Optional[RuleNode]) -> Tuple[RuleNode, ...]:
    return tuple(n for n in nodes if n is not None)


# ---------------------------------------------------------------------------
# Refinable atoms
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class StringRule(RuleNode):
    kind: ClassVar[str] = "string"

    refinements: Tuple[Refinement, ...] = ()

    def _refine(self, check: str, value: Any = None, message: Optional[str] = None) -> "StringRule":
        return dataclasses.replace(
            self, refinements=self.refinements + (Refinement(check, value, True, message),)
        )

    def min(self, length: int, message: Optional[str] = None) -> "StringRule":
        return self._refine("min_length", length, message)

    def max(self, length: int, message: Optional[str] = None) -> "StringRule":
        return self._refine("max_length", length, message)

    def length(self, length: int, message: Optional[str] = None) -> "StringRule":
        return self._refine("length", length, message)

    def email(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("email", message=message)

    def url(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("url", message=message)

    def emoji(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("emoji", message=message)

    def uuid(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("uuid", message=message)

    def cuid(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("cuid", message=message)

    def cuid2(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("cuid2", message=message)

    def ulid(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("ulid", message=message)

    def datetime(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("datetime", message=message)

    def ip(self, message: Optional[str] = None) -> "StringRule":
        return self._refine("ip", message=message)

    def regex(self, pattern: Union[str, Pattern[str]], message: Optional[str] = None) -> "StringRule":
        """*pattern* is a JS regex source string or a compiled Python pattern."""
        return self._refine("regex", pattern, message)

    def includes(self, value: str, message: Optional[str] = None) -> "StringRule":
        return self._refine("includes", value, message)

    def starts_with(self, value: str, message: Optional[str] = None) -> "StringRule":
        return self._refine("starts_with", value, message)

    def ends_with(self, value: str, message: Optional[str] = None) -> "StringRule":
        return self._refine("ends_with", value, message)


@dataclass(frozen=True, eq=False)
class NumberRule(RuleNode):
    kind: ClassVar[str] = "number"

    refinements: Tuple[Refinement, ...] = ()

    def _refine(
        self,
        check: str,
        value: Any = None,
        inclusive: bool = True,
        message: Optional[str] = None,
    ) -> "NumberRule":
        return dataclasses.replace(
            self, refinements=self.refinements + (Refinement(check, value, inclusive, message),)
        )

    def min(self, value: float, message: Optional[str] = None) -> "NumberRule":
        return self._refine("min", value, message=message)

    def max(self, value: float, message: Optional[str] = None) -> "NumberRule":
        return self._refine("max", value, message=message)

    def gte(self, value: float, message: Optional[str] = None) -> "NumberRule":
        return self._refine("greater_than", value, True, message)

    def gt(self, value: float, message: Optional[str] = None) -> "NumberRule":
        return self._refine("greater_than", value, False, message)

    def lte(self, value: float, message: Optional[str] = None) -> "NumberRule":
        return self._refine("less_than", value, True, message)

    def lt(self, value: float, message: Optional[str] = None) -> "NumberRule":
        return self._refine("less_than", value, False, message)

    def positive(self, message: Optional[str] = None) -> "NumberRule":
        return self.gt(0, message)

    def nonnegative(self, message: Optional[str] = None) -> "NumberRule":
        return self.gte(0, message)

    def negative(self, message: Optional[str] = None) -> "NumberRule":
        return self.lt(0, message)

    def nonpositive(self, message: Optional[str] = None) -> "NumberRule":
        return self.lte(0, message)

    def int(self, message: Optional[str] = None) -> "NumberRule":
        return self._refine("int", message=message)

    def multiple_of(self, value: float, message: Optional[str] = None) -> "NumberRule":
        return self._refine("multiple_of", value, message=message)

    def finite(self, message: Optional[str] = None) -> "NumberRule":
        return self._refine("finite", message=message)

    def safe(self, message: Optional[str] = None) -> "NumberRule":
        return self._refine("safe", message=message)


# ---------------------------------------------------------------------------
# Plain leaves
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class BooleanRule(RuleNode):
    kind: ClassVar[str] = "boolean"


@dataclass(frozen=True, eq=False)
class DateRule(RuleNode):
    kind: ClassVar[str] = "date"


@dataclass(frozen=True, eq=False)
class BigIntRule(RuleNode):
    kind: ClassVar[str] = "bigint"


@dataclass(frozen=True, eq=False)
class SymbolRule(RuleNode):
    kind: ClassVar[str] = "symbol"


@dataclass(frozen=True, eq=False)
class UndefinedRule(RuleNode):
    kind: ClassVar[str] = "undefined"


@dataclass(frozen=True, eq=False)
class NullRule(RuleNode):
    kind: ClassVar[str] = "null"


@dataclass(frozen=True, eq=False)
class VoidRule(RuleNode):
    kind: ClassVar[str] = "void"


@dataclass(frozen=True, eq=False)
class AnyRule(RuleNode):
    kind: ClassVar[str] = "any"


@dataclass(frozen=True, eq=False)
class UnknownRule(RuleNode):
    kind: ClassVar[str] = "unknown"


@dataclass(frozen=True, eq=False)
class NeverRule(RuleNode):
    kind: ClassVar[str] = "never"


@dataclass(frozen=True, eq=False)
class FunctionRule(RuleNode):
    kind: ClassVar[str] = "function"


@dataclass(frozen=True, eq=False)
class LazyRule(RuleNode):
    """Deferred (possibly self-referential) rule; never expanded."""

    kind: ClassVar[str] = "lazy"

    getter: Optional[Callable[[], RuleNode]] = None


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class LiteralRule(RuleNode):
    kind: ClassVar[str] = "literal"

    value: Any = None


@dataclass(frozen=True, eq=False)
class EnumRule(RuleNode):
    kind: ClassVar[str] = "enum"

    values: Tuple[str, ...] = ()


@dataclass(frozen=True, eq=False)
class NativeEnumRule(RuleNode):
    kind: ClassVar[str] = "native_enum"

    enum: Any = None


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class ArrayRule(RuleNode):
    kind: ClassVar[str] = "array"

    item: Optional[RuleNode] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    exact_length: Optional[int] = None

    def children(self) -> Tuple[RuleNode, ...]:
        return _present(self.item)

    def min(self, length: int) -> "ArrayRule":
        return dataclasses.replace(self, min_length=length)

    def max(self, length: int) -> "ArrayRule":
        return dataclasses.replace(self, max_length=length)

    def length(self, length: int) -> "ArrayRule":
        return dataclasses.replace(self, exact_length=length)

    def nonempty(self) -> "ArrayRule":
        return self.min(1)


@dataclass(frozen=True, eq=False)
class ObjectRule(RuleNode):
    kind: ClassVar[str] = "object"

    shape: Tuple[Tuple[str, RuleNode], ...] = ()

    def children(self) -> Tuple[RuleNode, ...]:
        return tuple(rule for _, rule in self.shape)


@dataclass(frozen=True, eq=False)
class UnionRule(RuleNode):
    kind: ClassVar[str] = "union"

    options: Tuple[RuleNode, ...] = ()

    def children(self) -> Tuple[RuleNode, ...]:
        return self.options


@dataclass(frozen=True, eq=False)
class DiscriminatedUnionRule(RuleNode):
    kind: ClassVar[str] = "discriminated_union"

    discriminator: str = ""
    options: Tuple[RuleNode, ...] = ()

    def children(self) -> Tuple[RuleNode, ...]:
        return self.options


@dataclass(frozen=True, eq=False)
class IntersectionRule(RuleNode):
    kind: ClassVar[str] = "intersection"

    left: Optional[RuleNode] = None
    right: Optional[RuleNode] = None

    def children(self) -> Tuple[RuleNode, ...]:
        return _present(self.left, self.right)


@dataclass(frozen=True, eq=False)
class TupleRule(RuleNode):
    kind: ClassVar[str] = "tuple"

    items: Tuple[RuleNode, ...] = ()

    def children(self) -> Tuple[RuleNode, ...]:
        return self.items


@dataclass(frozen=True, eq=False)
class RecordRule(RuleNode):
    kind: ClassVar[str] = "record"

    value_type: Optional[RuleNode] = None

    def children(self) -> Tuple[RuleNode, ...]:
        return _present(self.value_type)


@dataclass(frozen=True, eq=False)
class MapRule(RuleNode):
    kind: ClassVar[str] = "map"

    key_type: Optional[RuleNode] = None
    value_type: Optional[RuleNode] = None

    def children(self) -> Tuple[RuleNode, ...]:
        return _present(self.key_type, self.value_type)


@dataclass(frozen=True, eq=False)
class SetRule(RuleNode):
    kind: ClassVar[str] = "set"

    value_type: Optional[RuleNode] = None

    def children(self) -> Tuple[RuleNode, ...]:
        return _present(self.value_type)


@dataclass(frozen=True, eq=False)
class PipelineRule(RuleNode):
    kind: ClassVar[str] = "pipeline"

    input: Optional[RuleNode] = None
    output: Optional[RuleNode] = None

    def children(self) -> Tuple[RuleNode, ...]:
        return _present(self.input, self.output)


# ---------------------------------------------------------------------------
# Single-child wrappers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class _WrapperRule(RuleNode):
    inner: Optional[RuleNode] = None

    def children(self) -> Tuple[RuleNode, ...]:
        return _present(self.inner)


@dataclass(frozen=True, eq=False)
class OptionalRule(_WrapperRule):
    kind: ClassVar[str] = "optional"


@dataclass(frozen=True, eq=False)
class NullableRule(_WrapperRule):
    kind: ClassVar[str] = "nullable"


@dataclass(frozen=True, eq=False)
class ReadonlyRule(_WrapperRule):
    kind: ClassVar[str] = "readonly"


@dataclass(frozen=True, eq=False)
class PromiseRule(_WrapperRule):
    kind: ClassVar[str] = "promise"


@dataclass(frozen=True, eq=False)
class BrandedRule(_WrapperRule):
    kind: ClassVar[str] = "branded"

    brand_name: str = ""


@dataclass(frozen=True, eq=False)
class DefaultRule(_WrapperRule):
    kind: ClassVar[str] = "default"

    default_value: Any = None


@dataclass(frozen=True, eq=False)
class CatchRule(_WrapperRule):
    kind: ClassVar[str] = "catch"

    catch_value: Any = None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class RuleFactory:
    """
    zod-style constructors, exposed as the module-level ``z`` instance.

    Method names follow zod (``z.object``, ``z.set``, ``z.null``) which is
    why this is a namespace object rather than a set of module functions.
    """

    def string(self) -> StringRule:
        return StringRule()

    def number(self) -> NumberRule:
        return NumberRule()

    def boolean(self) -> BooleanRule:
        return BooleanRule()

    def date(self) -> DateRule:
        return DateRule()

    def bigint(self) -> BigIntRule:
        return BigIntRule()

    def symbol(self) -> SymbolRule:
        return SymbolRule()

    def undefined(self) -> UndefinedRule:
        return UndefinedRule()

    def null(self) -> NullRule:
        return NullRule()

    def void(self) -> VoidRule:
        return VoidRule()

    def any(self) -> AnyRule:
        return AnyRule()

    def unknown(self) -> UnknownRule:
        return UnknownRule()

    def never(self) -> NeverRule:
        return NeverRule()

    def function(self) -> FunctionRule:
        return FunctionRule()

    def lazy(self, getter: Callable[[], RuleNode]) -> LazyRule:
        return LazyRule(getter)

    def literal(self, value: Any) -> LiteralRule:
        return LiteralRule(value)

    def enum(self, values: Sequence[str]) -> EnumRule:
        return EnumRule(tuple(values))

    def native_enum(self, enum: Any) -> NativeEnumRule:
        return NativeEnumRule(enum)

    def array(self, item: RuleNode) -> ArrayRule:
        return ArrayRule(item)

    def object(self, **shape: RuleNode) -> ObjectRule:
        return ObjectRule(tuple(shape.items()))

    def union(self, options: Sequence[RuleNode]) -> UnionRule:
        return UnionRule(tuple(options))

    def discriminated_union(self, discriminator: str, options: Sequence[RuleNode]) -> DiscriminatedUnionRule:
        return DiscriminatedUnionRule(discriminator, tuple(options))

    def intersection(self, left: RuleNode, right: RuleNode) -> IntersectionRule:
        return IntersectionRule(left, right)

    def tuple(self, items: Sequence[RuleNode]) -> TupleRule:
        return TupleRule(tuple(items))

    def record(self, value_type: Optional[RuleNode] = None) -> RecordRule:
        return RecordRule(value_type)

    def map(self, key_type: Optional[RuleNode] = None, value_type: Optional[RuleNode] = None) -> MapRule:
        return MapRule(key_type, value_type)

    def set(self, value_type: Optional[RuleNode] = None) -> SetRule:
        return SetRule(value_type)

    def promise(self, inner: Optional[RuleNode] = None) -> PromiseRule:
        return PromiseRule(inner)


z: RuleFactory = RuleFactory()


def regex_source(pattern: Union[str, Pattern[str]]) -> str:
    """
    Render a regex refinement value as a JS regex literal.

    A plain string is taken as JS source (``^[a-z]+$`` or an already
    delimited ``/^[a-z]+$/i``); a compiled Python pattern contributes its
    ``pattern`` plus the ``i``/``m``/``s`` flags it was compiled with.
    """
    if isinstance(pattern, re.Pattern):
        flags: str = ""
        if pattern.flags & re.IGNORECASE:
            flags += "i"
        if pattern.flags & re.MULTILINE:
            flags += "m"
        if pattern.flags & re.DOTALL:
            flags += "s"
        return f"/{pattern.pattern}/{flags}"
    if len(pattern) >= 2 and pattern.startswith("/") and pattern.rfind("/") > 0:
        return pattern
    return f"/{pattern}/"


WRAPPER_KINDS: frozenset = frozenset(
    {"optional", "nullable", "readonly", "default", "catch", "branded", "promise"}
)


__all__: List[str] = [
    "Refinement",
    "RuleNode",
    "StringRule",
    "NumberRule",
    "BooleanRule",
    "DateRule",
    "BigIntRule",
    "SymbolRule",
    "UndefinedRule",
    "NullRule",
    "VoidRule",
    "AnyRule",
    "UnknownRule",
    "NeverRule",
    "FunctionRule",
    "LazyRule",
    "LiteralRule",
    "EnumRule",
    "NativeEnumRule",
    "ArrayRule",
    "ObjectRule",
    "UnionRule",
    "DiscriminatedUnionRule",
    "IntersectionRule",
    "TupleRule",
    "RecordRule",
    "MapRule",
    "SetRule",
    "PipelineRule",
    "OptionalRule",
    "NullableRule",
    "ReadonlyRule",
    "PromiseRule",
    "BrandedRule",
    "DefaultRule",
    "CatchRule",
    "RuleFactory",
    "z",
    "regex_source",
    "WRAPPER_KINDS",
]
