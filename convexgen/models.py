# File: convexgen/models.py
"""
convexgen - Core Data Models
=============================
Pydantic V2 models for everything the parser produces and the generator
consumes:

- ``TypeNode``: tagged union (discriminated on ``kind``) of the parsed
  type-expression tree.
- ``FieldRecord`` / ``TableRecord``: one parsed field / table.
- ``SerializeOptions``: flags for the rule serializer.
- ``CodegenConfig``: generator configuration loaded from JSON / YAML.

Type nodes and records are frozen: they are built once per parse call and
never mutated afterwards.
"""

from __future__ import annotations

import logging
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from convexgen.rules import RuleNode

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_NODE_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
)

_RECORD_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    arbitrary_types_allowed=True,
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

UNKNOWN_TYPE: str = "unknown"


# ---------------------------------------------------------------------------
# Type-expression tree
# ---------------------------------------------------------------------------


class _TypeNodeBase(BaseModel):
    """Fields and derived flags shared by every type node."""

    model_config = _NODE_CONFIG

    raw: str = Field(..., description="Original text slice, kept for diagnostics.")

    def children(self) -> Tuple["TypeNode", ...]:
        return ()

    @property
    def base_type(self) -> str:
        return UNKNOWN_TYPE

    @property
    def is_optional(self) -> bool:
        return False

    @property
    def is_array(self) -> bool:
        return False


class OptionalType(_TypeNodeBase):
    """``v.optional(x)``; ``raw`` is the whole wrapped form."""

    kind: Literal["optional"] = "optional"
    inner: TypeNode

    def children(self) -> Tuple["TypeNode", ...]:
        return (self.inner,)

    @property
    def base_type(self) -> str:
        return self.inner.base_type

    @property
    def is_optional(self) -> bool:
        return True

    @property
    def is_array(self) -> bool:
        return self.inner.is_array


class ArrayType(_TypeNodeBase):
    """``v.array(x)``. Never reports optionality, whatever the item carries."""

    kind: Literal["array"] = "array"
    item: TypeNode

    def children(self) -> Tuple["TypeNode", ...]:
        return (self.item,)

    @property
    def base_type(self) -> str:
        return "array"

    @property
    def is_array(self) -> bool:
        return True


class ReferenceType(_TypeNodeBase):
    """``v.id('table')``: foreign-key style pointer to another table."""

    kind: Literal["reference"] = "reference"
    target_table: str = Field(..., min_length=1)

    @property
    def base_type(self) -> str:
        return "id"


class UnionType(_TypeNodeBase):
    kind: Literal["union"] = "union"
    alternatives: Tuple[TypeNode, ...] = ()

    def children(self) -> Tuple["TypeNode", ...]:
        return self.alternatives

    @property
    def base_type(self) -> str:
        return "union" if self.alternatives else UNKNOWN_TYPE


class ObjectType(_TypeNodeBase):
    kind: Literal["object"] = "object"
    fields: Dict[str, TypeNode] = Field(default_factory=dict)

    def children(self) -> Tuple["TypeNode", ...]:
        return tuple(self.fields.values())

    @property
    def base_type(self) -> str:
        return "object"


class AtomType(_TypeNodeBase):
    """Primitive leaf (``v.string()``) or the ``unknown`` fallback."""

    kind: Literal["atom"] = "atom"
    base_type_name: str = Field(..., min_length=1)

    @property
    def base_type(self) -> str:
        return self.base_type_name

    @property
    def is_unknown(self) -> bool:
        return self.base_type_name == UNKNOWN_TYPE


TypeNode = Annotated[
    Union[OptionalType, ArrayType, ReferenceType, UnionType, ObjectType, AtomType],
    Field(discriminator="kind"),
]

for _model in (OptionalType, ArrayType, ReferenceType, UnionType, ObjectType, AtomType):
    _model.model_rebuild()


# ---------------------------------------------------------------------------
# Field / table records
# ---------------------------------------------------------------------------


class FieldRecord(BaseModel):
    """
    One parsed field declaration.

    ``is_optional`` / ``is_array`` are hoisted from ``declared_type`` for
    template convenience and must agree with it.
    """

    model_config = _RECORD_CONFIG

    name: str = Field(..., min_length=1)
    declared_type: TypeNode
    is_optional: bool = False
    is_array: bool = False
    raw_type_expression: str = ""
    rule: Optional[RuleNode] = Field(
        default=None, description="Validation rule supplied by the resolver."
    )

    @model_validator(mode="after")
    def _flags_match_type(self) -> "FieldRecord":
        if self.is_optional != self.declared_type.is_optional:
            raise ValueError(
                f"Field '{self.name}': is_optional={self.is_optional} "
                f"disagrees with declared type {self.declared_type.raw!r}."
            )
        if self.is_array != self.declared_type.is_array:
            raise ValueError(
                f"Field '{self.name}': is_array={self.is_array} "
                f"disagrees with declared type {self.declared_type.raw!r}."
            )
        return self

    @property
    def base_type(self) -> str:
        return self.declared_type.base_type

    @classmethod
    def from_type(
        cls,
        name: str,
        declared_type: TypeNode,
        rule: Optional[RuleNode] = None,
    ) -> "FieldRecord":
        return cls(
            name=name,
            declared_type=declared_type,
            is_optional=declared_type.is_optional,
            is_array=declared_type.is_array,
            raw_type_expression=declared_type.raw,
            rule=rule,
        )

    def __repr__(self) -> str:
        flags: str = "".join(
            ("?" if self.is_optional else "", "[]" if self.is_array else "")
        )
        return f"<Field {self.name}: {self.base_type}{flags}>"


class TableRecord(BaseModel):
    """One ``defineTable`` block: ordered fields plus index names."""

    model_config = _RECORD_CONFIG

    name: str = Field(..., min_length=1)
    fields: List[FieldRecord] = Field(default_factory=list)
    index_names: List[str] = Field(default_factory=list)

    @field_validator("index_names")
    @classmethod
    def _dedupe_index_names(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    @computed_field  # type: ignore[misc]
    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldRecord]:
        for record in self.fields:
            if record.name == name:
                return record
        return None

    def __repr__(self) -> str:
        return f"<Table {self.name} ({len(self.fields)} fields, {len(self.index_names)} indexes)>"


# ---------------------------------------------------------------------------
# Serializer options
# ---------------------------------------------------------------------------


class SerializeOptions(BaseModel):
    """Flags recognised by the rule serializer."""

    model_config = _SETTINGS_CONFIG

    include_error_messages: bool = Field(
        default=True,
        description="Emit refinement messages as the last call argument.",
    )
    custom_kind_overrides: Dict[str, str] = Field(
        default_factory=dict,
        description="Literal source text for rule kinds the serializer does not know.",
    )


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------

DEFAULT_EXCLUDED_FIELDS: Tuple[str, ...] = (
    "id",
    "_id",
    "_creationTime",
    "createdAt",
    "updatedAt",
)


class CodegenConfig(BaseModel):
    """
    Master configuration for the generation pipeline.

    Loaded from a JSON / YAML file by ``convexgen.generator.load_config``;
    CLI flags override individual values afterwards.
    """

    model_config = _SETTINGS_CONFIG

    include_error_messages: bool = Field(default=True)
    custom_kind_overrides: Dict[str, str] = Field(default_factory=dict)
    exclude_fields: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_FIELDS),
        description="System fields left out of generated validation schemas.",
    )
    schema_name_suffix: str = Field(
        default="Schema",
        pattern=r"^[A-Za-z_$][A-Za-z0-9_$]*$",
        description="Suffix of the exported schema constant, e.g. todosSchema.",
    )
    tables: Optional[List[str]] = Field(
        default=None,
        description="Only generate these tables (None = all).",
    )
    table_overrides: Dict[str, Dict[str, str]] = Field(
        default_factory=dict,
        description="{table: {field: preset name}} mapped onto mappings.PRESETS.",
    )

    @field_validator("table_overrides")
    @classmethod
    def _known_presets(cls, v: Dict[str, Dict[str, str]]) -> Dict[str, Dict[str, str]]:
        from convexgen.mappings import PRESETS

        unknown: List[str] = sorted(
            {preset for fields in v.values() for preset in fields.values()} - set(PRESETS)
        )
        if unknown:
            raise ValueError(
                f"Unknown rule preset(s) {unknown}. Available: {sorted(PRESETS)}"
            )
        return v

    def serialize_options(self) -> SerializeOptions:
        return SerializeOptions(
            include_error_messages=self.include_error_messages,
            custom_kind_overrides=dict(self.custom_kind_overrides),
        )

    def wants_table(self, name: str) -> bool:
        return self.tables is None or name in self.tables


__all__: List[str] = [
    "UNKNOWN_TYPE",
    "OptionalType",
    "ArrayType",
    "ReferenceType",
    "UnionType",
    "ObjectType",
    "AtomType",
    "TypeNode",
    "FieldRecord",
    "TableRecord",
    "SerializeOptions",
    "DEFAULT_EXCLUDED_FIELDS",
    "CodegenConfig",
]
