"""
tests/test_models.py
Unit tests for convexgen.models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from convexgen.models import (
    DEFAULT_EXCLUDED_FIELDS,
    ArrayType,
    AtomType,
    CodegenConfig,
    FieldRecord,
    OptionalType,
    ReferenceType,
    SerializeOptions,
    TableRecord,
)
from convexgen.rules import z


def _atom(name: str = "string") -> AtomType:
    return AtomType(raw=f"v.{name}()", base_type_name=name)


# ===========================================================================
# Type nodes
# ===========================================================================


class TestTypeNodes:

    def test_optional_array_flags(self) -> None:
        node = OptionalType(
            raw="v.optional(v.array(v.string()))",
            inner=ArrayType(raw="v.array(v.string())", item=_atom()),
        )
        assert (node.is_optional, node.is_array, node.base_type) == (True, True, "array")

    def test_reference_base_type(self) -> None:
        assert ReferenceType(raw="v.id('users')", target_table="users").base_type == "id"

    def test_nodes_are_frozen(self) -> None:
        node = _atom()
        with pytest.raises(ValidationError):
            node.raw = "other"  # type: ignore[misc]

    def test_validate_from_dict_uses_kind(self) -> None:
        record = FieldRecord.model_validate(
            {
                "name": "bio",
                "declared_type": {
                    "kind": "optional",
                    "raw": "v.optional(v.string())",
                    "inner": {"kind": "atom", "raw": "v.string()", "base_type_name": "string"},
                },
                "is_optional": True,
            }
        )
        assert isinstance(record.declared_type, OptionalType)
        assert isinstance(record.declared_type.inner, AtomType)

    def test_unknown_kind_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldRecord.model_validate(
                {"name": "x", "declared_type": {"kind": "tuple", "raw": "v.tuple()"}}
            )


# ===========================================================================
# Records
# ===========================================================================


class TestFieldRecord:

    def test_from_type_hoists_flags(self) -> None:
        declared = OptionalType(raw="v.optional(v.number())", inner=_atom("number"))
        record = FieldRecord.from_type("age", declared, z.number().optional())
        assert record.is_optional is True
        assert record.is_array is False
        assert record.raw_type_expression == "v.optional(v.number())"
        assert record.base_type == "number"
        assert record.rule is not None and record.rule.kind == "optional"

    def test_disagreeing_flags_are_rejected(self) -> None:
        with pytest.raises(ValidationError, match="disagrees"):
            FieldRecord(name="age", declared_type=_atom("number"), is_optional=True)

    def test_rule_must_be_a_rule_node(self) -> None:
        with pytest.raises(ValidationError):
            FieldRecord(name="age", declared_type=_atom(), rule="z.string()")  # type: ignore[arg-type]

    def test_repr(self) -> None:
        declared = ArrayType(raw="v.array(v.string())", item=_atom())
        assert repr(FieldRecord.from_type("tags", declared)) == "<Field tags: array[]>"


class TestTableRecord:

    def test_index_names_are_deduplicated(self) -> None:
        table = TableRecord(name="t", index_names=["by_a", "by_b", "by_a"])
        assert table.index_names == ["by_a", "by_b"]

    def test_field_lookup(self) -> None:
        table = TableRecord(
            name="todos",
            fields=[FieldRecord.from_type("text", _atom()), FieldRecord.from_type("done", _atom("boolean"))],
        )
        assert table.field_names == ["text", "done"]
        assert table.get_field("done").base_type == "boolean"
        assert table.get_field("missing") is None


# ===========================================================================
# Configuration
# ===========================================================================


class TestCodegenConfig:

    def test_defaults(self) -> None:
        config = CodegenConfig()
        assert config.include_error_messages is True
        assert config.exclude_fields == list(DEFAULT_EXCLUDED_FIELDS)
        assert config.schema_name_suffix == "Schema"
        assert config.tables is None

    def test_wants_table(self) -> None:
        assert CodegenConfig().wants_table("anything")
        limited = CodegenConfig(tables=["todos"])
        assert limited.wants_table("todos")
        assert not limited.wants_table("users")

    def test_serialize_options(self) -> None:
        config = CodegenConfig(
            include_error_messages=False,
            custom_kind_overrides={"geo": "z.custom()"},
        )
        options = config.serialize_options()
        assert isinstance(options, SerializeOptions)
        assert options.include_error_messages is False
        assert options.custom_kind_overrides == {"geo": "z.custom()"}

    def test_assignment_is_validated(self) -> None:
        config = CodegenConfig()
        with pytest.raises(ValidationError):
            config.schema_name_suffix = "not valid"

    def test_extra_keys_are_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CodegenConfig(colour="blue")  # type: ignore[call-arg]

    def test_unknown_preset(self) -> None:
        with pytest.raises(ValidationError, match="Unknown rule preset"):
            CodegenConfig(table_overrides={"products": {"homepage": "website"}})
