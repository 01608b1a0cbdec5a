"""
tests/test_parser.py
Unit tests for convexgen.parser.

Tests cover:
- Type-expression recognition order and node shapes
- Graceful degradation to the ``unknown`` atom
- Schema extraction: tables, fields, indexes, identifier checks
- Structural errors and file reading
"""

from __future__ import annotations

import logging
import pathlib
from typing import List, Optional, Tuple

import pytest

from convexgen.diagnostics import Diagnostics
from convexgen.errors import ErrorCode, FileSystemError, SchemaParseError
from convexgen.models import (
    ArrayType,
    AtomType,
    ObjectType,
    OptionalType,
    ReferenceType,
    UnionType,
)
from convexgen.parser import (
    parse_schema,
    parse_schema_file,
    parse_type_expression,
    read_schema_file,
)
from convexgen.rules import RuleNode, z


def _no_rules(table: str, field: str, base_type: str, is_optional: bool) -> Optional[RuleNode]:
    return None


# ===========================================================================
# parse_type_expression
# ===========================================================================


class TestParseTypeExpression:
    """Recursive descent over single type expressions."""

    def test_nesting_order_is_preserved(self) -> None:
        node = parse_type_expression("v.optional(v.array(v.id('x')))")
        assert isinstance(node, OptionalType)
        assert isinstance(node.inner, ArrayType)
        assert isinstance(node.inner.item, ReferenceType)
        assert node.inner.item.target_table == "x"
        assert node.is_optional is True
        assert node.is_array is True
        assert node.base_type == "array"

    def test_raw_is_the_whole_wrapped_form(self) -> None:
        node = parse_type_expression("  v.optional(v.string())  ")
        assert node.raw == "v.optional(v.string())"
        assert node.inner.raw == "v.string()"

    def test_atom(self) -> None:
        node = parse_type_expression("v.string()")
        assert isinstance(node, AtomType)
        assert node.base_type == "string"
        assert not node.is_optional
        assert not node.is_array

    def test_namespace_is_optional(self) -> None:
        node = parse_type_expression("optional(number())")
        assert isinstance(node, OptionalType)
        assert node.base_type == "number"

    @pytest.mark.parametrize("quote", ["'", '"'])
    def test_reference_quotes(self, quote: str) -> None:
        node = parse_type_expression(f"v.id({quote}users{quote})")
        assert isinstance(node, ReferenceType)
        assert node.target_table == "users"
        assert node.base_type == "id"

    def test_array_never_reports_optional(self) -> None:
        node = parse_type_expression("v.array(v.optional(v.string()))")
        assert isinstance(node, ArrayType)
        assert node.is_optional is False
        assert node.item.is_optional is True

    def test_union_order(self) -> None:
        node = parse_type_expression("union(a(), b(), c())")
        assert isinstance(node, UnionType)
        assert [alt.base_type for alt in node.alternatives] == ["a", "b", "c"]
        assert node.base_type == "union"

    def test_empty_union_behaves_as_unknown(self) -> None:
        node = parse_type_expression("v.union()")
        assert isinstance(node, UnionType)
        assert node.alternatives == ()
        assert node.base_type == "unknown"

    def test_union_sub_error_propagates(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_type_expression("v.union(v.string(), v.optional( ))")
        assert exc_info.value.code == ErrorCode.EMPTY_EXPRESSION

    def test_object(self) -> None:
        node = parse_type_expression(
            "v.object({ street: v.string(), zip: v.optional(v.number()) })"
        )
        assert isinstance(node, ObjectType)
        assert list(node.fields) == ["street", "zip"]
        assert node.fields["zip"].is_optional
        assert node.base_type == "object"

    def test_object_pair_without_colon_is_skipped(self) -> None:
        node = parse_type_expression("v.object({ a: v.string(), junk })")
        assert isinstance(node, ObjectType)
        assert list(node.fields) == ["a"]

    def test_object_unclosed_brace_propagates(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_type_expression("v.object({ a: v.string() )")
        assert exc_info.value.code == ErrorCode.UNCLOSED_BRACES

    def test_empty_expression(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_type_expression("   ")
        assert exc_info.value.code == ErrorCode.EMPTY_EXPRESSION

    @pytest.mark.parametrize(
        "expression",
        ["weirdThing(1,2,3)", "v.literal('x')", "v.string().min(3)", "42"],
    )
    def test_unknown_shapes_degrade(self, expression: str) -> None:
        diagnostics = Diagnostics()
        node = parse_type_expression(expression, diagnostics)
        assert isinstance(node, AtomType)
        assert node.is_unknown
        assert node.raw == expression
        assert diagnostics.codes() == [ErrorCode.UNKNOWN_TYPE_EXPRESSION]

    def test_unknown_shape_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="convexgen.parser"):
            parse_type_expression("weirdThing(1,2,3)")
        assert "Unknown type expression: weirdThing(1,2,3)" in caplog.text

    def test_children(self) -> None:
        node = parse_type_expression("v.union(v.string(), v.array(v.number()))")
        assert [child.kind for child in node.children()] == ["atom", "array"]


# ===========================================================================
# parse_schema
# ===========================================================================


class TestParseSchema:
    """Table and field extraction."""

    def test_single_line_scenario(self, todos_document: str) -> None:
        tables = parse_schema(todos_document)
        assert list(tables) == ["todos"]
        todos = tables["todos"]
        assert todos.field_names == ["text", "done"]
        for record in todos.fields:
            assert isinstance(record.declared_type, AtomType)
            assert record.is_optional is False
        assert todos.get_field("text").base_type == "string"
        assert todos.get_field("done").base_type == "boolean"

    def test_tables_in_declaration_order(self, full_document: str) -> None:
        tables = parse_schema(full_document)
        assert list(tables) == ["users", "products", "todos"]

    def test_field_shapes(self, full_document: str) -> None:
        users = parse_schema(full_document)["users"]
        assert users.field_names == [
            "name", "email", "website", "age", "role", "tags", "profile",
        ]
        assert users.get_field("website").is_optional
        assert users.get_field("tags").is_array
        assert users.get_field("role").base_type == "union"
        assert users.get_field("profile").base_type == "object"

    def test_multiline_union_is_one_field(self, full_document: str) -> None:
        role = parse_schema(full_document)["users"].get_field("role")
        assert isinstance(role.declared_type, UnionType)
        assert len(role.declared_type.alternatives) == 2
        assert "\n" not in role.raw_type_expression

    def test_reference_fields(self, full_document: str) -> None:
        products = parse_schema(full_document)["products"]
        owner = products.get_field("ownerId")
        assert isinstance(owner.declared_type, ReferenceType)
        assert owner.declared_type.target_table == "users"
        image = products.get_field("imageId")
        assert image.is_optional and image.base_type == "id"

    def test_index_names_are_document_wide(self, full_document: str) -> None:
        tables = parse_schema(full_document)
        for table in tables.values():
            assert table.index_names == ["by_email", "by_owner"]

    def test_invalid_field_names_are_skipped(self, full_document: str) -> None:
        diagnostics = Diagnostics()
        todos = parse_schema(full_document, diagnostics=diagnostics)["todos"]
        assert todos.field_names == ["text", "completed"]
        codes = diagnostics.codes()
        assert ErrorCode.RESERVED_KEYWORD in codes
        assert ErrorCode.INVALID_FIELD_NAME in codes

    def test_invalid_table_name_is_skipped(self) -> None:
        document = (
            "defineSchema({ class: defineTable({ a: v.string() }), "
            "ok: defineTable({ a: v.string() }) })"
        )
        diagnostics = Diagnostics()
        tables = parse_schema(document, diagnostics=diagnostics)
        assert list(tables) == ["ok"]
        assert diagnostics.codes() == [ErrorCode.INVALID_TABLE_NAME]

    def test_empty_table_is_dropped(self) -> None:
        document = (
            "defineSchema({ empty: defineTable({}), "
            "full: defineTable({ a: v.string() }) })"
        )
        diagnostics = Diagnostics()
        tables = parse_schema(document, diagnostics=diagnostics)
        assert list(tables) == ["full"]
        assert diagnostics.codes() == [ErrorCode.EMPTY_TABLE]

    def test_resolver_receives_field_facts(self, todos_document: str) -> None:
        calls: List[Tuple[str, str, str, bool]] = []

        def resolver(table: str, field: str, base_type: str, is_optional: bool) -> RuleNode:
            calls.append((table, field, base_type, is_optional))
            return z.string()

        tables = parse_schema(todos_document, resolve_rule=resolver)
        assert calls == [
            ("todos", "text", "string", False),
            ("todos", "done", "boolean", False),
        ]
        assert tables["todos"].get_field("text").rule.kind == "string"

    def test_default_resolver_attaches_rules(self, todos_document: str) -> None:
        todos = parse_schema(todos_document)["todos"]
        assert todos.get_field("text").rule.kind == "string"
        assert todos.get_field("done").rule.kind == "boolean"

    def test_commented_out_table_is_ignored(self) -> None:
        document = (
            "defineSchema({\n"
            "  // old: defineTable({ a: v.string() }),\n"
            "  /* legacy: defineTable({ b: v.number() }), */\n"
            "  live: defineTable({ c: v.boolean() }),\n"
            "})"
        )
        assert list(parse_schema(document, _no_rules)) == ["live"]

    def test_escaped_backslash_literal_keeps_following_fields(self) -> None:
        document = (
            "defineSchema({ t: defineTable({\n"
            '  sep: v.union(v.literal("\\\\"), v.literal("/")),\n'
            "  name: v.string(),\n"
            "}) })"
        )
        table = parse_schema(document, _no_rules)["t"]
        assert table.field_names == ["sep", "name"]
        sep = table.get_field("sep").declared_type
        assert isinstance(sep, UnionType)
        assert [alt.raw for alt in sep.alternatives] == [
            'v.literal("\\\\")',
            'v.literal("/")',
        ]
        assert table.get_field("name").base_type == "string"

    def test_no_schema_block(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema("export const x = 1;")
        assert exc_info.value.code == ErrorCode.NO_SCHEMA_BLOCK

    def test_schema_call_without_object(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema("defineSchema()")
        assert exc_info.value.code == ErrorCode.NO_SCHEMA_BLOCK

    def test_no_tables(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema("defineSchema({})")
        assert exc_info.value.code == ErrorCode.NO_TABLES_FOUND

    def test_only_empty_tables_means_no_tables(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema("defineSchema({ a: defineTable({}) })")
        assert exc_info.value.code == ErrorCode.NO_TABLES_FOUND

    def test_unclosed_table_body(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema("defineSchema({ t: defineTable({ a: v.string() ")
        assert exc_info.value.code == ErrorCode.UNCLOSED_BRACES

    def test_empty_field_type_names_the_field(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            parse_schema("defineSchema({ t: defineTable({ a: v.optional( ) }) })")
        assert exc_info.value.code == ErrorCode.EMPTY_EXPRESSION
        assert exc_info.value.table_name == "t"
        assert exc_info.value.field_name == "a"


# ===========================================================================
# Files
# ===========================================================================


class TestSchemaFiles:
    """read_schema_file / parse_schema_file."""

    def test_parse_file(self, schema_file: pathlib.Path) -> None:
        tables = parse_schema_file(schema_file)
        assert set(tables) == {"users", "products", "todos"}

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileSystemError) as exc_info:
            read_schema_file(tmp_path / "nope.ts")
        assert exc_info.value.code == ErrorCode.FILE_NOT_FOUND

    def test_directory_is_not_readable(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileSystemError) as exc_info:
            read_schema_file(tmp_path)
        assert exc_info.value.code == ErrorCode.FILE_READ_ERROR

    def test_blank_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.ts"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(FileSystemError) as exc_info:
            read_schema_file(path)
        assert exc_info.value.code == ErrorCode.FILE_READ_ERROR
        assert exc_info.value.path == str(path)
