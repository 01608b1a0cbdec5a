# File: convexgen/parser.py
"""
convexgen - Schema & Type-Expression Parser
============================================
Turns a Convex schema document into ``TableRecord`` objects.

Two layers:

1. ``parse_type_expression``: recursive descent over one type expression
   (``v.optional(v.array(v.id('users')))``) producing a ``TypeNode`` tree.
   Recognition order is fixed because the shapes nest inside each other:
   optional, array, id reference, union, object, zero-argument atom, and
   finally the ``unknown`` fallback.
2. ``parse_schema``: locates ``defineSchema({...})``, walks every
   ``name: defineTable({...})`` block, parses each field declaration and
   asks a resolver callback for the field's validation rule.

Error handling strategy:
    - Structural problems raise ``SchemaParseError`` (empty expression,
      unbalanced braces, no ``defineSchema`` block, zero tables).
    - A bad identifier, an unrecognised type expression or an empty table
      is logged as a warning (and recorded in ``Diagnostics`` when one is
      passed) and parsing carries on.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from convexgen.diagnostics import Diagnostics, report_warning
from convexgen.errors import (
    ErrorCode,
    FileSystemError,
    IdentifierError,
    SchemaParseError,
)
from convexgen.lexer import extract_balanced, match_call, split_top_level, strip_comments
from convexgen.models import (
    UNKNOWN_TYPE,
    ArrayType,
    AtomType,
    FieldRecord,
    ObjectType,
    OptionalType,
    ReferenceType,
    TableRecord,
    TypeNode,
    UnionType,
)
from convexgen.rules import RuleNode
from convexgen.utils import read_file
from convexgen.validators import validate_field_name, validate_table_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.parser")

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

RuleResolver = Callable[[str, str, str, bool], Optional[RuleNode]]

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_REFERENCE_ARG_RE: re.Pattern[str] = re.compile(r"""^(['"])(\w+)\1$""")
_DEFINE_SCHEMA_RE: re.Pattern[str] = re.compile(r"\bdefineSchema\s*\(")
_TABLE_RE: re.Pattern[str] = re.compile(
    r"""(?<![\w$])(['"]?)([^\s'":,{}()]+)\1\s*:\s*defineTable\s*\("""
)
_FIELD_RE: re.Pattern[str] = re.compile(
    r"""^(['"]?)([^\s'":]+)\1\s*:\s*(.+)$""", re.DOTALL
)
_INDEX_RE: re.Pattern[str] = re.compile(r"""\.index\(\s*['"]([^'"]+)['"]""")
_LINE_BREAK_RE: re.Pattern[str] = re.compile(r"\s*\n\s*")


# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------


def parse_type_expression(
    raw: str,
    diagnostics: Optional[Diagnostics] = None,
) -> TypeNode:
    """
    Parse one type expression into a ``TypeNode``.

    Examples:
        >>> parse_type_expression("v.optional(v.array(v.id('tags')))").base_type
        'array'
        >>> parse_type_expression("weirdThing(1,2,3)").base_type
        'unknown'

    Raises:
        SchemaParseError: ``EMPTY_EXPRESSION`` for blank input (including a
            blank argument of a nested wrapper), or a brace error from an
            ``object({...})`` body.
    """
    expression: str = raw.strip()
    if not expression:
        raise SchemaParseError(ErrorCode.EMPTY_EXPRESSION, "Empty type expression")

    call = match_call(expression)
    if call is not None:
        name, args = call

        if name == "optional":
            inner: TypeNode = parse_type_expression(args, diagnostics)
            return OptionalType(raw=expression, inner=inner)

        if name == "array":
            item: TypeNode = parse_type_expression(args, diagnostics)
            return ArrayType(raw=expression, item=item)

        if name == "id":
            ref = _REFERENCE_ARG_RE.match(args.strip())
            if ref is not None:
                return ReferenceType(raw=expression, target_table=ref.group(2))

        if name == "union":
            alternatives: List[TypeNode] = [
                parse_type_expression(part, diagnostics)
                for part in split_top_level(args)
            ]
            return UnionType(raw=expression, alternatives=tuple(alternatives))

        if name == "object":
            node = _parse_object(expression, args, diagnostics)
            if node is not None:
                return node

        if not args.strip():
            return AtomType(raw=expression, base_type_name=name)

    report_warning(
        diagnostics,
        logger,
        ErrorCode.UNKNOWN_TYPE_EXPRESSION,
        f"Unknown type expression: {expression}",
        expression=expression,
    )
    return AtomType(raw=expression, base_type_name=UNKNOWN_TYPE)


def _parse_object(
    expression: str,
    args: str,
    diagnostics: Optional[Diagnostics],
) -> Optional[ObjectType]:
    """``object({ a: T, b: U })``; returns None when the argument is not one brace block."""
    body_text: str = args.strip()
    if not body_text.startswith("{"):
        return None

    body: str = extract_balanced(body_text, 0)
    if len(body) != len(body_text) - 2:
        # something follows the closing brace, e.g. object({...}, extra)
        return None

    fields: Dict[str, TypeNode] = {}
    for pair in split_top_level(body):
        colon_parts: List[str] = split_top_level(pair, ":")
        if len(colon_parts) < 2:
            continue
        field_name: str = colon_parts[0]
        field_type: str = ":".join(colon_parts[1:])
        fields[field_name] = parse_type_expression(field_type, diagnostics)

    return ObjectType(raw=expression, fields=fields)


# ---------------------------------------------------------------------------
# Schema documents
# ---------------------------------------------------------------------------


def _default_resolver() -> RuleResolver:
    from convexgen.mappings import resolve_rule

    return resolve_rule


def parse_schema(
    document: str,
    resolve_rule: Optional[RuleResolver] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[str, TableRecord]:
    """
    Parse a Convex schema document.

    Args:
        document: Full text of ``schema.ts``.
        resolve_rule: ``(table, field, base_type, is_optional) -> RuleNode``.
            Defaults to ``convexgen.mappings.resolve_rule``.
        diagnostics: Optional collector for non-fatal warnings.

    Returns:
        Tables keyed by name, in declaration order.

    Raises:
        SchemaParseError: ``NO_SCHEMA_BLOCK``, ``NO_TABLES_FOUND``, brace
            errors, or an empty type expression.
    """
    resolver: RuleResolver = resolve_rule or _default_resolver()
    cleaned: str = strip_comments(document)

    schema_match = _DEFINE_SCHEMA_RE.search(cleaned)
    if schema_match is None:
        raise SchemaParseError(
            ErrorCode.NO_SCHEMA_BLOCK,
            "Could not find defineSchema(...) in schema file",
        )
    try:
        schema_body: str = extract_balanced(cleaned, schema_match.end())
    except SchemaParseError as exc:
        if exc.is_code(ErrorCode.BRACE_NOT_FOUND):
            raise SchemaParseError(
                ErrorCode.NO_SCHEMA_BLOCK,
                "defineSchema(...) has no object literal argument",
            ) from exc
        raise

    # indexes are collected document-wide, not per table
    index_names: List[str] = _INDEX_RE.findall(cleaned)

    tables: Dict[str, TableRecord] = {}
    for match in _TABLE_RE.finditer(schema_body):
        table_name: str = match.group(2)

        try:
            validate_table_name(table_name)
        except IdentifierError as exc:
            report_warning(
                diagnostics, logger, exc.code, exc.message, table=table_name
            )
            continue

        try:
            fields_block: str = extract_balanced(schema_body, match.end())
        except SchemaParseError as exc:
            raise SchemaParseError(
                exc.code,
                f"Table '{table_name}': {exc.message}",
                table_name=table_name,
            ) from exc

        fields: List[FieldRecord] = _parse_fields(
            table_name, fields_block, resolver, diagnostics
        )
        if not fields:
            report_warning(
                diagnostics,
                logger,
                ErrorCode.EMPTY_TABLE,
                f"Table '{table_name}' has no valid fields and was dropped.",
                table=table_name,
            )
            continue

        tables[table_name] = TableRecord(
            name=table_name, fields=fields, index_names=index_names
        )
        logger.debug("Parsed table '%s' with %d field(s).", table_name, len(fields))

    if not tables:
        raise SchemaParseError(ErrorCode.NO_TABLES_FOUND, "No tables found in schema")

    logger.info(
        "Parsed schema: %d table(s), %d field(s).",
        len(tables),
        sum(len(t.fields) for t in tables.values()),
    )
    return tables


def _parse_fields(
    table_name: str,
    fields_block: str,
    resolver: RuleResolver,
    diagnostics: Optional[Diagnostics],
) -> List[FieldRecord]:
    """Split a ``defineTable`` body into declarations and parse each one."""
    fields: List[FieldRecord] = []

    for declaration in split_top_level(fields_block):
        field_match = _FIELD_RE.match(declaration)
        if field_match is None:
            if declaration:
                logger.debug(
                    "Skipping non-field declaration in '%s': %s", table_name, declaration
                )
            continue

        field_name: str = field_match.group(2)
        type_text: str = _LINE_BREAK_RE.sub(" ", field_match.group(3))

        try:
            validate_field_name(field_name, table_name)
        except IdentifierError as exc:
            report_warning(
                diagnostics,
                logger,
                exc.code,
                exc.message,
                table=table_name,
                field=field_name,
            )
            continue

        try:
            declared: TypeNode = parse_type_expression(type_text, diagnostics)
        except SchemaParseError as exc:
            raise SchemaParseError(
                exc.code,
                f"{table_name}.{field_name}: {exc.message}",
                table_name=table_name,
                field_name=field_name,
            ) from exc

        rule: Optional[RuleNode] = resolver(
            table_name, field_name, declared.base_type, declared.is_optional
        )
        fields.append(FieldRecord.from_type(field_name, declared, rule))

    return fields


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def read_schema_file(path: Union[str, Path]) -> str:
    """
    Read a schema file.

    Raises:
        FileSystemError: ``FILE_NOT_FOUND`` or ``FILE_READ_ERROR`` (also for
            a blank file).
    """
    schema_path: Path = Path(path)
    if not schema_path.exists():
        raise FileSystemError(
            ErrorCode.FILE_NOT_FOUND,
            str(schema_path),
            f"Schema file not found: {schema_path}",
        )
    if not schema_path.is_file():
        raise FileSystemError(
            ErrorCode.FILE_READ_ERROR,
            str(schema_path),
            f"Schema path is not a file: {schema_path}",
        )

    try:
        content: str = read_file(schema_path)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileSystemError(
            ErrorCode.FILE_READ_ERROR,
            str(schema_path),
            f"Failed to read schema file: {exc}",
        ) from exc

    if not content.strip():
        raise FileSystemError(
            ErrorCode.FILE_READ_ERROR, str(schema_path), "Schema file is empty"
        )
    return content


def parse_schema_file(
    path: Union[str, Path],
    resolve_rule: Optional[RuleResolver] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[str, TableRecord]:
    """``read_schema_file`` followed by ``parse_schema``."""
    return parse_schema(read_schema_file(path), resolve_rule, diagnostics)


__all__: List[str] = [
    "RuleResolver",
    "parse_type_expression",
    "parse_schema",
    "read_schema_file",
    "parse_schema_file",
]
