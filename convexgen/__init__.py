# File: convexgen/__init__.py
"""
convexgen - Convex Schema Code Generation Core
===============================================

Parses Convex ``defineSchema`` / ``defineTable`` declarations into typed
table metadata and turns validation-rule trees into zod source text.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│  SchemaCodegen │────▶│  RuleSerializer  │
    │   (cli.py)   │     │ (generator.py) │     │ (serializer.py)  │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
                    ┌────────────┼─────────────┐
                    ▼            ▼             ▼
             ┌──────────┐ ┌────────────┐ ┌───────────┐
             │  parser  │ │  mappings  │ │   rules   │
             │ + lexer  │ │ (resolver) │ │ (z.xxx()) │
             └──────────┘ └────────────┘ └───────────┘

Usage::

    # As a library
    from convexgen import parse_schema, serialize_rule, z

    tables = parse_schema(open("convex/schema.ts").read())
    serialize_rule(z.number().nonnegative("Must be non-negative"))

    # From the command line
    convexgen -s convex/schema.ts -o src/schemas -v

Public API:
    - parse_type_expression / parse_schema: text -> TypeNode / TableRecord
    - serialize_rule / RuleSerializer: RuleNode -> zod source
    - z: zod-style RuleNode factory
    - SchemaCodegen: file -> per-table zod modules
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from convexgen.diagnostics import Diagnostic, Diagnostics
from convexgen.errors import (
    ConfigError,
    ConvexGenError,
    ErrorCode,
    FileSystemError,
    IdentifierError,
    RuleSerializationError,
    SchemaParseError,
)
from convexgen.lexer import extract_balanced, split_top_level, strip_comments
from convexgen.models import (
    ArrayType,
    AtomType,
    CodegenConfig,
    FieldRecord,
    ObjectType,
    OptionalType,
    ReferenceType,
    SerializeOptions,
    TableRecord,
    TypeNode,
    UnionType,
)
from convexgen.parser import (
    parse_schema,
    parse_schema_file,
    parse_type_expression,
    read_schema_file,
)
from convexgen.rules import Refinement, RuleNode, z
from convexgen.serializer import RuleSerializer, escape_string, serialize_rule
from convexgen.mappings import RuleResolver, resolve_rule
from convexgen.generator import (
    GenerationReport,
    SchemaCodegen,
    load_config,
    write_outputs,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Core
    "parse_type_expression",
    "parse_schema",
    "parse_schema_file",
    "read_schema_file",
    "serialize_rule",
    "RuleSerializer",
    "escape_string",
    # Lexing
    "strip_comments",
    "extract_balanced",
    "split_top_level",
    # Models
    "TypeNode",
    "OptionalType",
    "ArrayType",
    "ReferenceType",
    "UnionType",
    "ObjectType",
    "AtomType",
    "FieldRecord",
    "TableRecord",
    "SerializeOptions",
    "CodegenConfig",
    # Rules
    "RuleNode",
    "Refinement",
    "z",
    "RuleResolver",
    "resolve_rule",
    # Pipeline
    "SchemaCodegen",
    "GenerationReport",
    "load_config",
    "write_outputs",
    # Errors & diagnostics
    "ErrorCode",
    "ConvexGenError",
    "SchemaParseError",
    "IdentifierError",
    "RuleSerializationError",
    "FileSystemError",
    "ConfigError",
    "Diagnostic",
    "Diagnostics",
]
