# File: convexgen/errors.py
"""
convexgen - Error Hierarchy
============================
Typed exceptions for the parsing and serialization pipeline.

Structural problems (empty type expression, unbalanced braces, missing
``defineSchema`` block, zero tables) are raised as exceptions and abort the
current call.  Item-level problems (bad identifiers, unknown type shapes,
unsupported rule kinds) are *not* raised from the public API; they are
downgraded to warnings and recorded in a ``Diagnostics`` collector.

Every exception carries an ``ErrorCode`` so callers can branch on the kind
of failure without string matching::

    try:
        tables = parse_schema(text)
    except SchemaParseError as exc:
        if exc.is_code(ErrorCode.NO_TABLES_FOUND):
            ...
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Stable error / warning codes."""

    # File system
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"

    # Structural parse errors
    EMPTY_EXPRESSION = "EMPTY_EXPRESSION"
    UNMATCHED_CLOSING_BRACE = "UNMATCHED_CLOSING_BRACE"
    UNCLOSED_BRACES = "UNCLOSED_BRACES"
    BRACE_NOT_FOUND = "BRACE_NOT_FOUND"
    NO_SCHEMA_BLOCK = "NO_SCHEMA_BLOCK"
    NO_TABLES_FOUND = "NO_TABLES_FOUND"

    # Identifier validation (downgraded to warnings by the extractor)
    INVALID_TABLE_NAME = "INVALID_TABLE_NAME"
    INVALID_FIELD_NAME = "INVALID_FIELD_NAME"
    RESERVED_KEYWORD = "RESERVED_KEYWORD"

    # Degradation warnings
    UNKNOWN_TYPE_EXPRESSION = "UNKNOWN_TYPE_EXPRESSION"
    EMPTY_TABLE = "EMPTY_TABLE"
    MISSING_RULE = "MISSING_RULE"
    UNSUPPORTED_RULE_KIND = "UNSUPPORTED_RULE_KIND"
    PLACEHOLDER_RULE = "PLACEHOLDER_RULE"
    CIRCULAR_RULE = "CIRCULAR_RULE"

    # Serializer hard failure
    RULE_EXTRACT_ERROR = "RULE_EXTRACT_ERROR"

    # Configuration / generation
    INVALID_CONFIG = "INVALID_CONFIG"
    CODE_GENERATION_ERROR = "CODE_GENERATION_ERROR"


class ConvexGenError(Exception):
    """Base class for every error raised by convexgen."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code: ErrorCode = code
        self.message: str = message
        self.details: Dict[str, Any] = {
            k: v for k, v in (details or {}).items() if v is not None
        }

    def is_code(self, code: ErrorCode) -> bool:
        return self.code == code

    def format(self) -> str:
        """Human-readable one-block rendering used by the CLI."""
        output: str = f"[{self.code.value}] {self.message}"
        if self.details:
            output += "\n  Details: " + json.dumps(self.details, default=str, indent=2)
        if self.__cause__ is not None:
            output += f"\n  Caused by: {self.__cause__}"
        return output

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code.value}: {self.message}>"


class SchemaParseError(ConvexGenError):
    """Structural failure while parsing a schema document or type expression."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        table_name: Optional[str] = None,
        field_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            code,
            message,
            {"table_name": table_name, "field_name": field_name},
        )
        self.table_name: Optional[str] = table_name
        self.field_name: Optional[str] = field_name


class IdentifierError(ConvexGenError):
    """A table or field name that is not usable as a generated identifier."""

    def __init__(
        self,
        code: ErrorCode,
        identifier: str,
        message: str,
        suggestions: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            code,
            message,
            {"identifier": identifier, "suggestions": suggestions},
        )
        self.identifier: str = identifier
        self.suggestions: List[str] = list(suggestions or [])


class RuleSerializationError(ConvexGenError):
    """The serializer was handed something that is not a readable rule node."""

    def __init__(self, code: ErrorCode, rule_type: str, message: str) -> None:
        super().__init__(code, message, {"rule_type": rule_type})
        self.rule_type: str = rule_type


class FileSystemError(ConvexGenError):
    """Reading or writing a file failed."""

    def __init__(self, code: ErrorCode, path: str, message: str) -> None:
        super().__init__(code, message, {"path": path})
        self.path: str = path


class ConfigError(ConvexGenError):
    """A configuration file could not be loaded or validated."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(ErrorCode.INVALID_CONFIG, message, {"path": path})
        self.path: Optional[str] = path


__all__: List[str] = [
    "ErrorCode",
    "ConvexGenError",
    "SchemaParseError",
    "IdentifierError",
    "RuleSerializationError",
    "FileSystemError",
    "ConfigError",
]
