# File: convexgen/validators.py
"""
convexgen - Identifier Validators
==================================
Table and field names end up as JavaScript identifiers in generated source
(object keys, component props, exported constants), so they must be valid
JS identifiers and must not collide with reserved words.

The validators raise ``IdentifierError``; the schema extractor catches it,
logs a warning and skips the offending table or field instead of failing
the whole parse.
"""

from __future__ import annotations

import logging
import re
from typing import FrozenSet, List

from convexgen.errors import ErrorCode, IdentifierError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.validators")

# ---------------------------------------------------------------------------
# Regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# JavaScript reserved words, strict-mode reserved words and future reserved words
_JS_RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger",
        "default", "delete", "do", "else", "enum", "export", "extends",
        "false", "finally", "for", "function", "if", "import", "in",
        "instanceof", "new", "null", "return", "super", "switch", "this",
        "throw", "true", "try", "typeof", "var", "void", "while", "with",
        "yield",
        "let", "static", "implements", "interface", "package", "private",
        "protected", "public",
        "await", "async",
    }
)

_IDENTIFIER_HINTS: List[str] = [
    "Use only letters, numbers, $, and _",
    "Must start with a letter, $, or _",
    "Cannot be a reserved keyword",
]


def is_reserved_keyword(identifier: str) -> bool:
    """Case-insensitive reserved-word check (``Class`` is rejected too)."""
    return identifier.lower() in _JS_RESERVED_WORDS


def is_valid_identifier(identifier: str) -> bool:
    """
    True when *identifier* matches ``[A-Za-z_$][A-Za-z0-9_$]*`` and is not
    a reserved word.

    Examples:
        >>> is_valid_identifier("createdAt")
        True
        >>> is_valid_identifier("2fa")
        False
        >>> is_valid_identifier("delete")
        False
    """
    return bool(_IDENTIFIER_RE.match(identifier)) and not is_reserved_keyword(identifier)


def validate_table_name(table_name: str) -> None:
    """Raise ``IdentifierError(INVALID_TABLE_NAME)`` for an unusable table name."""
    if not is_valid_identifier(table_name):
        raise IdentifierError(
            ErrorCode.INVALID_TABLE_NAME,
            table_name,
            f'Invalid table name: "{table_name}". Must be a valid JavaScript identifier.',
            _IDENTIFIER_HINTS,
        )


def validate_field_name(field_name: str, table_name: str) -> None:
    """
    Raise ``IdentifierError`` for an unusable field name.

    Reserved words get their own code (``RESERVED_KEYWORD``) and a rename
    suggestion; everything else is ``INVALID_FIELD_NAME``.
    """
    if not _IDENTIFIER_RE.match(field_name):
        raise IdentifierError(
            ErrorCode.INVALID_FIELD_NAME,
            field_name,
            f'Invalid field name: "{field_name}" in table "{table_name}". '
            f"Must be a valid JavaScript identifier.",
            _IDENTIFIER_HINTS,
        )
    if is_reserved_keyword(field_name):
        raise IdentifierError(
            ErrorCode.RESERVED_KEYWORD,
            field_name,
            f'Field name "{field_name}" in table "{table_name}" is a reserved JavaScript keyword.',
            [f'Rename field to "{field_name}_field"', "Use a different name"],
        )


__all__: List[str] = [
    "is_reserved_keyword",
    "is_valid_identifier",
    "validate_table_name",
    "validate_field_name",
]
