# File: convexgen/lexer.py
"""
convexgen - Lexical Utilities
==============================
String-literal-aware scanning helpers shared by the type-expression parser
and the table/field extractor.

None of these functions tokenise the input into a token stream.  They scan
character by character tracking two pieces of state: the active quote
character (``'``, ``"`` or a backtick, with backslash escapes inside
it) and the bracket nesting depth.  That is enough for the Convex schema
dialect, where every construct is a call expression with balanced
delimiters.

All functions are pure and O(n) in the length of the input.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from convexgen.errors import ErrorCode, SchemaParseError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.lexer")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

# ``optional(`` or ``v.optional(``; the ``v.`` namespace is optional
_CALL_HEAD_RE: re.Pattern[str] = re.compile(
    r"^(?:v\.)?([A-Za-z_$][A-Za-z0-9_$]*)\s*\("
)

_QUOTES: str = "'\"`"
_OPENERS: str = "({["
_CLOSERS: str = ")}]"


# ---------------------------------------------------------------------------
# Quote tracking
# ---------------------------------------------------------------------------


class _QuoteState:
    """
    String-literal state fed one character at a time.

    Inside a string a backslash escapes exactly the next character, so in
    ``"\\\\"`` the second backslash is consumed and the closing quote ends
    the string.  Only the opening quote character closes a string.  Single
    and double quoted strings cannot span lines; a newline resets them.
    """

    __slots__ = ("active", "escaped")

    def __init__(self) -> None:
        self.active: Optional[str] = None
        self.escaped: bool = False

    @property
    def in_string(self) -> bool:
        return self.active is not None

    def feed(self, char: str) -> None:
        if self.active is None:
            if char in _QUOTES:
                self.active = char
            return
        if self.escaped:
            self.escaped = False
        elif char == "\\":
            self.escaped = True
        elif char == self.active:
            self.active = None
        elif char == "\n" and self.active != "`":
            self.active = None


# ---------------------------------------------------------------------------
# Comment stripping
# ---------------------------------------------------------------------------


def strip_comments(text: str) -> str:
    """
    Remove ``/* ... */`` block comments and ``// ...`` line comments.

    Both are only recognised outside single, double and backtick quoted
    strings, so ``"https://example.com"`` survives.  A line comment keeps
    its newline.  The text is scanned once from left to right, so the
    result contains no comment and a second call returns it unchanged.

    Examples:
        >>> strip_comments("a: v.string(), // note")
        'a: v.string(), '
        >>> strip_comments("url: 'http://x' // c")
        "url: 'http://x' "
    """
    output: List[str] = []
    quotes = _QuoteState()
    i: int = 0
    length: int = len(text)

    while i < length:
        char: str = text[i]
        if not quotes.in_string and char == "/":
            following: str = text[i + 1:i + 2]
            if following == "/":
                newline_at: int = text.find("\n", i)
                if newline_at == -1:
                    break
                i = newline_at
                continue
            if following == "*":
                close_at: int = text.find("*/", i + 2)
                if close_at == -1:
                    # unterminated block comment: leave the rest untouched
                    output.append(text[i:])
                    break
                i = close_at + 2
                continue
        quotes.feed(char)
        output.append(char)
        i += 1

    return "".join(output)


# ---------------------------------------------------------------------------
# Balanced extraction
# ---------------------------------------------------------------------------


def extract_balanced(text: str, start_index: int = 0) -> str:
    """
    Return the text strictly between the first ``{`` at or after
    *start_index* and its matching ``}``.

    Raises:
        SchemaParseError: ``UNMATCHED_CLOSING_BRACE`` when a ``}`` appears
            with no open brace, ``UNCLOSED_BRACES`` when the text ends
            inside a brace block, ``BRACE_NOT_FOUND`` when there is no
            brace at all.

    Examples:
        >>> extract_balanced("{a:{b:1}}")
        'a:{b:1}'
    """
    depth: int = 0
    open_at: int = -1

    for i in range(start_index, len(text)):
        char: str = text[i]
        if char == "{":
            if depth == 0:
                open_at = i
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[open_at + 1:i]
            if depth < 0:
                raise SchemaParseError(
                    ErrorCode.UNMATCHED_CLOSING_BRACE,
                    f"Unmatched closing brace at offset {i}.",
                )

    if depth > 0:
        raise SchemaParseError(
            ErrorCode.UNCLOSED_BRACES,
            f"Unclosed braces: {depth} block(s) still open at end of input.",
        )
    raise SchemaParseError(
        ErrorCode.BRACE_NOT_FOUND,
        f"No brace block found after offset {start_index}.",
    )


# ---------------------------------------------------------------------------
# Top-level splitting
# ---------------------------------------------------------------------------


def split_top_level(text: str, delimiter: str = ",") -> List[str]:
    """
    Split *text* on *delimiter*, ignoring delimiters nested inside
    ``()``, ``{}``, ``[]`` or quoted strings.

    Each part is stripped.  A trailing empty part left by a terminal
    delimiter is dropped.

    Examples:
        >>> split_top_level("a(1,2), b, 'c,d'")
        ['a(1,2)', 'b', "'c,d'"]
        >>> split_top_level("x, y,")
        ['x', 'y']
    """
    parts: List[str] = []
    current: List[str] = []
    depth: int = 0
    quotes = _QuoteState()

    for char in text:
        quotes.feed(char)

        if not quotes.in_string:
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth -= 1
            elif char == delimiter and depth == 0:
                parts.append("".join(current).strip())
                current = []
                continue

        current.append(char)

    tail: str = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


# ---------------------------------------------------------------------------
# Call-shape recognition
# ---------------------------------------------------------------------------


def match_call(expression: str) -> Optional[Tuple[str, str]]:
    """
    Recognise ``name(args)`` (optionally ``v.name(args)``) where the opening
    parenthesis is closed by the very last character.

    Returns ``(name, args)`` with *args* untrimmed, or ``None`` when the
    expression is not a single complete call, e.g. ``v.string().min(1)``
    or an unterminated ``v.array(``.

    Examples:
        >>> match_call("v.optional(v.string())")
        ('optional', 'v.string()')
        >>> match_call("v.string().min(3)") is None
        True
    """
    head = _CALL_HEAD_RE.match(expression)
    if head is None:
        return None

    open_at: int = head.end() - 1
    depth: int = 0
    quotes = _QuoteState()

    for i in range(open_at, len(expression)):
        char: str = expression[i]
        quotes.feed(char)
        if quotes.in_string:
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                if i != len(expression) - 1:
                    return None
                return head.group(1), expression[open_at + 1:i]

    return None


__all__: List[str] = [
    "strip_comments",
    "extract_balanced",
    "split_top_level",
    "match_call",
]
