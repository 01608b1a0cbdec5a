"""
tests/test_lexer.py
Unit tests for convexgen.lexer.

Tests cover:
- Comment stripping (block, line, strings, idempotence)
- Balanced brace extraction and its error codes
- Top-level splitting
- Call-shape recognition
"""

from __future__ import annotations

import pytest

from convexgen.errors import ErrorCode, SchemaParseError
from convexgen.lexer import extract_balanced, match_call, split_top_level, strip_comments


# ===========================================================================
# strip_comments
# ===========================================================================


class TestStripComments:
    """Comment removal outside string literals."""

    def test_removes_line_comment(self) -> None:
        assert strip_comments("a: v.string(), // note") == "a: v.string(), "

    def test_removes_multiline_block_comment(self) -> None:
        text = "a /* one\ntwo */ b"
        assert strip_comments(text) == "a  b"

    @pytest.mark.parametrize(
        "text",
        [
            'url: "http://example.com"',
            "url: 'http://example.com'",
            "url: `http://example.com`",
        ],
    )
    def test_keeps_double_slash_inside_strings(self, text: str) -> None:
        assert strip_comments(text) == text

    def test_escaped_quote_does_not_close_string(self) -> None:
        text = "msg: 'it\\'s // not a comment'"
        assert strip_comments(text) == text

    def test_comment_after_string(self) -> None:
        text = 'homepage: "http://x.io", // trailing'
        assert strip_comments(text) == 'homepage: "http://x.io", '

    def test_preserves_line_count(self) -> None:
        text = "a, // one\nb, // two\nc"
        assert strip_comments(text).count("\n") == 2

    def test_idempotent(self, full_document: str) -> None:
        once = strip_comments(full_document)
        assert strip_comments(once) == once
        assert '"convex/server"' in once
        assert "login address" not in once

    def test_escaped_backslash_closes_string(self) -> None:
        text = r'a: v.literal("\\"), // note'
        assert strip_comments(text) == r'a: v.literal("\\"), '

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("//*x*/*y*/", ""),
            ("/*x*//*y*/z", "z"),
            ("a/*x*//b", "a/b"),
            ("a//*x*/b\nc", "a\nc"),
        ],
    )
    def test_adjacent_comment_markers(self, text: str, expected: str) -> None:
        once = strip_comments(text)
        assert once == expected
        assert strip_comments(once) == once

    def test_unterminated_block_comment_is_kept(self) -> None:
        assert strip_comments("a, /* open") == "a, /* open"

    def test_block_comment_inside_string_is_kept(self) -> None:
        text = 'pattern: "/* no */", b'
        assert strip_comments(text) == text


# ===========================================================================
# extract_balanced
# ===========================================================================


class TestExtractBalanced:
    """Brace-block extraction."""

    def test_nested_block(self) -> None:
        assert extract_balanced("{a:{b:1}}", 0) == "a:{b:1}"

    def test_starts_at_first_brace_after_index(self) -> None:
        text = "x({ first }) y({ second })"
        assert extract_balanced(text, text.index("y")) == " second "

    def test_unclosed_braces(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            extract_balanced("{a:{b:1}", 0)
        assert exc_info.value.code == ErrorCode.UNCLOSED_BRACES

    def test_stray_closing_brace(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            extract_balanced("a}", 0)
        assert exc_info.value.code == ErrorCode.UNMATCHED_CLOSING_BRACE

    def test_no_brace_at_all(self) -> None:
        with pytest.raises(SchemaParseError) as exc_info:
            extract_balanced("no braces here")
        assert exc_info.value.is_code(ErrorCode.BRACE_NOT_FOUND)

    def test_empty_block(self) -> None:
        assert extract_balanced("defineTable({})", 0) == ""


# ===========================================================================
# split_top_level
# ===========================================================================


class TestSplitTopLevel:
    """Delimiter splitting at depth zero only."""

    def test_ignores_nested_and_quoted_commas(self) -> None:
        assert split_top_level("a(1,2), b, 'c,d'") == ["a(1,2)", "b", "'c,d'"]

    def test_drops_trailing_empty_segment(self) -> None:
        assert split_top_level("x, y,") == ["x", "y"]

    def test_brackets_and_braces(self) -> None:
        text = "a: {x: 1, y: 2}, b: [1, 2], c: v.union(v.a(), v.b())"
        assert split_top_level(text) == [
            "a: {x: 1, y: 2}",
            "b: [1, 2]",
            "c: v.union(v.a(), v.b())",
        ]

    def test_custom_delimiter(self) -> None:
        assert split_top_level("name: v.object({ a: v.b() })", ":") == [
            "name",
            "v.object({ a: v.b() })",
        ]

    def test_empty_input(self) -> None:
        assert split_top_level("") == []

    def test_parts_are_trimmed(self) -> None:
        assert split_top_level("\n  a ,\n  b  \n") == ["a", "b"]

    def test_escaped_backslash_closes_string(self) -> None:
        assert split_top_level(r'v.literal("\\"), b, c') == [
            r'v.literal("\\")',
            "b",
            "c",
        ]


# ===========================================================================
# match_call
# ===========================================================================


class TestMatchCall:
    """Single complete call recognition."""

    def test_with_namespace(self) -> None:
        assert match_call("v.optional(v.string())") == ("optional", "v.string()")

    def test_without_namespace(self) -> None:
        assert match_call("union(a(), b())") == ("union", "a(), b()")

    def test_zero_arguments(self) -> None:
        assert match_call("v.string()") == ("string", "")

    def test_chained_call_is_not_single_call(self) -> None:
        assert match_call("v.string().min(3)") is None

    def test_unterminated_call(self) -> None:
        assert match_call("v.array(v.string()") is None

    def test_paren_inside_string_is_ignored(self) -> None:
        assert match_call("v.literal(')')") == ("literal", "')'")

    def test_escaped_backslash_closes_string(self) -> None:
        assert match_call(r'v.literal("\\")') == ("literal", r'"\\"')
        assert match_call(r'v.literal("\\").min(1)') is None

    def test_not_a_call(self) -> None:
        assert match_call("string") is None
        assert match_call("42") is None
