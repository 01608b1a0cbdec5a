"""
tests/test_mappings.py
Unit tests for convexgen.mappings (field-to-rule resolution).
"""

from __future__ import annotations

import pytest

from convexgen.errors import ConfigError, ErrorCode
from convexgen.mappings import (
    DEFAULT_FIELD_PATTERNS,
    PRESETS,
    RuleResolver,
    resolve_rule,
)
from convexgen.rules import OptionalRule, z
from convexgen.serializer import serialize_rule


def _resolved(table: str, field: str, base_type: str, optional: bool = False) -> str:
    return serialize_rule(resolve_rule(table, field, base_type, optional))


# ===========================================================================
# Default resolution
# ===========================================================================


class TestDefaultResolution:

    @pytest.mark.parametrize(
        "base_type, expected",
        [
            ("string", "z.string()"),
            ("number", "z.number()"),
            ("boolean", "z.boolean()"),
            ("id", "z.string()"),
            ("array", "z.array(z.string())"),
        ],
    )
    def test_type_defaults(self, base_type: str, expected: str) -> None:
        assert _resolved("things", "value", base_type) == expected

    def test_unmapped_type_is_none(self) -> None:
        assert resolve_rule("things", "value", "union", False) is None
        assert resolve_rule("things", "value", "unknown", True) is None

    def test_pattern_is_case_insensitive_substring(self) -> None:
        assert _resolved("users", "contactEmail", "string") == (
            'z.string().email("Invalid email address")'
        )

    def test_first_pattern_wins(self) -> None:
        # "url" is registered before "image"
        assert _resolved("posts", "imageUrl", "string") == 'z.string().url("Invalid URL")'

    def test_pattern_beats_type_default(self) -> None:
        assert _resolved("tasks", "completed", "string") == "z.boolean()"

    def test_optional_is_appended(self) -> None:
        assert _resolved("users", "age", "number", True) == "z.number().optional()"

    def test_already_optional_pattern_is_not_wrapped_twice(self) -> None:
        rule = resolve_rule("users", "website", "string", True)
        assert isinstance(rule, OptionalRule)
        assert not isinstance(rule.inner, OptionalRule)
        assert serialize_rule(rule) == 'z.string().url("Invalid URL").optional()'

    def test_table_overrides(self) -> None:
        assert _resolved("products", "title", "string") == "z.string().min(3).max(100)"
        assert _resolved("products", "price", "number") == (
            'z.number().nonnegative("Price must be non-negative")'
        )
        assert _resolved("todos", "text", "string") == (
            'z.string().min(1, "Todo text is required")'
        )

    def test_override_is_table_specific(self) -> None:
        assert _resolved("notes", "title", "string") == "z.string()"

    def test_currency_pattern(self) -> None:
        assert _resolved("orders", "totalAmount", "number") == (
            'z.number().nonnegative().multipleOf(0.01, "Invalid currency amount")'
        )


# ===========================================================================
# RuleResolver customisation
# ===========================================================================


class TestRuleResolver:

    def test_instances_do_not_share_state(self) -> None:
        resolver = RuleResolver()
        resolver.add_table_override("users", "nickname", z.string().max(20))
        assert serialize_rule(resolver("users", "nickname", "string", False)) == (
            "z.string().max(20)"
        )
        assert serialize_rule(resolve_rule("users", "nickname", "string")) == "z.string()"

    def test_new_pattern_is_tried_last(self) -> None:
        resolver = RuleResolver()
        resolver.add_field_pattern("code", z.string().length(6))
        assert serialize_rule(resolver("rooms", "joinCode", "string", False)) == (
            "z.string().length(6)"
        )
        # "email" is registered earlier and still wins
        assert "email" in serialize_rule(resolver("rooms", "emailCode", "string", False))

    def test_empty_tables(self) -> None:
        resolver = RuleResolver(type_rules={}, field_patterns={}, table_overrides={})
        assert resolver("a", "b", "string", False) is None

    def test_preset_overrides(self) -> None:
        resolver = RuleResolver()
        resolver.add_preset_overrides({"products": {"homepage": "url"}})
        assert serialize_rule(resolver("products", "homepage", "string", True)) == (
            'z.string().url("Invalid URL").optional()'
        )

    def test_unknown_preset(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            RuleResolver().add_preset_overrides({"t": {"f": "nope"}})
        assert exc_info.value.code == ErrorCode.INVALID_CONFIG

    def test_defaults_are_not_mutated(self) -> None:
        before = list(DEFAULT_FIELD_PATTERNS)
        RuleResolver().add_field_pattern("zzz", PRESETS["string"])
        assert list(DEFAULT_FIELD_PATTERNS) == before
