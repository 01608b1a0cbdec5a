# File: convexgen/mappings.py
"""
convexgen - Default Field-to-Rule Mapping
==========================================
Decides which validation rule a parsed field gets.  ``parse_schema`` calls
``resolve_rule(table, field, base_type, is_optional)`` once per field.

Resolution order (later steps win):
    1. Default rule for the field's base type (``string``, ``number``,
       ``boolean``, ``id``, ``array``).
    2. The first field-name pattern that occurs, case-insensitively, in the
       field name (``email`` matches ``contactEmail``).
    3. A per-table override for the exact ``table.field`` pair.
    4. Optional fields get ``.optional()`` appended.

A field whose base type has no default and matches nothing resolves to
``None``; the serializer renders that as ``z.any()`` with a warning.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from convexgen.errors import ConfigError
from convexgen.rules import OptionalRule, RuleNode, z

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.mappings")

# ---------------------------------------------------------------------------
# Named rule presets
# ---------------------------------------------------------------------------

PRESETS: Dict[str, RuleNode] = {
    # Strings
    "string": z.string(),
    "email": z.string().email("Invalid email address"),
    "url": z.string().url("Invalid URL"),
    "uuid": z.string().uuid(),
    "isoDate": z.string().datetime(),
    "phone": z.string().regex(
        r"^(\+\d{1,3})?\s?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}$",
        "Invalid phone number",
    ),
    "slug": z.string().regex(r"^[a-z0-9-]+$", "Invalid slug format"),
    "username": z.string().regex(r"^[a-zA-Z0-9_-]{3,20}$", "Invalid username"),
    "hexColor": z.string().regex(r"^#[0-9A-Fa-f]{6}$", "Invalid hex color"),
    "requiredString": z.string().min(1, "This field is required"),
    # Numbers
    "number": z.number(),
    "positiveNumber": z.number().positive("Must be positive"),
    "nonNegativeNumber": z.number().nonnegative("Must be non-negative"),
    "integer": z.number().int("Must be an integer"),
    "price": z.number().nonnegative("Price must be non-negative"),
    "currency": z.number().nonnegative().multiple_of(0.01, "Invalid currency amount"),
    # Others
    "boolean": z.boolean(),
    "date": z.date(),
    "stringArray": z.array(z.string()),
    "numberArray": z.array(z.number()),
}

DEFAULT_TYPE_RULES: Dict[str, RuleNode] = {
    "string": PRESETS["string"],
    "number": PRESETS["number"],
    "boolean": PRESETS["boolean"],
    "id": PRESETS["string"],
    "array": PRESETS["stringArray"],
}

# Insertion order is the match order
DEFAULT_FIELD_PATTERNS: Dict[str, RuleNode] = {
    "email": PRESETS["email"],
    "url": PRESETS["url"],
    "website": PRESETS["url"].optional(),
    "description": PRESETS["string"],
    "content": PRESETS["string"],
    "bio": PRESETS["string"].optional(),
    "image": PRESETS["string"],
    "imageId": PRESETS["string"],
    "imageUrl": PRESETS["url"],
    "avatar": PRESETS["string"].optional(),
    "price": PRESETS["price"],
    "amount": PRESETS["currency"],
    "status": PRESETS["string"],
    "completed": PRESETS["boolean"],
    "isActive": PRESETS["boolean"],
    "enabled": PRESETS["boolean"],
    "phone": PRESETS["phone"],
}

DEFAULT_TABLE_OVERRIDES: Dict[str, Dict[str, RuleNode]] = {
    "products": {
        "title": z.string().min(3).max(100),
        "price": PRESETS["price"],
    },
    "todos": {
        "text": z.string().min(1, "Todo text is required"),
    },
}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class RuleResolver:
    """
    Field-to-rule resolution with extensible patterns and overrides.

    Instances are callable with the ``parse_schema`` resolver signature::

        resolver = RuleResolver()
        resolver.add_table_override("users", "nickname", z.string().max(20))
        tables = parse_schema(document, resolve_rule=resolver)
    """

    def __init__(
        self,
        type_rules: Optional[Mapping[str, RuleNode]] = None,
        field_patterns: Optional[Mapping[str, RuleNode]] = None,
        table_overrides: Optional[Mapping[str, Mapping[str, RuleNode]]] = None,
    ) -> None:
        self.type_rules: Dict[str, RuleNode] = dict(
            DEFAULT_TYPE_RULES if type_rules is None else type_rules
        )
        self.field_patterns: Dict[str, RuleNode] = dict(
            DEFAULT_FIELD_PATTERNS if field_patterns is None else field_patterns
        )
        source = DEFAULT_TABLE_OVERRIDES if table_overrides is None else table_overrides
        self.table_overrides: Dict[str, Dict[str, RuleNode]] = {
            table: dict(fields) for table, fields in source.items()
        }

    def add_table_override(self, table_name: str, field_name: str, rule: RuleNode) -> None:
        self.table_overrides.setdefault(table_name, {})[field_name] = rule

    def add_field_pattern(self, pattern: str, rule: RuleNode) -> None:
        """Register *pattern*; a new pattern is tried after the existing ones."""
        self.field_patterns[pattern] = rule

    def add_preset_overrides(self, overrides: Mapping[str, Mapping[str, str]]) -> None:
        """
        Apply ``{table: {field: preset name}}`` from a config file.

        Raises:
            ConfigError: A preset name is not in ``PRESETS``.
        """
        for table_name, fields in overrides.items():
            for field_name, preset in fields.items():
                if preset not in PRESETS:
                    raise ConfigError(
                        f"Unknown rule preset '{preset}' for {table_name}.{field_name}"
                    )
                self.add_table_override(table_name, field_name, PRESETS[preset])

    def resolve(
        self,
        table_name: str,
        field_name: str,
        base_type: str,
        is_optional: bool = False,
    ) -> Optional[RuleNode]:
        rule: Optional[RuleNode] = self.type_rules.get(base_type)

        lowered: str = field_name.lower()
        for pattern, pattern_rule in self.field_patterns.items():
            if pattern.lower() in lowered:
                rule = pattern_rule
                break

        override: Optional[RuleNode] = self.table_overrides.get(table_name, {}).get(field_name)
        if override is not None:
            rule = override

        # patterns such as "website" are already optional
        if is_optional and rule is not None and not isinstance(rule, OptionalRule):
            rule = rule.optional()

        logger.debug(
            "Resolved %s.%s (%s%s) -> %s",
            table_name,
            field_name,
            base_type,
            "?" if is_optional else "",
            rule.kind if rule is not None else None,
        )
        return rule

    __call__ = resolve


default_resolver: RuleResolver = RuleResolver()


def resolve_rule(
    table_name: str,
    field_name: str,
    base_type: str,
    is_optional: bool = False,
) -> Optional[RuleNode]:
    """Resolve with the module-level ``default_resolver``."""
    return default_resolver.resolve(table_name, field_name, base_type, is_optional)


__all__: List[str] = [
    "PRESETS",
    "DEFAULT_TYPE_RULES",
    "DEFAULT_FIELD_PATTERNS",
    "DEFAULT_TABLE_OVERRIDES",
    "RuleResolver",
    "default_resolver",
    "resolve_rule",
]
