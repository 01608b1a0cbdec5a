"""
tests/conftest.py
Shared fixtures for the convexgen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import logging
import pathlib
import textwrap
from typing import Any, Dict, Iterator

import pytest
import yaml


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_convexgen_logger() -> Iterator[None]:
    """The CLI reconfigures the package logger; restore it so caplog keeps working."""
    yield
    package_logger = logging.getLogger("convexgen")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


# ---------------------------------------------------------------------------
# Schema documents
# ---------------------------------------------------------------------------


@pytest.fixture()
def todos_document() -> str:
    """Single-line schema with one table and two fields."""
    return (
        "defineSchema({ todos: defineTable({ text: v.string(), "
        "done: v.boolean() }) })"
    )


@pytest.fixture()
def full_document() -> str:
    """Realistic multi-table schema.ts with comments, indexes and bad names."""
    return textwrap.dedent(
        """\
        import { defineSchema, defineTable } from "convex/server";
        import { v } from "convex/values";

        /* Application schema.
           Tables are listed in display order. */
        export default defineSchema({
          users: defineTable({
            name: v.string(),
            email: v.string(), // login address
            website: v.optional(v.string()),
            age: v.optional(v.number()),
            role: v.union(
              v.literal("admin"),
              v.literal("member"),
            ),
            tags: v.array(v.string()),
            profile: v.object({ bio: v.string(), avatar: v.optional(v.string()) }),
          }).index("by_email", ["email"]),

          products: defineTable({
            title: v.string(),
            price: v.number(),
            imageId: v.optional(v.id("_storage")),
            ownerId: v.id("users"),
            homepage: v.string(), // see "http://example.com"
          }).index("by_owner", ["ownerId"]),

          todos: defineTable({
            text: v.string(),
            completed: v.boolean(),
            delete: v.boolean(),
            "2fa": v.string(),
          }),
        });
        """
    )


@pytest.fixture()
def schema_file(full_document: str, tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the full schema to ``convex/schema.ts`` under tmp_path."""
    path = tmp_path / "convex" / "schema.ts"
    path.parent.mkdir(parents=True)
    path.write_text(full_document, encoding="utf-8")
    return path


@pytest.fixture()
def todos_schema_file(todos_document: str, tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "schema.ts"
    path.write_text(todos_document, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config_dict() -> Dict[str, Any]:
    return {
        "include_error_messages": False,
        "exclude_fields": ["_id", "createdAt"],
        "schema_name_suffix": "Validator",
        "tables": ["products"],
        "table_overrides": {"products": {"homepage": "url"}},
    }


@pytest.fixture()
def config_yaml_path(config_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the config dict to a temporary YAML file and return its path."""
    path = tmp_path / "convexgen.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(config_dict, fh, default_flow_style=False)
    return path
