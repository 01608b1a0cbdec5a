# File: convexgen/utils.py
"""
convexgen - Utility Functions & Helpers
========================================
Naming conversions for generated identifiers, file I/O helpers and a small
timing context manager used by the generation pipeline.

- String-conversion functions are ``lru_cache``'d: the same table and field
  names are converted once per table and again per field.
- ``write_file`` writes through a temporary file and renames, so a crash
  never leaves a half-written module behind.
- Standard library only.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """Lower-cased words of *name*, whatever its casing style."""
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert any string to PascalCase.

    Examples:
        >>> to_pascal_case("todos")
        'Todos'
        >>> to_pascal_case("user_profiles")
        'UserProfiles'
        >>> to_pascal_case("orderItems")
        'OrderItems'
    """
    if not name:
        return ""
    return "".join(word.capitalize() for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("user_profiles")
        'userProfiles'
        >>> to_camel_case("OrderItems")
        'orderItems'
    """
    words: Tuple[str, ...] = _extract_words(name) if name else ()
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


def schema_export_name(table_name: str, suffix: str = "Schema") -> str:
    """``todos`` -> ``todosSchema``: the exported zod object constant."""
    return f"{to_camel_case(table_name)}{suffix}"


def input_type_name(table_name: str) -> str:
    """``todos`` -> ``TodosInput``: the inferred TypeScript input type."""
    return f"{to_pascal_case(table_name)}Input"


def schema_module_name(table_name: str) -> str:
    """``todos`` -> ``todos.schema.ts``."""
    return f"{table_name}.schema.ts"


# ---------------------------------------------------------------------------
# Indentation helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent each non-empty line; generated TypeScript uses two spaces."""
    prefix: str = " " * (level * size)
    return [f"{prefix}{line}" if line else line for line in lines]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True, writes to a temporary file in the same directory
    first and then moves it over the target.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
            shutil.move(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def write_files_batch(
    files: Dict[str, str],
    base_dir: Path,
    atomic: bool = True,
) -> Tuple[int, int]:
    """
    Write multiple files at once.

    Args:
        files: Mapping of relative path to content.
        base_dir: Root output directory.
        atomic: Use atomic writes.

    Returns:
        Tuple of (total_files_written, total_bytes_written).
    """
    total_files: int = 0
    total_bytes: int = 0

    for rel_path, content in files.items():
        total_bytes += write_file(base_dir / rel_path, content, atomic=atomic)
        total_files += 1

    logger.info(
        "Batch write complete: %d files, %d bytes to %s",
        total_files,
        total_bytes,
        base_dir,
    )
    return total_files, total_bytes


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for profiling generation steps.

    Usage:
        with Timer("parse schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "to_pascal_case",
    "to_camel_case",
    "schema_export_name",
    "input_type_name",
    "schema_module_name",
    "indent_lines",
    "ensure_directory",
    "write_file",
    "write_files_batch",
    "read_file",
    "count_lines",
    "Timer",
]
