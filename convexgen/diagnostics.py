# File: convexgen/diagnostics.py
"""
convexgen - Diagnostics Collector
==================================
Side channel for the graceful-degradation paths of the parser and the
serializer.

Neither core function raises for an unknown type expression, a skipped
identifier or an unsupported rule kind.  Instead the problem is logged on
the emitting module's logger and, when the caller passes one in, appended to
a ``Diagnostics`` instance.  Recording a diagnostic never changes the value
returned by the core call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from convexgen.errors import ErrorCode

logger: logging.Logger = logging.getLogger("convexgen.diagnostics")


class Diagnostic:
    """Lightweight diagnostic record (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: ErrorCode = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code.value}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class Diagnostics:
    """
    Accumulates ``Diagnostic`` records produced during one pipeline run.

    A fresh instance is expected per parse / serialize invocation; it is
    not shared between threads.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(Diagnostic("error", code, message, context))

    def add_warning(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(Diagnostic("warning", code, message, context))

    def add_info(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(Diagnostic("info", code, message, context))

    def merge(self, other: "Diagnostics") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self._items if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self._items if d.is_warning]

    @property
    def all_items(self) -> List[Diagnostic]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(d.is_warning for d in self._items)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self._items if d.is_warning)

    def codes(self) -> List[ErrorCode]:
        """Codes in recording order (handy in tests)."""
        return [d.code for d in self._items]

    def summary(self) -> str:
        return (
            f"Diagnostics: {len(self.errors)} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<Diagnostics {self.summary()}>"

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "✗",
                "warning": "⚠",
                "info": "ℹ",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code.value}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


def report_warning(
    diagnostics: Optional[Diagnostics],
    log: logging.Logger,
    code: ErrorCode,
    message: str,
    **context: Any,
) -> None:
    """Log *message* at WARNING on *log* and record it when a collector is given."""
    log.warning("%s", message)
    if diagnostics is not None:
        diagnostics.add_warning(code, message, context or None)


__all__: List[str] = [
    "Diagnostic",
    "Diagnostics",
    "report_warning",
]
