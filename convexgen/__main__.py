# File: convexgen/__main__.py
"""
convexgen - Module entry point.

Allows running the generator directly via::

    python -m convexgen --schema convex/schema.ts --output src/schemas
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from convexgen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
