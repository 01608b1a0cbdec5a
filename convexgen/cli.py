# File: convexgen/cli.py
"""
convexgen - Command-Line Interface
===================================

Standard-library ``argparse`` CLI.

Usage examples::

    # Generate one zod module per table
    convexgen -s convex/schema.ts -o src/schemas

    # Use a config file, only two tables, no refinement messages
    convexgen -s convex/schema.ts -o src/schemas --config convexgen.yaml \\
        --table todos --table products --no-messages

    # Show what the parser and resolver make of the schema
    convexgen -s convex/schema.ts --inspect

    # Run everything but write nothing
    convexgen -s convex/schema.ts --dry-run -v

Exit codes:
    0: success
    1: schema parse error
    2: generation error
    3: export error
    4: input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List, NoReturn, Optional, Sequence

from convexgen.errors import ConfigError, FileSystemError

if TYPE_CHECKING:
    from convexgen.generator import GenerationReport
    from convexgen.models import CodegenConfig

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_PARSE_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root convexgen logger based on verbosity level.

    Args:
        verbosity: -1 = errors only, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("convexgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from convexgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="convexgen",
        description=(
            "convexgen: Convex schema to zod validation modules.\n\n"
            "Parses defineSchema/defineTable declarations and emits one "
            "zod object schema per table."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s convex/schema.ts -o src/schemas\n"
            "  %(prog)s -s convex/schema.ts --inspect\n"
            "  %(prog)s -s convex/schema.ts -o out --config convexgen.yaml --no-messages\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"convexgen v{__version__}",
    )

    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the Convex schema file (schema.ts).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Directory for generated modules. Required unless --inspect or --dry-run.",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--inspect",
        action="store_true",
        default=False,
        help="Print every table's fields, types and serialized rules; write nothing.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="FILE",
        help="JSON or YAML configuration file.",
    )
    config_group.add_argument(
        "--no-messages",
        action="store_true",
        default=False,
        help="Leave refinement error messages out of the generated rules.",
    )
    config_group.add_argument(
        "--table",
        dest="tables",
        action="append",
        default=None,
        metavar="NAME",
        help="Only generate this table (repeatable).",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def _build_config(args: argparse.Namespace) -> CodegenConfig:
    """Load the config file (if any) and apply CLI overrides on top."""
    from convexgen.generator import load_config
    from convexgen.models import CodegenConfig

    config: CodegenConfig = load_config(args.config) if args.config else CodegenConfig()

    if args.no_messages:
        config.include_error_messages = False
    if args.tables:
        config.tables = list(args.tables)

    return config


# ---------------------------------------------------------------------------
# Inspect mode
# ---------------------------------------------------------------------------


def _print_inspection(report: GenerationReport, config: CodegenConfig) -> None:
    from convexgen.serializer import RuleSerializer

    serializer = RuleSerializer(config.serialize_options())

    print(f"\n{'='*60}")
    print(f"  Schema Inspection: {report.schema_path}")
    print(f"{'='*60}")
    for table in report.tables.values():
        print(f"\n  {table.name} ({len(table.fields)} fields)")
        if table.index_names:
            print(f"    indexes: {', '.join(table.index_names)}")
        for record in table.fields:
            flags: str = "".join(
                ("?" if record.is_optional else "", "[]" if record.is_array else "")
            )
            marker: str = " (excluded)" if record.name in config.exclude_fields else ""
            print(f"    • {record.name:<20s} {record.base_type + flags:<12s}{marker}")
            print(f"        {record.raw_type_expression}")
            print(f"        → {serializer.serialize(record.rule)}")
    print(f"{'='*60}\n")


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _exit_code_for(report: GenerationReport) -> int:
    if report.input_errors:
        return EXIT_INPUT_ERROR
    if report.parse_errors:
        return EXIT_PARSE_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    return EXIT_SUCCESS


def _run_generation(
    schema_path: Path,
    output_dir: Optional[Path],
    args: argparse.Namespace,
) -> int:
    """Run the pipeline and return the appropriate exit code."""
    from convexgen.generator import GenerationReport, SchemaCodegen, write_outputs
    from convexgen.models import CodegenConfig

    try:
        config: CodegenConfig = _build_config(args)
    except ConfigError as exc:
        logger.error("%s", exc.format())
        return EXIT_INPUT_ERROR

    report: GenerationReport = SchemaCodegen(config).generate_from_file(schema_path)

    if args.inspect:
        if report.tables:
            _print_inspection(report, config)
        else:
            print(report.summary())
        return _exit_code_for(report)

    if report.success and output_dir is not None and not args.dry_run:
        try:
            write_outputs(report, output_dir)
        except FileSystemError as exc:
            logger.error("%s", exc.format())
            print(report.summary())
            return EXIT_EXPORT_ERROR
    elif args.dry_run:
        logger.info("Dry-run mode: %d module(s) not written.", len(report.modules))

    print(report.summary())
    return _exit_code_for(report)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()

    if args.output is None and not (args.inspect or args.dry_run):
        logger.error(
            "Output directory is required for generation. "
            "Use -o/--output, --inspect or --dry-run."
        )
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    output_dir: Optional[Path] = Path(args.output).resolve() if args.output else None

    logger.info("Schema:  %s", schema_path)
    logger.info("Output:  %s", output_dir)

    exit_code: int = _run_generation(schema_path, output_dir, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# Console-script alias
main = cli_main


__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_PARSE_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]
