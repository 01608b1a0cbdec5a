# File: convexgen/generator.py
"""
convexgen - Generation Pipeline (Orchestrator)
===============================================
Connects the phases together:

    schema.ts -> parse_schema -> serialize_rule per field -> zod modules

``SchemaCodegen`` is the programmatic API and the backend of the CLI.

Workflow::

    1. Read the Convex schema file (or accept the document text).
    2. Parse it into ``TableRecord`` objects, resolving a rule per field.
    3. Serialize each field's rule to zod source.
    4. Render one ``<table>.schema.ts`` module per table.
    5. Return a ``GenerationReport``; ``write_outputs`` puts it on disk.

Error handling strategy:
    - The pipeline never raises for bad input: structural parse errors,
      unreadable files and serialization failures land in the report.
    - Serialization failures are isolated per table: one bad table does not
      stop the others.
    - Non-fatal warnings from parser and serializer are copied into the
      report so callers can surface them.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from convexgen.diagnostics import Diagnostics
from convexgen.errors import (
    ConfigError,
    ErrorCode,
    FileSystemError,
    RuleSerializationError,
    SchemaParseError,
)
from convexgen.mappings import RuleResolver
from convexgen.models import CodegenConfig, TableRecord
from convexgen.parser import parse_schema, read_schema_file
from convexgen.serializer import RuleSerializer
from convexgen.utils import (
    Timer,
    count_lines,
    indent_lines,
    input_type_name,
    schema_export_name,
    schema_module_name,
    write_files_batch,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("convexgen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``SchemaCodegen.generate()``.

    Holds the rendered modules (relative path -> source) plus timing,
    counts, warnings and errors.  Error lists are split by stage so the CLI
    can map them onto exit codes.
    """

    success: bool = False
    schema_path: str = ""
    output_directory: str = ""

    # Metrics
    total_tables_processed: int = 0
    total_fields_generated: int = 0
    total_files_written: int = 0
    total_lines: int = 0
    total_bytes: int = 0
    total_elapsed_seconds: float = 0.0

    # Results
    tables: Dict[str, TableRecord] = field(default_factory=dict)
    serialized_rules: Dict[str, Dict[str, str]] = field(default_factory=dict)
    modules: Dict[str, str] = field(default_factory=dict)

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    parse_errors: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped_tables: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.input_errors or self.parse_errors or self.generation_errors)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  convexgen - Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Schema:           {self.schema_path or '<in-memory>'}")
        if self.output_directory:
            lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Tables processed: {self.total_tables_processed}")
        lines.append(f"  Fields generated: {self.total_fields_generated}")
        lines.append(f"  Modules:          {len(self.modules)}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections: List[Tuple[str, List[str], str]] = [
            ("Input Errors", self.input_errors, "✗"),
            ("Parse Errors", self.parse_errors, "✗"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Warnings", self.warnings, "⚠"),
            ("Skipped Tables", self.skipped_tables, "⊘"),
        ]
        for title, items, icon in sections:
            if not items:
                continue
            lines.append(f"{'─'*60}")
            lines.append(f"  {title} ({len(items)}):")
            for item in items:
                lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_config(path: Union[str, Path]) -> CodegenConfig:
    """
    Load a ``CodegenConfig`` from a JSON or YAML file.

    Dispatches on the file extension; any other extension tries JSON first,
    then YAML.

    Raises:
        ConfigError: Missing file, unparsable content or invalid values.
    """
    config_path: Path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}", path=str(config_path))

    suffix: str = config_path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            raw: Dict[str, Any] = _load_yaml_file(config_path)
        elif suffix == ".json":
            raw = _load_json_file(config_path)
        else:
            logger.info("Unknown extension '%s': trying JSON then YAML.", suffix)
            try:
                raw = _load_json_file(config_path)
            except ValueError:
                raw = _load_yaml_file(config_path)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise ConfigError(str(exc), path=str(config_path)) from exc

    try:
        config: CodegenConfig = CodegenConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration in {config_path}: {exc}", path=str(config_path)
        ) from exc

    logger.info("Loaded config from %s.", config_path)
    return config


# ---------------------------------------------------------------------------
# Module rendering
# ---------------------------------------------------------------------------


def render_table_module(
    table_name: str,
    serialized_fields: Dict[str, str],
    schema_name_suffix: str = "Schema",
) -> str:
    """
    Render the zod module for one table.

    Example output::

        import { z } from "zod";

        export const todosSchema = z.object({
          text: z.string().min(1, "Todo text is required"),
          done: z.boolean(),
        });

        export type TodosInput = z.infer<typeof todosSchema>;
    """
    const_name: str = schema_export_name(table_name, schema_name_suffix)
    lines: List[str] = ['import { z } from "zod";', ""]

    if serialized_fields:
        lines.append(f"export const {const_name} = z.object({{")
        lines.extend(
            indent_lines([f"{name}: {code}," for name, code in serialized_fields.items()])
        )
        lines.append("});")
    else:
        lines.append(f"export const {const_name} = z.object({{}});")

    lines.append("")
    lines.append(f"export type {input_type_name(table_name)} = z.infer<typeof {const_name}>;")
    lines.append("")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# SchemaCodegen: master orchestrator
# ---------------------------------------------------------------------------


class SchemaCodegen:
    """
    Pipeline orchestrator.

    Usage::

        codegen = SchemaCodegen(load_config("convexgen.yaml"))
        report = codegen.generate_from_file(Path("convex/schema.ts"))
        if report.success:
            write_outputs(report, Path("src/schemas"))
        print(report.summary())

    The instance is reusable; every call builds a fresh report.
    """

    def __init__(
        self,
        config: Optional[CodegenConfig] = None,
        resolver: Optional[RuleResolver] = None,
    ) -> None:
        self.config: CodegenConfig = config or CodegenConfig()
        self.resolver: RuleResolver = resolver or RuleResolver()
        self.resolver.add_preset_overrides(self.config.table_overrides)

        logger.debug(
            "SchemaCodegen initialised: messages=%s, tables=%s, excluded=%s.",
            self.config.include_error_messages,
            self.config.tables,
            self.config.exclude_fields,
        )

    # -----------------------------------------------------------------
    # Public entry points
    # -----------------------------------------------------------------

    def generate_from_file(self, schema_path: Union[str, Path]) -> GenerationReport:
        """Read *schema_path* and run the pipeline on its content."""
        pipeline_start: float = time.perf_counter()
        report: GenerationReport = GenerationReport(schema_path=str(schema_path))

        with Timer("read_schema") as t_read:
            try:
                document: Optional[str] = read_schema_file(schema_path)
                error: Optional[FileSystemError] = None
            except FileSystemError as exc:
                document = None
                error = exc

        if error is not None:
            report.input_errors.append(error.message)
            report.step_metrics.append(GenerationStepMetric(
                step_name="Read Schema File",
                success=False,
                elapsed_seconds=t_read.elapsed,
                detail=error.code.value,
            ))
            return self._finalise_report(report, pipeline_start)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Read Schema File",
            success=True,
            elapsed_seconds=t_read.elapsed,
            detail=f"{count_lines(document or '')} lines from {Path(schema_path).name}",
        ))
        return self._run_pipeline(document or "", report, pipeline_start)

    def generate(self, document: str) -> GenerationReport:
        """Run the pipeline on schema text already in memory."""
        return self._run_pipeline(document, GenerationReport(), time.perf_counter())

    # -----------------------------------------------------------------
    # Internal: pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        document: str,
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        diagnostics: Diagnostics = Diagnostics()

        tables: Optional[Dict[str, TableRecord]] = self._step_parse(
            document, diagnostics, report
        )
        if tables is not None:
            self._step_generate(tables, diagnostics, report)

        report.warnings.extend(
            f"[{item.code.value}] {item.message}" for item in diagnostics.warnings
        )
        return self._finalise_report(report, pipeline_start)

    def _step_parse(
        self,
        document: str,
        diagnostics: Diagnostics,
        report: GenerationReport,
    ) -> Optional[Dict[str, TableRecord]]:
        tables: Dict[str, TableRecord] = {}
        failure: Optional[SchemaParseError] = None
        with Timer("parse_schema") as t:
            try:
                tables = parse_schema(document, self.resolver, diagnostics)
            except SchemaParseError as exc:
                failure = exc

        if failure is not None:
            report.parse_errors.append(failure.message)
            report.step_metrics.append(GenerationStepMetric(
                step_name="Parse Schema",
                success=False,
                elapsed_seconds=t.elapsed,
                detail=failure.code.value,
            ))
            logger.error("Schema parsing failed: %s", failure.format())
            return None

        report.tables = tables
        report.step_metrics.append(GenerationStepMetric(
            step_name="Parse Schema",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(tables)} tables, {diagnostics.warning_count} warning(s)",
        ))
        return tables

    def _step_generate(
        self,
        tables: Dict[str, TableRecord],
        diagnostics: Diagnostics,
        report: GenerationReport,
    ) -> None:
        serializer: RuleSerializer = RuleSerializer(
            self.config.serialize_options(), diagnostics
        )
        excluded = set(self.config.exclude_fields)

        for wanted in self.config.tables or []:
            if wanted not in tables:
                report.warnings.append(f"Requested table '{wanted}' is not in the schema")

        with Timer("code_generation") as t:
            for table in tables.values():
                if not self.config.wants_table(table.name):
                    report.skipped_tables.append(table.name)
                    continue

                try:
                    serialized: Dict[str, str] = {
                        record.name: serializer.serialize(record.rule)
                        for record in table.fields
                        if record.name not in excluded
                    }
                except RuleSerializationError as exc:
                    report.generation_errors.append(f"{table.name}: {exc.message}")
                    logger.error("Serialization failed for table '%s': %s", table.name, exc)
                    continue

                module: str = render_table_module(
                    table.name, serialized, self.config.schema_name_suffix
                )
                report.serialized_rules[table.name] = serialized
                report.modules[schema_module_name(table.name)] = module
                report.total_tables_processed += 1
                report.total_fields_generated += len(serialized)

        report.total_lines = sum(count_lines(text) for text in report.modules.values())
        report.total_bytes = sum(len(text.encode("utf-8")) for text in report.modules.values())

        detail: str = (
            f"{len(report.modules)} modules, "
            f"{report.total_fields_generated} fields, "
            f"~{report.total_lines:,} lines"
        )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Serialize Rules",
            success=not report.generation_errors,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))
        logger.info("Code generation complete: %s in %.3fs.", detail, t.elapsed)

    def _finalise_report(
        self,
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        """Set final status and timing on the report."""
        report.total_elapsed_seconds = time.perf_counter() - pipeline_start
        report.success = not report.has_errors
        return report


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def write_outputs(
    report: GenerationReport,
    output_dir: Union[str, Path],
    atomic: bool = True,
) -> Tuple[int, int]:
    """
    Write ``report.modules`` below *output_dir*.

    Returns:
        Tuple of (files_written, bytes_written).

    Raises:
        FileSystemError: ``FILE_WRITE_ERROR`` when the filesystem refuses.
    """
    target: Path = Path(output_dir)

    with Timer("export") as t:
        try:
            files, written = write_files_batch(report.modules, target, atomic=atomic)
        except OSError as exc:
            raise FileSystemError(
                ErrorCode.FILE_WRITE_ERROR,
                str(target),
                f"Failed to write generated modules: {exc}",
            ) from exc

    report.output_directory = str(target.resolve())
    report.total_files_written = files
    report.step_metrics.append(GenerationStepMetric(
        step_name="Write Modules",
        success=True,
        elapsed_seconds=t.elapsed,
        detail=f"{files} files, {written:,} bytes",
    ))
    return files, written


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationStepMetric",
    "GenerationReport",
    "load_config",
    "render_table_module",
    "SchemaCodegen",
    "write_outputs",
]
