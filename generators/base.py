# ============================================================================
# BASE GENERATOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Generators - Shared validate / generate / write workflow
# PURPOSE: Common plumbing for schema.sql, procs.sql and triggers.sql
# CREATED: 17 OCT 2026
# ============================================================================
"""
Base Generator

Every generator follows the same workflow:

    1. should_skip()  - honor --schema-only / --procs-only / --triggers-only
    2. validate()     - ValidationResult; errors stop this generator
    3. generate()     - build GeneratedFile objects
    4. write          - files under output_dir, or stdout

execute() never raises for expected failures (missing schema, no
tables, acquisition errors); it returns a failed GeneratorResult so the
caller can decide whether to keep going with the next generator.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, TextIO

from psycopg import sql

from core.config import GeneratorDefaults
from core.errors import SchemaSyncError
from core.logging import ComponentType, get_logger, log_context
from core.schema.formatting import file_footer, file_header, generated_at, render
from core.validation import ValidationResult, check_schema_presence, validate_identifier
from infrastructure.metadata_source import MetadataSource

logger = get_logger(__name__, ComponentType.GENERATOR)

STDOUT_SEPARATOR = "=" * 80


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class GenerationOptions:
    """Options shared by all generators."""
    output_dir: str = "./output"
    to_stdout: bool = False
    schema_only: bool = False
    procs_only: bool = False
    triggers_only: bool = False
    database: Optional[str] = None
    # Fixed header timestamp; None means "now"
    generated: Optional[str] = None


@dataclass
class GeneratedFile:
    """One generated SQL file."""
    name: str
    content: str
    path: Optional[str] = None


@dataclass
class GeneratorResult:
    """Result of one generator run."""
    generator: str
    success: bool
    skipped: bool = False
    files: List[GeneratedFile] = field(default_factory=list)
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator": self.generator,
            "success": self.success,
            "skipped": self.skipped,
            "files": [f.path or f.name for f in self.files],
            "error": self.error,
            "warnings": self.warnings,
        }


# ============================================================================
# BASE GENERATOR
# ============================================================================

class BaseGenerator(ABC):
    """
    Abstract base for file generators.

    Subclasses set `name` and `title` and implement should_skip() and
    generate(); validate() may be extended with generator-specific checks.
    """

    name: ClassVar[str]
    title: ClassVar[str]

    def __init__(
        self,
        source: MetadataSource,
        options: Optional[GenerationOptions] = None,
        defaults: Optional[GeneratorDefaults] = None,
    ):
        self.source = source
        self.options = options or GenerationOptions()
        self.defaults = defaults or GeneratorDefaults()

    @property
    def schema(self) -> str:
        return self.source.schema

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def should_skip(self) -> bool:
        """True when the only-flags exclude this generator."""

    @abstractmethod
    async def generate(self) -> List[GeneratedFile]:
        """Build this generator's files."""

    async def validate(self) -> ValidationResult:
        """Schema name and schema existence checks."""
        result = validate_identifier(self.schema, "schema")
        if not result.valid:
            return result
        exists = await self.source.schema_exists()
        if not exists:
            result.merge(check_schema_presence(self.schema, False, await self.source.list_schemas()))
        return result

    # ------------------------------------------------------------------
    # Shared rendering
    # ------------------------------------------------------------------

    def qualified(self, name: str) -> str:
        """Always-quoted "schema"."name", as generated files spell it."""
        return render(sql.Identifier(self.schema, name))

    def header(self) -> List[str]:
        lines = file_header(
            self.title,
            self.schema,
            self.options.database,
            self.options.generated or generated_at(),
        )
        lines.append("")
        if self.schema != "public":
            lines.append("-- Create schema if it doesn't exist")
            lines.append(render(sql.SQL("CREATE SCHEMA IF NOT EXISTS {};").format(sql.Identifier(self.schema))))
            lines.append("")
        return lines

    def footer(self) -> List[str]:
        return file_footer(self.title)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    async def execute(self, stream: Optional[TextIO] = None) -> GeneratorResult:
        """
        Validate, generate and write.

        Returns:
            GeneratorResult; success is False when validation or
            acquisition failed
        """
        with log_context(schema=self.schema, operation=self.name):
            if self.should_skip():
                logger.info(f"Skipping {self.name}")
                return GeneratorResult(self.name, success=True, skipped=True)

            logger.info(f"Generating {self.name}")
            try:
                validation = await self.validate()
                if not validation.valid:
                    error = str(validation.errors[0])
                    logger.error(f"{self.name} validation failed: {error}")
                    return GeneratorResult(
                        self.name, success=False, error=error, warnings=validation.warnings
                    )
                for warning in validation.warnings:
                    logger.warning(warning)

                files = await self.generate()
            except SchemaSyncError as e:
                logger.error(f"{self.name} failed: {e}")
                return GeneratorResult(self.name, success=False, error=str(e))

            if self.options.to_stdout:
                self._write_stdout(files, stream or sys.stdout)
            else:
                self._write_files(files)

            logger.info(f"{self.name} completed")
            return GeneratorResult(self.name, success=True, files=files, warnings=validation.warnings)

    def _write_stdout(self, files: List[GeneratedFile], stream: TextIO) -> None:
        for i, generated in enumerate(files):
            if i > 0:
                stream.write(f"\n{STDOUT_SEPARATOR}\n\n")
            stream.write(f"-- {generated.name}\n\n")
            stream.write(generated.content)

    def _write_files(self, files: List[GeneratedFile]) -> None:
        output_dir = Path(self.options.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        for generated in files:
            path = output_dir / generated.name
            path.write_text(generated.content, encoding="utf-8")
            generated.path = str(path)
            logger.info(f"Generated: {path}")


__all__ = [
    "BaseGenerator",
    "GenerationOptions",
    "GeneratedFile",
    "GeneratorResult",
]
