# ============================================================================
# SCHEMA SYNC ORCHESTRATOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase sequencing and script assembly
# PURPOSE: Run the six phases in order and emit one reviewable SQL script
# CREATED: 17 OCT 2026
# ============================================================================
"""
Schema Sync Orchestrator

Runs the phases strictly in order

    Tables -> Columns -> Functions/Procedures -> Constraints -> Indexes -> Triggers

and assembles their statements into one script:

    header banner (source, target, generation time)
    one section per phase ("-- No changes" when empty)
    footer banner

The script is written to a named file, to an auto-named file in the
output directory, or to stdout. Both metadata sources are closed when the
run ends, whether or not it succeeded.

Usage:
    orchestrator = SchemaSyncOrchestrator(source, target, SyncOptions(save=True))
    report = await orchestrator.execute()
    print(report.output_path, report.todo_count)
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TextIO

from core.config import SyncDefaults
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.schema.formatting import (
    generate_timestamp,
    generated_at,
    script_footer,
    script_header,
    section_header,
)
from infrastructure.metadata_source import MetadataSource
from sync.operations import PHASE_OPERATIONS, PhaseResult, SyncContext, SyncOperation
from sync.policy import SafeMutationPolicy

logger = get_logger(__name__, ComponentType.ORCHESTRATOR)

NO_CHANGES = "-- No changes"


# ============================================================================
# OPTIONS & REPORT
# ============================================================================

@dataclass
class SyncOptions:
    """
    Where the script goes and how backups are named.

    output_file wins over save; with neither, the script goes to stdout.
    """
    output_file: Optional[str] = None
    save: bool = False
    output_dir: str = "."
    backup_suffix: str = "backup"
    defaults: SyncDefaults = field(default_factory=SyncDefaults)


@dataclass
class SyncReport:
    """Complete result of one sync run."""
    source_schema: str
    target_schema: str
    timestamp: str
    success: bool = False
    phases: List[PhaseResult] = field(default_factory=list)
    output_path: Optional[str] = None
    script: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def todo_count(self) -> int:
        return sum(p.todo_count for p in self.phases)

    @property
    def has_changes(self) -> bool:
        return any(p.statements for p in self.phases)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source_schema": self.source_schema,
            "target_schema": self.target_schema,
            "timestamp": self.timestamp,
            "success": self.success,
            "output_path": self.output_path,
            "phases": [p.to_dict() for p in self.phases],
            "errors": self.errors,
            "summary": {
                "created": sum(p.created for p in self.phases),
                "dropped": sum(p.dropped for p in self.phases),
                "modified": sum(p.modified for p in self.phases),
                "todos": self.todo_count,
            },
        }


# ============================================================================
# ORCHESTRATOR
# ============================================================================

class SchemaSyncOrchestrator:
    """
    Drives one source-to-target sync.

    Args:
        source: Schema the target should be brought in line with
        target: Schema the script alters
        options: Output and backup naming options
        clock: Timestamp source for backup names and the output filename
        operations: Phase operations, in order (defaults to all six)
    """

    def __init__(
        self,
        source: MetadataSource,
        target: MetadataSource,
        options: Optional[SyncOptions] = None,
        clock: Callable[[], str] = generate_timestamp,
        operations: Optional[List[SyncOperation]] = None,
    ):
        self.source = source
        self.target = target
        self.options = options or SyncOptions()
        self.clock = clock
        self.operations = operations if operations is not None else [op() for op in PHASE_OPERATIONS]

    async def generate_script(self, generated: Optional[str] = None) -> SyncReport:
        """
        Run every phase and assemble the script.

        Sources are left open; execute() owns their lifetime.

        Returns:
            SyncReport with phases and script filled in
        """
        source_schema = await self.source.resolve_schema()
        target_schema = await self.target.resolve_schema()
        policy = SafeMutationPolicy(
            target_schema,
            source_schema,
            clock=self.clock,
            backup_suffix=self.options.backup_suffix,
        )
        context = SyncContext(policy=policy)
        report = SyncReport(source_schema, target_schema, policy.timestamp)

        lines = script_header(source_schema, target_schema, generated or generated_at())
        with log_context(source_schema=source_schema, target_schema=target_schema):
            logger.info(f"Syncing {self.source.describe()} -> {self.target.describe()}")
            for operation in self.operations:
                with log_context(phase=operation.phase.value):
                    phase = await operation.generate(self.source, self.target, context)
                    report.phases.append(phase)
                    log_checkpoint("phase_completed", phase.to_dict(), logger.logger)

                lines.append("")
                lines.extend(section_header(phase.phase.section_title))
                if phase.statements:
                    lines.append("\n\n".join(phase.statements))
                else:
                    lines.append(NO_CHANGES)

        lines.extend(script_footer())
        report.script = "\n".join(lines) + "\n"
        report.success = True
        return report

    def write_output(self, report: SyncReport, stream: Optional[TextIO] = None) -> Optional[str]:
        """
        Write the script to its destination.

        Returns:
            Path written, or None when written to the stream (stdout)
        """
        path = None
        if self.options.output_file:
            path = Path(self.options.output_file)
        elif self.options.save:
            filename = self.options.defaults.output_filename(
                report.source_schema, report.target_schema, report.timestamp
            )
            path = Path(self.options.output_dir) / filename

        if path is None:
            (stream or sys.stdout).write(report.script)
            return None

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report.script, encoding="utf-8")
        logger.info(f"Sync script written to {path}")
        log_checkpoint("script_written", {"path": str(path), "todos": report.todo_count}, logger.logger)
        return str(path)

    async def execute(self, stream: Optional[TextIO] = None) -> SyncReport:
        """
        Generate and write the script, then release both sources.

        Raises:
            SchemaSyncError: Acquisition failures propagate after cleanup
        """
        try:
            report = await self.generate_script()
            report.output_path = self.write_output(report, stream)
            if report.todo_count:
                logger.warning(f"Script contains {report.todo_count} TODO item(s) that need manual review")
            return report
        finally:
            await self._close_sources()

    async def _close_sources(self) -> None:
        for source in (self.source, self.target):
            try:
                await source.close()
            except Exception as e:
                logger.error(f"Failed to close {source.describe()}: {e}")


__all__ = ["SchemaSyncOrchestrator", "SyncOptions", "SyncReport", "NO_CHANGES"]
