# ============================================================================
# SYNC OPERATION BASE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase contract
# PURPOSE: Shared context and result types for the six sync phases
# CREATED: 17 OCT 2026
# ============================================================================
"""
Sync Operation Base

Each phase queries both metadata sources on its own, diffs one object
category and hands the decisions to the policy. State carried between
phases is limited to the table partition computed by the table phase (so
later phases can skip objects that travel with a renamed table) and the
names of routines the function phase replaces (triggers bind to the
routine itself, so triggers calling a replaced routine are re-created).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Set

from core.contracts import SyncPhase
from core.models import TableDescriptor
from infrastructure.metadata_source import MetadataSource
from sync.diff import DiffResult, diff_objects, table_key
from sync.policy import SafeMutationPolicy

TODO_PREFIX = "-- TODO:"


@dataclass
class SyncContext:
    """State shared by the phases of one sync run."""
    policy: SafeMutationPolicy
    source_tables: Optional[List[TableDescriptor]] = None
    target_tables: Optional[List[TableDescriptor]] = None
    table_diff: Optional[DiffResult] = None
    replaced_routines: Set[str] = field(default_factory=set)

    @property
    def source_schema(self) -> Optional[str]:
        return self.policy.source_schema

    @property
    def target_schema(self) -> str:
        return self.policy.target_schema

    async def load_tables(self, source: MetadataSource, target: MetadataSource) -> DiffResult:
        """Fetch and partition tables once per run."""
        if self.table_diff is None:
            self.source_tables = await source.list_tables()
            self.target_tables = await target.list_tables()
            self.table_diff = diff_objects(self.source_tables, self.target_tables, table_key)
        return self.table_diff

    @property
    def dropped_tables(self) -> Set[str]:
        if self.table_diff is None:
            return set()
        return {t.name for t in self.table_diff.to_drop}

    @property
    def common_tables(self) -> List[str]:
        """Names present on both sides, in source order."""
        if self.table_diff is None or self.source_tables is None:
            return []
        created = {t.name for t in self.table_diff.to_create}
        return [t.name for t in self.source_tables if t.name not in created]


@dataclass
class PhaseResult:
    """Statements and counts produced by one phase."""
    phase: SyncPhase
    statements: List[str] = field(default_factory=list)
    created: int = 0
    dropped: int = 0
    modified: int = 0

    @property
    def todo_count(self) -> int:
        return sum(
            1
            for block in self.statements
            for line in block.splitlines()
            if line.startswith(TODO_PREFIX)
        )

    def record(self, diff: DiffResult) -> None:
        self.created += len(diff.to_create)
        self.dropped += len(diff.to_drop)
        self.modified += len(diff.to_modify)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "created": self.created,
            "dropped": self.dropped,
            "modified": self.modified,
            "statements": len(self.statements),
            "todos": self.todo_count,
        }


class SyncOperation(ABC):
    """One ordered sync phase."""

    phase: ClassVar[SyncPhase]

    @abstractmethod
    async def generate(
        self,
        source: MetadataSource,
        target: MetadataSource,
        context: SyncContext,
    ) -> PhaseResult:
        """Diff one category and return the DDL for it."""


__all__ = ["SyncContext", "PhaseResult", "SyncOperation", "TODO_PREFIX"]
