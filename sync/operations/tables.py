# ============================================================================
# TABLE OPERATIONS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase 1
# PURPOSE: Create missing tables, rename away tables missing from the source
# CREATED: 17 OCT 2026
# ============================================================================
"""
Table Operations

Missing tables are created in foreign-key dependency order (columns only;
constraints and indexes are added by their own phases). Tables that exist
only in the target are renamed to a backup name.
"""

import logging

from core.contracts import SyncPhase
from core.schema.sorting import sort_by_dependency
from infrastructure.metadata_source import MetadataSource
from sync.operations.base import PhaseResult, SyncContext, SyncOperation

logger = logging.getLogger(__name__)


class TableOperations(SyncOperation):
    phase = SyncPhase.TABLES

    async def generate(self, source: MetadataSource, target: MetadataSource, context: SyncContext) -> PhaseResult:
        diff = await context.load_tables(source, target)
        result = PhaseResult(self.phase)
        result.record(diff)

        missing = {t.name for t in diff.to_create}
        for table in sort_by_dependency(context.source_tables):
            if table.name in missing:
                result.statements.extend(context.policy.create_table(table))

        for table in diff.to_drop:
            result.statements.extend(context.policy.drop_table(table))

        logger.info(f"Tables: {len(diff.to_create)} to create, {len(diff.to_drop)} to rename")
        return result


__all__ = ["TableOperations"]
