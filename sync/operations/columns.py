# ============================================================================
# COLUMN OPERATIONS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase 2
# PURPOSE: Add, modify and rename away columns of tables on both sides
# CREATED: 17 OCT 2026
# ============================================================================
"""
Column Operations

Only tables present in both schemas are compared; new tables were created
with all their columns and dropped tables keep theirs. Output is grouped
per table (source order): renames first, then additions and modifications
in the source column order.
"""

import logging
from collections import defaultdict

from core.contracts import SyncPhase
from infrastructure.metadata_source import MetadataSource
from sync.diff import column_key, column_signature, diff_objects
from sync.operations.base import PhaseResult, SyncContext, SyncOperation

logger = logging.getLogger(__name__)


class ColumnOperations(SyncOperation):
    phase = SyncPhase.COLUMNS

    async def generate(self, source: MetadataSource, target: MetadataSource, context: SyncContext) -> PhaseResult:
        await context.load_tables(source, target)
        common = context.common_tables
        shared = set(common)

        source_columns = [c for c in await source.list_columns() if c.table in shared]
        target_columns = [c for c in await target.list_columns() if c.table in shared]

        diff = diff_objects(
            source_columns,
            target_columns,
            column_key,
            column_signature((context.source_schema, context.target_schema)),
        )
        result = PhaseResult(self.phase)
        result.record(diff)

        created = {column_key(c) for c in diff.to_create}
        modified = {column_key(s): (s, t) for s, t in diff.to_modify}
        dropped = defaultdict(list)
        for column in diff.to_drop:
            dropped[column.table].append(column)

        policy = context.policy
        for table in common:
            for column in dropped.get(table, []):
                result.statements.extend(policy.drop_column(column))
            for column in source_columns:
                if column.table != table:
                    continue
                key = column_key(column)
                if key in created:
                    result.statements.extend(policy.add_column(column))
                elif key in modified:
                    result.statements.extend(policy.modify_column(*modified[key]))

        logger.info(
            f"Columns: {len(diff.to_create)} to add, {len(diff.to_modify)} to modify, "
            f"{len(diff.to_drop)} to rename"
        )
        return result


__all__ = ["ColumnOperations"]
