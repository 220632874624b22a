# ============================================================================
# INDEX OPERATIONS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase 5
# PURPOSE: Create missing indexes, drop indexes missing from the source
# CREATED: 17 OCT 2026
# ============================================================================
"""
Index Operations

Indexes hold no data, so they are created and dropped outright (both
guarded with IF [NOT] EXISTS). Indexes that back a PRIMARY KEY, UNIQUE or
EXCLUDE constraint come and go with the constraint and are skipped.
"""

import logging

from core.contracts import SyncPhase
from infrastructure.metadata_source import MetadataSource
from sync.diff import diff_objects, index_key
from sync.operations.base import PhaseResult, SyncContext, SyncOperation

logger = logging.getLogger(__name__)


async def _independent_indexes(source: MetadataSource):
    constraints = await source.list_constraints()
    return [i for i in await source.list_indexes() if not i.is_constraint_backed(constraints)]


class IndexOperations(SyncOperation):
    phase = SyncPhase.INDEXES

    async def generate(self, source: MetadataSource, target: MetadataSource, context: SyncContext) -> PhaseResult:
        await context.load_tables(source, target)
        diff = diff_objects(
            await _independent_indexes(source),
            await _independent_indexes(target),
            index_key,
        )
        dropped_tables = context.dropped_tables
        diff.to_drop = [i for i in diff.to_drop if i.table not in dropped_tables]

        result = PhaseResult(self.phase)
        result.record(diff)

        policy = context.policy
        for index in diff.to_create:
            result.statements.extend(policy.create_index(index))
        for index in diff.to_drop:
            result.statements.extend(policy.drop_index(index))

        logger.info(f"Indexes: {len(diff.to_create)} to create, {len(diff.to_drop)} to drop")
        return result


__all__ = ["IndexOperations"]
