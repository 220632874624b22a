# ============================================================================
# CONSTRAINT OPERATIONS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase 4
# PURPOSE: Add, replace and rename away table constraints
# CREATED: 17 OCT 2026
# ============================================================================
"""
Constraint Operations

NOT NULL constraints are left to the column phase. Constraints are
matched by their emitted name (the original name, or the convention name
when the original is empty or unusable), and added in the order

    PRIMARY KEY, UNIQUE, CHECK, EXCLUDE, FOREIGN KEY, self-referencing FOREIGN KEY

so every referenced key exists before the foreign keys that need it.
Constraints of tables that are being renamed away are left alone.
"""

import logging

from core.contracts import ConstraintKind, SyncPhase
from core.schema.ddl_utils import ConstraintBuilder
from infrastructure.metadata_source import MetadataSource
from sync.diff import constraint_signature, diff_objects
from sync.operations.base import PhaseResult, SyncContext, SyncOperation

logger = logging.getLogger(__name__)


def emission_order(constraint) -> tuple:
    return (constraint.kind.emission_rank, constraint.is_self_referencing)


class ConstraintOperations(SyncOperation):
    phase = SyncPhase.CONSTRAINTS

    async def generate(self, source: MetadataSource, target: MetadataSource, context: SyncContext) -> PhaseResult:
        await context.load_tables(source, target)
        timestamp = context.policy.timestamp

        def key(constraint):
            return ConstraintBuilder.name(constraint, timestamp)

        source_constraints = [
            c for c in await source.list_constraints() if c.kind != ConstraintKind.NOT_NULL
        ]
        target_constraints = [
            c for c in await target.list_constraints() if c.kind != ConstraintKind.NOT_NULL
        ]
        diff = diff_objects(source_constraints, target_constraints, key, constraint_signature)

        dropped_tables = context.dropped_tables
        diff.to_drop = [c for c in diff.to_drop if c.table not in dropped_tables]

        result = PhaseResult(self.phase)
        result.record(diff)

        policy = context.policy
        for source_constraint, target_constraint in sorted(diff.to_modify, key=lambda pair: emission_order(pair[0])):
            result.statements.extend(policy.modify_constraint(source_constraint, target_constraint))
        for constraint in sorted(diff.to_create, key=emission_order):
            result.statements.extend(policy.add_constraint(constraint))
        for constraint in diff.to_drop:
            result.statements.extend(policy.drop_constraint(constraint))

        logger.info(
            f"Constraints: {len(diff.to_create)} to add, {len(diff.to_modify)} to replace, "
            f"{len(diff.to_drop)} to rename"
        )
        return result


__all__ = ["ConstraintOperations", "emission_order"]
