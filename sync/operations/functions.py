# ============================================================================
# FUNCTION / PROCEDURE OPERATIONS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase 3
# PURPOSE: Create, replace and rename away routines
# CREATED: 17 OCT 2026
# ============================================================================
"""
Function / Procedure Operations

Routines run before constraints and triggers so CHECK expressions and
trigger definitions can refer to them. Bodies are compared with both
schema names replaced by a placeholder, so a routine that only differs
in the schema it qualifies names with is not a change.
"""

import logging

from core.contracts import SyncPhase
from infrastructure.metadata_source import MetadataSource
from sync.diff import diff_objects, function_key, function_signature
from sync.operations.base import PhaseResult, SyncContext, SyncOperation

logger = logging.getLogger(__name__)


class FunctionOperations(SyncOperation):
    phase = SyncPhase.FUNCTIONS

    async def generate(self, source: MetadataSource, target: MetadataSource, context: SyncContext) -> PhaseResult:
        diff = diff_objects(
            await source.list_functions(),
            await target.list_functions(),
            function_key,
            function_signature((context.source_schema, context.target_schema)),
        )
        context.replaced_routines.update(target_function.name for _, target_function in diff.to_modify)

        result = PhaseResult(self.phase)
        result.record(diff)

        policy = context.policy
        for function in diff.to_create:
            result.statements.extend(policy.create_function(function))
        for source_function, target_function in diff.to_modify:
            result.statements.extend(policy.modify_function(source_function, target_function))
        for function in diff.to_drop:
            result.statements.extend(policy.drop_function(function))

        logger.info(
            f"Routines: {len(diff.to_create)} to create, {len(diff.to_modify)} to replace, "
            f"{len(diff.to_drop)} to rename"
        )
        return result


__all__ = ["FunctionOperations"]
