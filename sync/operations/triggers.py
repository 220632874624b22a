# ============================================================================
# TRIGGER OPERATIONS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Phase 6
# PURPOSE: Create, recreate and drop triggers
# CREATED: 17 OCT 2026
# ============================================================================
"""
Trigger Operations

Runs last so the tables, columns and routines a trigger needs exist.
Triggers are matched per (table, name). A changed trigger is dropped and
created again; triggers on tables being renamed away are left alone.

A trigger is bound to the routine it calls, not to its name. When the
function phase replaces a routine (old one renamed to a backup, new one
created), unchanged triggers calling it still point at the backup, so
they are dropped and created again as well.
"""

import logging
from typing import List, Sequence, Set, Tuple

from core.contracts import SyncPhase
from core.models import TriggerDescriptor
from infrastructure.metadata_source import MetadataSource
from sync.diff import diff_objects, trigger_key, trigger_signature
from sync.operations.base import PhaseResult, SyncContext, SyncOperation

logger = logging.getLogger(__name__)


def rebound_triggers(
    source_triggers: Sequence[TriggerDescriptor],
    target_triggers: Sequence[TriggerDescriptor],
    replaced_routines: Set[str],
    already_modified: Set[Tuple[str, str]],
) -> List[Tuple[TriggerDescriptor, TriggerDescriptor]]:
    """(source, target) pairs of matching triggers that call a replaced routine."""
    if not replaced_routines:
        return []
    targets = {trigger_key(t): t for t in target_triggers}
    pairs = []
    for trigger in source_triggers:
        key = trigger_key(trigger)
        existing = targets.get(key)
        if existing is None or key in already_modified:
            continue
        if existing.function_name in replaced_routines:
            pairs.append((trigger, existing))
    return pairs


class TriggerOperations(SyncOperation):
    phase = SyncPhase.TRIGGERS

    async def generate(self, source: MetadataSource, target: MetadataSource, context: SyncContext) -> PhaseResult:
        await context.load_tables(source, target)
        source_triggers = await source.list_triggers()
        target_triggers = await target.list_triggers()
        diff = diff_objects(source_triggers, target_triggers, trigger_key, trigger_signature)
        dropped_tables = context.dropped_tables
        diff.to_drop = [t for t in diff.to_drop if t.table not in dropped_tables]

        rebound = rebound_triggers(
            source_triggers,
            target_triggers,
            context.replaced_routines,
            {trigger_key(s) for s, _ in diff.to_modify},
        )
        if rebound:
            logger.info(f"Re-creating {len(rebound)} trigger(s) calling replaced routines")
            diff.to_modify.extend(rebound)

        result = PhaseResult(self.phase)
        result.record(diff)

        policy = context.policy
        for trigger in diff.to_create:
            result.statements.extend(policy.create_trigger(trigger))
        for source_trigger, target_trigger in diff.to_modify:
            result.statements.extend(policy.modify_trigger(source_trigger, target_trigger))
        for trigger in diff.to_drop:
            result.statements.extend(policy.drop_trigger(trigger))

        logger.info(
            f"Triggers: {len(diff.to_create)} to create, {len(diff.to_modify)} to recreate, "
            f"{len(diff.to_drop)} to drop"
        )
        return result


__all__ = ["TriggerOperations", "rebound_triggers"]
