# ============================================================================
# SYNC PACKAGE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Diff, policy and orchestration
# PURPOSE: Turn two schema snapshots into one reviewable migration script
# CREATED: 17 OCT 2026
# ============================================================================
"""
Schema sync.

    diff          keyed comparison of descriptor lists
    policy        non-destructive DDL for each decision
    operations    the six ordered phases
    orchestrator  phase sequencing and script output
"""

from sync.diff import DiffResult, diff_objects
from sync.policy import SafeMutationPolicy
from sync.operations import PHASE_OPERATIONS, PhaseResult, SyncContext
from sync.orchestrator import NO_CHANGES, SchemaSyncOrchestrator, SyncOptions, SyncReport

__all__ = [
    "DiffResult",
    "diff_objects",
    "SafeMutationPolicy",
    "PHASE_OPERATIONS",
    "PhaseResult",
    "SyncContext",
    "SchemaSyncOrchestrator",
    "SyncOptions",
    "SyncReport",
    "NO_CHANGES",
]
