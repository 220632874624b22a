# ============================================================================
# SYNC OPERATIONS PACKAGE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Ordered phases
# PURPOSE: One operation per object category, in execution order
# CREATED: 17 OCT 2026
# ============================================================================
"""
Sync operations, in the order the orchestrator runs them.
"""

from sync.operations.base import PhaseResult, SyncContext, SyncOperation
from sync.operations.tables import TableOperations
from sync.operations.columns import ColumnOperations
from sync.operations.functions import FunctionOperations
from sync.operations.constraints import ConstraintOperations
from sync.operations.indexes import IndexOperations
from sync.operations.triggers import TriggerOperations

PHASE_OPERATIONS = (
    TableOperations,
    ColumnOperations,
    FunctionOperations,
    ConstraintOperations,
    IndexOperations,
    TriggerOperations,
)

__all__ = [
    "PhaseResult",
    "SyncContext",
    "SyncOperation",
    "TableOperations",
    "ColumnOperations",
    "FunctionOperations",
    "ConstraintOperations",
    "IndexOperations",
    "TriggerOperations",
    "PHASE_OPERATIONS",
]
