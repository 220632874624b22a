# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core module initialization
# PURPOSE: Export contracts, descriptors, errors and schema utilities
# CREATED: 17 OCT 2026
# ============================================================================

from core.contracts import ConstraintKind, RoutineKind, SyncPhase
from core.errors import (
    ErrorKind,
    SchemaSyncError,
    AcquisitionError,
    ValidationError,
    FormattingError,
)
from core.models import (
    TableDescriptor,
    ColumnDescriptor,
    ConstraintDescriptor,
    IndexDescriptor,
    SequenceDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    TriggerDescriptor,
)

__all__ = [
    # Enums
    "ConstraintKind",
    "RoutineKind",
    "SyncPhase",
    # Errors
    "ErrorKind",
    "SchemaSyncError",
    "AcquisitionError",
    "ValidationError",
    "FormattingError",
    # Models
    "TableDescriptor",
    "ColumnDescriptor",
    "ConstraintDescriptor",
    "IndexDescriptor",
    "SequenceDescriptor",
    "FunctionDescriptor",
    "FunctionParameter",
    "TriggerDescriptor",
]
