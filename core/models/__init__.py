# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Model exports
# PURPOSE: Central export point for all descriptor models
# CREATED: 17 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Frozen pydantic descriptors, one per database object category. They are
built once per run at the acquisition boundary and never mutated.
"""

from core.models.column import ColumnDescriptor, normalize_type_name
from core.models.constraint import ConstraintDescriptor
from core.models.index import IndexDescriptor
from core.models.routine import FunctionDescriptor, FunctionParameter
from core.models.sequence import SequenceDescriptor, SEQUENCE_DEFAULTS
from core.models.table import TableDescriptor
from core.models.trigger import TriggerDescriptor

__all__ = [
    # Tables
    "TableDescriptor",
    "ColumnDescriptor",
    "ConstraintDescriptor",
    "IndexDescriptor",
    "SequenceDescriptor",
    "SEQUENCE_DEFAULTS",
    # Routines
    "FunctionDescriptor",
    "FunctionParameter",
    # Triggers
    "TriggerDescriptor",
    # Helpers
    "normalize_type_name",
]
