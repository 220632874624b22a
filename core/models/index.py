# ============================================================================
# INDEX DESCRIPTOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core model - Index snapshot
# PURPOSE: Immutable description of one index
# CREATED: 17 OCT 2026
# EXPORTS: IndexDescriptor
# DEPENDENCIES: pydantic
# ============================================================================
"""
Index Descriptor

Identity key: index name. Indexes are create/drop only.
"""

from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from core.contracts import ConstraintKind


class IndexDescriptor(BaseModel):
    """Snapshot of one index."""

    model_config = {"frozen": True}

    table: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    columns: Tuple[str, ...] = ()
    is_unique: bool = False
    is_primary: bool = False
    predicate: Optional[str] = None
    method: str = "btree"
    definition: Optional[str] = None
    # Set by acquisition when pg_constraint.conindid points at this index
    backs_constraint: bool = False

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, value):
        if not value:
            return "btree"
        return str(value).strip().lower()

    @field_validator("predicate", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def is_constraint_backed(self, constraints: Iterable = ()) -> bool:
        """
        Whether this index exists only to back a PRIMARY KEY or UNIQUE constraint.

        Args:
            constraints: ConstraintDescriptors of the same schema

        Returns:
            True if the index must not be emitted independently
        """
        if self.is_primary or self.backs_constraint:
            return True
        for constraint in constraints:
            if constraint.kind in (ConstraintKind.PRIMARY_KEY, ConstraintKind.UNIQUE):
                if constraint.name == self.name:
                    return True
        return False


__all__ = ["IndexDescriptor"]
