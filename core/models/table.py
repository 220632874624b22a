# ============================================================================
# TABLE DESCRIPTOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core model - Table snapshot with owned objects
# PURPOSE: Immutable description of a table, its columns, constraints,
#          indexes and sequences
# CREATED: 17 OCT 2026
# EXPORTS: TableDescriptor
# DEPENDENCIES: pydantic
# ============================================================================
"""
Table Descriptor

Identity key: table name (within one schema)

Invariant: column ordinal positions are contiguous (1..n). Columns are
stored sorted by ordinal so every consumer emits them in table order.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from core.contracts import ConstraintKind
from core.models.column import ColumnDescriptor
from core.models.constraint import ConstraintDescriptor
from core.models.index import IndexDescriptor
from core.models.sequence import SequenceDescriptor


class TableDescriptor(BaseModel):
    """Snapshot of one table."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = Field(..., min_length=1)
    schema_name: str = Field(..., min_length=1, alias="schema")
    columns: Tuple[ColumnDescriptor, ...] = ()
    constraints: Tuple[ConstraintDescriptor, ...] = ()
    indexes: Tuple[IndexDescriptor, ...] = ()
    sequences: Tuple[SequenceDescriptor, ...] = ()
    comment: Optional[str] = None

    @field_validator("columns")
    @classmethod
    def _ordered_columns(cls, value):
        return tuple(sorted(value, key=lambda c: c.ordinal_position))

    @model_validator(mode="after")
    def _check_columns(self):
        positions = [c.ordinal_position for c in self.columns]
        if positions != list(range(1, len(positions) + 1)):
            raise ValueError(
                f"Column ordinal positions of {self.name} must be contiguous from 1, got {positions}"
            )
        for column in self.columns:
            if column.table != self.name:
                raise ValueError(f"Column {column.name} belongs to {column.table}, not {self.name}")
        return self

    def column(self, name: str) -> Optional[ColumnDescriptor]:
        """Look up a column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def foreign_keys(self) -> List[ConstraintDescriptor]:
        return [c for c in self.constraints if c.kind == ConstraintKind.FOREIGN_KEY]

    def foreign_key_dependencies(self) -> List[str]:
        """Referenced table names of non-self FOREIGN KEYs, declaration order, no repeats."""
        names: List[str] = []
        for constraint in self.foreign_keys:
            if constraint.foreign_table and not constraint.is_self_referencing:
                if constraint.foreign_table not in names:
                    names.append(constraint.foreign_table)
        return names


__all__ = ["TableDescriptor"]
