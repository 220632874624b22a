# ============================================================================
# CONSTRAINT DESCRIPTOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core model - Table constraint snapshot
# PURPOSE: Immutable description of PK / FK / UNIQUE / CHECK / NOT NULL
# CREATED: 17 OCT 2026
# EXPORTS: ConstraintDescriptor
# DEPENDENCIES: pydantic
# ============================================================================
"""
Constraint Descriptor

Identity key: constraint name

A FOREIGN KEY with no foreign table is accepted here so the row is not
lost; acquisition logs it and the DDL builders render a TODO marker in
place of the unresolvable REFERENCES clause.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from core.contracts import ConstraintKind

NO_ACTION = "NO ACTION"


class ConstraintDescriptor(BaseModel):
    """Snapshot of one table constraint."""

    model_config = {"frozen": True}

    table: str = Field(..., min_length=1)
    name: str = ""
    kind: ConstraintKind
    columns: Tuple[str, ...] = ()
    foreign_schema: Optional[str] = None
    foreign_table: Optional[str] = None
    foreign_columns: Tuple[str, ...] = ()
    update_rule: str = NO_ACTION
    delete_rule: str = NO_ACTION
    check_clause: Optional[str] = None
    # pg_get_constraintdef text, needed to recreate EXCLUDE constraints
    definition: Optional[str] = None
    deferrable: bool = False
    initially_deferred: bool = False

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value):
        if isinstance(value, ConstraintKind):
            return value
        return ConstraintKind.parse(value)

    @field_validator("columns", "foreign_columns", mode="before")
    @classmethod
    def _split_columns(cls, value):
        # STRING_AGG rows arrive as "a, b"
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return tuple(value)

    @field_validator("update_rule", "delete_rule", mode="before")
    @classmethod
    def _default_rule(cls, value):
        if not value:
            return NO_ACTION
        return " ".join(str(value).upper().split())

    @field_validator("foreign_table", "foreign_schema", "check_clause", "definition", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_foreign_key(self) -> bool:
        return self.kind == ConstraintKind.FOREIGN_KEY

    @property
    def is_self_referencing(self) -> bool:
        """FK whose referenced table is its own table."""
        return self.is_foreign_key and self.foreign_table == self.table

    @property
    def has_reference(self) -> bool:
        """FK carries both a foreign table and at least one foreign column."""
        return bool(self.foreign_table) and bool(self.foreign_columns)


__all__ = ["ConstraintDescriptor", "NO_ACTION"]
