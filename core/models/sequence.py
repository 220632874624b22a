# ============================================================================
# SEQUENCE DESCRIPTOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core model - Sequence snapshot (generation only)
# PURPOSE: Immutable description of one sequence
# CREATED: 17 OCT 2026
# EXPORTS: SequenceDescriptor, SEQUENCE_DEFAULTS
# DEPENDENCIES: pydantic
# ============================================================================
"""
Sequence Descriptor

Sequences are emitted by the schema generator; they take no part in
the sync diff.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core.models.column import normalize_type_name

# Values PostgreSQL assumes when an option is omitted
SEQUENCE_DEFAULTS = {
    "data_type": "bigint",
    "start_value": 1,
    "increment": 1,
    "minimum_value": 1,
    "maximum_value": 9223372036854775807,
    "cycle": False,
}


class SequenceDescriptor(BaseModel):
    """Snapshot of one sequence."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = Field(..., min_length=1)
    schema_name: str = Field(..., min_length=1, alias="schema")
    data_type: str = "bigint"
    start_value: int = 1
    increment: int = 1
    minimum_value: Optional[int] = 1
    maximum_value: Optional[int] = 9223372036854775807
    cycle: bool = False
    comment: Optional[str] = None

    @field_validator("data_type", mode="before")
    @classmethod
    def _canonical_type(cls, value):
        if not value:
            return "bigint"
        return normalize_type_name(value)

    @field_validator("cycle", mode="before")
    @classmethod
    def _parse_cycle(cls, value):
        # information_schema.sequences.cycle_option is 'YES' / 'NO'
        if isinstance(value, str):
            return value.strip().upper() in ("YES", "TRUE", "CYCLE")
        return bool(value)


__all__ = ["SequenceDescriptor", "SEQUENCE_DEFAULTS"]
