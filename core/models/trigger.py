# ============================================================================
# TRIGGER DESCRIPTOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core model - Trigger snapshot
# PURPOSE: Immutable description of one trigger (all of its events)
# CREATED: 17 OCT 2026
# EXPORTS: TriggerDescriptor
# DEPENDENCIES: pydantic
# ============================================================================
"""
Trigger Descriptor

information_schema.triggers reports one row per event; acquisition
folds those rows into a single descriptor with several events.

Identity key: (table, name), the namespace PostgreSQL uses for triggers.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from core.contracts import (
    TRIGGER_EVENT_ORDER,
    TriggerEvent,
    TriggerOrientation,
    TriggerTiming,
)


class TriggerDescriptor(BaseModel):
    """Snapshot of one trigger."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = Field(..., min_length=1)
    table: str = Field(..., min_length=1)
    schema_name: str = Field(..., min_length=1, alias="schema")
    events: Tuple[TriggerEvent, ...] = Field(..., min_length=1)
    timing: TriggerTiming
    orientation: TriggerOrientation = TriggerOrientation.ROW
    function_name: str = Field(..., min_length=1)
    function_schema: Optional[str] = None
    condition: Optional[str] = None

    @field_validator("events", mode="before")
    @classmethod
    def _parse_events(cls, value):
        if isinstance(value, (str, TriggerEvent)):
            value = [value]
        events = []
        for item in value:
            if isinstance(item, TriggerEvent):
                events.append(item)
                continue
            for part in str(item).upper().replace(" OR ", ",").split(","):
                if part.strip():
                    events.append(TriggerEvent(part.strip()))
        return tuple(sorted(set(events), key=TRIGGER_EVENT_ORDER.get))

    @field_validator("timing", mode="before")
    @classmethod
    def _parse_timing(cls, value):
        if isinstance(value, TriggerTiming):
            return value
        return TriggerTiming(" ".join(str(value).upper().split()))

    @field_validator("orientation", mode="before")
    @classmethod
    def _parse_orientation(cls, value):
        if isinstance(value, TriggerOrientation):
            return value
        if not value:
            return TriggerOrientation.ROW
        return TriggerOrientation(str(value).strip().upper())

    @field_validator("condition", "function_schema", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def identity_key(self) -> Tuple[str, str]:
        return (self.table, self.name)

    @property
    def event_clause(self) -> str:
        """Events joined with OR, e.g. 'INSERT OR UPDATE'."""
        return " OR ".join(event.value for event in self.events)


__all__ = ["TriggerDescriptor"]
