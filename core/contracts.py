# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Foundation - Core enums shared by descriptors, diff and generators
# PURPOSE: Closed vocabularies for PostgreSQL object kinds and options
# CREATED: 17 OCT 2026
# EXPORTS: ConstraintKind, IdentityMode, ParameterMode, RoutineKind,
#          Volatility, SecurityMode, TriggerEvent, TriggerTiming,
#          TriggerOrientation, SyncPhase
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the schema sync system.

These enums are the vocabulary that crosses every boundary:
- Catalog rows (information_schema / pg_catalog)
- Parsed SQL files (schema.sql, procs.sql, triggers.sql)
- Emitted DDL text

Values are the literal SQL spelling so they can be rendered directly.
"""

from enum import Enum
from typing import Optional


# ============================================================================
# CONSTRAINTS & COLUMNS
# ============================================================================

class ConstraintKind(str, Enum):
    """Table constraint kinds as reported by information_schema."""
    PRIMARY_KEY = "PRIMARY KEY"
    FOREIGN_KEY = "FOREIGN KEY"
    UNIQUE = "UNIQUE"
    CHECK = "CHECK"
    NOT_NULL = "NOT NULL"
    EXCLUDE = "EXCLUDE"

    @classmethod
    def parse(cls, value: str) -> "ConstraintKind":
        """Parse catalog spelling (case/whitespace insensitive)."""
        normalized = " ".join(str(value).upper().split())
        return cls(normalized)

    @property
    def emission_rank(self) -> int:
        """Order in which constraints of this kind are added to a table."""
        return _CONSTRAINT_RANK[self]


_CONSTRAINT_RANK = {
    ConstraintKind.PRIMARY_KEY: 0,
    ConstraintKind.UNIQUE: 1,
    ConstraintKind.CHECK: 2,
    ConstraintKind.EXCLUDE: 3,
    ConstraintKind.FOREIGN_KEY: 4,
    ConstraintKind.NOT_NULL: 5,
}


class IdentityMode(str, Enum):
    """Identity column generation mode."""
    ALWAYS = "ALWAYS"
    BY_DEFAULT = "BY DEFAULT"
    NONE = "NONE"

    @classmethod
    def parse(cls, value: Optional[str]) -> "IdentityMode":
        """Map catalog values ('ALWAYS', 'BY DEFAULT', 'a', 'd', '') to a mode."""
        if not value:
            return cls.NONE
        normalized = " ".join(str(value).upper().split())
        if normalized in ("A", "ALWAYS"):
            return cls.ALWAYS
        if normalized in ("D", "BY DEFAULT"):
            return cls.BY_DEFAULT
        return cls.NONE


# ============================================================================
# ROUTINES
# ============================================================================

class ParameterMode(str, Enum):
    """Routine parameter modes."""
    IN = "IN"
    OUT = "OUT"
    INOUT = "INOUT"
    VARIADIC = "VARIADIC"

    @property
    def is_input(self) -> bool:
        """Input parameters participate in the routine's call signature."""
        return self in (ParameterMode.IN, ParameterMode.INOUT, ParameterMode.VARIADIC)


class RoutineKind(str, Enum):
    """Routine kind; procedures are routines returning void."""
    FUNCTION = "FUNCTION"
    PROCEDURE = "PROCEDURE"


class Volatility(str, Enum):
    """Function volatility category."""
    VOLATILE = "VOLATILE"
    STABLE = "STABLE"
    IMMUTABLE = "IMMUTABLE"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "Volatility":
        """Map pg_proc.provolatile codes: v, s, anything else immutable."""
        if code is None:
            return cls.VOLATILE
        value = str(code).strip()
        if value.upper() in cls.__members__:
            return cls[value.upper()]
        if value == "v":
            return cls.VOLATILE
        if value == "s":
            return cls.STABLE
        return cls.IMMUTABLE


class SecurityMode(str, Enum):
    """SECURITY INVOKER / SECURITY DEFINER."""
    INVOKER = "INVOKER"
    DEFINER = "DEFINER"


# ============================================================================
# TRIGGERS
# ============================================================================

class TriggerEvent(str, Enum):
    """Trigger events in canonical (PostgreSQL display) order."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    TRUNCATE = "TRUNCATE"


TRIGGER_EVENT_ORDER = {event: i for i, event in enumerate(TriggerEvent)}


class TriggerTiming(str, Enum):
    """When a trigger fires relative to its event."""
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    INSTEAD_OF = "INSTEAD OF"


class TriggerOrientation(str, Enum):
    """FOR EACH ROW / FOR EACH STATEMENT."""
    ROW = "ROW"
    STATEMENT = "STATEMENT"


# ============================================================================
# SYNC PHASES
# ============================================================================

class SyncPhase(str, Enum):
    """
    Ordered sync phases.

    Execution order is the declaration order:
        TABLES -> COLUMNS -> FUNCTIONS -> CONSTRAINTS -> INDEXES -> TRIGGERS
    """
    TABLES = "TABLE OPERATIONS"
    COLUMNS = "COLUMN OPERATIONS"
    FUNCTIONS = "FUNCTION/PROCEDURE OPERATIONS"
    CONSTRAINTS = "CONSTRAINT OPERATIONS"
    INDEXES = "INDEX OPERATIONS"
    TRIGGERS = "TRIGGER OPERATIONS"

    @property
    def section_title(self) -> str:
        return self.value


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ConstraintKind",
    "IdentityMode",
    "ParameterMode",
    "RoutineKind",
    "Volatility",
    "SecurityMode",
    "TriggerEvent",
    "TRIGGER_EVENT_ORDER",
    "TriggerTiming",
    "TriggerOrientation",
    "SyncPhase",
]
