# ============================================================================
# ROUTINE DESCRIPTORS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core model - Function / procedure snapshot
# PURPOSE: Immutable description of routines and their parameters
# CREATED: 17 OCT 2026
# EXPORTS: FunctionParameter, FunctionDescriptor
# DEPENDENCIES: pydantic
# ============================================================================
"""
Routine Descriptors

FunctionDescriptor covers both functions and procedures.

Identity key: (name, kind)

A return type of "void" (or none at all) denotes a procedure unless the
acquisition layer states the kind explicitly (pg_proc.prokind).
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from core.contracts import ParameterMode, RoutineKind, SecurityMode, Volatility
from core.models.column import normalize_type_name


class FunctionParameter(BaseModel):
    """One routine parameter, in declaration order."""

    model_config = {"frozen": True}

    name: Optional[str] = None
    data_type: str = Field(..., min_length=1)
    mode: ParameterMode = ParameterMode.IN
    default: Optional[str] = None

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value):
        if not value:
            return ParameterMode.IN
        if isinstance(value, ParameterMode):
            return value
        return ParameterMode(str(value).strip().upper())

    @field_validator("data_type")
    @classmethod
    def _canonical_type(cls, value: str) -> str:
        return normalize_type_name(value)

    @field_validator("name", "default", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class FunctionDescriptor(BaseModel):
    """Snapshot of one function or procedure."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = Field(..., min_length=1)
    schema_name: str = Field(..., min_length=1, alias="schema")
    parameters: Tuple[FunctionParameter, ...] = ()
    return_type: str = "void"
    kind: RoutineKind = RoutineKind.FUNCTION
    language: str = "plpgsql"
    body: Optional[str] = None
    volatility: Volatility = Volatility.VOLATILE
    security: SecurityMode = SecurityMode.INVOKER
    comment: Optional[str] = None
    definition: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_kind(cls, data):
        if isinstance(data, dict) and not data.get("kind"):
            return_type = data.get("return_type")
            is_void = return_type is None or str(return_type).strip().lower() in ("", "void")
            data = dict(data)
            data["kind"] = RoutineKind.PROCEDURE if is_void else RoutineKind.FUNCTION
        return data

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value):
        if isinstance(value, RoutineKind):
            return value
        code = str(value).strip().upper()
        if code in ("P", "PROCEDURE"):
            return RoutineKind.PROCEDURE
        return RoutineKind.FUNCTION

    @field_validator("return_type", mode="before")
    @classmethod
    def _default_return(cls, value):
        if value is None or not str(value).strip():
            return "void"
        return " ".join(str(value).split())

    @field_validator("volatility", mode="before")
    @classmethod
    def _parse_volatility(cls, value):
        if isinstance(value, Volatility):
            return value
        return Volatility.from_code(value)

    @field_validator("security", mode="before")
    @classmethod
    def _parse_security(cls, value):
        if isinstance(value, SecurityMode):
            return value
        if isinstance(value, bool):
            return SecurityMode.DEFINER if value else SecurityMode.INVOKER
        if not value:
            return SecurityMode.INVOKER
        return SecurityMode(str(value).strip().upper())

    @field_validator("language", mode="before")
    @classmethod
    def _lower_language(cls, value):
        if not value:
            return "plpgsql"
        return str(value).strip().lower()

    @field_validator("body", "comment", "definition", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def identity_key(self) -> Tuple[str, RoutineKind]:
        return (self.name, self.kind)

    @property
    def is_procedure(self) -> bool:
        return self.kind == RoutineKind.PROCEDURE

    @property
    def returns_table(self) -> bool:
        return self.return_type.upper().startswith("TABLE")

    @property
    def argument_types(self) -> str:
        """Comma-separated input argument types, as used by ALTER FUNCTION."""
        return ", ".join(
            p.data_type if p.mode == ParameterMode.IN else f"{p.mode.value} {p.data_type}"
            for p in self.parameters
            if p.mode.is_input
        )


__all__ = ["FunctionParameter", "FunctionDescriptor"]
