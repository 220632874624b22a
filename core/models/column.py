# ============================================================================
# COLUMN DESCRIPTOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core model - Column snapshot
# PURPOSE: Immutable description of one table column
# CREATED: 17 OCT 2026
# EXPORTS: ColumnDescriptor, TYPE_ALIASES, normalize_type_name
# DEPENDENCIES: pydantic
# ============================================================================
"""
Column Descriptor

ColumnDescriptor is a frozen snapshot of one column as reported by the
catalog or parsed from a generated schema file.

Identity key: (table, name)

Type names are canonicalized on construction so that "varchar" parsed
from a file and "character varying" read from the catalog compare equal.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from core.contracts import IdentityMode


# ============================================================================
# TYPE NAMES
# ============================================================================

TYPE_ALIASES = {
    "varchar": "character varying",
    "char": "character",
    "bpchar": "character",
    "int": "integer",
    "int4": "integer",
    "int2": "smallint",
    "int8": "bigint",
    "float4": "real",
    "float8": "double precision",
    "float": "double precision",
    "bool": "boolean",
    "decimal": "numeric",
    "timestamp": "timestamp without time zone",
    "timestamptz": "timestamp with time zone",
    "time": "time without time zone",
    "timetz": "time with time zone",
    "varbit": "bit varying",
    "serial4": "serial",
    "serial8": "bigserial",
}

# Built-in names kept lower-case; anything else (user types) keeps its spelling
CANONICAL_TYPES = frozenset(TYPE_ALIASES.values()) | frozenset({
    "text", "bytea", "uuid", "json", "jsonb", "xml", "date", "interval",
    "money", "inet", "cidr", "macaddr", "tsvector", "tsquery", "oid",
    "bit", "smallserial", "serial", "bigserial", "point", "line", "box",
    "polygon", "circle", "path", "lseg", "int4range", "int8range",
    "numrange", "tsrange", "tstzrange", "daterange", "name", "regclass",
    "void", "trigger", "record", "setof record", "anyelement",
})


def normalize_type_name(name: str) -> str:
    """
    Canonicalize a PostgreSQL type name.

    Args:
        name: Type name as written ("VARCHAR", "int4", "timestamptz[]")

    Returns:
        Canonical name ("character varying", "integer", ...)
    """
    stripped = " ".join(str(name).split())
    suffix = ""
    while stripped.endswith("[]"):
        suffix += "[]"
        stripped = stripped[:-2].rstrip()
    key = stripped.lower()
    if key in TYPE_ALIASES:
        return TYPE_ALIASES[key] + suffix
    if key in CANONICAL_TYPES:
        return key + suffix
    return stripped + suffix


# ============================================================================
# COLUMN DESCRIPTOR
# ============================================================================

class ColumnDescriptor(BaseModel):
    """
    Snapshot of one table column.

    Attributes mirror information_schema.columns with identity and
    generation info folded in.
    """

    model_config = {"frozen": True}

    table: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    data_type: str = Field(..., min_length=1)
    is_nullable: bool = True
    default: Optional[str] = None
    character_maximum_length: Optional[int] = Field(default=None, ge=0)
    numeric_precision: Optional[int] = Field(default=None, ge=0)
    numeric_scale: Optional[int] = Field(default=None, ge=0)
    datetime_precision: Optional[int] = Field(default=None, ge=0)
    identity: IdentityMode = IdentityMode.NONE
    generation_expression: Optional[str] = None
    ordinal_position: int = Field(..., ge=1)
    comment: Optional[str] = None

    @field_validator("data_type")
    @classmethod
    def _canonical_type(cls, value: str) -> str:
        return normalize_type_name(value)

    @field_validator("identity", mode="before")
    @classmethod
    def _parse_identity(cls, value):
        if isinstance(value, IdentityMode):
            return value
        return IdentityMode.parse(value)

    @field_validator("default", "generation_expression", "comment", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def identity_key(self) -> Tuple[str, str]:
        return (self.table, self.name)

    @property
    def is_identity(self) -> bool:
        return self.identity != IdentityMode.NONE

    @property
    def is_generated(self) -> bool:
        return self.generation_expression is not None


__all__ = [
    "ColumnDescriptor",
    "TYPE_ALIASES",
    "CANONICAL_TYPES",
    "normalize_type_name",
]
