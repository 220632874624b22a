# ============================================================================
# METADATA SOURCE INTERFACE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Infrastructure - Acquisition interface
# PURPOSE: One interface over live catalogs and generated file sets
# CREATED: 17 OCT 2026
# PATTERNS: BaseRepository (abstract base with shared helpers)
# ============================================================================
"""
Metadata Source Interface

Every consumer (sync phases, generators) reads descriptors through
MetadataSource, so diffing and DDL emission behave identically whether
the snapshot came from a live database or from schema.sql/procs.sql/
triggers.sql.

Implementations:
- DatabaseMetadataSource (infrastructure.introspection): catalog queries
- FileMetadataSource (infrastructure.file_source): parsed SQL files
- InMemoryMetadataSource (here): descriptors handed in directly
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    IndexDescriptor,
    SequenceDescriptor,
    TableDescriptor,
    TriggerDescriptor,
)
from core.schema.formatting import sequence_names_in_default

logger = logging.getLogger(__name__)


class MetadataSource(ABC):
    """
    Abstract per-schema metadata source.

    All list_* methods return fresh descriptor lists for `schema`.
    """

    def __init__(self, schema: str):
        self.schema = schema
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def list_tables(self) -> List[TableDescriptor]:
        """Tables with their columns, constraints, indexes and sequences."""

    @abstractmethod
    async def list_columns(self) -> List[ColumnDescriptor]:
        """Columns of every table, ordered by table then ordinal."""

    @abstractmethod
    async def list_constraints(self) -> List[ConstraintDescriptor]:
        """Constraints of every table."""

    @abstractmethod
    async def list_indexes(self) -> List[IndexDescriptor]:
        """Indexes of every table, including constraint-backing ones."""

    @abstractmethod
    async def list_functions(self) -> List[FunctionDescriptor]:
        """Functions and procedures with their parameters."""

    @abstractmethod
    async def list_triggers(self) -> List[TriggerDescriptor]:
        """Triggers, one descriptor per (table, name)."""

    @abstractmethod
    async def list_sequences(self) -> List[SequenceDescriptor]:
        """Sequences (generation only)."""

    async def resolve_schema(self) -> str:
        """Schema name, for sources that only learn it while loading."""
        return self.schema

    async def schema_exists(self) -> bool:
        return True

    async def list_schemas(self) -> List[str]:
        return [self.schema]

    def describe(self) -> str:
        """Short human-readable description for logs and headers."""
        return self.schema

    async def close(self) -> None:
        """Release resources held by the source."""


# ============================================================================
# ASSEMBLY
# ============================================================================

def assemble_tables(
    schema: str,
    tables: Sequence[Tuple[str, Optional[str]]],
    columns: Iterable[ColumnDescriptor],
    constraints: Iterable[ConstraintDescriptor] = (),
    indexes: Iterable[IndexDescriptor] = (),
    sequences: Iterable[SequenceDescriptor] = (),
) -> List[TableDescriptor]:
    """
    Group flat descriptor lists into TableDescriptors.

    Args:
        schema: Schema the tables live in
        tables: (name, comment) pairs in output order
        columns / constraints / indexes: Flat lists, matched by table name
        sequences: Schema sequences; attached to the tables whose column
            defaults call nextval() on them

    Returns:
        One TableDescriptor per entry in `tables`
    """
    columns_by_table: Dict[str, List[ColumnDescriptor]] = defaultdict(list)
    for column in columns:
        columns_by_table[column.table].append(column)

    constraints_by_table: Dict[str, List[ConstraintDescriptor]] = defaultdict(list)
    for constraint in constraints:
        constraints_by_table[constraint.table].append(constraint)

    indexes_by_table: Dict[str, List[IndexDescriptor]] = defaultdict(list)
    for index in indexes:
        indexes_by_table[index.table].append(index)

    sequences_by_name = {s.name: s for s in sequences}

    result = []
    for name, comment in tables:
        table_columns = columns_by_table.get(name, [])
        owned = []
        for column in table_columns:
            for sequence_name in sequence_names_in_default(column.default):
                sequence = sequences_by_name.get(sequence_name)
                if sequence is not None and sequence not in owned:
                    owned.append(sequence)
        result.append(
            TableDescriptor(
                name=name,
                schema=schema,
                columns=table_columns,
                constraints=constraints_by_table.get(name, []),
                indexes=indexes_by_table.get(name, []),
                sequences=owned,
                comment=comment,
            )
        )
    return result


# ============================================================================
# IN-MEMORY SOURCE
# ============================================================================

class InMemoryMetadataSource(MetadataSource):
    """
    Metadata source over descriptors supplied by the caller.

    Usage:
        source = InMemoryMetadataSource("dev", tables=[users], functions=[fn])
        tables = await source.list_tables()
    """

    def __init__(
        self,
        schema: str,
        tables: Iterable[TableDescriptor] = (),
        functions: Iterable[FunctionDescriptor] = (),
        triggers: Iterable[TriggerDescriptor] = (),
        sequences: Iterable[SequenceDescriptor] = (),
        schemas: Optional[Iterable[str]] = None,
    ):
        super().__init__(schema)
        self._tables = list(tables)
        self._functions = list(functions)
        self._triggers = list(triggers)
        self._sequences = list(sequences)
        self._schemas = list(schemas) if schemas is not None else [schema]
        self.closed = False

    async def list_tables(self) -> List[TableDescriptor]:
        return list(self._tables)

    async def list_columns(self) -> List[ColumnDescriptor]:
        return [c for t in self._tables for c in t.columns]

    async def list_constraints(self) -> List[ConstraintDescriptor]:
        return [c for t in self._tables for c in t.constraints]

    async def list_indexes(self) -> List[IndexDescriptor]:
        return [i for t in self._tables for i in t.indexes]

    async def list_functions(self) -> List[FunctionDescriptor]:
        return list(self._functions)

    async def list_triggers(self) -> List[TriggerDescriptor]:
        return list(self._triggers)

    async def list_sequences(self) -> List[SequenceDescriptor]:
        seen = {s.name: s for t in self._tables for s in t.sequences}
        for sequence in self._sequences:
            seen.setdefault(sequence.name, sequence)
        return list(seen.values())

    async def schema_exists(self) -> bool:
        return self.schema in self._schemas

    async def list_schemas(self) -> List[str]:
        return list(self._schemas)

    def describe(self) -> str:
        return f"in-memory:{self.schema}"

    async def close(self) -> None:
        self.closed = True


__all__ = [
    "MetadataSource",
    "InMemoryMetadataSource",
    "assemble_tables",
]
