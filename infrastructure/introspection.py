# ============================================================================
# LIVE CATALOG INTROSPECTION
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Infrastructure - Live database metadata source
# PURPOSE: Convert catalog rows into descriptors at the acquisition boundary
# CREATED: 17 OCT 2026
# ============================================================================
"""
Live Catalog Introspection

DatabaseMetadataSource runs the catalog queries against one schema and
converts each row into a frozen descriptor. A row that does not validate
is rejected with AcquisitionError rather than passed along half-empty:
silently dropping an object would make the diff propose renaming it away.

Usage:
    async with open_connection(settings) as conn:
        source = DatabaseMetadataSource(conn, "public")
        tables = await source.list_tables()
"""

import re
from collections import OrderedDict, defaultdict
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

import psycopg
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from core.errors import AcquisitionError, error_context
from core.logging import ComponentType, get_logger
from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    IndexDescriptor,
    SequenceDescriptor,
    TableDescriptor,
    TriggerDescriptor,
)
from infrastructure import catalog_queries as queries
from infrastructure.metadata_source import MetadataSource, assemble_tables
from infrastructure.sql_text import parse_index_definition, split_qualified_name

logger = get_logger(__name__, ComponentType.ACQUISITION)

ModelT = TypeVar("ModelT", bound=BaseModel)

_EXECUTE_CLAUSE = re.compile(
    r"EXECUTE\s+(?:FUNCTION|PROCEDURE)\s+(?P<name>(?:\"[^\"]+\"|[\w$]+)(?:\.(?:\"[^\"]+\"|[\w$]+))?)\s*\(",
    re.IGNORECASE,
)
_FUNCTION_NAME = re.compile(r"(?:EXECUTE FUNCTION\s+)?(?:[\w.]+\.)?(\w+)(?:\(\))?")


def parse_trigger_function(action_statement: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract (schema, function) from a trigger's action statement.

    Args:
        action_statement: e.g. "EXECUTE FUNCTION public.set_updated_at()"

    Returns:
        (schema or None, function name or None)
    """
    if not action_statement:
        return None, None
    match = _EXECUTE_CLAUSE.search(action_statement)
    if match:
        return split_qualified_name(match.group("name"))
    match = _FUNCTION_NAME.search(action_statement)
    if match:
        return None, match.group(1)
    return None, None


def _validate(model: Type[ModelT], data: Mapping[str, Any], what: str, schema: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ModelValidationError as e:
        raise AcquisitionError(
            f"Rejected {what} row in schema {schema}: {e.error_count()} invalid field(s)",
            source=schema,
            operation=f"convert {what}",
            details={"row": dict(data), "errors": e.errors(include_url=False)},
        ) from e


# ============================================================================
# DATABASE METADATA SOURCE
# ============================================================================

class DatabaseMetadataSource(MetadataSource):
    """
    Metadata source backed by a live connection.

    Each list_* call issues fresh queries; nothing is cached between phases.
    The connection is owned by the caller unless owns_connection is set.
    """

    def __init__(self, connection: psycopg.AsyncConnection, schema: str, owns_connection: bool = False):
        super().__init__(schema)
        self.connection = connection
        self.owns_connection = owns_connection

    async def _fetch(self, query: str, operation: str) -> List[Dict[str, Any]]:
        with error_context(operation, self.schema):
            cur = await self.connection.execute(query, {"schema": self.schema})
            return list(await cur.fetchall())

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def schema_exists(self) -> bool:
        rows = await self._fetch(queries.SCHEMA_EXISTS_QUERY, "check schema")
        return bool(rows and rows[0]["schema_exists"])

    async def list_schemas(self) -> List[str]:
        with error_context("list schemas", self.schema):
            cur = await self.connection.execute(queries.LIST_SCHEMAS_QUERY)
            rows = await cur.fetchall()
        return [row["schema_name"] for row in rows]

    def describe(self) -> str:
        return f"database:{self.schema}"

    # ------------------------------------------------------------------
    # Tables & columns
    # ------------------------------------------------------------------

    async def _table_rows(self) -> List[Tuple[str, Optional[str]]]:
        rows = await self._fetch(queries.TABLES_QUERY, "list tables")
        return [(row["table_name"], row.get("comment")) for row in rows]

    async def list_tables(self) -> List[TableDescriptor]:
        table_rows = await self._table_rows()
        columns = await self.list_columns()
        constraints = await self.list_constraints()
        indexes = await self.list_indexes()
        sequences = await self.list_sequences()
        with error_context("assemble tables", self.schema):
            tables = assemble_tables(self.schema, table_rows, columns, constraints, indexes, sequences)
        logger.debug(f"Fetched {len(tables)} tables from {self.schema}")
        return tables

    async def list_columns(self) -> List[ColumnDescriptor]:
        rows = await self._fetch(queries.COLUMNS_QUERY, "list columns")
        return [
            _validate(
                ColumnDescriptor,
                {
                    "table": row["table_name"],
                    "name": row["column_name"],
                    "data_type": row["data_type"],
                    "is_nullable": row["is_nullable"],
                    "default": row["column_default"],
                    "character_maximum_length": row["character_maximum_length"],
                    "numeric_precision": row["numeric_precision"],
                    "numeric_scale": row["numeric_scale"],
                    "datetime_precision": row["datetime_precision"],
                    "identity": row["identity_generation"],
                    "generation_expression": row["generation_expression"],
                    "ordinal_position": row["ordinal_position"],
                    "comment": row.get("comment"),
                },
                "column",
                self.schema,
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Constraints & indexes
    # ------------------------------------------------------------------

    async def list_constraints(self) -> List[ConstraintDescriptor]:
        rows = await self._fetch(queries.CONSTRAINTS_QUERY, "list constraints")
        constraints = []
        for row in rows:
            constraint = _validate(
                ConstraintDescriptor,
                {
                    "table": row["table_name"],
                    "name": row["constraint_name"],
                    "kind": row["constraint_type"],
                    "columns": row["column_names"],
                    "foreign_schema": row["foreign_schema"],
                    "foreign_table": row["foreign_table"],
                    "foreign_columns": row["foreign_column_names"],
                    "update_rule": row["update_rule"],
                    "delete_rule": row["delete_rule"],
                    "check_clause": row["check_clause"],
                    "definition": row["definition"],
                    "deferrable": row["is_deferrable"],
                    "initially_deferred": row["is_initially_deferred"],
                },
                "constraint",
                self.schema,
            )
            if constraint.is_foreign_key and not constraint.has_reference:
                logger.warning(f"Foreign key {constraint.name} on {constraint.table} has no reference table/column")
            constraints.append(constraint)
        return constraints

    async def list_indexes(self) -> List[IndexDescriptor]:
        rows = await self._fetch(queries.INDEXES_QUERY, "list indexes")
        indexes = []
        for row in rows:
            parsed = parse_index_definition(row["definition"] or "") or {}
            if not parsed:
                logger.warning(f"Could not parse definition of index {row['index_name']}")
            indexes.append(
                _validate(
                    IndexDescriptor,
                    {
                        "table": row["table_name"],
                        "name": row["index_name"],
                        "columns": parsed.get("columns", ()),
                        "is_unique": row["is_unique"],
                        "is_primary": row["is_primary"],
                        "predicate": parsed.get("predicate"),
                        "method": parsed.get("method"),
                        "definition": row["definition"],
                        "backs_constraint": row["backs_constraint"],
                    },
                    "index",
                    self.schema,
                )
            )
        return indexes

    # ------------------------------------------------------------------
    # Routines
    # ------------------------------------------------------------------

    async def list_functions(self) -> List[FunctionDescriptor]:
        rows = await self._fetch(queries.FUNCTIONS_QUERY, "list functions")
        parameter_rows = await self._fetch(queries.PARAMETERS_QUERY, "list function parameters")

        parameters: Dict[Any, List[FunctionParameter]] = defaultdict(list)
        for row in parameter_rows:
            parameters[row["oid"]].append(
                _validate(
                    FunctionParameter,
                    {
                        "name": row["parameter_name"],
                        "data_type": row["data_type"],
                        "mode": row["parameter_mode"],
                        "default": row.get("parameter_default"),
                    },
                    "parameter",
                    self.schema,
                )
            )

        functions = []
        for row in rows:
            functions.append(
                _validate(
                    FunctionDescriptor,
                    {
                        "name": row["function_name"],
                        "schema": self.schema,
                        "parameters": parameters.get(row["oid"], []),
                        "return_type": row["return_type"],
                        "kind": row["routine_type"],
                        "language": row["language"],
                        "body": row["body"],
                        "volatility": row["volatility"],
                        "security": bool(row["security_definer"]),
                        "comment": row.get("comment"),
                        "definition": row.get("definition"),
                    },
                    "function",
                    self.schema,
                )
            )
        return functions

    # ------------------------------------------------------------------
    # Triggers & sequences
    # ------------------------------------------------------------------

    async def list_triggers(self) -> List[TriggerDescriptor]:
        rows = await self._fetch(queries.TRIGGERS_QUERY, "list triggers")

        grouped: "OrderedDict[Tuple[str, str], Dict[str, Any]]" = OrderedDict()
        for row in rows:
            key = (row["table_name"], row["trigger_name"])
            entry = grouped.get(key)
            if entry is None:
                function_schema, function_name = parse_trigger_function(row["action_statement"])
                entry = {
                    "name": row["trigger_name"],
                    "table": row["table_name"],
                    "schema": self.schema,
                    "events": [],
                    "timing": row["timing"],
                    "orientation": row["orientation"],
                    "function_name": function_name,
                    "function_schema": function_schema,
                    "condition": row["condition"],
                }
                grouped[key] = entry
            entry["events"].append(row["event"])

        return [_validate(TriggerDescriptor, entry, "trigger", self.schema) for entry in grouped.values()]

    async def list_sequences(self) -> List[SequenceDescriptor]:
        rows = await self._fetch(queries.SEQUENCES_QUERY, "list sequences")
        return [
            _validate(
                SequenceDescriptor,
                {
                    "name": row["sequence_name"],
                    "schema": self.schema,
                    "data_type": row["data_type"],
                    "start_value": row["start_value"],
                    "minimum_value": row["minimum_value"],
                    "maximum_value": row["maximum_value"],
                    "increment": row["increment"],
                    "cycle": row["cycle_option"],
                    "comment": row.get("comment"),
                },
                "sequence",
                self.schema,
            )
            for row in rows
        ]

    async def close(self) -> None:
        if self.owns_connection:
            await self.connection.close()


__all__ = ["DatabaseMetadataSource", "parse_trigger_function"]
