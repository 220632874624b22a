# ============================================================================
# CATALOG INTROSPECTION TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Tests - Catalog rows to descriptors
# PURPOSE: Verify DatabaseMetadataSource conversion over a mocked connection
# CREATED: 17 OCT 2026
# ============================================================================
"""
Catalog Introspection Tests

The psycopg connection is replaced by a mock whose execute() returns a
cursor for canned dict rows, keyed by query.

Run with:
    pytest tests/test_introspection.py -v
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.contracts import ConstraintKind, RoutineKind, SecurityMode, TriggerEvent, Volatility
from core.errors import AcquisitionError
from infrastructure import catalog_queries as queries
from infrastructure.introspection import DatabaseMetadataSource, parse_trigger_function


# ============================================================================
# HELPERS
# ============================================================================

def _make_connection(rows_by_query):
    """Mock AsyncConnection; unknown queries return no rows."""
    calls = []

    async def execute(query, params=None):
        calls.append((query, params))
        cursor = MagicMock()
        cursor.fetchall = AsyncMock(return_value=rows_by_query.get(query, []))
        return cursor

    connection = MagicMock()
    connection.execute = AsyncMock(side_effect=execute)
    connection.close = AsyncMock()
    connection.calls = calls
    return connection


def _column_row(table, name, position, data_type="integer", **overrides):
    row = {
        "table_name": table,
        "column_name": name,
        "data_type": data_type,
        "is_nullable": True,
        "column_default": None,
        "character_maximum_length": None,
        "numeric_precision": None,
        "numeric_scale": None,
        "datetime_precision": None,
        "identity_generation": None,
        "generation_expression": None,
        "ordinal_position": position,
        "comment": None,
    }
    row.update(overrides)
    return row


def _constraint_row(table, name, kind, columns, **overrides):
    row = {
        "table_name": table,
        "constraint_name": name,
        "constraint_type": kind,
        "column_names": columns,
        "foreign_schema": None,
        "foreign_table": None,
        "foreign_column_names": None,
        "update_rule": None,
        "delete_rule": None,
        "check_clause": None,
        "definition": None,
        "is_deferrable": False,
        "is_initially_deferred": False,
    }
    row.update(overrides)
    return row


def _trigger_row(name, table, event, **overrides):
    row = {
        "trigger_name": name,
        "table_name": table,
        "event": event,
        "timing": "BEFORE",
        "orientation": "ROW",
        "action_statement": "EXECUTE FUNCTION public.set_updated_at()",
        "condition": None,
    }
    row.update(overrides)
    return row


def _run(coro):
    return asyncio.run(coro)


# ============================================================================
# TRIGGER ACTIONS
# ============================================================================

class TestParseTriggerFunction:

    @pytest.mark.parametrize(
        "statement, expected",
        [
            ("EXECUTE FUNCTION public.set_updated_at()", ("public", "set_updated_at")),
            ("EXECUTE PROCEDURE audit()", (None, "audit")),
            ('EXECUTE FUNCTION "My Schema".touch()', ("My Schema", "touch")),
            ("", (None, None)),
        ],
    )
    def test_parse(self, statement, expected):
        assert parse_trigger_function(statement) == expected


# ============================================================================
# CONVERSION
# ============================================================================

class TestDatabaseMetadataSource:

    def test_queries_bound_to_schema(self):
        connection = _make_connection({})
        source = DatabaseMetadataSource(connection, "app")
        _run(source.list_columns())
        assert connection.calls == [(queries.COLUMNS_QUERY, {"schema": "app"})]

    def test_schema_exists_and_list(self):
        connection = _make_connection({
            queries.SCHEMA_EXISTS_QUERY: [{"schema_exists": False}],
            queries.LIST_SCHEMAS_QUERY: [{"schema_name": "public"}, {"schema_name": "app"}],
        })
        source = DatabaseMetadataSource(connection, "ap")
        assert _run(source.schema_exists()) is False
        assert _run(source.list_schemas()) == ["public", "app"]

    def test_tables_assembled(self):
        connection = _make_connection({
            queries.TABLES_QUERY: [{"table_name": "users", "comment": "People"}],
            queries.COLUMNS_QUERY: [
                _column_row("users", "id", 1, is_nullable=False, identity_generation="ALWAYS"),
                _column_row("users", "email", 2, "character varying", character_maximum_length=255),
            ],
            queries.CONSTRAINTS_QUERY: [_constraint_row("users", "users_pkey", "PRIMARY KEY", "id")],
            queries.INDEXES_QUERY: [{
                "table_name": "users",
                "index_name": "users_pkey",
                "definition": "CREATE UNIQUE INDEX users_pkey ON public.users USING btree (id)",
                "is_unique": True,
                "is_primary": True,
                "backs_constraint": True,
            }],
        })
        tables = _run(DatabaseMetadataSource(connection, "public").list_tables())

        assert len(tables) == 1
        users = tables[0]
        assert users.comment == "People"
        assert [c.name for c in users.columns] == ["id", "email"]
        assert users.column("id").is_identity
        assert users.constraints[0].kind == ConstraintKind.PRIMARY_KEY
        assert users.constraints[0].columns == ("id",)
        assert users.indexes[0].columns == ("id",)
        assert users.indexes[0].is_constraint_backed()

    def test_foreign_key_columns_split(self):
        connection = _make_connection({
            queries.CONSTRAINTS_QUERY: [
                _constraint_row(
                    "orders", "orders_ref_fkey", "FOREIGN KEY", "a, b",
                    foreign_schema="public", foreign_table="refs", foreign_column_names="x, y",
                    delete_rule="CASCADE",
                )
            ],
        })
        constraint = _run(DatabaseMetadataSource(connection, "public").list_constraints())[0]
        assert constraint.columns == ("a", "b")
        assert constraint.foreign_columns == ("x", "y")
        assert constraint.delete_rule == "CASCADE"
        assert constraint.update_rule == "NO ACTION"

    def test_foreign_key_without_reference_is_kept(self):
        connection = _make_connection({
            queries.CONSTRAINTS_QUERY: [_constraint_row("orders", "orders_x_fkey", "FOREIGN KEY", "x")],
        })
        constraints = _run(DatabaseMetadataSource(connection, "public").list_constraints())
        assert len(constraints) == 1
        assert not constraints[0].has_reference

    def test_functions_with_parameters(self):
        connection = _make_connection({
            queries.FUNCTIONS_QUERY: [
                {
                    "oid": 10, "function_name": "add_one", "routine_type": "FUNCTION",
                    "return_type": "integer", "language": "sql", "body": "SELECT $1 + 1",
                    "volatility": "i", "security_definer": True, "comment": None, "definition": None,
                },
                {
                    "oid": 11, "function_name": "cleanup", "routine_type": "PROCEDURE",
                    "return_type": None, "language": "plpgsql", "body": "BEGIN END",
                    "volatility": "v", "security_definer": False, "comment": None, "definition": None,
                },
            ],
            queries.PARAMETERS_QUERY: [
                {"oid": 10, "parameter_name": "n", "data_type": "integer", "parameter_mode": "IN",
                 "parameter_default": None},
            ],
        })
        add_one, cleanup = _run(DatabaseMetadataSource(connection, "public").list_functions())

        assert add_one.kind == RoutineKind.FUNCTION
        assert add_one.volatility == Volatility.IMMUTABLE
        assert add_one.security == SecurityMode.DEFINER
        assert add_one.argument_types == "integer"
        assert cleanup.kind == RoutineKind.PROCEDURE
        assert cleanup.parameters == ()

    def test_trigger_events_folded(self):
        connection = _make_connection({
            queries.TRIGGERS_QUERY: [
                _trigger_row("users_touch", "users", "UPDATE"),
                _trigger_row("users_touch", "users", "INSERT"),
                _trigger_row("users_touch", "admins", "DELETE"),
            ],
        })
        triggers = _run(DatabaseMetadataSource(connection, "public").list_triggers())

        assert [(t.table, t.name) for t in triggers] == [("users", "users_touch"), ("admins", "users_touch")]
        assert triggers[0].events == (TriggerEvent.INSERT, TriggerEvent.UPDATE)
        assert triggers[0].function_schema == "public"
        assert triggers[0].function_name == "set_updated_at"

    def test_sequences(self):
        connection = _make_connection({
            queries.SEQUENCES_QUERY: [{
                "sequence_name": "users_id_seq", "data_type": "integer", "start_value": "1",
                "minimum_value": "1", "maximum_value": "2147483647", "increment": "1",
                "cycle_option": "NO", "comment": None,
            }],
        })
        sequence = _run(DatabaseMetadataSource(connection, "public").list_sequences())[0]
        assert sequence.maximum_value == 2147483647
        assert sequence.cycle is False

    def test_invalid_row_rejected(self):
        connection = _make_connection({
            queries.COLUMNS_QUERY: [_column_row("users", "id", 0)],
        })
        with pytest.raises(AcquisitionError, match="Rejected column row in schema public"):
            _run(DatabaseMetadataSource(connection, "public").list_columns())

    def test_close_only_when_owned(self):
        connection = _make_connection({})
        _run(DatabaseMetadataSource(connection, "public").close())
        connection.close.assert_not_awaited()

        _run(DatabaseMetadataSource(connection, "public", owns_connection=True).close())
        connection.close.assert_awaited_once()
