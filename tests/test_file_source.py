# ============================================================================
# FILE METADATA SOURCE TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Tests - Descriptors parsed from generated SQL files
# PURPOSE: Verify statement parsing and gen -> files -> sync round trip
# CREATED: 17 OCT 2026
# ============================================================================
"""
File Metadata Source Tests

Files are written to pytest's tmp_path; nothing touches a database.

Run with:
    pytest tests/test_file_source.py -v
"""

import asyncio

import pytest

from core.contracts import ConstraintKind, IdentityMode, RoutineKind, TriggerEvent
from core.errors import AcquisitionError
from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    IndexDescriptor,
    TableDescriptor,
    TriggerDescriptor,
)
from generators import GENERATORS, GenerationOptions
from infrastructure import FileMetadataSource, InMemoryMetadataSource
from infrastructure.file_source import parse_constraint_body, parse_parameter
from infrastructure.sql_text import split_statements, unquote_literal
from sync import SchemaSyncOrchestrator

SCHEMA_SQL = """
-- ===========================================
-- Schema Definition
-- ===========================================
CREATE SCHEMA IF NOT EXISTS "shop";

CREATE SEQUENCE IF NOT EXISTS "shop"."invoice_no"
  INCREMENT BY 5
  START WITH 100;

CREATE TABLE "shop"."customers" (
  "id" integer GENERATED ALWAYS AS IDENTITY NOT NULL,
  "email" varchar(100) NOT NULL,
  "created_at" timestamptz DEFAULT now()
);
COMMENT ON TABLE "shop"."customers" IS 'People who buy things';
COMMENT ON COLUMN "shop"."customers"."email" IS 'Login; unique';

ALTER TABLE "shop"."customers" ADD CONSTRAINT customers_pkey PRIMARY KEY (id);
ALTER TABLE "shop"."customers" ADD CONSTRAINT customers_email_key UNIQUE (email);

CREATE TABLE "shop"."orders" (
  "id" bigint NOT NULL,
  "customer_id" integer,
  "total" numeric(10,2) DEFAULT 0,
  CONSTRAINT orders_total_check CHECK (total >= 0)
);

ALTER TABLE "shop"."orders" ADD CONSTRAINT orders_customer_id_fkey FOREIGN KEY (customer_id) REFERENCES shop.customers(id) ON UPDATE CASCADE ON DELETE SET NULL;
CREATE INDEX IF NOT EXISTS idx_orders_customer ON "shop"."orders" (customer_id) WHERE total > 0;
"""

PROCS_SQL = """
-- Function: order_total
CREATE OR REPLACE FUNCTION shop.order_total(
  p_order bigint,
  OUT total numeric
)
RETURNS numeric
LANGUAGE plpgsql
STABLE
SECURITY DEFINER
AS $$
BEGIN
  SELECT o.total INTO total FROM shop.orders o WHERE o.id = p_order;
END;
$$;
COMMENT ON FUNCTION shop.order_total(bigint) IS 'Total of one order';

-- Procedure: purge
CREATE OR REPLACE PROCEDURE shop.purge()
LANGUAGE sql
SECURITY INVOKER
AS $$
DELETE FROM shop.orders WHERE total = 0
$$;
"""

TRIGGERS_SQL = """
CREATE TRIGGER orders_audit
  AFTER INSERT OR UPDATE OF total
  ON shop.orders
  FOR EACH ROW
  WHEN (NEW.total > 0)
  EXECUTE FUNCTION shop.audit();
"""


# ============================================================================
# HELPERS
# ============================================================================

def _write_files(directory, schema=SCHEMA_SQL, procs=PROCS_SQL, triggers=TRIGGERS_SQL):
    for name, text in (("schema.sql", schema), ("procs.sql", procs), ("triggers.sql", triggers)):
        if text is not None:
            (directory / name).write_text(text, encoding="utf-8")
    return FileMetadataSource(str(directory))


def _run(coro):
    return asyncio.run(coro)


# ============================================================================
# LEXING
# ============================================================================

class TestSplitStatements:

    def test_semicolons_in_bodies_and_literals(self):
        text = "SELECT ';'; CREATE FUNCTION f() AS $$ BEGIN x; END $$; -- trailing; comment\nSELECT 2"
        assert split_statements(text) == [
            "SELECT ';'",
            "CREATE FUNCTION f() AS $$ BEGIN x; END $$",
            "SELECT 2",
        ]

    def test_block_comments_dropped(self):
        assert split_statements("/* a; b */ SELECT 1;") == ["SELECT 1"]


class TestClauseParsers:

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("'it''s'", "it's"),
            ("E'C:\\\\temp'", "C:\\temp"),
        ],
    )
    def test_unquote_literal(self, token, expected):
        assert unquote_literal(token) == expected

    def test_foreign_key_body(self):
        data = parse_constraint_body(
            "orders", "fk", "FOREIGN KEY (a, b) REFERENCES other.t(x, y) ON DELETE CASCADE DEFERRABLE"
        )
        assert data["columns"] == ["a", "b"]
        assert data["foreign_schema"] == "other"
        assert data["foreign_table"] == "t"
        assert data["foreign_columns"] == ["x", "y"]
        assert data["delete_rule"] == "CASCADE"
        assert data["deferrable"] is True

    def test_check_body_is_parenthesized(self):
        data = parse_constraint_body("orders", "c", "CHECK (total >= 0 AND (total < 10))")
        assert data["check_clause"] == "(total >= 0 AND (total < 10))"

    def test_unknown_body(self):
        assert parse_constraint_body("t", "x", "WHATEVER (a)") is None

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("p_id integer", {"name": "p_id", "data_type": "integer", "mode": "IN", "default": None}),
            ("OUT total numeric", {"name": "total", "data_type": "numeric", "mode": "OUT", "default": None}),
            ("integer", {"name": None, "data_type": "integer", "mode": "IN", "default": None}),
            ("double precision", {"name": None, "data_type": "double precision", "mode": "IN", "default": None}),
            ("n int DEFAULT 1", {"name": "n", "data_type": "int", "mode": "IN", "default": "1"}),
        ],
    )
    def test_parameters(self, text, expected):
        assert parse_parameter(text) == expected


# ============================================================================
# FILE SET PARSING
# ============================================================================

class TestFileMetadataSource:

    def test_schema_inferred_from_create_schema(self, tmp_path):
        source = _write_files(tmp_path)
        assert _run(source.resolve_schema()) == "shop"

    def test_schema_inferred_from_qualifiers(self, tmp_path):
        source = _write_files(tmp_path, schema=SCHEMA_SQL.replace('CREATE SCHEMA IF NOT EXISTS "shop";', ""))
        assert _run(source.resolve_schema()) == "shop"

    def test_explicit_schema_wins(self, tmp_path):
        (tmp_path / "schema.sql").write_text(SCHEMA_SQL, encoding="utf-8")
        source = FileMetadataSource(str(tmp_path), schema="other")
        assert _run(source.resolve_schema()) == "other"

    def test_tables_and_columns(self, tmp_path):
        tables = _run(_write_files(tmp_path).list_tables())
        assert [t.name for t in tables] == ["customers", "orders"]

        customers = tables[0]
        assert customers.comment == "People who buy things"
        identity = customers.column("id")
        assert identity.identity == IdentityMode.ALWAYS
        assert not identity.is_nullable

        email = customers.column("email")
        assert email.data_type == "character varying"
        assert email.character_maximum_length == 100
        assert email.comment == "Login; unique"

        created = customers.column("created_at")
        assert created.data_type == "timestamp with time zone"
        assert created.default == "now()"
        assert created.is_nullable

        total = tables[1].column("total")
        assert (total.numeric_precision, total.numeric_scale) == (10, 2)
        assert total.default == "0"

    def test_constraints(self, tmp_path):
        constraints = {c.name: c for c in _run(_write_files(tmp_path).list_constraints())}
        assert constraints["customers_pkey"].kind == ConstraintKind.PRIMARY_KEY
        assert constraints["customers_email_key"].columns == ("email",)
        assert constraints["orders_total_check"].check_clause == "(total >= 0)"

        fk = constraints["orders_customer_id_fkey"]
        assert fk.foreign_table == "customers"
        assert fk.update_rule == "CASCADE"
        assert fk.delete_rule == "SET NULL"

    def test_indexes(self, tmp_path):
        indexes = _run(_write_files(tmp_path).list_indexes())
        assert len(indexes) == 1
        assert indexes[0].name == "idx_orders_customer"
        assert indexes[0].table == "orders"
        assert indexes[0].columns == ("customer_id",)
        assert indexes[0].predicate == "total > 0"

    def test_sequences(self, tmp_path):
        sequences = _run(_write_files(tmp_path).list_sequences())
        assert [(s.name, s.increment, s.start_value, s.schema_name) for s in sequences] == [
            ("invoice_no", 5, 100, "shop")
        ]

    def test_routines(self, tmp_path):
        routines = {r.name: r for r in _run(_write_files(tmp_path).list_functions())}
        total = routines["order_total"]
        assert total.kind == RoutineKind.FUNCTION
        assert total.return_type == "numeric"
        assert total.security.value == "DEFINER"
        assert total.volatility.value == "STABLE"
        assert [(p.name, p.mode.value) for p in total.parameters] == [("p_order", "IN"), ("total", "OUT")]
        assert total.body.startswith("BEGIN")
        assert total.comment == "Total of one order"

        purge = routines["purge"]
        assert purge.kind == RoutineKind.PROCEDURE
        assert purge.language == "sql"
        assert purge.body == "DELETE FROM shop.orders WHERE total = 0"

    def test_triggers(self, tmp_path):
        triggers = _run(_write_files(tmp_path).list_triggers())
        assert len(triggers) == 1
        trigger = triggers[0]
        assert trigger.table == "orders"
        assert trigger.events == (TriggerEvent.INSERT, TriggerEvent.UPDATE)
        assert trigger.condition == "NEW.total > 0"
        assert (trigger.function_schema, trigger.function_name) == ("shop", "audit")

    def test_missing_files_are_empty(self, tmp_path):
        source = _write_files(tmp_path, procs=None, triggers=None)
        assert _run(source.list_functions()) == []
        assert _run(source.list_triggers()) == []

    def test_missing_directory(self, tmp_path):
        source = FileMetadataSource(str(tmp_path / "nope"))
        with pytest.raises(AcquisitionError):
            _run(source.list_tables())


# ============================================================================
# ROUND TRIP
# ============================================================================

def _snapshot():
    users = TableDescriptor(
        name="users",
        schema="public",
        columns=[
            ColumnDescriptor(table="users", name="id", data_type="integer", is_nullable=False,
                             identity="ALWAYS", ordinal_position=1),
            ColumnDescriptor(table="users", name="email", data_type="varchar", character_maximum_length=255,
                             is_nullable=False, ordinal_position=2),
            ColumnDescriptor(table="users", name="name", data_type="varchar", character_maximum_length=100,
                             ordinal_position=3),
            ColumnDescriptor(table="users", name="created_at", data_type="timestamptz", default="now()",
                             ordinal_position=4),
        ],
        constraints=[
            ConstraintDescriptor(table="users", name="users_pkey", kind="PRIMARY KEY", columns=("id",)),
            ConstraintDescriptor(table="users", name="users_email_key", kind="UNIQUE", columns=("email",)),
        ],
    )
    orders = TableDescriptor(
        name="orders",
        schema="public",
        columns=[
            ColumnDescriptor(table="orders", name="id", data_type="bigint", is_nullable=False, ordinal_position=1),
            ColumnDescriptor(table="orders", name="user_id", data_type="integer", is_nullable=False,
                             ordinal_position=2),
            ColumnDescriptor(table="orders", name="total", data_type="numeric", numeric_precision=10,
                             numeric_scale=2, ordinal_position=3),
        ],
        constraints=[
            ConstraintDescriptor(table="orders", name="orders_pkey", kind="PRIMARY KEY", columns=("id",)),
            ConstraintDescriptor(table="orders", name="orders_user_id_fkey", kind="FOREIGN KEY",
                                 columns=("user_id",), foreign_table="users", foreign_columns=("id",),
                                 delete_rule="CASCADE"),
            ConstraintDescriptor(table="orders", name="orders_total_check", kind="CHECK",
                                 columns=("total",), check_clause="(total >= 0)"),
        ],
        indexes=[IndexDescriptor(table="orders", name="idx_orders_user_id", columns=("user_id",))],
    )
    function = FunctionDescriptor(
        name="user_count",
        schema="public",
        return_type="integer",
        language="sql",
        volatility="STABLE",
        body="SELECT count(*)::integer FROM public.users",
    )
    trigger = TriggerDescriptor(
        name="orders_audit",
        table="orders",
        schema="public",
        events=["INSERT", "UPDATE"],
        timing="AFTER",
        function_name="audit_orders",
    )
    return InMemoryMetadataSource(
        "public", tables=[orders, users], functions=[function], triggers=[trigger]
    )


class TestRoundTrip:

    def test_generated_files_sync_clean(self, tmp_path):
        source = _snapshot()
        options = GenerationOptions(output_dir=str(tmp_path), generated="2026-10-17T00:00:00Z")
        for generator_cls in GENERATORS:
            result = _run(generator_cls(source, options).execute())
            assert result.success, result.error

        files = FileMetadataSource(str(tmp_path))
        report = _run(SchemaSyncOrchestrator(source, files, clock=lambda: "1").generate_script())
        assert not report.has_changes, report.script

    def test_parsed_files_preserve_objects(self, tmp_path):
        source = _snapshot()
        options = GenerationOptions(output_dir=str(tmp_path), generated="2026-10-17T00:00:00Z")
        for generator_cls in GENERATORS:
            _run(generator_cls(source, options).execute())

        files = FileMetadataSource(str(tmp_path))
        assert [t.name for t in _run(files.list_tables())] == ["users", "orders"]
        assert {c.name for c in _run(files.list_constraints())} == {
            "users_pkey", "users_email_key", "orders_pkey", "orders_user_id_fkey", "orders_total_check"
        }
        assert [f.name for f in _run(files.list_functions())] == ["user_count"]
        assert [t.name for t in _run(files.list_triggers())] == ["orders_audit"]
