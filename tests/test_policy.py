# ============================================================================
# SAFE-MUTATION POLICY TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Tests - DDL emitted per diff decision
# PURPOSE: Verify renames-instead-of-drops, column ALTERs, TODO markers
# CREATED: 17 OCT 2026
# ============================================================================
"""
Safe-Mutation Policy Tests

The policy is driven with a fixed clock so backup names are predictable.

Run with:
    pytest tests/test_policy.py -v
"""

from unittest.mock import MagicMock

from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    IndexDescriptor,
    TableDescriptor,
    TriggerDescriptor,
)
from sync.policy import SafeMutationPolicy

TS = "1700000000000"


# ============================================================================
# HELPERS
# ============================================================================

def _make_policy(backup_suffix="backup"):
    return SafeMutationPolicy("prod", "dev", clock=lambda: TS, backup_suffix=backup_suffix)


def _make_column(name="email", table="users", position=1, **overrides):
    data = {
        "table": table,
        "name": name,
        "data_type": "character varying",
        "character_maximum_length": 255,
        "ordinal_position": position,
    }
    data.update(overrides)
    return ColumnDescriptor(**data)


def _make_fk(**overrides):
    data = {
        "table": "orders",
        "name": "orders_customer_id_fkey",
        "kind": "FOREIGN KEY",
        "columns": ("customer_id",),
        "foreign_schema": "dev",
        "foreign_table": "customers",
        "foreign_columns": ("id",),
        "delete_rule": "CASCADE",
    }
    data.update(overrides)
    return ConstraintDescriptor(**data)


def _make_trigger(**overrides):
    data = {
        "name": "orders_audit",
        "table": "orders",
        "schema": "dev",
        "events": ["INSERT"],
        "timing": "AFTER",
        "function_name": "audit_orders",
        "function_schema": "dev",
    }
    data.update(overrides)
    return TriggerDescriptor(**data)


def _lines(blocks):
    return "\n".join(blocks).splitlines()


# ============================================================================
# TABLES
# ============================================================================

class TestTables:

    def test_create_table(self):
        table = TableDescriptor(
            name="users",
            schema="dev",
            columns=[_make_column("id", data_type="integer", is_nullable=False, identity="ALWAYS"),
                     _make_column("email", position=2, is_nullable=False)],
        )
        block = _make_policy().create_table(table)[0]
        assert block.splitlines()[0] == "-- Create missing table users"
        assert "CREATE TABLE IF NOT EXISTS prod.users (" in block
        assert '"id" integer GENERATED ALWAYS AS IDENTITY NOT NULL' in block
        assert '"email" character varying(255) NOT NULL' in block

    def test_create_table_with_comment(self):
        table = TableDescriptor(name="users", schema="dev", columns=[_make_column()], comment="App users")
        block = _make_policy().create_table(table)[0]
        assert block.endswith("COMMENT ON TABLE prod.users IS 'App users';")

    def test_drop_table_is_rename(self):
        table = TableDescriptor(name="legacy", schema="prod")
        assert _lines(_make_policy().drop_table(table)) == [
            "-- Table legacy exists in prod but not in dev",
            "-- Renaming table to preserve data before manual drop",
            f"ALTER TABLE prod.legacy RENAME TO legacy_backup_{TS};",
            f"-- TODO: Manually drop table prod.legacy_backup_{TS} after confirming data is no longer needed",
        ]

    def test_dropped_suffix(self):
        table = TableDescriptor(name="legacy", schema="prod")
        block = _make_policy(backup_suffix="dropped").drop_table(table)[0]
        assert f"RENAME TO legacy_dropped_{TS};" in block


# ============================================================================
# COLUMNS
# ============================================================================

class TestColumns:

    def test_add_not_null_column_without_default_warns(self):
        blocks = _make_policy().add_column(_make_column(is_nullable=False))
        lines = _lines(blocks)
        assert len(blocks) == 1
        assert lines[0].startswith("-- TODO: Column users.email is NOT NULL without a default")
        assert lines[1] == 'ALTER TABLE prod.users ADD COLUMN "email" character varying(255) NOT NULL;'

    def test_add_nullable_column(self):
        lines = _lines(_make_policy().add_column(_make_column(default="'x'::character varying")))
        assert lines == [
            "ALTER TABLE prod.users ADD COLUMN \"email\" character varying(255) DEFAULT 'x'::character varying;"
        ]

    def test_add_column_retargets_sequence_default(self):
        column = _make_column("id", data_type="integer", default="nextval('dev.users_id_seq'::regclass)")
        block = _make_policy().add_column(column)[0]
        assert "DEFAULT nextval('prod.users_id_seq'::regclass)" in block

    def test_add_identity_column_does_not_warn(self):
        column = _make_column("id", data_type="bigint", is_nullable=False, identity="BY DEFAULT")
        block = _make_policy().add_column(column)[0]
        assert "TODO" not in block
        assert '"id" bigint GENERATED BY DEFAULT AS IDENTITY NOT NULL' in block

    def test_drop_column_is_rename(self):
        lines = _lines(_make_policy().drop_column(_make_column("nickname")))
        assert lines[2] == f'ALTER TABLE prod.users RENAME COLUMN "nickname" TO nickname_backup_{TS};'
        assert lines[3].startswith(f"-- TODO: Manually drop column prod.users.nickname_backup_{TS}")

    def test_modify_combines_clauses_in_order(self):
        source = _make_column(is_nullable=False, default="'none'::character varying")
        target = _make_column(character_maximum_length=100)
        lines = _lines(_make_policy().modify_column(source, target))
        assert lines[0] == "-- Modifying column users.email"
        assert lines[1].startswith("--   dev: character varying(255) NOT NULL")
        assert lines[2] == "--   prod: character varying(100)"
        statement = "\n".join(lines[3:])
        assert statement == (
            "ALTER TABLE prod.users\n"
            '  ALTER COLUMN "email" TYPE character varying(255),\n'
            '  ALTER COLUMN "email" SET NOT NULL,\n'
            "  ALTER COLUMN \"email\" SET DEFAULT 'none'::character varying;"
        )

    def test_modify_drops_default(self):
        source = _make_column()
        target = _make_column(default="'x'::character varying")
        block = _make_policy().modify_column(source, target)[0]
        assert 'ALTER COLUMN "email" DROP DEFAULT;' in block

    def test_modify_adds_identity(self):
        source = _make_column("id", data_type="integer", is_nullable=False, identity="ALWAYS")
        target = _make_column("id", data_type="integer", is_nullable=False)
        block = _make_policy().modify_column(source, target)[0]
        assert 'ALTER COLUMN "id" ADD GENERATED ALWAYS AS IDENTITY;' in block

    def test_modify_generation_expression_is_todo(self):
        source = _make_column("total", data_type="numeric", generation_expression="price * qty")
        target = _make_column("total", data_type="numeric", generation_expression="price")
        block = _make_policy().modify_column(source, target)[0]
        assert "-- TODO: Generation expression of users.total differs" in block
        assert "ALTER TABLE" not in block

    def test_modify_ignores_own_schema_type_qualifier(self):
        source = _make_column("status", data_type="dev.order_status", character_maximum_length=None)
        target = _make_column("status", data_type="prod.order_status", character_maximum_length=None, is_nullable=False)
        block = _make_policy().modify_column(source, target)[0]
        assert "TYPE" not in block
        assert 'ALTER COLUMN "status" DROP NOT NULL;' in block

    def test_modify_type_points_at_target_schema(self):
        source = _make_column("status", data_type="dev.order_status", character_maximum_length=None)
        target = _make_column("status", data_type="text", character_maximum_length=None)
        block = _make_policy().modify_column(source, target)[0]
        assert block.endswith('ALTER COLUMN "status" TYPE prod.order_status;')

    def test_add_column_points_at_target_schema_type(self):
        column = _make_column("status", data_type="dev.order_status", character_maximum_length=None)
        block = _make_policy().add_column(column)[0]
        assert block == 'ALTER TABLE prod.users ADD COLUMN "status" prod.order_status;'


# ============================================================================
# CONSTRAINTS
# ============================================================================

class TestConstraints:

    def test_foreign_key_follows_table_to_target(self):
        assert _make_policy().add_constraint(_make_fk()) == [
            "ALTER TABLE prod.orders ADD CONSTRAINT orders_customer_id_fkey "
            "FOREIGN KEY (customer_id) REFERENCES prod.customers(id) ON DELETE CASCADE;"
        ]

    def test_foreign_key_into_other_schema_kept(self):
        block = _make_policy().add_constraint(_make_fk(foreign_schema="ref"))[0]
        assert "REFERENCES ref.customers(id)" in block

    def test_foreign_key_without_reference_is_todo(self):
        blocks = _make_policy().add_constraint(_make_fk(foreign_table=None))
        assert len(blocks) == 1
        assert blocks[0].startswith("-- TODO: Foreign key orders_customer_id_fkey")

    def test_unnamed_check_gets_convention_name(self):
        check = ConstraintDescriptor(
            table="orders", name="", kind="CHECK", columns=("total",), check_clause="total > 0"
        )
        assert _make_policy().add_constraint(check) == [
            f"ALTER TABLE prod.orders ADD CONSTRAINT orders_total_check_{TS} CHECK (total > 0);"
        ]

    def test_modify_renames_then_adds(self):
        source = _make_fk()
        target = _make_fk(delete_rule="NO ACTION")
        blocks = _make_policy().modify_constraint(source, target)
        assert len(blocks) == 2
        assert (
            f"RENAME CONSTRAINT orders_customer_id_fkey TO orders_customer_id_fkey_backup_{TS};"
            in blocks[0]
        )
        assert blocks[1].startswith("ALTER TABLE prod.orders ADD CONSTRAINT orders_customer_id_fkey")


# ============================================================================
# ROUTINES
# ============================================================================

class TestRoutines:

    def test_create_function_retargets_body(self):
        function = FunctionDescriptor(
            name="user_count",
            schema="dev",
            return_type="integer",
            language="sql",
            volatility="STABLE",
            body="SELECT count(*)::integer FROM dev.users",
        )
        block = _make_policy().create_function(function)[0]
        assert block.startswith("CREATE OR REPLACE FUNCTION prod.user_count()\nRETURNS integer")
        assert "FROM prod.users" in block
        assert "dev." not in block

    def test_create_function_without_body_is_todo(self):
        function = FunctionDescriptor(name="opaque", schema="dev", return_type="integer")
        assert _make_policy().create_function(function) == [
            "-- TODO: Could not retrieve definition for function opaque"
        ]

    def test_drop_function_is_rename(self):
        function = FunctionDescriptor(
            name="add_one",
            schema="prod",
            return_type="integer",
            parameters=[FunctionParameter(name="x", data_type="int4")],
            body="SELECT x + 1",
        )
        lines = _lines(_make_policy().drop_function(function))
        assert lines[1] == f"ALTER FUNCTION prod.add_one(integer) RENAME TO add_one_backup_{TS};"
        assert lines[2].startswith("-- TODO: Manually drop function")

    def test_drop_procedure_uses_procedure_keyword(self):
        procedure = FunctionDescriptor(name="cleanup", schema="prod", body="BEGIN NULL; END")
        block = _make_policy().drop_function(procedure)[0]
        assert f"ALTER PROCEDURE prod.cleanup() RENAME TO cleanup_backup_{TS};" in block


# ============================================================================
# INDEXES & TRIGGERS
# ============================================================================

class TestIndexesAndTriggers:

    def test_create_index(self):
        index = IndexDescriptor(table="users", name="idx_users_email", columns=("email",))
        assert _make_policy().create_index(index) == [
            "CREATE INDEX IF NOT EXISTS idx_users_email ON prod.users (email);"
        ]

    def test_drop_index(self):
        index = IndexDescriptor(table="users", name="idx_users_email", columns=("email",))
        assert _make_policy().drop_index(index) == ["DROP INDEX IF EXISTS prod.idx_users_email;"]

    def test_trigger_function_follows_to_target(self):
        block = _make_policy().create_trigger(_make_trigger())[0]
        assert block.endswith("EXECUTE FUNCTION prod.audit_orders();")
        assert "ON prod.orders" in block

    def test_trigger_function_in_other_schema_kept(self):
        block = _make_policy().create_trigger(_make_trigger(function_schema="util"))[0]
        assert block.endswith("EXECUTE FUNCTION util.audit_orders();")

    def test_modify_trigger_drops_then_creates(self):
        blocks = _make_policy().modify_trigger(_make_trigger(events=["INSERT", "UPDATE"]), _make_trigger())
        assert blocks[0] == "DROP TRIGGER IF EXISTS orders_audit ON prod.orders;"
        assert "AFTER INSERT OR UPDATE" in blocks[1]


# ============================================================================
# TIMESTAMP
# ============================================================================

class TestTimestamp:

    def test_clock_read_once(self):
        clock = MagicMock(return_value=TS)
        policy = SafeMutationPolicy("prod", "dev", clock=clock)
        policy.drop_table(TableDescriptor(name="a", schema="prod"))
        policy.drop_table(TableDescriptor(name="b", schema="prod"))
        assert clock.call_count == 1
        assert policy.timestamp == TS
