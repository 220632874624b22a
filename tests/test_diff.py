# ============================================================================
# OBJECT DIFF TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Tests - Keyed comparison and change signatures
# PURPOSE: Verify diff_objects partitioning and per-category signatures
# CREATED: 17 OCT 2026
# ============================================================================
"""
Object Diff Tests

Run with:
    pytest tests/test_diff.py -v
"""

from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    TriggerDescriptor,
)
from sync.diff import (
    DiffResult,
    column_key,
    column_signature,
    constraint_signature,
    diff_objects,
    function_key,
    function_signature,
    trigger_key,
    trigger_signature,
)


# ============================================================================
# HELPERS
# ============================================================================

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


def _make_function(name="user_count", body="SELECT count(*) FROM dev.users", **overrides):
    data = {"name": name, "schema": "dev", "return_type": "integer", "body": body}
    data.update(overrides)
    return FunctionDescriptor(**data)


def _make_trigger(name="orders_audit", table="orders", **overrides):
    data = {
        "name": name,
        "table": table,
        "schema": "dev",
        "events": ["INSERT", "UPDATE"],
        "timing": "AFTER",
        "function_name": "audit_orders",
    }
    data.update(overrides)
    return TriggerDescriptor(**data)


# ============================================================================
# DIFF ENGINE
# ============================================================================

class TestDiffObjects:

    def test_partition(self):
        result = diff_objects(["a", "b", "c"], ["b", "c", "d"], lambda x: x)
        assert result.to_create == ["a"]
        assert result.to_drop == ["d"]
        assert result.to_modify == []

    def test_create_keeps_source_order_drop_keeps_target_order(self):
        result = diff_objects(["z", "y", "x"], ["q", "p"], lambda x: x)
        assert result.to_create == ["z", "y", "x"]
        assert result.to_drop == ["q", "p"]

    def test_modified_pairs_are_source_then_target(self):
        source = [("a", 1), ("b", 2)]
        target = [("a", 1), ("b", 3)]
        result = diff_objects(source, target, lambda x: x[0], lambda x: x[1])
        assert result.to_modify == [(("b", 2), ("b", 3))]

    def test_without_signature_nothing_is_modified(self):
        result = diff_objects([("a", 1)], [("a", 2)], lambda x: x[0])
        assert not result.has_changes

    def test_duplicate_keys_keep_first(self):
        result = diff_objects([("a", 1), ("a", 2)], [("a", 1)], lambda x: x[0], lambda x: x[1])
        assert not result.has_changes

    def test_counts(self):
        result = diff_objects(["a"], ["b"], lambda x: x)
        assert result.counts() == {"created": 1, "dropped": 1, "modified": 0}

    def test_empty_result(self):
        assert not DiffResult().has_changes

    def test_same_input_same_result(self):
        first = diff_objects(["a", "b"], ["b", "c"], lambda x: x)
        second = diff_objects(["a", "b"], ["b", "c"], lambda x: x)
        assert first == second


# ============================================================================
# SIGNATURES
# ============================================================================

class TestColumnSignature:

    def test_restated_default_length_is_not_a_change(self):
        signature = column_signature(("dev", "prod"))
        restated = _make_column()
        implied = _make_column(character_maximum_length=None)
        assert signature(restated) == signature(implied)

    def test_nullability_change(self):
        signature = column_signature(("dev", "prod"))
        assert signature(_make_column(is_nullable=False)) != signature(_make_column())

    def test_sequence_defaults_in_different_schemas_match(self):
        signature = column_signature(("dev", "prod"))
        dev = _make_column(data_type="integer", default="nextval('dev.users_id_seq'::regclass)")
        prod = _make_column(data_type="integer", default="nextval('prod.users_id_seq'::regclass)")
        assert signature(dev) == signature(prod)

    def test_identity_change(self):
        signature = column_signature()
        assert signature(_make_column(data_type="integer", identity="ALWAYS")) != signature(
            _make_column(data_type="integer")
        )

    def test_columns_keyed_by_table_and_name(self):
        source = [_make_column(table="users"), _make_column(table="admins")]
        target = [_make_column(table="users")]
        result = diff_objects(source, target, column_key, column_signature())
        assert [c.table for c in result.to_create] == ["admins"]


class TestConstraintSignature:

    def test_rule_change(self):
        base = {"table": "orders", "name": "fk", "kind": "FOREIGN KEY", "columns": "customer_id",
                "foreign_table": "customers", "foreign_columns": "id"}
        cascade = ConstraintDescriptor(**base, delete_rule="CASCADE")
        plain = ConstraintDescriptor(**base)
        assert constraint_signature(cascade) != constraint_signature(plain)

    def test_check_clause_not_compared(self):
        first = ConstraintDescriptor(table="t", name="c", kind="CHECK", check_clause="(x > 0)")
        second = ConstraintDescriptor(table="t", name="c", kind="CHECK", check_clause="(x > 1)")
        assert constraint_signature(first) == constraint_signature(second)


class TestFunctionSignature:

    def test_body_differing_only_in_schema_matches(self):
        signature = function_signature(("dev", "prod"))
        dev = _make_function()
        prod = _make_function(body="SELECT count(*)\n  FROM prod.users", schema="prod")
        assert signature(dev) == signature(prod)

    def test_body_change(self):
        signature = function_signature(("dev", "prod"))
        assert signature(_make_function()) != signature(_make_function(body="SELECT 1"))

    def test_return_type_case_ignored(self):
        signature = function_signature()
        assert signature(_make_function(return_type="INTEGER")) == signature(_make_function())

    def test_function_and_procedure_with_same_name_are_distinct(self):
        function = _make_function(name="refresh")
        procedure = _make_function(name="refresh", kind="PROCEDURE", return_type=None)
        result = diff_objects([function, procedure], [function], function_key)
        assert result.to_create == [procedure]


class TestTriggerSignature:

    def test_condition_whitespace_ignored(self):
        first = _make_trigger(condition="NEW.total  > 0")
        second = _make_trigger(condition="NEW.total > 0")
        assert trigger_signature(first) == trigger_signature(second)

    def test_event_change(self):
        assert trigger_signature(_make_trigger(events=["INSERT"])) != trigger_signature(_make_trigger())

    def test_same_name_on_two_tables(self):
        source = [_make_trigger(table="orders"), _make_trigger(table="invoices")]
        target = [_make_trigger(table="orders")]
        result = diff_objects(source, target, trigger_key, trigger_signature)
        assert [t.table for t in result.to_create] == ["invoices"]
