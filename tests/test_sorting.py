# ============================================================================
# DEPENDENCY SORTING TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Tests - Foreign-key ordering of tables
# PURPOSE: Verify sort_by_dependency and the extraction helpers
# CREATED: 17 OCT 2026
# ============================================================================
"""
Dependency Sorting Tests

Run with:
    pytest tests/test_sorting.py -v
"""

from core.models import ConstraintDescriptor, SequenceDescriptor, TableDescriptor
from core.schema.sorting import (
    extract_all_sequences,
    extract_self_referencing_constraints,
    sort_by_dependency,
)


# ============================================================================
# HELPERS
# ============================================================================

def _make_table(name, references=(), sequences=()):
    """Table with one FOREIGN KEY per referenced table name."""
    constraints = [
        ConstraintDescriptor(
            table=name,
            name=f"{name}_{ref}_fkey",
            kind="FOREIGN KEY",
            columns=(f"{ref}_id",),
            foreign_table=ref,
            foreign_columns=("id",),
        )
        for ref in references
    ]
    return TableDescriptor(name=name, schema="public", constraints=constraints, sequences=list(sequences))


def _names(tables):
    return [t.name for t in tables]


# ============================================================================
# SORT
# ============================================================================

class TestSortByDependency:

    def test_independent_tables_keep_input_order(self):
        tables = [_make_table("b"), _make_table("a")]
        assert _names(sort_by_dependency(tables)) == ["b", "a"]

    def test_referenced_table_first(self):
        tables = [_make_table("orders", ["customers"]), _make_table("customers")]
        assert _names(sort_by_dependency(tables)) == ["customers", "orders"]

    def test_chain(self):
        tables = [
            _make_table("line_items", ["orders"]),
            _make_table("orders", ["customers"]),
            _make_table("customers"),
        ]
        assert _names(sort_by_dependency(tables)) == ["customers", "orders", "line_items"]

    def test_cycle_emits_second_visited_first(self):
        tables = [_make_table("a", ["b"]), _make_table("b", ["a"])]
        assert _names(sort_by_dependency(tables)) == ["b", "a"]

    def test_self_reference_is_not_an_edge(self):
        tables = [_make_table("employees", ["employees"])]
        assert _names(sort_by_dependency(tables)) == ["employees"]

    def test_reference_outside_input_ignored(self):
        tables = [_make_table("orders", ["elsewhere"])]
        assert _names(sort_by_dependency(tables)) == ["orders"]

    def test_each_table_once(self):
        tables = [
            _make_table("c", ["a", "b"]),
            _make_table("b", ["a"]),
            _make_table("a"),
        ]
        result = _names(sort_by_dependency(tables))
        assert sorted(result) == ["a", "b", "c"]
        assert result == ["a", "b", "c"]

    def test_deterministic(self):
        tables = [_make_table("x", ["y"]), _make_table("y", ["z"]), _make_table("z", ["x"])]
        assert _names(sort_by_dependency(tables)) == _names(sort_by_dependency(tables))


# ============================================================================
# EXTRACTION
# ============================================================================

class TestExtraction:

    def test_self_referencing_constraints(self):
        tables = [_make_table("employees", ["employees", "departments"]), _make_table("departments")]
        found = extract_self_referencing_constraints(tables)
        assert [c.name for c in found] == ["employees_employees_fkey"]

    def test_sequences_deduplicated_by_name(self):
        seq = SequenceDescriptor(name="users_id_seq", schema="public")
        tables = [_make_table("users", sequences=[seq]), _make_table("admins", sequences=[seq])]
        extra = [SequenceDescriptor(name="invoice_no", schema="public"), seq]
        assert [s.name for s in extract_all_sequences(tables, extra)] == ["users_id_seq", "invoice_no"]
