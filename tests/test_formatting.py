# ============================================================================
# FORMATTING TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Tests - Identifier, type and banner formatting
# PURPOSE: Verify the pure formatting helpers shared by sync and gen
# CREATED: 17 OCT 2026
# ============================================================================
"""
Formatting Tests

Pure functions only; no database or filesystem.

Run with:
    pytest tests/test_formatting.py -v
"""

import pytest
from psycopg import sql

from core.models import ColumnDescriptor
from core.schema.formatting import (
    RULE,
    backup_name,
    escape_identifier,
    file_footer,
    file_header,
    format_data_type,
    format_default,
    format_type,
    normalize_schema_references,
    parse_type_spec,
    qualify,
    quote_identifier,
    quote_literal,
    render,
    retarget_schema,
    script_footer,
    script_header,
    section_header,
    todo,
    wrap_function_body,
)


# ============================================================================
# HELPERS
# ============================================================================

def _make_column(data_type="character varying", **overrides):
    """Build a ColumnDescriptor on table t with sensible defaults."""
    data = {"table": "t", "name": "c", "data_type": data_type, "ordinal_position": 1}
    data.update(overrides)
    return ColumnDescriptor(**data)


# ============================================================================
# IDENTIFIERS & LITERALS
# ============================================================================

class TestQuoting:

    def test_simple_identifier_is_bare(self):
        assert quote_identifier("users") == "users"

    def test_identifier_with_space_is_quoted(self):
        assert quote_identifier("Order Items") == '"Order Items"'

    def test_embedded_quote_is_doubled(self):
        assert quote_identifier('a"b') == '"a""b"'

    def test_identifier_starting_with_digit_is_quoted(self):
        assert quote_identifier("1st") == '"1st"'

    def test_qualify(self):
        assert qualify("target", "users") == "target.users"

    def test_qualify_without_schema(self):
        assert qualify(None, "users") == "users"

    def test_literal_doubles_quotes(self):
        assert quote_literal("it's") == "'it''s'"

    def test_none_literal_is_null(self):
        assert quote_literal(None) == "NULL"

    def test_backslash_literal_is_escape_string(self):
        assert quote_literal("C:\\temp") == "E'C:\\\\temp'"

    def test_escape_identifier_always_quotes(self):
        assert escape_identifier("users") == '"users"'
        assert escape_identifier('a"b') == '"a""b"'

    def test_render_composed_statement(self):
        statement = sql.SQL("DROP INDEX IF EXISTS {};").format(sql.Identifier("app", "idx"))
        assert render(statement) == 'DROP INDEX IF EXISTS "app"."idx";'


# ============================================================================
# TYPES
# ============================================================================

class TestFormatType:

    def test_default_varchar_length_is_elided(self):
        column = _make_column(character_maximum_length=255)
        assert format_type(column) == "character varying"

    def test_non_default_varchar_length_is_kept(self):
        column = _make_column(character_maximum_length=100)
        assert format_type(column) == "character varying(100)"

    def test_explicit_rendering_keeps_default_length(self):
        column = _make_column(character_maximum_length=255)
        assert format_data_type(column) == "character varying(255)"

    def test_alias_is_canonicalized(self):
        column = _make_column(data_type="varchar", character_maximum_length=50)
        assert format_type(column) == "character varying(50)"

    def test_numeric_precision_and_scale(self):
        column = _make_column(data_type="numeric", numeric_precision=10, numeric_scale=2)
        assert format_type(column) == "numeric(10,2)"

    def test_default_timestamp_precision_is_elided(self):
        column = _make_column(data_type="timestamptz", datetime_precision=6)
        assert format_type(column) == "timestamp with time zone"

    def test_timestamp_precision_goes_before_zone(self):
        column = _make_column(data_type="timestamp", datetime_precision=3)
        assert format_type(column) == "timestamp(3) without time zone"

    def test_array_suffix_is_preserved(self):
        column = _make_column(data_type="int4[]")
        assert format_type(column) == "integer[]"

    def test_user_type_keeps_spelling(self):
        column = _make_column(data_type="OrderStatus")
        assert format_type(column) == "OrderStatus"


class TestParseTypeSpec:

    def test_varchar_length(self):
        spec = parse_type_spec("varchar(100)")
        assert spec["data_type"] == "character varying"
        assert spec["character_maximum_length"] == 100

    def test_numeric_precision_scale(self):
        spec = parse_type_spec("numeric(10,2)")
        assert spec["numeric_precision"] == 10
        assert spec["numeric_scale"] == 2

    def test_timestamp_precision_with_zone(self):
        spec = parse_type_spec("timestamp(3) with time zone")
        assert spec["data_type"] == "timestamp with time zone"
        assert spec["datetime_precision"] == 3

    def test_plain_type(self):
        spec = parse_type_spec("text")
        assert spec["data_type"] == "text"
        assert spec["character_maximum_length"] is None


# ============================================================================
# DEFAULTS & BODIES
# ============================================================================

class TestSchemaReferences:

    def test_nextval_is_retargeted(self):
        result = format_default("nextval('dev.users_id_seq'::regclass)", "prod")
        assert result == "nextval('prod.users_id_seq'::regclass)"

    def test_unqualified_nextval_unchanged(self):
        result = format_default("nextval('users_id_seq'::regclass)", "prod")
        assert result == "nextval('users_id_seq'::regclass)"

    def test_none_default(self):
        assert format_default(None, "prod") is None

    def test_normalized_bodies_compare_equal(self):
        dev = normalize_schema_references("SELECT *   FROM dev.users", ["dev", "prod"])
        prod = normalize_schema_references("SELECT * FROM prod.users", ["dev", "prod"])
        assert dev == prod == "SELECT * FROM SCHEMA.users"

    def test_normalize_leaves_longer_names_alone(self):
        result = normalize_schema_references("SELECT * FROM devices.x", ["dev"])
        assert result == "SELECT * FROM devices.x"

    def test_retarget_schema(self):
        assert retarget_schema("SELECT dev.f()", "dev", "prod") == "SELECT prod.f()"

    def test_retarget_same_schema_is_noop(self):
        assert retarget_schema("SELECT dev.f()", "dev", "dev") == "SELECT dev.f()"


class TestWrapFunctionBody:

    def test_body_is_dollar_quoted(self):
        assert wrap_function_body("BEGIN RETURN 1; END;") == "$$\nBEGIN RETURN 1; END\n$$"

    def test_already_quoted_body_kept(self):
        assert wrap_function_body("$$ SELECT 1 $$") == "$$ SELECT 1 $$"

    def test_body_containing_dollars_uses_tag(self):
        wrapped = wrap_function_body("SELECT '$$'")
        assert wrapped.startswith("$body$\n")
        assert wrapped.endswith("\n$body$")


# ============================================================================
# NAMES & BANNERS
# ============================================================================

class TestBackupName:

    def test_backup_name(self):
        assert backup_name("users", "1700000000000") == "users_backup_1700000000000"

    def test_dropped_suffix(self):
        assert backup_name("users", "1", "dropped") == "users_dropped_1"

    def test_long_name_fits_identifier_limit(self):
        name = backup_name("x" * 80, "1700000000000")
        assert len(name) == 63
        assert name.endswith("_backup_1700000000000")


class TestBanners:

    def test_section_header(self):
        assert section_header("TABLE OPERATIONS") == [RULE, "-- TABLE OPERATIONS", RULE]

    def test_script_header(self):
        lines = script_header("dev", "prod", "2026-10-17T00:00:00Z")
        assert lines[1] == "-- Schema Sync Script"
        assert "-- Source Schema: dev" in lines
        assert "-- Target Schema: prod" in lines
        assert "-- Generated: 2026-10-17T00:00:00Z" in lines

    def test_script_footer(self):
        assert script_footer()[-2] == "-- END OF SCHEMA SYNC SCRIPT"

    def test_file_header_with_database(self):
        lines = file_header("Triggers", "public", "appdb", "2026-10-17T00:00:00Z")
        assert lines[1:4] == ["-- Triggers", "-- Schema: public", "-- Database: appdb"]

    def test_file_header_without_database(self):
        lines = file_header("Triggers", "public", None, "now")
        assert not any(line.startswith("-- Database") for line in lines)

    def test_file_footer(self):
        assert "-- End of Schema Definition" in file_footer("Schema Definition")

    @pytest.mark.parametrize("message", ["Check this", "Manually drop table x"])
    def test_todo(self, message):
        assert todo(message) == f"-- TODO: {message}"
