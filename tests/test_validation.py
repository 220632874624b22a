# ============================================================================
# INPUT VALIDATION TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Tests - Identifier and schema presence checks
# PURPOSE: Verify ValidationResult collection and messages
# CREATED: 17 OCT 2026
# ============================================================================
"""
Input Validation Tests

Run with:
    pytest tests/test_validation.py -v
"""

import pytest

from core.errors import ValidationError
from core.validation import (
    ValidationIssue,
    ValidationResult,
    check_object_count,
    check_schema_presence,
    validate_identifier,
)


class TestValidateIdentifier:

    @pytest.mark.parametrize("name", ["public", "_staging", "App2", "a" * 63])
    def test_valid(self, name):
        assert validate_identifier(name, "schema").valid

    def test_required(self):
        result = validate_identifier("", "schema")
        assert str(result.errors[0]) == "Schema name is required"

    def test_too_long(self):
        result = validate_identifier("a" * 64, "table")
        assert result.errors[0].message == f"Table name '{'a' * 64}' exceeds 63 characters"

    @pytest.mark.parametrize("name", ["bad-name", "1st", "has space", "semi;colon"])
    def test_invalid_characters(self, name):
        result = validate_identifier(name, "schema")
        assert not result.valid
        assert result.errors[0].message == f"Invalid schema name '{name}'"
        assert result.errors[0].suggestion


class TestSchemaPresence:

    def test_present(self):
        assert check_schema_presence("dev", True, []).valid

    def test_close_match_suggested(self):
        result = check_schema_presence("prd", False, ["public", "prod", "dev"])
        assert str(result.errors[0]) == "Schema 'prd' does not exist (did you mean 'prod'?)"
        assert result.errors[0].details["available_schemas"] == ["dev", "prod", "public"]

    def test_no_match(self):
        result = check_schema_presence("zzz", False, ["public"])
        assert result.errors[0].suggestion == "check the schema name"


class TestObjectCount:

    def test_required_is_error(self):
        result = check_object_count(0, "tables", "dev")
        assert [str(e) for e in result.errors] == ["No tables found in schema 'dev'"]

    def test_optional_is_warning(self):
        result = check_object_count(0, "triggers", "dev", required=False)
        assert result.valid
        assert result.warnings == ["No triggers found in schema 'dev'"]

    def test_nonzero_passes(self):
        result = check_object_count(3, "tables", "dev")
        assert result.valid and not result.warnings


class TestValidationResult:

    def test_merge_collects_everything(self):
        result = validate_identifier("bad-name", "schema")
        result.merge(check_object_count(0, "triggers", "x", required=False))
        result.merge(validate_identifier("", "table"))
        assert len(result.errors) == 2
        assert result.to_dict()["warnings"] == ["No triggers found in schema 'x'"]

    def test_raise_for_errors(self):
        result = check_schema_presence("prd", False, ["prod"])
        with pytest.raises(ValidationError) as exc_info:
            result.raise_for_errors()
        assert exc_info.value.field == "schema"
        assert exc_info.value.suggestion == "did you mean 'prod'?"

    def test_raise_for_errors_noop_when_valid(self):
        ValidationResult().raise_for_errors()


class TestValidationIssue:

    def test_field_and_details_carried_to_error(self):
        issue = ValidationIssue("Bad name", field="table", value="x-y")
        error = issue.to_error()
        assert (error.field, error.value) == ("table", "x-y")
        assert issue.details == {}

    def test_details_not_shared(self):
        first, second = ValidationIssue("a"), ValidationIssue("b")
        first.details["k"] = 1
        assert second.details == {}
