# ============================================================================
# INPUT VALIDATION
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Validation as result values
# PURPOSE: Identifier checks and schema presence checks for generation runs
# CREATED: 17 OCT 2026
# PATTERNS: PreflightResult - collect every problem, report at once
# ============================================================================
"""
Input Validation

"Schema not found" or "no tables" are expected outcomes of pointing the
tool at the wrong place, so checks return a ValidationResult instead of
raising. Callers that want to abort call raise_for_errors().

Usage:
    result = validate_identifier(name, "schema")
    result.merge(await check_schema(source))
    if not result.valid:
        result.raise_for_errors()
"""

import dataclasses
import difflib
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from core.errors import ValidationError

MAX_IDENTIFIER_LENGTH = 63

IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@dataclass
class ValidationIssue:
    """One validation failure with its context."""
    message: str
    field: Optional[str] = None
    value: Any = None
    suggestion: Optional[str] = None
    details: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_error(self) -> ValidationError:
        return ValidationError(
            self.message,
            field=self.field,
            value=self.value,
            suggestion=self.suggestion,
            details=self.details,
        )

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


@dataclass
class ValidationResult:
    """
    Result of validation.

    Collects all errors so every problem is reported at once.
    """
    errors: List[ValidationIssue] = dataclasses.field(default_factory=list)
    warnings: List[str] = dataclasses.field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str, **context: Any) -> None:
        self.errors.append(ValidationIssue(message, **context))

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def raise_for_errors(self) -> None:
        """Raise the first error as a ValidationError."""
        if self.errors:
            raise self.errors[0].to_error()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [str(e) for e in self.errors],
            "warnings": list(self.warnings),
        }


# ============================================================================
# CHECKS
# ============================================================================

def validate_identifier(name: Optional[str], kind: str = "identifier") -> ValidationResult:
    """
    Check a schema/table/function name.

    Args:
        name: Name to check
        kind: Label used in messages ("schema", "table", ...)

    Returns:
        ValidationResult with at most one error
    """
    result = ValidationResult()
    if not name:
        result.add_error(f"{kind.capitalize()} name is required", field=kind, value=name)
    elif len(name) > MAX_IDENTIFIER_LENGTH:
        result.add_error(
            f"{kind.capitalize()} name '{name}' exceeds {MAX_IDENTIFIER_LENGTH} characters",
            field=kind,
            value=name,
        )
    elif not IDENTIFIER_PATTERN.match(name):
        result.add_error(
            f"Invalid {kind} name '{name}'",
            field=kind,
            value=name,
            suggestion="use letters, digits and underscores, starting with a letter or underscore",
        )
    return result


def check_schema_presence(schema: str, exists: bool, available: Iterable[str]) -> ValidationResult:
    """
    Report a missing schema with the closest available names.

    Args:
        schema: Requested schema
        exists: Whether the schema was found
        available: Schemas that do exist
    """
    result = ValidationResult()
    if exists:
        return result

    available = sorted(available)
    close = difflib.get_close_matches(schema, available, n=1)
    suggestion = f"did you mean '{close[0]}'?" if close else "check the schema name"
    result.add_error(
        f"Schema '{schema}' does not exist",
        field="schema",
        value=schema,
        suggestion=suggestion,
        details={"available_schemas": available},
    )
    return result


def check_object_count(count: int, kind: str, schema: str, required: bool = True) -> ValidationResult:
    """Zero objects is an error when required, a warning otherwise."""
    result = ValidationResult()
    if count > 0:
        return result
    message = f"No {kind} found in schema '{schema}'"
    if required:
        result.add_error(message, field="schema", value=schema, details={"kind": kind})
    else:
        result.add_warning(message)
    return result


__all__ = [
    "MAX_IDENTIFIER_LENGTH",
    "ValidationIssue",
    "ValidationResult",
    "validate_identifier",
    "check_schema_presence",
    "check_object_count",
]
