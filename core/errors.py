# ============================================================================
# ERROR KINDS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Typed errors with explicit discriminants
# PURPOSE: Acquisition, validation and formatting failures
# CREATED: 17 OCT 2026
# PATTERNS: RepositoryError/ValidationError context attributes
# ============================================================================
"""
Error Kinds

Three kinds of failure, each tagged with an ErrorKind discriminant:

- AcquisitionError: catalog query or file read failed. Not recoverable,
  aborts the run (connections are still released by the caller).
- ValidationError: schema missing, no tables, invalid identifier. Expected
  outcomes are returned as ValidationResult; this is raised only when a
  caller decides to abort on them.
- FormattingError: a descriptor is missing a field a clause needs. Never
  fatal, the policy turns it into a "-- TODO:" marker.

Usage:
    from core.errors import AcquisitionError, ErrorKind

    try:
        tables = await source.list_tables()
    except AcquisitionError as e:
        print(e.kind, e.details)
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Discriminant for SchemaSyncError subclasses."""
    ACQUISITION = "acquisition"
    VALIDATION = "validation"
    FORMATTING = "formatting"


class SchemaSyncError(Exception):
    """Base exception for schema sync operations."""

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


class AcquisitionError(SchemaSyncError):
    """Raised when metadata cannot be fetched (query failure, unreadable file)."""

    kind = ErrorKind.ACQUISITION

    def __init__(
        self,
        message: str,
        source: str = None,
        operation: str = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.source = source
        self.operation = operation
        super().__init__(message, details)


class ValidationError(SchemaSyncError):
    """Raised when inputs fail validation (schema, table or identifier)."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        field: str = None,
        value: Any = None,
        suggestion: str = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.field = field
        self.value = value
        self.suggestion = suggestion
        super().__init__(message, details)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class FormattingError(SchemaSyncError):
    """Raised by DDL builders when a clause cannot be rendered."""

    kind = ErrorKind.FORMATTING

    def __init__(
        self,
        message: str,
        object_name: str = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.object_name = object_name
        super().__init__(message, details)


@contextmanager
def error_context(operation: str, source: Optional[str] = None):
    """
    Context manager for consistent acquisition error handling.

    Typed errors pass through untouched; anything else is logged and
    wrapped in AcquisitionError.

    Args:
        operation: Human-readable description of the operation
        source: Optional source description (schema, directory)

    Example:
        with error_context("list columns", "public"):
            rows = await self._fetch(COLUMNS_QUERY, schema)
    """
    try:
        yield
    except SchemaSyncError:
        raise
    except Exception as e:
        error_msg = f"{operation} failed"
        if source:
            error_msg += f" for {source}"
        error_msg += f": {e}"
        logger.error(error_msg)
        raise AcquisitionError(error_msg, source=source, operation=operation) from e


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ErrorKind",
    "SchemaSyncError",
    "AcquisitionError",
    "ValidationError",
    "FormattingError",
    "error_context",
]
