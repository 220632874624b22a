# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Infrastructure - Metadata acquisition
# PURPOSE: Live catalog and generated-file metadata sources
# CREATED: 17 OCT 2026
# ============================================================================
"""
Infrastructure module for schema sync.

Provides:
- open_connection: Scoped read-only psycopg connection
- DatabaseMetadataSource: Descriptors from a live catalog
- FileMetadataSource: Descriptors from schema.sql / procs.sql / triggers.sql
- InMemoryMetadataSource: Descriptors handed in directly

Usage:
    from infrastructure import open_connection, DatabaseMetadataSource

    async with open_connection(settings) as conn:
        source = DatabaseMetadataSource(conn, settings.schema)
        tables = await source.list_tables()
"""

from infrastructure.metadata_source import (
    MetadataSource,
    InMemoryMetadataSource,
    assemble_tables,
)
from infrastructure.postgresql import (
    open_connection,
    check_connection,
)
from infrastructure.introspection import DatabaseMetadataSource
from infrastructure.file_source import FileMetadataSource

__all__ = [
    "MetadataSource",
    "InMemoryMetadataSource",
    "assemble_tables",
    "open_connection",
    "check_connection",
    "DatabaseMetadataSource",
    "FileMetadataSource",
]
