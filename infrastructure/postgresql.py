# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Infrastructure - PostgreSQL connection handling
# PURPOSE: Scoped read-only async connections for catalog introspection
# CREATED: 17 OCT 2026
# ============================================================================
"""
PostgreSQL Connection Infrastructure

One connection per database per command invocation:
- opened from ConnectionSettings (password masked in logs)
- set read-only, rows returned as dicts
- closed unconditionally when the scope exits, including on failure

Usage:
    async with open_connection(settings) as conn:
        await check_connection(conn)
        source = DatabaseMetadataSource(conn, settings.schema)
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

import psycopg
from psycopg.rows import dict_row

from core.config import ConnectionSettings
from core.errors import AcquisitionError
from infrastructure.catalog_queries import DATABASE_INFO_QUERY, TEST_CONNECTION_QUERY

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_connection(settings: ConnectionSettings) -> AsyncIterator[psycopg.AsyncConnection]:
    """
    Open a read-only async connection for the duration of the block.

    Args:
        settings: Connection parameters

    Yields:
        psycopg.AsyncConnection with dict_row factory

    Raises:
        AcquisitionError: If the connection cannot be established
    """
    logger.info(f"Connecting to {settings.redacted()}")
    try:
        conn = await psycopg.AsyncConnection.connect(
            settings.conninfo(),
            row_factory=dict_row,
        )
    except psycopg.Error as e:
        raise AcquisitionError(
            f"Could not connect to {settings.redacted()}: {e}",
            source=settings.redacted(),
            operation="connect",
        ) from e

    try:
        await conn.set_read_only(True)
        yield conn
    finally:
        await conn.close()
        logger.debug(f"Closed connection to {settings.redacted()}")


async def check_connection(conn: psycopg.AsyncConnection) -> Dict[str, Any]:
    """
    Verify the connection answers and report what it is connected to.

    Returns:
        Dict with database_name, user_name, version

    Raises:
        AcquisitionError: If either probe query fails
    """
    try:
        cur = await conn.execute(TEST_CONNECTION_QUERY)
        await cur.fetchone()
        cur = await conn.execute(DATABASE_INFO_QUERY)
        info = await cur.fetchone()
    except psycopg.Error as e:
        raise AcquisitionError(f"Connection test failed: {e}", operation="test connection") from e
    logger.info(f"Connected to database {info['database_name']} as {info['user_name']}")
    return dict(info)


__all__ = ["open_connection", "check_connection"]
