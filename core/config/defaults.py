# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Default configuration values
# PURPOSE: Connection settings, sync and generation defaults
# CREATED: 17 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for connections, sync output and generated files.
These can be overridden via environment variables (optionally loaded from
a .env file) and then by command-line flags.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access

Environment:
    DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD, DB_SCHEMA, DB_SSLMODE
    SOURCE_DB_*  / TARGET_DB_*   (same keys, used by `sync`)
    SCHEMA_SYNC_BACKUP_SUFFIX, SCHEMA_SYNC_OUTPUT_DIR
    SCHEMA_GEN_OUTPUT_DIR
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Optional
from urllib.parse import quote

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)


def load_environment(path: Optional[str] = None) -> Optional[str]:
    """
    Load a .env file into the process environment.

    Searches upward from the working directory when no path is given.
    Variables already set in the environment win.

    Returns:
        Path of the loaded file, or None if none was found
    """
    dotenv_path = path or find_dotenv(usecwd=True)
    if not dotenv_path:
        return None
    load_dotenv(dotenv_path, override=False)
    logger.debug(f"Loaded environment from {dotenv_path}")
    return dotenv_path


@dataclass(frozen=True)
class ConnectionSettings:
    """
    PostgreSQL connection parameters for one database.

    Used for `gen` (no prefix) and for both sides of `sync`
    (SOURCE_ / TARGET_ prefixes).
    """
    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    username: str = "postgres"
    password: Optional[str] = None
    schema: str = "public"
    sslmode: Optional[str] = None

    @classmethod
    def from_env(cls, prefix: str = "") -> "ConnectionSettings":
        """Create from {prefix}DB_* environment variables."""
        def env(key: str, default: Any = None) -> Any:
            return os.getenv(f"{prefix}DB_{key}", default)

        return cls(
            host=env("HOST", "localhost"),
            port=int(env("PORT", 5432)),
            database=env("NAME", "postgres"),
            username=env("USER", "postgres"),
            password=env("PASSWORD"),
            schema=env("SCHEMA", "public"),
            sslmode=env("SSLMODE"),
        )

    def with_overrides(self, **overrides: Any) -> "ConnectionSettings":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if v is not None and k in known}
        if "port" in changes:
            changes["port"] = int(changes["port"])
        return replace(self, **changes)

    def conninfo(self) -> str:
        """postgresql:// URL with credentials URL-encoded."""
        credentials = quote(self.username, safe="")
        if self.password:
            credentials += ":" + quote(self.password, safe="")
        url = f"postgresql://{credentials}@{self.host}:{self.port}/{quote(self.database, safe='')}"
        if self.sslmode:
            url += f"?sslmode={self.sslmode}"
        return url

    def redacted(self) -> str:
        """Connection description safe for logs."""
        return f"{self.username}@{self.host}:{self.port}/{self.database} (schema {self.schema})"


@dataclass(frozen=True)
class SyncDefaults:
    """
    Defaults for sync script generation.

    Controls backup naming and output file naming.
    """
    # Renamed-instead-of-dropped suffixes
    backup_suffix: str = "backup"
    generated_backup_suffix: str = "dropped"

    # schema-sync_{source}-to-{target}_{timestamp}.sql
    output_prefix: str = "schema-sync"
    output_dir: str = "."

    def output_filename(self, source_schema: str, target_schema: str, timestamp: str) -> str:
        return f"{self.output_prefix}_{source_schema}-to-{target_schema}_{timestamp}.sql"

    @classmethod
    def from_env(cls) -> "SyncDefaults":
        """Create from environment variables."""
        return cls(
            backup_suffix=os.getenv("SCHEMA_SYNC_BACKUP_SUFFIX", "backup"),
            output_dir=os.getenv("SCHEMA_SYNC_OUTPUT_DIR", "."),
        )


@dataclass(frozen=True)
class GeneratorDefaults:
    """
    Defaults for `gen` output files.
    """
    output_dir: str = "./output"
    schema_file: str = "schema.sql"
    procs_file: str = "procs.sql"
    triggers_file: str = "triggers.sql"

    @classmethod
    def from_env(cls) -> "GeneratorDefaults":
        """Create from environment variables."""
        return cls(
            output_dir=os.getenv("SCHEMA_GEN_OUTPUT_DIR", "./output"),
        )


__all__ = [
    "ConnectionSettings",
    "SyncDefaults",
    "GeneratorDefaults",
    "load_environment",
]
