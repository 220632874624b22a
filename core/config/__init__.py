# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Configuration and defaults
# PURPOSE: Connection settings, sync and gen defaults, .env loading
# CREATED: 17 OCT 2026
# ============================================================================
"""
Configuration Module

Connection settings for each side of a run and the output defaults of
sync and gen. Every value can be overridden from the environment.
"""

from core.config.defaults import (
    ConnectionSettings,
    SyncDefaults,
    GeneratorDefaults,
    load_environment,
)

__all__ = [
    "ConnectionSettings",
    "SyncDefaults",
    "GeneratorDefaults",
    "load_environment",
]
