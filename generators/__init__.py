# ============================================================================
# GENERATORS PACKAGE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Generators - Introspection to files
# PURPOSE: schema.sql, procs.sql and triggers.sql for one schema
# CREATED: 17 OCT 2026
# ============================================================================
"""
File generators, in the order `gen` runs them.
"""

from generators.base import BaseGenerator, GeneratedFile, GenerationOptions, GeneratorResult
from generators.schema_generator import SchemaGenerator
from generators.procs_generator import ProcsGenerator
from generators.triggers_generator import TriggersGenerator

GENERATORS = (SchemaGenerator, ProcsGenerator, TriggersGenerator)

__all__ = [
    "BaseGenerator",
    "GeneratedFile",
    "GenerationOptions",
    "GeneratorResult",
    "SchemaGenerator",
    "ProcsGenerator",
    "TriggersGenerator",
    "GENERATORS",
]
