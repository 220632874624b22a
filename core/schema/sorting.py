# ============================================================================
# DEPENDENCY SORTING
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Table ordering by foreign keys
# PURPOSE: Emit referenced tables before the tables that reference them
# CREATED: 17 OCT 2026
# EXPORTS: sort_by_dependency, extract_self_referencing_constraints,
#          extract_all_sequences
# DEPENDENCIES: core.models
# ============================================================================
"""
Dependency Sorting.

Depth-first topological sort over FOREIGN KEY edges. Self-references are
not edges (those constraints are emitted after every table exists).

Cycles do not fail the sort: a table already being visited is simply not
descended into again, so the participant reached second in the walk is
emitted first. The walk is deterministic: tables are visited in input
order, and each table's dependencies in constraint declaration order.

Example:
    A <-> B, input [A, B]  ->  [B, A]
"""

import logging
from typing import Dict, Iterable, List, Sequence, Set

from core.models import ConstraintDescriptor, SequenceDescriptor, TableDescriptor

logger = logging.getLogger(__name__)


def sort_by_dependency(tables: Sequence[TableDescriptor]) -> List[TableDescriptor]:
    """
    Order tables so every referenced table precedes its referrers.

    Args:
        tables: Tables of one schema, in any order

    Returns:
        Each table exactly once, dependencies first
    """
    by_name: Dict[str, TableDescriptor] = {}
    for table in tables:
        by_name.setdefault(table.name, table)

    ordered: List[TableDescriptor] = []
    visited: Set[str] = set()
    visiting: Set[str] = set()

    def visit(table: TableDescriptor) -> None:
        if table.name in visited:
            return
        if table.name in visiting:
            logger.debug(f"Foreign key cycle through {table.name}, not descending")
            return

        visiting.add(table.name)
        for dependency in table.foreign_key_dependencies():
            referenced = by_name.get(dependency)
            if referenced is not None:
                visit(referenced)
        visiting.discard(table.name)

        visited.add(table.name)
        ordered.append(table)

    for table in by_name.values():
        visit(table)

    return ordered


def extract_self_referencing_constraints(
    tables: Iterable[TableDescriptor],
) -> List[ConstraintDescriptor]:
    """Self-referencing FOREIGN KEYs of all tables, in table order."""
    result: List[ConstraintDescriptor] = []
    for table in tables:
        result.extend(c for c in table.constraints if c.is_self_referencing)
    return result


def extract_all_sequences(
    tables: Iterable[TableDescriptor],
    extra: Iterable[SequenceDescriptor] = (),
) -> List[SequenceDescriptor]:
    """Sequences owned by the tables plus any standalone ones, first name wins."""
    seen: Dict[str, SequenceDescriptor] = {}
    for table in tables:
        for sequence in table.sequences:
            seen.setdefault(sequence.name, sequence)
    for sequence in extra:
        seen.setdefault(sequence.name, sequence)
    return list(seen.values())


__all__ = [
    "sort_by_dependency",
    "extract_self_referencing_constraints",
    "extract_all_sequences",
]
