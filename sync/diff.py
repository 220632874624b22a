# ============================================================================
# OBJECT DIFF ENGINE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Keyed comparison of descriptor lists
# PURPOSE: Partition source/target objects into create / drop / modify
# CREATED: 17 OCT 2026
# EXPORTS: DiffResult, diff_objects, *_key, *_signature
# ============================================================================
"""
Object Diff Engine

One generic comparison used by every sync phase. Objects are matched by
an identity key; matched pairs are compared by a change signature (a
hashable tuple of the attributes that matter for that category).

    | Category   | Identity key    | Signature                                  |
    |------------|-----------------|--------------------------------------------|
    | Table      | name            | (none)                                     |
    | Column     | (table, name)   | type, nullability, default, identity       |
    | Constraint | name            | kind, columns (not CHECK), reference, rules |
    | Index      | name            | (none)                                     |
    | Routine    | (name, kind)    | kind, return type, normalized body         |
    | Trigger    | (table, name)   | timing, events, function, condition        |

to_create keeps source order, to_drop keeps target order and to_modify
keeps source order. Running the diff on the same snapshot twice gives
the same result.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, List, Optional, Tuple, TypeVar

from core.contracts import ConstraintKind
from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    IndexDescriptor,
    TableDescriptor,
    TriggerDescriptor,
)
from core.schema.formatting import format_type, normalize_schema_references

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DiffResult(Generic[T]):
    """Outcome of comparing one category of objects."""
    to_create: List[T] = field(default_factory=list)
    to_drop: List[T] = field(default_factory=list)
    to_modify: List[Tuple[T, T]] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.to_create or self.to_drop or self.to_modify)

    def counts(self) -> Dict[str, int]:
        return {
            "created": len(self.to_create),
            "dropped": len(self.to_drop),
            "modified": len(self.to_modify),
        }


def _index_by_key(items: Iterable[T], identity_key: Callable[[T], Hashable], side: str) -> Dict[Hashable, T]:
    indexed: Dict[Hashable, T] = {}
    for item in items:
        key = identity_key(item)
        if key in indexed:
            logger.warning(f"Duplicate {side} object key {key!r}, keeping the first")
            continue
        indexed[key] = item
    return indexed


def diff_objects(
    source: Iterable[T],
    target: Iterable[T],
    identity_key: Callable[[T], Hashable],
    change_signature: Optional[Callable[[T], Hashable]] = None,
) -> DiffResult[T]:
    """
    Compare two object lists.

    Args:
        source: Objects the target should end up matching
        target: Objects currently in the target
        identity_key: Maps an object to the key it is matched by
        change_signature: Maps an object to the attributes compared for
            modification; None means matched objects are never modified

    Returns:
        DiffResult with to_create (source only), to_drop (target only) and
        to_modify ((source, target) pairs whose signatures differ)
    """
    source_by_key = _index_by_key(source, identity_key, "source")
    target_by_key = _index_by_key(target, identity_key, "target")

    result: DiffResult[T] = DiffResult()
    for key, item in source_by_key.items():
        existing = target_by_key.get(key)
        if existing is None:
            result.to_create.append(item)
        elif change_signature is not None and change_signature(item) != change_signature(existing):
            result.to_modify.append((item, existing))

    for key, item in target_by_key.items():
        if key not in source_by_key:
            result.to_drop.append(item)
    return result


# ============================================================================
# IDENTITY KEYS
# ============================================================================

def table_key(table: TableDescriptor) -> str:
    return table.name


def column_key(column: ColumnDescriptor) -> Tuple[str, str]:
    return column.identity_key


def constraint_key(constraint: ConstraintDescriptor) -> str:
    return constraint.name


def index_key(index: IndexDescriptor) -> str:
    return index.name


def function_key(function: FunctionDescriptor) -> Tuple[str, Any]:
    return function.identity_key


def trigger_key(trigger: TriggerDescriptor) -> Tuple[str, str]:
    return trigger.identity_key


# ============================================================================
# CHANGE SIGNATURES
# ============================================================================

def column_signature(schemas: Iterable[Optional[str]] = ()) -> Callable[[ColumnDescriptor], Hashable]:
    """
    Build the column signature function.

    Types and defaults are compared with schema qualifiers replaced, so
    dev.order_status and prod.order_status match, as do
    nextval('dev.users_id_seq') and nextval('prod.users_id_seq').
    """
    names = tuple(schemas)

    def signature(column: ColumnDescriptor) -> Hashable:
        return (
            normalize_schema_references(format_type(column), names),
            column.is_nullable,
            normalize_schema_references(column.default, names),
            column.identity,
            normalize_schema_references(column.generation_expression, names),
        )

    return signature


def constraint_signature(constraint: ConstraintDescriptor) -> Hashable:
    # CHECK columns are derived from the clause and absent from parsed files
    columns = () if constraint.kind == ConstraintKind.CHECK else constraint.columns
    return (
        constraint.kind,
        columns,
        constraint.foreign_table,
        constraint.foreign_columns,
        constraint.update_rule,
        constraint.delete_rule,
    )


def function_signature(schemas: Iterable[Optional[str]] = ()) -> Callable[[FunctionDescriptor], Hashable]:
    """Build the routine signature function; bodies are compared schema-neutral."""
    names = tuple(schemas)

    def signature(function: FunctionDescriptor) -> Hashable:
        return (
            function.kind,
            " ".join(function.return_type.lower().split()),
            normalize_schema_references(function.body, names),
        )

    return signature


def trigger_signature(trigger: TriggerDescriptor) -> Hashable:
    return (
        trigger.timing,
        trigger.events,
        trigger.function_name,
        " ".join((trigger.condition or "").split()),
    )


__all__ = [
    "DiffResult",
    "diff_objects",
    "table_key",
    "column_key",
    "constraint_key",
    "index_key",
    "function_key",
    "trigger_key",
    "column_signature",
    "constraint_signature",
    "function_signature",
    "trigger_signature",
]
