# ============================================================================
# CONSTRAINT NAME SYNTHESIS
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Pure naming functions
# PURPOSE: PostgreSQL-convention names for constraints without a usable name
# CREATED: 17 OCT 2026
# EXPORTS: synthesize_name, is_valid_name
# DEPENDENCIES: re
# ============================================================================
"""
Constraint Name Synthesis.

User-chosen names are kept. Missing or unusable names (empty, too long,
starting with a digit such as the catalog's "2200_16390_1_not_null") are
replaced with the names PostgreSQL itself would generate, so objects that
already carry convention names in the target are matched instead of
duplicated.

    orders_pkey
    orders_email_key
    orders_customer_id_fkey
    orders_total_check_1760659200000
"""

import re
from typing import Iterable, Optional, Union

from core.contracts import ConstraintKind
from core.schema.formatting import MAX_IDENTIFIER_LENGTH, generate_timestamp

_VALID_START = re.compile(r"^[A-Za-z_]")


def is_valid_name(name: Optional[str]) -> bool:
    """Non-empty, at most 63 characters, starting with a letter or underscore."""
    if not name:
        return False
    return len(name) <= MAX_IDENTIFIER_LENGTH and bool(_VALID_START.match(name))


def _column_part(columns: Iterable[str]) -> str:
    parts = ["_".join(str(c).split()) for c in columns if str(c).strip()]
    if not parts:
        return "col"
    return "_".join(parts).lower()


def _fit(prefix: str, suffix: str) -> str:
    # Truncate the prefix, never the distinguishing suffix
    room = MAX_IDENTIFIER_LENGTH - len(suffix)
    return prefix[: max(1, room)] + suffix


def synthesize_name(
    original: Optional[str],
    kind: Union[ConstraintKind, str],
    table: str,
    columns: Iterable[str] = (),
    timestamp: Optional[str] = None,
) -> str:
    """
    Return the constraint name to emit.

    Args:
        original: Name reported by the source (may be empty or invalid)
        kind: Constraint kind
        table: Owning table name
        columns: Constrained columns
        timestamp: CHECK suffix; defaults to the current epoch milliseconds

    Returns:
        original when valid, otherwise a convention name
    """
    if is_valid_name(original):
        return original

    columns = list(columns)
    cols = _column_part(columns)

    if kind == ConstraintKind.PRIMARY_KEY:
        return _fit(table, "_pkey")
    if kind == ConstraintKind.UNIQUE:
        return _fit(f"{table}_{cols}", "_key")
    if kind == ConstraintKind.FOREIGN_KEY:
        return _fit(f"{table}_{cols}", "_fkey")
    if kind == ConstraintKind.CHECK:
        return _fit(f"{table}_{cols}", f"_check_{timestamp or generate_timestamp()}")

    label = kind.value if isinstance(kind, ConstraintKind) else str(kind)
    return _fit(f"{table}_{cols}", "_" + "_".join(label.lower().split()))


__all__ = ["synthesize_name", "is_valid_name"]
