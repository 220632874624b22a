# ============================================================================
# SCHEMA MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - DDL text generation
# PURPOSE: Formatting, naming, dependency ordering and DDL builders
# CREATED: 17 OCT 2026
# ============================================================================

from core.schema.ddl_utils import (
    ColumnBuilder,
    TableBuilder,
    ConstraintBuilder,
    IndexBuilder,
    SequenceBuilder,
    FunctionBuilder,
    TriggerBuilder,
    CommentBuilder,
)
from core.schema.naming import synthesize_name, is_valid_name
from core.schema.sorting import (
    sort_by_dependency,
    extract_self_referencing_constraints,
    extract_all_sequences,
)

__all__ = [
    # Builders
    "ColumnBuilder",
    "TableBuilder",
    "ConstraintBuilder",
    "IndexBuilder",
    "SequenceBuilder",
    "FunctionBuilder",
    "TriggerBuilder",
    "CommentBuilder",
    # Naming
    "synthesize_name",
    "is_valid_name",
    # Ordering
    "sort_by_dependency",
    "extract_self_referencing_constraints",
    "extract_all_sequences",
]
