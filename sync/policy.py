# ============================================================================
# SAFE-MUTATION POLICY
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Sync - Diff entries to DDL text
# PURPOSE: Non-destructive DDL for every create / drop / modify decision
# CREATED: 17 OCT 2026
# ============================================================================
"""
Safe-Mutation Policy

Decides the DDL emitted for each diff entry. Nothing that holds data is
ever dropped:

    tables, columns, constraints, routines
        drop    -> RENAME to {name}_{suffix}_{timestamp} + TODO marker
        modify  -> rename old to backup + TODO, then create from source
    triggers, indexes
        drop    -> DROP ... IF EXISTS
        modify  -> drop, then create

New NOT NULL columns are added as-is; existing rows are never back-filled.
When such a column has no default a TODO warning precedes the statement.

Each method returns a list of blocks. A block is one statement, possibly
preceded by comment lines; the orchestrator separates blocks with a blank
line. A FormattingError from a builder replaces that block with a TODO
marker, so the script stays valid SQL.
"""

from typing import Callable, List, Optional

from psycopg import sql

from core.contracts import IdentityMode
from core.errors import FormattingError
from core.logging import ComponentType, get_logger
from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    IndexDescriptor,
    TableDescriptor,
    TriggerDescriptor,
)
from core.schema.ddl_utils import (
    ColumnBuilder,
    CommentBuilder,
    ConstraintBuilder,
    FunctionBuilder,
    IndexBuilder,
    TableBuilder,
    TriggerBuilder,
)
from core.schema.formatting import (
    backup_name,
    format_data_type,
    format_default,
    format_type,
    generate_timestamp,
    normalize_schema_references,
    qualify,
    render,
    retarget_schema,
    todo,
)

logger = get_logger(__name__, ComponentType.POLICY)


class SafeMutationPolicy:
    """
    Renders diff decisions as DDL against the target schema.

    Args:
        target_schema: Schema the script alters
        source_schema: Schema the script brings the target in line with;
            names qualified with it are re-pointed at the target
        clock: Returns the timestamp used in backup and CHECK names; read
            once per policy so one script uses one timestamp
        backup_suffix: "backup" (live sync) or "dropped" (file sync)
    """

    def __init__(
        self,
        target_schema: str,
        source_schema: Optional[str] = None,
        clock: Callable[[], str] = generate_timestamp,
        backup_suffix: str = "backup",
    ):
        self.target_schema = target_schema
        self.source_schema = source_schema
        self.backup_suffix = backup_suffix
        self.timestamp = clock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def qualify(self, name: str) -> str:
        return qualify(self.target_schema, name)

    def backup(self, name: str) -> str:
        return backup_name(name, self.timestamp, self.backup_suffix)

    def _guard(self, what: str, build: Callable[[], List[str]]) -> List[str]:
        try:
            return build()
        except FormattingError as e:
            logger.warning(f"Cannot render {what}: {e.message}")
            return [todo(e.message)]

    def _reference_schema(self, constraint: ConstraintDescriptor) -> Optional[str]:
        # References into the source schema follow the table to the target
        if constraint.foreign_schema in (None, self.source_schema, self.target_schema):
            return self.target_schema
        return constraint.foreign_schema

    def _function_schema(self, trigger: TriggerDescriptor) -> Optional[str]:
        if trigger.function_schema in (None, self.source_schema, self.target_schema):
            return self.target_schema
        return trigger.function_schema

    def _describe_column(self, column: ColumnDescriptor) -> str:
        parts = [format_data_type(column)]
        if column.is_identity:
            parts.append(f"GENERATED {column.identity.value} AS IDENTITY")
        if not column.is_nullable:
            parts.append("NOT NULL")
        if column.default is not None:
            parts.append(f"DEFAULT {column.default}")
        return " ".join(parts)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def create_table(self, table: TableDescriptor) -> List[str]:
        def build():
            lines = [
                f"-- Create missing table {table.name}",
                TableBuilder.create(
                    self.qualify(table.name),
                    list(table.columns),
                    if_not_exists=True,
                    target_schema=self.target_schema,
                    source_schema=self.source_schema,
                ),
            ]
            if table.comment:
                lines.append(CommentBuilder.table(self.qualify(table.name), table.comment))
            return ["\n".join(lines)]

        return self._guard(f"table {table.name}", build)

    def drop_table(self, table: TableDescriptor) -> List[str]:
        backup = self.backup(table.name)
        return ["\n".join([
            f"-- Table {table.name} exists in {self.target_schema} but not in {self.source_schema}",
            "-- Renaming table to preserve data before manual drop",
            TableBuilder.rename(self.qualify(table.name), backup),
            todo(
                f"Manually drop table {self.target_schema}.{backup} "
                "after confirming data is no longer needed"
            ),
        ])]

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def add_column(self, column: ColumnDescriptor) -> List[str]:
        def build():
            lines = []
            if not column.is_nullable and column.default is None and not column.is_identity and not column.is_generated:
                lines.append(todo(
                    f"Column {column.table}.{column.name} is NOT NULL without a default; "
                    "this fails if the table already has rows"
                ))
            lines.append(TableBuilder.add_column(
                self.qualify(column.table), column, self.target_schema, self.source_schema
            ))
            if column.comment:
                lines.append(CommentBuilder.column(self.qualify(column.table), column.name, column.comment))
            return ["\n".join(lines)]

        return self._guard(f"column {column.table}.{column.name}", build)

    def drop_column(self, column: ColumnDescriptor) -> List[str]:
        backup = self.backup(column.name)
        return ["\n".join([
            f"-- Column {column.name} exists in {self.target_schema} but not in {self.source_schema}",
            "-- Renaming column to preserve data before manual drop",
            TableBuilder.rename_column(self.qualify(column.table), column.name, backup),
            todo(
                f"Manually drop column {self.target_schema}.{column.table}.{backup} "
                "after confirming data is no longer needed"
            ),
        ])]

    def modify_column(self, source: ColumnDescriptor, target: ColumnDescriptor) -> List[str]:
        """
        Bring a target column in line with the source column.

        Sub-clauses are combined into one ALTER TABLE, ordered TYPE,
        nullability, default, identity (a default must be dropped before
        identity is added, and identity needs NOT NULL first). Types are
        compared with schema qualifiers neutralized; a user-defined type of
        the source schema is emitted against the target schema.
        """
        lines = [
            f"-- Modifying column {source.table}.{source.name}",
            f"--   {self.source_schema}: {self._describe_column(source)}",
            f"--   {self.target_schema}: {self._describe_column(target)}",
        ]
        alter = sql.SQL("ALTER COLUMN {} ").format(sql.Identifier(source.name))
        clauses = []
        schemas = (self.source_schema, self.target_schema)

        if normalize_schema_references(format_type(source), schemas) != normalize_schema_references(
            format_type(target), schemas
        ):
            data_type = ColumnBuilder.data_type(source, True, self.source_schema, self.target_schema)
            clauses.append(sql.SQL("{}TYPE {}").format(alter, sql.SQL(data_type)))

        if source.is_nullable != target.is_nullable:
            action = "DROP" if source.is_nullable else "SET"
            clauses.append(sql.SQL("{}{} NOT NULL").format(alter, sql.SQL(action)))

        if normalize_schema_references(source.default, schemas) != normalize_schema_references(target.default, schemas):
            if source.default is not None:
                default = format_default(source.default, self.target_schema)
                clauses.append(sql.SQL("{}SET DEFAULT {}").format(alter, sql.SQL(default)))
            else:
                clauses.append(sql.SQL("{}DROP DEFAULT").format(alter))

        if source.identity != target.identity:
            if target.identity == IdentityMode.NONE:
                clauses.append(sql.SQL("{}ADD GENERATED {} AS IDENTITY").format(alter, sql.SQL(source.identity.value)))
            elif source.identity == IdentityMode.NONE:
                clauses.append(sql.SQL("{}DROP IDENTITY IF EXISTS").format(alter))
            else:
                clauses.append(sql.SQL("{}SET GENERATED {}").format(alter, sql.SQL(source.identity.value)))

        if normalize_schema_references(source.generation_expression, schemas) != normalize_schema_references(
            target.generation_expression, schemas
        ):
            lines.append(todo(
                f"Generation expression of {source.table}.{source.name} differs; "
                "recreate the column manually"
            ))

        if clauses:
            lines.append(TableBuilder.alter_column(self.qualify(source.table), [render(c) for c in clauses]))
        return ["\n".join(lines)]

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------

    def add_constraint(self, constraint: ConstraintDescriptor) -> List[str]:
        return self._guard(
            f"constraint {constraint.name} on {constraint.table}",
            lambda: [ConstraintBuilder.add(
                self.qualify(constraint.table),
                constraint,
                self._reference_schema(constraint),
                self.timestamp,
            )],
        )

    def drop_constraint(self, constraint: ConstraintDescriptor) -> List[str]:
        backup = self.backup(constraint.name)
        return ["\n".join([
            f"-- Constraint {constraint.name} on {constraint.table} exists in "
            f"{self.target_schema} but not in {self.source_schema}",
            ConstraintBuilder.rename(self.qualify(constraint.table), constraint.name, backup),
            todo(
                f"Manually drop constraint {backup} on {self.target_schema}.{constraint.table} "
                "after confirming it is no longer needed"
            ),
        ])]

    def modify_constraint(self, source: ConstraintDescriptor, target: ConstraintDescriptor) -> List[str]:
        return self.drop_constraint(target) + self.add_constraint(source)

    # ------------------------------------------------------------------
    # Routines
    # ------------------------------------------------------------------

    def create_function(self, function: FunctionDescriptor) -> List[str]:
        def build():
            qualified = self.qualify(function.name)
            body = retarget_schema(function.body, self.source_schema, self.target_schema)
            lines = [FunctionBuilder.create(function, qualified, body=body)]
            if function.comment:
                lines.append(CommentBuilder.function(function, qualified))
            return ["\n".join(lines)]

        return self._guard(f"{function.kind.value.lower()} {function.name}", build)

    def drop_function(self, function: FunctionDescriptor) -> List[str]:
        backup = self.backup(function.name)
        kind = function.kind.value.lower()
        return ["\n".join([
            f"-- {kind.capitalize()} {function.name} exists in {self.target_schema} but not in {self.source_schema}",
            FunctionBuilder.rename(function, self.qualify(function.name), backup),
            todo(
                f"Manually drop {kind} {self.target_schema}.{backup} "
                "after confirming it is no longer needed"
            ),
        ])]

    def modify_function(self, source: FunctionDescriptor, target: FunctionDescriptor) -> List[str]:
        return self.drop_function(target) + self.create_function(source)

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------

    def create_index(self, index: IndexDescriptor) -> List[str]:
        return self._guard(
            f"index {index.name}",
            lambda: [IndexBuilder.create(index, self.qualify(index.table))],
        )

    def drop_index(self, index: IndexDescriptor) -> List[str]:
        return [IndexBuilder.drop(self.qualify(index.name))]

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def create_trigger(self, trigger: TriggerDescriptor) -> List[str]:
        return self._guard(
            f"trigger {trigger.name} on {trigger.table}",
            lambda: [TriggerBuilder.create(
                trigger,
                self.qualify(trigger.table),
                self._function_schema(trigger),
            )],
        )

    def drop_trigger(self, trigger: TriggerDescriptor) -> List[str]:
        return [TriggerBuilder.drop(trigger, self.qualify(trigger.table))]

    def modify_trigger(self, source: TriggerDescriptor, target: TriggerDescriptor) -> List[str]:
        return self.drop_trigger(target) + self.create_trigger(source)


__all__ = ["SafeMutationPolicy"]
