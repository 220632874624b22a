# ============================================================================
# DDL UTILITIES
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Builders for PostgreSQL DDL text
# PURPOSE: Column, table, constraint, index, sequence, routine, trigger and
#          comment builders shared by sync and generation, using psycopg.sql
# CREATED: 17 OCT 2026
# EXPORTS: ColumnBuilder, TableBuilder, ConstraintBuilder, IndexBuilder,
#          SequenceBuilder, FunctionBuilder, TriggerBuilder, CommentBuilder
# DEPENDENCIES: psycopg, core.models, core.schema.formatting
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

Statements are composed with psycopg.sql (sql.SQL templates, sql.Identifier
for always-quoted names) and rendered to text at the end of each builder:
the output is a script for human review, not something executed here.
Callers pass the already qualified object names so the same builders serve
the sync script (target.users) and generated files ("public"."users").

Builders raise FormattingError when a descriptor lacks what a clause
needs; callers turn that into a TODO marker.

Usage:
    from core.schema.ddl_utils import ConstraintBuilder, IndexBuilder

    stmt = ConstraintBuilder.add("target.orders", constraint, "target")
    stmt = IndexBuilder.create(index, "target.orders")
"""

from typing import Iterable, List, Optional

from psycopg import sql

from core.contracts import ConstraintKind, ParameterMode
from core.errors import FormattingError
from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    IndexDescriptor,
    SequenceDescriptor,
    TriggerDescriptor,
)
from core.models.constraint import NO_ACTION
from core.models.sequence import SEQUENCE_DEFAULTS
from core.schema.formatting import (
    format_data_type,
    format_default,
    format_type,
    qualify,
    quote_identifier,
    quote_literal,
    render,
    retarget_schema,
    wrap_function_body,
)
from core.schema.naming import synthesize_name


def _name(name: str) -> sql.SQL:
    """Identifier quoted only when it is not a simple name."""
    return sql.SQL(quote_identifier(name))


def _names(names: Iterable[str]) -> sql.Composed:
    return sql.SQL(", ").join(_name(n) for n in names)


def _is_parenthesized(expression: str) -> bool:
    """True when the opening parenthesis closes at the very end."""
    if not (expression.startswith("(") and expression.endswith(")")):
        return False
    depth = 0
    quoted = False
    for i, char in enumerate(expression):
        if char == "'":
            quoted = not quoted
        elif quoted:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and i != len(expression) - 1:
                return False
    return depth == 0


# ============================================================================
# COLUMN BUILDER
# ============================================================================

class ColumnBuilder:
    """Builder for column definitions."""

    @staticmethod
    def data_type(
        column: ColumnDescriptor,
        explicit_type: bool = True,
        source_schema: Optional[str] = None,
        target_schema: Optional[str] = None,
    ) -> str:
        """Column type, with user-defined types of the source schema re-pointed at the target."""
        data_type = format_data_type(column) if explicit_type else format_type(column)
        return retarget_schema(data_type, source_schema, target_schema)

    @staticmethod
    def definition(
        column: ColumnDescriptor,
        explicit_type: bool = True,
        target_schema: Optional[str] = None,
        source_schema: Optional[str] = None,
    ) -> str:
        """
        Render a column definition: "name" type [identity] [NOT NULL] [DEFAULT x].

        Args:
            column: Column descriptor
            explicit_type: Spell out default lengths (sync) or elide them (generation)
            target_schema: Re-point nextval() defaults and source-schema types at this schema
            source_schema: Schema the column was read from

        Returns:
            Column definition text
        """
        parts = [
            sql.Identifier(column.name),
            sql.SQL(ColumnBuilder.data_type(column, explicit_type, source_schema, target_schema)),
        ]

        if column.is_generated:
            parts.append(sql.SQL("GENERATED ALWAYS AS ({}) STORED").format(sql.SQL(column.generation_expression)))
        elif column.is_identity:
            parts.append(sql.SQL("GENERATED {} AS IDENTITY").format(sql.SQL(column.identity.value)))

        if not column.is_nullable:
            parts.append(sql.SQL("NOT NULL"))

        if column.default is not None and not column.is_identity and not column.is_generated:
            parts.append(sql.SQL("DEFAULT {}").format(sql.SQL(format_default(column.default, target_schema))))

        return render(sql.SQL(" ").join(parts))


# ============================================================================
# TABLE BUILDER
# ============================================================================

class TableBuilder:
    """Builder for CREATE TABLE / table rename statements."""

    @staticmethod
    def create(
        qualified_name: str,
        columns: List[ColumnDescriptor],
        if_not_exists: bool = False,
        explicit_types: bool = True,
        target_schema: Optional[str] = None,
        source_schema: Optional[str] = None,
    ) -> str:
        """CREATE TABLE with one column definition per line, in ordinal order."""
        ordered = sorted(columns, key=lambda c: c.ordinal_position)
        definitions = [
            sql.SQL(ColumnBuilder.definition(c, explicit_types, target_schema, source_schema))
            for c in ordered
        ]
        guard = sql.SQL("IF NOT EXISTS " if if_not_exists else "")
        if not definitions:
            return render(sql.SQL("CREATE TABLE {guard}{table} ();").format(
                guard=guard, table=sql.SQL(qualified_name)
            ))
        return render(sql.SQL("CREATE TABLE {guard}{table} (\n  {columns}\n);").format(
            guard=guard,
            table=sql.SQL(qualified_name),
            columns=sql.SQL(",\n  ").join(definitions),
        ))

    @staticmethod
    def rename(qualified_name: str, new_name: str) -> str:
        return render(sql.SQL("ALTER TABLE {table} RENAME TO {name};").format(
            table=sql.SQL(qualified_name), name=_name(new_name)
        ))

    @staticmethod
    def add_column(
        qualified_name: str,
        column: ColumnDescriptor,
        target_schema: Optional[str] = None,
        source_schema: Optional[str] = None,
    ) -> str:
        definition = ColumnBuilder.definition(column, True, target_schema, source_schema)
        return render(sql.SQL("ALTER TABLE {table} ADD COLUMN {definition};").format(
            table=sql.SQL(qualified_name), definition=sql.SQL(definition)
        ))

    @staticmethod
    def rename_column(qualified_name: str, column: str, new_name: str) -> str:
        return render(sql.SQL("ALTER TABLE {table} RENAME COLUMN {column} TO {name};").format(
            table=sql.SQL(qualified_name),
            column=sql.Identifier(column),
            name=_name(new_name),
        ))

    @staticmethod
    def alter_column(qualified_name: str, clauses: List[str]) -> str:
        """Combine ALTER COLUMN sub-clauses into a single statement."""
        return render(sql.SQL("ALTER TABLE {table}\n  {clauses};").format(
            table=sql.SQL(qualified_name),
            clauses=sql.SQL(",\n  ").join(sql.SQL(c) for c in clauses),
        ))


# ============================================================================
# CONSTRAINT BUILDER
# ============================================================================

class ConstraintBuilder:
    """Builder for table constraint statements."""

    @staticmethod
    def _column_list(constraint: ConstraintDescriptor) -> sql.Composed:
        if not constraint.columns:
            raise FormattingError(
                f"{constraint.kind.value} constraint {constraint.name} on {constraint.table} has no columns",
                object_name=constraint.name,
            )
        return _names(constraint.columns)

    @staticmethod
    def clause(constraint: ConstraintDescriptor, reference_schema: Optional[str] = None) -> str:
        """
        Render the constraint body (without the CONSTRAINT name prefix).

        Args:
            constraint: Constraint descriptor
            reference_schema: Schema of the referenced table for FOREIGN KEYs;
                falls back to the descriptor's own foreign schema

        Returns:
            Clause text, e.g. FOREIGN KEY (a) REFERENCES s.t(id) ON DELETE CASCADE

        Raises:
            FormattingError: If the descriptor lacks a required field
        """
        kind = constraint.kind

        if kind in (ConstraintKind.PRIMARY_KEY, ConstraintKind.UNIQUE):
            return render(sql.SQL("{kind} ({columns})").format(
                kind=sql.SQL(kind.value), columns=ConstraintBuilder._column_list(constraint)
            ))

        if kind == ConstraintKind.FOREIGN_KEY:
            if not constraint.has_reference:
                raise FormattingError(
                    f"Foreign key {constraint.name} on {constraint.table} is missing its reference table/column",
                    object_name=constraint.name,
                )
            parts = [sql.SQL("FOREIGN KEY ({columns}) REFERENCES {table}({foreign_columns})").format(
                columns=ConstraintBuilder._column_list(constraint),
                table=sql.SQL(qualify(reference_schema or constraint.foreign_schema, constraint.foreign_table)),
                foreign_columns=_names(constraint.foreign_columns),
            )]
            if constraint.update_rule != NO_ACTION:
                parts.append(sql.SQL("ON UPDATE {}").format(sql.SQL(constraint.update_rule)))
            if constraint.delete_rule != NO_ACTION:
                parts.append(sql.SQL("ON DELETE {}").format(sql.SQL(constraint.delete_rule)))
            if constraint.deferrable:
                parts.append(sql.SQL("DEFERRABLE"))
                if constraint.initially_deferred:
                    parts.append(sql.SQL("INITIALLY DEFERRED"))
            return render(sql.SQL(" ").join(parts))

        if kind == ConstraintKind.CHECK:
            if not constraint.check_clause:
                raise FormattingError(
                    f"Check constraint {constraint.name} on {constraint.table} has no check clause",
                    object_name=constraint.name,
                )
            expression = constraint.check_clause.strip()
            if expression.upper().startswith("CHECK"):
                expression = expression[5:].strip()
            if not _is_parenthesized(expression):
                expression = f"({expression})"
            return render(sql.SQL("CHECK {}").format(sql.SQL(expression)))

        if kind == ConstraintKind.EXCLUDE and constraint.definition:
            return constraint.definition.strip()

        raise FormattingError(
            f"{kind.value} constraint {constraint.name} on {constraint.table} cannot be rendered",
            object_name=constraint.name,
        )

    @staticmethod
    def name(constraint: ConstraintDescriptor, timestamp: Optional[str] = None) -> str:
        """Emitted name: the original when valid, otherwise a convention name."""
        return synthesize_name(
            constraint.name, constraint.kind, constraint.table, constraint.columns, timestamp
        )

    @staticmethod
    def add(
        qualified_table: str,
        constraint: ConstraintDescriptor,
        reference_schema: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> str:
        """ALTER TABLE ... ADD CONSTRAINT name clause;"""
        clause = ConstraintBuilder.clause(constraint, reference_schema)
        return render(sql.SQL("ALTER TABLE {table} ADD CONSTRAINT {name} {clause};").format(
            table=sql.SQL(qualified_table),
            name=_name(ConstraintBuilder.name(constraint, timestamp)),
            clause=sql.SQL(clause),
        ))

    @staticmethod
    def rename(qualified_table: str, name: str, new_name: str) -> str:
        return render(sql.SQL("ALTER TABLE {table} RENAME CONSTRAINT {name} TO {new_name};").format(
            table=sql.SQL(qualified_table), name=_name(name), new_name=_name(new_name)
        ))


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """Builder for index statements."""

    @staticmethod
    def create(index: IndexDescriptor, qualified_table: str, if_not_exists: bool = True) -> str:
        """
        CREATE [UNIQUE] INDEX [IF NOT EXISTS] name ON table [USING m] (cols) [WHERE p];

        Column entries are emitted as parsed (they may be expressions).
        """
        if not index.columns:
            raise FormattingError(
                f"Index {index.name} on {index.table} has no columns",
                object_name=index.name,
            )
        stmt = sql.SQL("CREATE {unique}INDEX {guard}{name} ON {table}{using} ({columns})").format(
            unique=sql.SQL("UNIQUE " if index.is_unique else ""),
            guard=sql.SQL("IF NOT EXISTS " if if_not_exists else ""),
            name=_name(index.name),
            table=sql.SQL(qualified_table),
            using=sql.SQL(" USING {}").format(sql.SQL(index.method)) if index.method != "btree" else sql.SQL(""),
            columns=sql.SQL(", ").join(sql.SQL(c) for c in index.columns),
        )
        if index.predicate:
            stmt = sql.SQL("{} WHERE {}").format(stmt, sql.SQL(index.predicate))
        return render(sql.SQL("{};").format(stmt))

    @staticmethod
    def drop(qualified_index: str) -> str:
        return render(sql.SQL("DROP INDEX IF EXISTS {};").format(sql.SQL(qualified_index)))


# ============================================================================
# SEQUENCE BUILDER
# ============================================================================

class SequenceBuilder:
    """Builder for CREATE SEQUENCE; only non-default options are rendered."""

    @staticmethod
    def create(sequence: SequenceDescriptor, qualified_name: str, if_not_exists: bool = True) -> str:
        options = []
        if sequence.data_type != SEQUENCE_DEFAULTS["data_type"]:
            options.append(sql.SQL("AS {}").format(sql.SQL(sequence.data_type)))
        if sequence.increment != SEQUENCE_DEFAULTS["increment"]:
            options.append(sql.SQL("INCREMENT BY {}").format(sql.SQL(str(sequence.increment))))
        if sequence.minimum_value is not None and sequence.minimum_value != SEQUENCE_DEFAULTS["minimum_value"]:
            options.append(sql.SQL("MINVALUE {}").format(sql.SQL(str(sequence.minimum_value))))
        if sequence.maximum_value is not None and sequence.maximum_value != SEQUENCE_DEFAULTS["maximum_value"]:
            options.append(sql.SQL("MAXVALUE {}").format(sql.SQL(str(sequence.maximum_value))))
        if sequence.start_value != SEQUENCE_DEFAULTS["start_value"]:
            options.append(sql.SQL("START WITH {}").format(sql.SQL(str(sequence.start_value))))
        if sequence.cycle:
            options.append(sql.SQL("CYCLE"))

        stmt = sql.SQL("CREATE SEQUENCE {guard}{name}").format(
            guard=sql.SQL("IF NOT EXISTS " if if_not_exists else ""),
            name=sql.SQL(qualified_name),
        )
        if options:
            stmt = sql.SQL("{}\n  {}").format(stmt, sql.SQL("\n  ").join(options))
        return render(sql.SQL("{};").format(stmt))


# ============================================================================
# FUNCTION BUILDER
# ============================================================================

class FunctionBuilder:
    """Builder for functions and procedures."""

    @staticmethod
    def parameter(param: FunctionParameter) -> str:
        """[MODE ]name type[ DEFAULT d]; IN is implied and omitted."""
        parts = []
        if param.mode != ParameterMode.IN:
            parts.append(sql.SQL(param.mode.value))
        if param.name:
            parts.append(_name(param.name))
        parts.append(sql.SQL(param.data_type))
        if param.default is not None:
            parts.append(sql.SQL("DEFAULT {}").format(sql.SQL(param.default)))
        return render(sql.SQL(" ").join(parts))

    @staticmethod
    def create(
        function: FunctionDescriptor,
        qualified_name: str,
        body: Optional[str] = None,
    ) -> str:
        """
        CREATE OR REPLACE FUNCTION|PROCEDURE from descriptor fields.

        Args:
            function: Routine descriptor
            qualified_name: Schema-qualified routine name
            body: Body override (e.g. re-targeted at another schema)

        Raises:
            FormattingError: If no body is available
        """
        text = body if body is not None else function.body
        if not text or not text.strip():
            raise FormattingError(
                f"Could not retrieve definition for {function.kind.value.lower()} {function.name}",
                object_name=function.name,
            )

        params = function.parameters
        if function.returns_table:
            params = tuple(p for p in params if p.mode == ParameterMode.IN)

        if params:
            signature = sql.SQL("{name}(\n  {params}\n)").format(
                name=sql.SQL(qualified_name),
                params=sql.SQL(",\n  ").join(sql.SQL(FunctionBuilder.parameter(p)) for p in params),
            )
        else:
            signature = sql.SQL("{}()").format(sql.SQL(qualified_name))

        lines = [sql.SQL("CREATE OR REPLACE {kind} {signature}").format(
            kind=sql.SQL(function.kind.value), signature=signature
        )]
        if not function.is_procedure:
            lines.append(sql.SQL("RETURNS {}").format(sql.SQL(function.return_type)))
        lines.append(sql.SQL("LANGUAGE {}").format(sql.SQL(function.language)))
        if not function.is_procedure:
            lines.append(sql.SQL(function.volatility.value))
        lines.append(sql.SQL("SECURITY {}").format(sql.SQL(function.security.value)))
        lines.append(sql.SQL("AS {};").format(sql.SQL(wrap_function_body(text))))
        return render(sql.SQL("\n").join(lines))

    @staticmethod
    def rename(function: FunctionDescriptor, qualified_name: str, new_name: str) -> str:
        return render(sql.SQL("ALTER {kind} {name}({arguments}) RENAME TO {new_name};").format(
            kind=sql.SQL(function.kind.value),
            name=sql.SQL(qualified_name),
            arguments=sql.SQL(function.argument_types),
            new_name=_name(new_name),
        ))


# ============================================================================
# TRIGGER BUILDER
# ============================================================================

class TriggerBuilder:
    """Builder for trigger statements."""

    @staticmethod
    def create(trigger: TriggerDescriptor, qualified_table: str, function_schema: Optional[str] = None) -> str:
        """CREATE TRIGGER with one clause per line."""
        lines = [
            sql.SQL("CREATE TRIGGER {}").format(_name(trigger.name)),
            sql.SQL("  {timing} {events}").format(
                timing=sql.SQL(trigger.timing.value), events=sql.SQL(trigger.event_clause)
            ),
            sql.SQL("  ON {}").format(sql.SQL(qualified_table)),
            sql.SQL("  FOR EACH {}").format(sql.SQL(trigger.orientation.value)),
        ]
        if trigger.condition:
            lines.append(sql.SQL("  WHEN ({})").format(sql.SQL(trigger.condition)))
        function = qualify(function_schema or trigger.function_schema, trigger.function_name)
        lines.append(sql.SQL("  EXECUTE FUNCTION {}();").format(sql.SQL(function)))
        return render(sql.SQL("\n").join(lines))

    @staticmethod
    def drop(trigger: TriggerDescriptor, qualified_table: str) -> str:
        return render(sql.SQL("DROP TRIGGER IF EXISTS {name} ON {table};").format(
            name=_name(trigger.name), table=sql.SQL(qualified_table)
        ))


# ============================================================================
# COMMENT BUILDER
# ============================================================================

class CommentBuilder:
    """Builder for COMMENT ON statements."""

    @staticmethod
    def table(qualified_table: str, comment: str) -> str:
        return render(sql.SQL("COMMENT ON TABLE {table} IS {comment};").format(
            table=sql.SQL(qualified_table), comment=sql.SQL(quote_literal(comment))
        ))

    @staticmethod
    def column(qualified_table: str, column: str, comment: str) -> str:
        return render(sql.SQL("COMMENT ON COLUMN {table}.{column} IS {comment};").format(
            table=sql.SQL(qualified_table),
            column=sql.Identifier(column),
            comment=sql.SQL(quote_literal(comment)),
        ))

    @staticmethod
    def function(function: FunctionDescriptor, qualified_name: str) -> str:
        return render(sql.SQL("COMMENT ON {kind} {name}({arguments}) IS {comment};").format(
            kind=sql.SQL(function.kind.value),
            name=sql.SQL(qualified_name),
            arguments=sql.SQL(function.argument_types),
            comment=sql.SQL(quote_literal(function.comment)),
        ))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ColumnBuilder",
    "TableBuilder",
    "ConstraintBuilder",
    "IndexBuilder",
    "SequenceBuilder",
    "FunctionBuilder",
    "TriggerBuilder",
    "CommentBuilder",
]
