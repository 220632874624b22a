# ============================================================================
# SCHEMA GENERATOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Generators - schema.sql
# PURPOSE: Tables, sequences, constraints and indexes of one schema
# CREATED: 17 OCT 2026
# ============================================================================
"""
Schema Generator

Layout of schema.sql:

    header, CREATE SCHEMA (non-public schemas)
    sequences (non-default options only)
    one section per table, referenced tables first:
        CREATE TABLE with elided default lengths
        COMMENT ON TABLE / COLUMN
        constraints (no NOT NULL, no self-references), PK first
        indexes that do not back a constraint
    self-referencing foreign keys, once every table exists
    footer
"""

from typing import Dict, List

from core.contracts import ConstraintKind
from core.errors import FormattingError
from core.logging import ComponentType, get_logger
from core.models import ConstraintDescriptor, TableDescriptor
from core.schema.ddl_utils import (
    CommentBuilder,
    ConstraintBuilder,
    IndexBuilder,
    SequenceBuilder,
    TableBuilder,
)
from core.schema.formatting import generate_timestamp, section_header, todo
from core.schema.sorting import (
    extract_all_sequences,
    extract_self_referencing_constraints,
    sort_by_dependency,
)
from core.validation import ValidationResult, check_object_count, validate_identifier
from generators.base import BaseGenerator, GeneratedFile

logger = get_logger(__name__, ComponentType.GENERATOR)


class SchemaGenerator(BaseGenerator):
    name = "Schema Generator"
    title = "Schema Definition"

    def should_skip(self) -> bool:
        return self.options.procs_only or self.options.triggers_only

    async def validate(self) -> ValidationResult:
        result = await super().validate()
        if not result.valid:
            return result
        tables = await self.source.list_tables()
        result.merge(check_object_count(len(tables), "tables", self.schema, required=True))
        for table in tables:
            result.merge(validate_identifier(table.name, "table"))
        logger.info(f"Found {len(tables)} tables in schema {self.schema}")
        return result

    def _constraint(self, table: TableDescriptor, constraint: ConstraintDescriptor, timestamp: str) -> str:
        try:
            return ConstraintBuilder.add(
                self.qualified(table.name),
                constraint,
                constraint.foreign_schema or self.schema,
                timestamp,
            )
        except FormattingError as e:
            logger.warning(f"Cannot render constraint on {table.name}: {e.message}")
            return todo(e.message)

    def _table_lines(self, table: TableDescriptor, timestamp: str) -> List[str]:
        qualified = self.qualified(table.name)
        lines = section_header(f"TABLE: {self.schema}.{table.name}")
        lines.append(TableBuilder.create(qualified, list(table.columns), explicit_types=False))

        if table.comment:
            lines.append(CommentBuilder.table(qualified, table.comment))
        for column in table.columns:
            if column.comment:
                lines.append(CommentBuilder.column(qualified, column.name, column.comment))

        emitted: Dict[str, ConstraintDescriptor] = {}
        for constraint in table.constraints:
            if constraint.kind == ConstraintKind.NOT_NULL or constraint.is_self_referencing:
                continue
            emitted.setdefault(ConstraintBuilder.name(constraint, timestamp), constraint)
        ordered = sorted(emitted.values(), key=lambda c: c.kind.emission_rank)
        if ordered:
            lines.append("")
            lines.extend(self._constraint(table, c, timestamp) for c in ordered)

        indexes = [i for i in table.indexes if not i.is_constraint_backed(table.constraints)]
        if indexes:
            lines.append("")
            for index in indexes:
                try:
                    lines.append(IndexBuilder.create(index, qualified))
                except FormattingError as e:
                    logger.warning(f"Cannot render index {index.name}: {e.message}")
                    lines.append(todo(e.message))
        lines.append("")
        return lines

    async def generate(self) -> List[GeneratedFile]:
        tables = await self.source.list_tables()
        timestamp = generate_timestamp()
        lines = self.header()

        sequences = extract_all_sequences(tables, await self.source.list_sequences())
        if sequences:
            lines.append("-- Sequences")
            lines.extend(SequenceBuilder.create(s, self.qualified(s.name)) for s in sequences)
            lines.append("")

        for table in sort_by_dependency(tables):
            lines.extend(self._table_lines(table, timestamp))

        by_name = {t.name: t for t in tables}
        seen = set()
        self_references = []
        for constraint in extract_self_referencing_constraints(tables):
            name = ConstraintBuilder.name(constraint, timestamp)
            if name not in seen:
                seen.add(name)
                self_references.append(constraint)
        if self_references:
            lines.append("-- Self-referencing constraints")
            lines.extend(self._constraint(by_name[c.table], c, timestamp) for c in self_references)
            lines.append("")

        lines.extend(self.footer())
        return [GeneratedFile(self.defaults.schema_file, "\n".join(lines) + "\n")]


__all__ = ["SchemaGenerator"]
