# ============================================================================
# PROCS GENERATOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Generators - procs.sql
# PURPOSE: Functions and procedures of one schema
# CREATED: 17 OCT 2026
# ============================================================================
"""
Procs Generator

Functions first, then procedures, each group sorted by name. A routine
whose body cannot be read becomes a TODO line instead of a statement.
"""

from typing import List

from core.errors import FormattingError
from core.logging import ComponentType, get_logger
from core.models import FunctionDescriptor
from core.schema.ddl_utils import CommentBuilder, FunctionBuilder
from core.schema.formatting import qualify, section_header, todo
from core.validation import ValidationResult, check_object_count
from generators.base import BaseGenerator, GeneratedFile

logger = get_logger(__name__, ComponentType.GENERATOR)


class ProcsGenerator(BaseGenerator):
    name = "Procs Generator"
    title = "Stored Procedures and Functions"

    def should_skip(self) -> bool:
        return self.options.schema_only or self.options.triggers_only

    async def validate(self) -> ValidationResult:
        result = await super().validate()
        if result.valid:
            functions = await self.source.list_functions()
            result.merge(check_object_count(len(functions), "functions or procedures", self.schema, required=False))
        return result

    def _routine(self, function: FunctionDescriptor) -> List[str]:
        qualified = qualify(self.schema, function.name)
        lines = [f"-- {function.kind.value.capitalize()}: {function.name}"]
        try:
            lines.append(FunctionBuilder.create(function, qualified))
        except FormattingError as e:
            logger.warning(e.message)
            lines.append(todo(e.message))
            return lines + [""]
        if function.comment:
            lines.append(CommentBuilder.function(function, qualified))
        lines.append("")
        return lines

    async def generate(self) -> List[GeneratedFile]:
        routines = await self.source.list_functions()
        functions = sorted((r for r in routines if not r.is_procedure), key=lambda r: r.name)
        procedures = sorted((r for r in routines if r.is_procedure), key=lambda r: r.name)

        lines = self.header()
        if functions:
            lines.extend(section_header("FUNCTIONS"))
            for function in functions:
                lines.extend(self._routine(function))
        if procedures:
            lines.extend(section_header("PROCEDURES"))
            for procedure in procedures:
                lines.extend(self._routine(procedure))
        if not routines:
            lines.append(f"-- No functions or procedures in schema {self.schema}")
        lines.extend(self.footer())

        logger.info(f"Rendered {len(functions)} functions and {len(procedures)} procedures")
        return [GeneratedFile(self.defaults.procs_file, "\n".join(lines) + "\n")]


__all__ = ["ProcsGenerator"]
