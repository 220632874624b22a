# ============================================================================
# TRIGGERS GENERATOR
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Generators - triggers.sql
# PURPOSE: Triggers of one schema, grouped by table
# CREATED: 17 OCT 2026
# ============================================================================
"""
Triggers Generator

One section per table (tables sorted by name, triggers by name). Every
trigger is a single CREATE TRIGGER with its events joined by OR.
"""

from collections import defaultdict
from typing import Dict, List

from core.logging import ComponentType, get_logger
from core.models import TriggerDescriptor
from core.schema.ddl_utils import TriggerBuilder
from core.schema.formatting import qualify, section_header
from core.validation import MAX_IDENTIFIER_LENGTH, ValidationResult, check_object_count, validate_identifier
from generators.base import BaseGenerator, GeneratedFile

logger = get_logger(__name__, ComponentType.GENERATOR)


class TriggersGenerator(BaseGenerator):
    name = "Triggers Generator"
    title = "Triggers"

    def should_skip(self) -> bool:
        return self.options.schema_only or self.options.procs_only

    async def validate(self) -> ValidationResult:
        result = await super().validate()
        if not result.valid:
            return result
        triggers = await self.source.list_triggers()
        result.merge(check_object_count(len(triggers), "triggers", self.schema, required=False))
        for trigger in triggers:
            result.merge(validate_identifier(trigger.table, "table"))
            # Trigger names may be generated, so only the length is enforced
            if len(trigger.name) > MAX_IDENTIFIER_LENGTH:
                result.add_error(
                    f"Trigger name '{trigger.name}' exceeds {MAX_IDENTIFIER_LENGTH} characters",
                    field="trigger",
                    value=trigger.name,
                )
        return result

    async def generate(self) -> List[GeneratedFile]:
        triggers = await self.source.list_triggers()
        by_table: Dict[str, List[TriggerDescriptor]] = defaultdict(list)
        for trigger in triggers:
            by_table[trigger.table].append(trigger)

        lines = self.header()
        for table in sorted(by_table):
            lines.extend(section_header(f"TRIGGERS FOR TABLE: {table}"))
            for trigger in sorted(by_table[table], key=lambda t: t.name):
                lines.append(f"-- Trigger: {trigger.name}")
                lines.append(TriggerBuilder.create(
                    trigger,
                    qualify(self.schema, table),
                    trigger.function_schema or self.schema,
                ))
                lines.append("")
        if not triggers:
            lines.append(f"-- No triggers in schema {self.schema}")
        lines.extend(self.footer())

        logger.info(f"Rendered {len(triggers)} triggers on {len(by_table)} tables")
        return [GeneratedFile(self.defaults.triggers_file, "\n".join(lines) + "\n")]


__all__ = ["TriggersGenerator"]
