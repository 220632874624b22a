# ============================================================================
# GENERATED FILE METADATA SOURCE
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Infrastructure - File-set metadata source
# PURPOSE: Pattern extraction over schema.sql / procs.sql / triggers.sql
# CREATED: 17 OCT 2026
# ============================================================================
"""
Generated File Metadata Source

Reads a directory previously produced by `gen` (or hand-written in the
same shape) and extracts descriptors:

    schema.sql    CREATE SCHEMA / SEQUENCE / TABLE, ALTER TABLE ADD
                  CONSTRAINT, CREATE INDEX, COMMENT ON TABLE/COLUMN
    procs.sql     CREATE [OR REPLACE] FUNCTION | PROCEDURE
    triggers.sql  CREATE [OR REPLACE] TRIGGER

Missing files are treated as empty; a missing directory is an
AcquisitionError. Files are parsed once per source instance.

Usage:
    source = FileMetadataSource("./output/dev")
    tables = await source.list_tables()
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.config import GeneratorDefaults
from core.contracts import ConstraintKind
from core.errors import AcquisitionError, error_context
from core.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    IndexDescriptor,
    SequenceDescriptor,
    TableDescriptor,
    TriggerDescriptor,
)
from core.models.column import CANONICAL_TYPES, TYPE_ALIASES
from core.schema.formatting import parse_type_spec
from infrastructure.metadata_source import MetadataSource, assemble_tables
from infrastructure.sql_text import (
    QUALIFIED_NAME,
    extract_parenthesized,
    find_top_level_keyword,
    parse_index_definition,
    split_qualified_name,
    split_statements,
    split_top_level,
    unquote_identifier,
    unquote_literal,
)

logger = logging.getLogger(__name__)


# ============================================================================
# STATEMENT PATTERNS
# ============================================================================

_FLAGS = re.IGNORECASE | re.DOTALL

_CREATE_SCHEMA = re.compile(rf"^CREATE\s+SCHEMA\s+(?:IF\s+NOT\s+EXISTS\s+)?(?P<name>{QUALIFIED_NAME})", _FLAGS)
_CREATE_SEQUENCE = re.compile(
    rf"^CREATE\s+(?:TEMP\w*\s+|UNLOGGED\s+)?SEQUENCE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?P<name>{QUALIFIED_NAME})(?P<options>.*)$",
    _FLAGS,
)
_CREATE_TABLE = re.compile(
    rf"^CREATE\s+(?:UNLOGGED\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?P<name>{QUALIFIED_NAME})\s*\(",
    _FLAGS,
)
_ADD_CONSTRAINT = re.compile(
    rf"^ALTER\s+TABLE\s+(?:IF\s+EXISTS\s+)?(?:ONLY\s+)?(?P<table>{QUALIFIED_NAME})\s+"
    r"ADD\s+CONSTRAINT\s+(?P<name>\"(?:[^\"]|\"\")+\"|[\w$]+)\s+(?P<body>.*)$",
    _FLAGS,
)
_COMMENT_ON = re.compile(
    rf"^COMMENT\s+ON\s+(?P<kind>TABLE|COLUMN)\s+(?P<target>{QUALIFIED_NAME}(?:\s*\.\s*(?:\"(?:[^\"]|\"\")+\"|[\w$]+))?)"
    r"\s+IS\s+(?P<value>.*)$",
    _FLAGS,
)
_COMMENT_ON_ROUTINE = re.compile(
    rf"^COMMENT\s+ON\s+(?:FUNCTION|PROCEDURE)\s+(?P<name>{QUALIFIED_NAME})\s*\([^)]*\)\s+IS\s+(?P<value>.*)$",
    _FLAGS,
)
_CREATE_ROUTINE = re.compile(
    rf"^CREATE\s+(?:OR\s+REPLACE\s+)?(?P<kind>FUNCTION|PROCEDURE)\s+(?P<name>{QUALIFIED_NAME})\s*\(",
    _FLAGS,
)
_CREATE_TRIGGER = re.compile(
    r"^CREATE\s+(?:OR\s+REPLACE\s+)?(?:CONSTRAINT\s+)?TRIGGER\s+(?P<name>\"(?:[^\"]|\"\")+\"|[\w$]+)\s+"
    r"(?P<timing>BEFORE|AFTER|INSTEAD\s+OF)\s+(?P<events>.+?)\s+ON\s+"
    rf"(?P<table>{QUALIFIED_NAME})(?P<rest>.*)$",
    _FLAGS,
)

_RULE = r"(NO\s+ACTION|RESTRICT|CASCADE|SET\s+NULL|SET\s+DEFAULT)"
_ON_UPDATE = re.compile(rf"\bON\s+UPDATE\s+{_RULE}", re.IGNORECASE)
_ON_DELETE = re.compile(rf"\bON\s+DELETE\s+{_RULE}", re.IGNORECASE)
_REFERENCES = re.compile(rf"REFERENCES\s+(?P<table>{QUALIFIED_NAME})\s*", re.IGNORECASE)

_DOLLAR_BODY = re.compile(r"\bAS\s+(?P<tag>\$(?:[A-Za-z_][A-Za-z_0-9]*)?\$)(?P<body>.*?)(?P=tag)", re.DOTALL | re.IGNORECASE)
_QUOTED_BODY = re.compile(r"\bAS\s+'(?P<body>(?:[^']|'')*)'", re.DOTALL | re.IGNORECASE)

_ROUTINE_CLAUSES = [
    "LANGUAGE", "AS", "IMMUTABLE", "STABLE", "VOLATILE", "SECURITY", "STRICT",
    "CALLED ON NULL INPUT", "RETURNS NULL ON NULL INPUT", "COST", "ROWS",
    "PARALLEL", "LEAKPROOF", "NOT LEAKPROOF", "WINDOW", "SET", "SUPPORT",
    "EXTERNAL SECURITY", "TRANSFORM",
]

_COLUMN_KEYWORDS = [
    "NOT NULL", "NULL", "DEFAULT", "GENERATED", "PRIMARY KEY", "UNIQUE",
    "REFERENCES", "CHECK", "CONSTRAINT", "COLLATE",
]

_TABLE_CONSTRAINT_START = re.compile(r"^(CONSTRAINT|PRIMARY\s+KEY|UNIQUE|FOREIGN\s+KEY|CHECK|EXCLUDE)\b", re.IGNORECASE)


# ============================================================================
# PARSED STATE
# ============================================================================

@dataclass
class ParsedFileSet:
    """Raw values collected from one file set before descriptors are built."""
    schemas: List[str] = field(default_factory=list)
    tables: List[Tuple[str, Optional[str]]] = field(default_factory=list)
    columns: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    table_comments: Dict[str, str] = field(default_factory=dict)
    column_comments: Dict[Tuple[str, str], str] = field(default_factory=dict)
    routine_comments: Dict[str, str] = field(default_factory=dict)
    constraints: List[Dict[str, Any]] = field(default_factory=list)
    indexes: List[Dict[str, Any]] = field(default_factory=list)
    sequences: List[Dict[str, Any]] = field(default_factory=list)
    functions: List[Dict[str, Any]] = field(default_factory=list)
    triggers: List[Dict[str, Any]] = field(default_factory=list)
    qualifiers: List[str] = field(default_factory=list)

    def note_schema(self, schema: Optional[str]) -> None:
        if schema:
            self.qualifiers.append(schema)


# ============================================================================
# CLAUSE PARSERS
# ============================================================================

def parse_constraint_body(table: str, name: str, body: str) -> Optional[Dict[str, Any]]:
    """
    Parse the part of a constraint after its name.

    Args:
        table: Owning table
        name: Constraint name ("" when unnamed)
        body: e.g. "FOREIGN KEY (a) REFERENCES s.t(id) ON DELETE CASCADE"

    Returns:
        ConstraintDescriptor fields, or None if the kind is not recognized
    """
    text = body.strip()
    upper = text.upper()
    data: Dict[str, Any] = {"table": table, "name": name}

    def columns_after(keyword_length: int) -> Tuple[List[str], int]:
        start = text.index("(", keyword_length)
        inner, end = extract_parenthesized(text, start)
        return [unquote_identifier(c) for c in split_top_level(inner)], end

    if upper.startswith("PRIMARY KEY"):
        data["kind"] = ConstraintKind.PRIMARY_KEY
        data["columns"], _ = columns_after(len("PRIMARY KEY"))
    elif upper.startswith("UNIQUE"):
        data["kind"] = ConstraintKind.UNIQUE
        data["columns"], _ = columns_after(len("UNIQUE"))
    elif upper.startswith("FOREIGN KEY"):
        data["kind"] = ConstraintKind.FOREIGN_KEY
        data["columns"], end = columns_after(len("FOREIGN KEY"))
        rest = text[end:]
        reference = _REFERENCES.search(rest)
        if reference:
            schema, foreign_table = split_qualified_name(reference.group("table"))
            data["foreign_schema"] = schema
            data["foreign_table"] = foreign_table
            tail = rest[reference.end():]
            if tail.startswith("("):
                inner, _ = extract_parenthesized(tail, 0)
                data["foreign_columns"] = [unquote_identifier(c) for c in split_top_level(inner)]
        update = _ON_UPDATE.search(rest)
        delete = _ON_DELETE.search(rest)
        if update:
            data["update_rule"] = update.group(1)
        if delete:
            data["delete_rule"] = delete.group(1)
        data["deferrable"] = bool(re.search(r"(?<!NOT )\bDEFERRABLE\b", rest, re.IGNORECASE))
        data["initially_deferred"] = bool(re.search(r"\bINITIALLY\s+DEFERRED\b", rest, re.IGNORECASE))
    elif upper.startswith("CHECK"):
        data["kind"] = ConstraintKind.CHECK
        start = text.index("(")
        inner, _ = extract_parenthesized(text, start)
        data["check_clause"] = f"({inner.strip()})"
    elif upper.startswith("EXCLUDE"):
        data["kind"] = ConstraintKind.EXCLUDE
        data["definition"] = text
    else:
        return None
    return data


def _split_default(text: str) -> Tuple[str, Optional[str]]:
    position, keyword = find_top_level_keyword(text, ["DEFAULT"])
    if position < 0:
        equals = re.search(r"\s=\s", text)
        if not equals:
            return text.strip(), None
        return text[:equals.start()].strip(), text[equals.end():].strip()
    return text[:position].strip(), text[position + len(keyword):].strip()


def _is_type_only(text: str) -> bool:
    base = " ".join(text.lower().split())
    base = re.sub(r"\(.*\)", "", base).replace("[]", "").strip()
    return base in CANONICAL_TYPES or base in TYPE_ALIASES


def parse_parameter(text: str) -> Dict[str, Any]:
    """Parse "[MODE] [name] type [DEFAULT expr]" into FunctionParameter fields."""
    head, default = _split_default(text)
    tokens = head.split(None, 1)
    mode = "IN"
    if tokens and tokens[0].upper() in ("IN", "OUT", "INOUT", "VARIADIC"):
        mode = tokens[0].upper()
        head = tokens[1] if len(tokens) > 1 else ""

    name = None
    data_type = head.strip()
    parts = data_type.split(None, 1)
    if len(parts) == 2 and not _is_type_only(data_type):
        name = unquote_identifier(parts[0])
        data_type = parts[1].strip()
    return {"name": name, "data_type": data_type, "mode": mode, "default": default}


def _clause_value(header: str, keyword: str) -> Optional[str]:
    """Text following a top-level routine clause keyword, up to the next clause."""
    position, matched = find_top_level_keyword(header, [keyword])
    if position < 0:
        return None
    start = position + len(matched)
    others = [k for k in _ROUTINE_CLAUSES + ["RETURNS"] if k != keyword]
    end, _ = find_top_level_keyword(header, others, start)
    value = header[start:] if end < 0 else header[start:end]
    return value.strip() or None


def parse_column_definition(table: str, text: str, position: int) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Parse one column definition from a CREATE TABLE body.

    Returns:
        (ColumnDescriptor fields, inline constraint fields)
    """
    match = re.match(r'\s*("(?:[^"]|"")+"|[^\s]+)\s+(.*)$', text, re.DOTALL)
    if not match:
        raise ValueError(f"Unrecognized column definition in {table}: {text}")
    name = unquote_identifier(match.group(1))
    rest = match.group(2).strip()

    keyword_at, _ = find_top_level_keyword(rest, _COLUMN_KEYWORDS)
    type_text = rest if keyword_at < 0 else rest[:keyword_at]
    modifiers = "" if keyword_at < 0 else rest[keyword_at:]

    column: Dict[str, Any] = {"table": table, "name": name, "ordinal_position": position}
    column.update(parse_type_spec(type_text.strip()))
    column["is_nullable"] = not re.search(r"\bNOT\s+NULL\b", modifiers, re.IGNORECASE)

    identity = re.search(r"\bGENERATED\s+(ALWAYS|BY\s+DEFAULT)\s+AS\s+IDENTITY\b", modifiers, re.IGNORECASE)
    if identity:
        column["identity"] = identity.group(1)
    else:
        generated = re.search(r"\bGENERATED\s+ALWAYS\s+AS\s*\(", modifiers, re.IGNORECASE)
        if generated:
            inner, _ = extract_parenthesized(modifiers, generated.end() - 1)
            column["generation_expression"] = inner.strip()

    default_at, _ = find_top_level_keyword(modifiers, ["DEFAULT"])
    if default_at >= 0 and not identity:
        start = default_at + len("DEFAULT")
        end, _ = find_top_level_keyword(
            modifiers, ["NOT NULL", "NULL", "GENERATED", "PRIMARY KEY", "UNIQUE", "REFERENCES", "CHECK", "CONSTRAINT"], start
        )
        column["default"] = (modifiers[start:] if end < 0 else modifiers[start:end]).strip()

    inline: List[Dict[str, Any]] = []
    if re.search(r"\bPRIMARY\s+KEY\b", modifiers, re.IGNORECASE):
        inline.append({"table": table, "name": "", "kind": ConstraintKind.PRIMARY_KEY, "columns": [name]})
    if re.search(r"(?<!NULLS NOT DISTINCT )\bUNIQUE\b", modifiers, re.IGNORECASE):
        inline.append({"table": table, "name": "", "kind": ConstraintKind.UNIQUE, "columns": [name]})
    references_at, _ = find_top_level_keyword(modifiers, ["REFERENCES"])
    if references_at >= 0:
        parsed = parse_constraint_body(table, "", f"FOREIGN KEY ({match.group(1)}) {modifiers[references_at:]}")
        if parsed:
            inline.append(parsed)
    return column, inline


# ============================================================================
# FILE METADATA SOURCE
# ============================================================================

class FileMetadataSource(MetadataSource):
    """
    Metadata source over a generated file set.

    Args:
        directory: Directory holding schema.sql / procs.sql / triggers.sql
        schema: Schema name; inferred from CREATE SCHEMA or qualified names
            when omitted (falls back to "public")
    """

    def __init__(
        self,
        directory: str,
        schema: Optional[str] = None,
        defaults: Optional[GeneratorDefaults] = None,
    ):
        super().__init__(schema or "")
        self.directory = Path(directory)
        self.defaults = defaults or GeneratorDefaults()
        self._explicit_schema = schema
        self._parsed: Optional[ParsedFileSet] = None

    def describe(self) -> str:
        return f"files:{self.directory}"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read(self, filename: str) -> str:
        path = self.directory / filename
        if not path.exists():
            logger.info(f"{path} not found, treating as empty")
            return ""
        with error_context(f"read {filename}", str(self.directory)):
            return path.read_text(encoding="utf-8")

    async def _load(self) -> ParsedFileSet:
        if self._parsed is not None:
            return self._parsed
        if not self.directory.is_dir():
            raise AcquisitionError(
                f"Directory not found: {self.directory}",
                source=str(self.directory),
                operation="read file set",
            )

        parsed = ParsedFileSet()
        for filename in (self.defaults.schema_file, self.defaults.procs_file, self.defaults.triggers_file):
            text = self._read(filename)
            with error_context(f"parse {filename}", str(self.directory)):
                for statement in split_statements(text):
                    self._parse_statement(statement, parsed)

        if not self._explicit_schema:
            if parsed.schemas:
                self.schema = parsed.schemas[0]
            elif parsed.qualifiers:
                self.schema = max(set(parsed.qualifiers), key=parsed.qualifiers.count)
            else:
                self.schema = "public"

        logger.info(
            f"Parsed {self.directory}: {len(parsed.tables)} tables, "
            f"{len(parsed.functions)} routines, {len(parsed.triggers)} triggers"
        )
        self._parsed = parsed
        return parsed

    async def resolve_schema(self) -> str:
        """Load the files (if needed) and return the inferred schema name."""
        await self._load()
        return self.schema

    def _parse_statement(self, statement: str, parsed: ParsedFileSet) -> None:
        if match := _CREATE_SCHEMA.match(statement):
            _, name = split_qualified_name(match.group("name"))
            parsed.schemas.append(name)
        elif match := _CREATE_SEQUENCE.match(statement):
            self._parse_sequence(match, parsed)
        elif match := _CREATE_TABLE.match(statement):
            self._parse_table(statement, match, parsed)
        elif match := _ADD_CONSTRAINT.match(statement):
            schema, table = split_qualified_name(match.group("table"))
            parsed.note_schema(schema)
            data = parse_constraint_body(table, unquote_identifier(match.group("name")), match.group("body"))
            if data:
                parsed.constraints.append(data)
            else:
                logger.warning(f"Unrecognized constraint on {table}: {match.group('body')[:60]}")
        elif re.match(r"^CREATE\s+(UNIQUE\s+)?INDEX\b", statement, re.IGNORECASE):
            index = parse_index_definition(statement)
            if index:
                parsed.note_schema(index.pop("schema"))
                index["definition"] = statement
                parsed.indexes.append(index)
        elif match := _COMMENT_ON_ROUTINE.match(statement):
            _, name = split_qualified_name(match.group("name"))
            parsed.routine_comments[name] = unquote_literal(match.group("value"))
        elif match := _COMMENT_ON.match(statement):
            self._parse_comment(match, parsed)
        elif match := _CREATE_ROUTINE.match(statement):
            self._parse_routine(statement, match, parsed)
        elif match := _CREATE_TRIGGER.match(statement):
            self._parse_trigger(match, parsed)
        else:
            logger.debug(f"Skipping statement: {statement[:60]}")

    def _parse_sequence(self, match: re.Match, parsed: ParsedFileSet) -> None:
        schema, name = split_qualified_name(match.group("name"))
        parsed.note_schema(schema)
        options = match.group("options")
        data: Dict[str, Any] = {"name": name, "schema": schema}
        patterns = {
            "data_type": r"\bAS\s+(\w+)",
            "increment": r"\bINCREMENT\s+(?:BY\s+)?(-?\d+)",
            "minimum_value": r"\bMINVALUE\s+(-?\d+)",
            "maximum_value": r"\bMAXVALUE\s+(-?\d+)",
            "start_value": r"\bSTART\s+(?:WITH\s+)?(-?\d+)",
        }
        for key, pattern in patterns.items():
            found = re.search(pattern, options, re.IGNORECASE)
            if found:
                data[key] = found.group(1)
        data["cycle"] = bool(re.search(r"(?<!NO )\bCYCLE\b", options, re.IGNORECASE))
        parsed.sequences.append(data)

    def _parse_table(self, statement: str, match: re.Match, parsed: ParsedFileSet) -> None:
        schema, table = split_qualified_name(match.group("name"))
        parsed.note_schema(schema)
        body, _ = extract_parenthesized(statement, match.end() - 1)

        columns: List[Dict[str, Any]] = []
        for item in split_top_level(body):
            if _TABLE_CONSTRAINT_START.match(item):
                name = ""
                named = re.match(r'^CONSTRAINT\s+("(?:[^"]|"")+"|[\w$]+)\s+(.*)$', item, _FLAGS)
                if named:
                    name = unquote_identifier(named.group(1))
                    item = named.group(2)
                data = parse_constraint_body(table, name, item)
                if data:
                    parsed.constraints.append(data)
                continue
            column, inline = parse_column_definition(table, item, len(columns) + 1)
            columns.append(column)
            parsed.constraints.extend(inline)

        parsed.tables.append((table, None))
        parsed.columns[table] = columns

    def _parse_comment(self, match: re.Match, parsed: ParsedFileSet) -> None:
        value = unquote_literal(match.group("value"))
        parts = [unquote_identifier(p) for p in re.split(r'\.(?=(?:[^"]*"[^"]*")*[^"]*$)', match.group("target"))]
        if match.group("kind").upper() == "TABLE":
            parsed.table_comments[parts[-1]] = value
        elif len(parts) >= 2:
            parsed.column_comments[(parts[-2], parts[-1])] = value

    def _parse_routine(self, statement: str, match: re.Match, parsed: ParsedFileSet) -> None:
        schema, name = split_qualified_name(match.group("name"))
        parsed.note_schema(schema)
        params_text, end = extract_parenthesized(statement, match.end() - 1)
        rest = statement[end:]

        body_match = _DOLLAR_BODY.search(rest)
        if body_match:
            body = body_match.group("body").strip()
            header = rest[:body_match.start()] + " " + rest[body_match.end():]
        else:
            quoted = _QUOTED_BODY.search(rest)
            body = quoted.group("body").replace("''", "'").strip() if quoted else None
            header = rest if not quoted else rest[:quoted.start()] + " " + rest[quoted.end():]

        volatility = re.search(r"\b(IMMUTABLE|STABLE|VOLATILE)\b", header, re.IGNORECASE)
        security = re.search(r"\bSECURITY\s+(DEFINER|INVOKER)\b", header, re.IGNORECASE)
        language = _clause_value(header, "LANGUAGE")

        parsed.functions.append({
            "name": name,
            "schema": schema,
            "kind": match.group("kind").upper(),
            "parameters": [parse_parameter(p) for p in split_top_level(params_text)],
            "return_type": _clause_value(header, "RETURNS"),
            "language": language.strip("'\"") if language else None,
            "body": body,
            "volatility": volatility.group(1).upper() if volatility else None,
            "security": security.group(1).upper() if security else None,
        })

    def _parse_trigger(self, match: re.Match, parsed: ParsedFileSet) -> None:
        schema, table = split_qualified_name(match.group("table"))
        parsed.note_schema(schema)
        rest = match.group("rest")

        events = []
        for part in re.split(r"\s+OR\s+", match.group("events"), flags=re.IGNORECASE):
            event = part.strip().split()[0].upper() if part.strip() else ""
            if event:
                events.append(event)

        orientation = re.search(r"\bFOR\s+(?:EACH\s+)?(ROW|STATEMENT)\b", rest, re.IGNORECASE)
        condition = None
        when_at, _ = find_top_level_keyword(rest, ["WHEN"])
        if when_at >= 0:
            open_at = rest.index("(", when_at)
            condition, _ = extract_parenthesized(rest, open_at)
            condition = condition.strip()

        function_schema, function_name = None, None
        execute = re.search(
            rf"\bEXECUTE\s+(?:FUNCTION|PROCEDURE)\s+(?P<name>{QUALIFIED_NAME})\s*\(", rest, re.IGNORECASE
        )
        if execute:
            function_schema, function_name = split_qualified_name(execute.group("name"))

        parsed.triggers.append({
            "name": unquote_identifier(match.group("name")),
            "table": table,
            "schema": schema,
            "events": events,
            "timing": match.group("timing"),
            "orientation": orientation.group(1) if orientation else "ROW",
            "function_name": function_name,
            "function_schema": function_schema,
            "condition": condition,
        })

    # ------------------------------------------------------------------
    # Descriptor builders
    # ------------------------------------------------------------------

    def _column_descriptors(self, parsed: ParsedFileSet) -> List[ColumnDescriptor]:
        result = []
        for table, _ in parsed.tables:
            for data in parsed.columns.get(table, []):
                comment = parsed.column_comments.get((table, data["name"]))
                result.append(ColumnDescriptor.model_validate({**data, "comment": comment}))
        return result

    def _sequence_descriptors(self, parsed: ParsedFileSet) -> List[SequenceDescriptor]:
        return [
            SequenceDescriptor.model_validate({**data, "schema": self.schema})
            for data in parsed.sequences
        ]

    async def list_tables(self) -> List[TableDescriptor]:
        parsed = await self._load()
        with error_context("assemble tables", str(self.directory)):
            tables = [(name, parsed.table_comments.get(name)) for name, _ in parsed.tables]
            return assemble_tables(
                self.schema,
                tables,
                self._column_descriptors(parsed),
                [ConstraintDescriptor.model_validate(c) for c in parsed.constraints],
                [IndexDescriptor.model_validate(i) for i in parsed.indexes],
                self._sequence_descriptors(parsed),
            )

    async def list_columns(self) -> List[ColumnDescriptor]:
        parsed = await self._load()
        with error_context("build columns", str(self.directory)):
            return self._column_descriptors(parsed)

    async def list_constraints(self) -> List[ConstraintDescriptor]:
        parsed = await self._load()
        with error_context("build constraints", str(self.directory)):
            return [ConstraintDescriptor.model_validate(c) for c in parsed.constraints]

    async def list_indexes(self) -> List[IndexDescriptor]:
        parsed = await self._load()
        with error_context("build indexes", str(self.directory)):
            return [IndexDescriptor.model_validate(i) for i in parsed.indexes]

    async def list_functions(self) -> List[FunctionDescriptor]:
        parsed = await self._load()
        with error_context("build routines", str(self.directory)):
            return [
                FunctionDescriptor.model_validate({
                    **data,
                    "schema": self.schema,
                    "parameters": [FunctionParameter.model_validate(p) for p in data["parameters"]],
                    "comment": parsed.routine_comments.get(data["name"]),
                })
                for data in parsed.functions
            ]

    async def list_triggers(self) -> List[TriggerDescriptor]:
        parsed = await self._load()
        with error_context("build triggers", str(self.directory)):
            return [
                TriggerDescriptor.model_validate({**data, "schema": self.schema})
                for data in parsed.triggers
            ]

    async def list_sequences(self) -> List[SequenceDescriptor]:
        parsed = await self._load()
        with error_context("build sequences", str(self.directory)):
            return self._sequence_descriptors(parsed)


__all__ = [
    "FileMetadataSource",
    "ParsedFileSet",
    "parse_constraint_body",
    "parse_column_definition",
    "parse_parameter",
]
