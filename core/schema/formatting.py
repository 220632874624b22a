# ============================================================================
# IDENTIFIER & LITERAL FORMATTING
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Pure formatting functions
# PURPOSE: Quoting, type rendering with default elision, dollar quoting,
#          backup names and script banners
# CREATED: 17 OCT 2026
# EXPORTS: quote_identifier, escape_identifier, qualify, quote_literal,
#          format_type, format_data_type, parse_type_spec, format_default,
#          normalize_schema_references, wrap_function_body,
#          generate_timestamp, backup_name, section_header, script_header,
#          script_footer, file_header, file_footer, todo, render
# DEPENDENCIES: psycopg, re, time
# ============================================================================
"""
Identifier & Literal Formatting.

Stateless helpers shared by the DDL builders, the sync policy and the
generators. Nothing here touches a database or the filesystem.

Usage:
    from core.schema.formatting import quote_identifier, format_type

    quote_identifier("users")        # users
    quote_identifier("Order Items")  # "Order Items"
    format_type(column)              # character varying (length 255 elided)
"""

import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from psycopg import sql

from core.models.column import normalize_type_name

MAX_IDENTIFIER_LENGTH = 63

SIMPLE_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

RULE = "-- " + "=" * 43


# ============================================================================
# IDENTIFIERS & LITERALS
# ============================================================================

def quote_identifier(name: str) -> str:
    """
    Quote an identifier only when it is not a simple name.

    Args:
        name: Identifier

    Returns:
        Bare name if it matches [A-Za-z_][A-Za-z0-9_]*, otherwise the name
        in double quotes with internal quotes doubled
    """
    if SIMPLE_IDENTIFIER.match(name):
        return name
    return escape_identifier(name)


def escape_identifier(name: str) -> str:
    """Always double-quote an identifier."""
    return sql.Identifier(name).as_string(None)


def qualify(schema: Optional[str], name: str) -> str:
    """Schema-qualified identifier, e.g. target.users."""
    if not schema:
        return quote_identifier(name)
    return f"{quote_identifier(schema)}.{quote_identifier(name)}"


def quote_literal(value: Any) -> str:
    """
    Quote a literal for COMMENT ON; None becomes NULL.

    Text containing backslashes comes back as an E'...' string.
    """
    if value is None:
        return "NULL"
    return sql.Literal(str(value)).as_string(None).strip()


def render(statement: sql.Composable) -> str:
    """Statement text of a composed DDL statement."""
    return statement.as_string(None)


# ============================================================================
# TYPES
# ============================================================================

# Length that PostgreSQL tooling treats as implied when omitted
LENGTH_DEFAULTS: Dict[str, Optional[int]] = {
    "character varying": 255,
    "character": 1,
    "bit": 1,
    "bit varying": None,
}

PRECISION_TYPES = frozenset({"numeric"})

DATETIME_TYPES = frozenset({
    "timestamp without time zone",
    "timestamp with time zone",
    "time without time zone",
    "time with time zone",
    "interval",
})

DATETIME_DEFAULT_PRECISION = 6


def _split_array(data_type: str):
    suffix = ""
    while data_type.endswith("[]"):
        suffix += "[]"
        data_type = data_type[:-2]
    return data_type, suffix


def _render_type(column: Any, elide_defaults: bool) -> str:
    base, suffix = _split_array(normalize_type_name(column.data_type))

    if base in LENGTH_DEFAULTS:
        length = getattr(column, "character_maximum_length", None)
        if length is None or (elide_defaults and length == LENGTH_DEFAULTS[base]):
            return base + suffix
        return f"{base}({length}){suffix}"

    if base in PRECISION_TYPES:
        precision = getattr(column, "numeric_precision", None)
        scale = getattr(column, "numeric_scale", None)
        if precision is None:
            return base + suffix
        if scale is None:
            return f"{base}({precision}){suffix}"
        return f"{base}({precision},{scale}){suffix}"

    if base in DATETIME_TYPES:
        precision = getattr(column, "datetime_precision", None)
        if precision is None or precision == DATETIME_DEFAULT_PRECISION:
            return base + suffix
        head, _, tail = base.partition(" ")
        rendered = f"{head}({precision})"
        if tail:
            rendered += f" {tail}"
        return rendered + suffix

    return base + suffix


def format_type(column: Any) -> str:
    """
    Render a column type, eliding length/precision equal to the type default.

    VARCHAR 255 renders as "character varying"; VARCHAR 100 renders as
    "character varying(100)". Used for generated files and for change
    signatures so that restating a default is not a difference.
    """
    return _render_type(column, elide_defaults=True)


def format_data_type(column: Any) -> str:
    """Render a column type with every known length/precision spelled out."""
    return _render_type(column, elide_defaults=False)


_TYPE_MODIFIERS = re.compile(r"^(?P<head>[^(]*?)\s*\((?P<mods>[^)]*)\)\s*(?P<tail>.*)$")


def parse_type_spec(text: str) -> Dict[str, Any]:
    """
    Split a written type into name and modifiers.

    Args:
        text: Type as written, e.g. "varchar(100)", "numeric(10,2)",
              "timestamp(3) with time zone"

    Returns:
        Dict of ColumnDescriptor type fields
    """
    spec: Dict[str, Any] = {
        "data_type": normalize_type_name(text),
        "character_maximum_length": None,
        "numeric_precision": None,
        "numeric_scale": None,
        "datetime_precision": None,
    }
    match = _TYPE_MODIFIERS.match(text.strip())
    if not match:
        return spec

    name = normalize_type_name(f"{match.group('head')} {match.group('tail')}".strip())
    modifiers = [int(m) for m in match.group("mods").split(",") if m.strip().isdigit()]
    spec["data_type"] = name
    base, _ = _split_array(name)

    if not modifiers:
        return spec
    if base in LENGTH_DEFAULTS:
        spec["character_maximum_length"] = modifiers[0]
    elif base in PRECISION_TYPES:
        spec["numeric_precision"] = modifiers[0]
        if len(modifiers) > 1:
            spec["numeric_scale"] = modifiers[1]
    elif base in DATETIME_TYPES:
        spec["datetime_precision"] = modifiers[0]
    return spec


# ============================================================================
# DEFAULTS & BODIES
# ============================================================================

_NEXTVAL = re.compile(
    r"nextval\('(?:(?P<schema>\"?[\w$]+\"?)\.)?(?P<sequence>\"?[\w$]+\"?)'(?P<cast>::regclass)?\)",
    re.IGNORECASE,
)


def format_default(default: Optional[str], target_schema: Optional[str] = None) -> Optional[str]:
    """
    Prepare a column default for emission.

    Schema-qualified nextval() references are re-pointed at the target
    schema so the new column draws from the target's sequence.
    """
    if default is None:
        return None
    text = default.strip()
    if not target_schema:
        return text

    def _retarget(match):
        if not match.group("schema"):
            return match.group(0)
        cast = match.group("cast") or ""
        return f"nextval('{quote_identifier(target_schema)}.{match.group('sequence')}'{cast})"

    return _NEXTVAL.sub(_retarget, text)


def sequence_names_in_default(default: Optional[str]) -> List[str]:
    """Sequence names referenced by nextval() in a default expression."""
    if not default:
        return []
    return [m.group("sequence").strip('"') for m in _NEXTVAL.finditer(default)]


def normalize_schema_references(
    text: Optional[str],
    schemas: Iterable[Optional[str]],
    placeholder: str = "SCHEMA",
) -> str:
    """
    Replace schema-qualifier tokens with a placeholder and collapse whitespace.

    Lets bodies and defaults from two schemas compare equal when they differ
    only in the schema they qualify names with.
    """
    if not text:
        return ""
    result = text
    for schema in sorted({s for s in schemas if s}, key=len, reverse=True):
        pattern = re.compile(r'(?<![\w$"])"?' + re.escape(schema) + r'"?\.', re.IGNORECASE)
        result = pattern.sub(placeholder + ".", result)
    return " ".join(result.split())


def retarget_schema(text: Optional[str], source_schema: Optional[str], target_schema: Optional[str]) -> Optional[str]:
    """Re-qualify names written against the source schema with the target schema."""
    if not text or not source_schema or not target_schema or source_schema == target_schema:
        return text
    pattern = re.compile(r'(?<![\w$"])"?' + re.escape(source_schema) + r'"?\.')
    return pattern.sub(lambda _: quote_identifier(target_schema) + ".", text)


_DOLLAR_TAG = re.compile(r"^(\$[A-Za-z_0-9]*\$)")


def wrap_function_body(body: str) -> str:
    """
    Dollar-quote a routine body exactly once.

    Trailing semicolons are trimmed. A body that is already dollar-quoted
    keeps its quoting; a body containing $$ gets a $body$ tag instead.
    """
    text = body.strip()
    while text.endswith(";"):
        text = text[:-1].rstrip()

    match = _DOLLAR_TAG.match(text)
    if match:
        tag = match.group(1)
        if len(text) >= 2 * len(tag) and text.endswith(tag):
            return text

    tag = "$$"
    counter = 0
    while tag in text:
        tag = f"$body{counter or ''}$"
        counter += 1
    return f"{tag}\n{text}\n{tag}"


# ============================================================================
# NAMES & TIMESTAMPS
# ============================================================================

def generate_timestamp() -> str:
    """Milliseconds since the epoch, as used in backup and CHECK names."""
    return str(int(time.time() * 1000))


def generated_at() -> str:
    """ISO-8601 UTC timestamp for script headers."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def backup_name(name: str, timestamp: str, suffix: str = "backup") -> str:
    """
    Name an object is renamed to instead of being dropped.

    Args:
        name: Original object name
        timestamp: Timestamp string
        suffix: "backup" for sync, "dropped" for generated file sets

    Returns:
        {name}_{suffix}_{timestamp}, with the name part shortened so the
        result fits PostgreSQL's identifier limit
    """
    tail = f"_{suffix}_{timestamp}"
    head = name[: max(1, MAX_IDENTIFIER_LENGTH - len(tail))]
    return head + tail


# ============================================================================
# BANNERS
# ============================================================================

def section_header(title: str) -> List[str]:
    """Three-line section banner."""
    return [RULE, f"-- {title}", RULE]


def script_header(source_schema: str, target_schema: str, generated: Optional[str] = None) -> List[str]:
    """Banner opening a sync script."""
    return [
        RULE,
        "-- Schema Sync Script",
        f"-- Source Schema: {source_schema}",
        f"-- Target Schema: {target_schema}",
        f"-- Generated: {generated or generated_at()}",
        RULE,
    ]


def script_footer() -> List[str]:
    """Banner closing a sync script."""
    return ["", RULE, "-- END OF SCHEMA SYNC SCRIPT", RULE]


def file_header(
    title: str,
    schema: str,
    database: Optional[str] = None,
    generated: Optional[str] = None,
) -> List[str]:
    """Banner opening a generated schema/procs/triggers file."""
    lines = [RULE, f"-- {title}", f"-- Schema: {schema}"]
    if database:
        lines.append(f"-- Database: {database}")
    lines.append(f"-- Generated: {generated or generated_at()}")
    lines.append(RULE)
    return lines


def file_footer(title: str) -> List[str]:
    """Banner closing a generated file."""
    return ["", RULE, f"-- End of {title}", RULE]


def todo(message: str) -> str:
    """Manual-review marker line."""
    return f"-- TODO: {message}"


__all__ = [
    "MAX_IDENTIFIER_LENGTH",
    "RULE",
    "quote_identifier",
    "escape_identifier",
    "qualify",
    "quote_literal",
    "render",
    "format_type",
    "format_data_type",
    "parse_type_spec",
    "format_default",
    "sequence_names_in_default",
    "normalize_schema_references",
    "retarget_schema",
    "wrap_function_body",
    "generate_timestamp",
    "generated_at",
    "backup_name",
    "section_header",
    "script_header",
    "script_footer",
    "file_header",
    "file_footer",
    "todo",
]
