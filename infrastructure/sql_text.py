# ============================================================================
# SQL TEXT SCANNING
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Infrastructure - Lightweight SQL text helpers
# PURPOSE: Statement splitting, balanced-paren extraction, name splitting and
#          CREATE INDEX parsing for the catalog and file adapters
# CREATED: 17 OCT 2026
# ============================================================================
"""
SQL Text Scanning

Just enough lexing to pull descriptors out of generated SQL: quotes,
dollar quotes, comments and nested parentheses are respected; nothing
else about SQL grammar is assumed.

Usage:
    from infrastructure.sql_text import split_statements, split_top_level

    for statement in split_statements(text):
        ...
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

DOLLAR_TAG = re.compile(r"\$(?:[A-Za-z_][A-Za-z_0-9]*)?\$")

IDENTIFIER = r'(?:"(?:[^"]|"")+"|[A-Za-z_][\w$]*)'
QUALIFIED_NAME = rf"{IDENTIFIER}(?:\s*\.\s*{IDENTIFIER})?"


# ============================================================================
# SCANNING PRIMITIVES
# ============================================================================

def _quoted_end(text: str, start: int, quote: str) -> int:
    """Index just past the closing quote; doubled quotes are escapes."""
    i = start + 1
    n = len(text)
    while i < n:
        if text[i] == quote:
            if i + 1 < n and text[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return n


def _skip_literal(text: str, i: int) -> Optional[int]:
    """If a quoted or dollar-quoted literal starts at i, return its end."""
    char = text[i]
    if char in ("'", '"'):
        return _quoted_end(text, i, char)
    if char == "$":
        match = DOLLAR_TAG.match(text, i)
        if match:
            tag = match.group(0)
            end = text.find(tag, match.end())
            return len(text) if end == -1 else end + len(tag)
    return None


def split_statements(text: str) -> List[str]:
    """
    Split a script into statements, dropping comments.

    Semicolons inside quotes, dollar-quoted bodies and comments do not
    terminate a statement. Returned statements carry no trailing ';'.
    """
    statements: List[str] = []
    buffer: List[str] = []
    i = 0
    n = len(text)

    while i < n:
        char = text[i]
        if text.startswith("--", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            buffer.append(" ")
            continue
        literal_end = _skip_literal(text, i)
        if literal_end is not None:
            buffer.append(text[i:literal_end])
            i = literal_end
            continue
        if char == ";":
            statement = "".join(buffer).strip()
            if statement:
                statements.append(statement)
            buffer = []
            i += 1
            continue
        buffer.append(char)
        i += 1

    statement = "".join(buffer).strip()
    if statement:
        statements.append(statement)
    return statements


def extract_parenthesized(text: str, start: int) -> Tuple[str, int]:
    """
    Return the text inside the parenthesis opening at `start`.

    Args:
        text: Source text
        start: Index of "("

    Returns:
        (inner text, index just past the matching ")")
    """
    if start >= len(text) or text[start] != "(":
        raise ValueError(f"Expected '(' at position {start}")
    depth = 0
    i = start
    n = len(text)
    while i < n:
        literal_end = _skip_literal(text, i)
        if literal_end is not None:
            i = literal_end
            continue
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return text[start + 1:i], i + 1
        i += 1
    return text[start + 1:], n


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on a separator outside parentheses and quotes; parts are stripped."""
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        literal_end = _skip_literal(text, i)
        if literal_end is not None:
            current.append(text[i:literal_end])
            i = literal_end
            continue
        char = text[i]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [p for p in parts if p]


def find_top_level_keyword(text: str, keywords: Sequence[str], start: int = 0) -> Tuple[int, Optional[str]]:
    """
    Find the first keyword (word-bounded, case-insensitive) outside parens/quotes.

    Returns:
        (position, matched keyword) or (-1, None)
    """
    patterns = [(kw, re.compile(r"\b" + r"\s+".join(kw.split()) + r"\b", re.IGNORECASE)) for kw in keywords]
    depth = 0
    i = start
    n = len(text)
    while i < n:
        literal_end = _skip_literal(text, i)
        if literal_end is not None:
            i = literal_end
            continue
        char = text[i]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif depth == 0 and (i == 0 or not (text[i - 1].isalnum() or text[i - 1] == "_")):
            for keyword, pattern in patterns:
                if pattern.match(text, i):
                    return i, keyword
        i += 1
    return -1, None


# ============================================================================
# NAMES
# ============================================================================

def unquote_identifier(token: str) -> str:
    """Strip double quotes (un-doubling inner quotes) from an identifier token."""
    token = token.strip()
    if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
        return token[1:-1].replace('""', '"')
    return token


_QUALIFIED = re.compile(rf"^\s*({IDENTIFIER})(?:\s*\.\s*({IDENTIFIER}))?\s*$")


def split_qualified_name(text: str) -> Tuple[Optional[str], str]:
    """
    Split schema.name into (schema, name); schema is None when unqualified.
    """
    match = _QUALIFIED.match(text)
    if not match:
        return None, unquote_identifier(text)
    if match.group(2):
        return unquote_identifier(match.group(1)), unquote_identifier(match.group(2))
    return None, unquote_identifier(match.group(1))


def unquote_literal(token: str) -> str:
    """'it''s' -> it's"""
    token = token.strip()
    escaped = token.upper().startswith("E'")
    if escaped:
        token = token[1:]
    if len(token) >= 2 and token.startswith("'") and token.endswith("'"):
        text = token[1:-1].replace("''", "'")
        return text.replace("\\\\", "\\") if escaped else text
    return token


# ============================================================================
# CREATE INDEX
# ============================================================================

_CREATE_INDEX = re.compile(
    r"^\s*CREATE\s+(?P<unique>UNIQUE\s+)?INDEX\s+(?:CONCURRENTLY\s+)?(?:IF\s+NOT\s+EXISTS\s+)?"
    rf"(?P<name>{QUALIFIED_NAME})\s+ON\s+(?:ONLY\s+)?(?P<table>{QUALIFIED_NAME})\s*"
    r"(?:USING\s+(?P<method>\w+)\s*)?\(",
    re.IGNORECASE,
)


def parse_index_definition(definition: str) -> Optional[Dict[str, Any]]:
    """
    Parse CREATE INDEX text (pg_indexes.indexdef or a generated file).

    Returns:
        Dict with name, table, schema, is_unique, method, columns, predicate;
        None when the text is not a CREATE INDEX statement
    """
    match = _CREATE_INDEX.match(definition)
    if not match:
        return None

    inner, end = extract_parenthesized(definition, match.end() - 1)
    remainder = definition[end:]

    predicate = None
    position, _ = find_top_level_keyword(remainder, ["WHERE"])
    if position >= 0:
        predicate = remainder[position + len("WHERE"):].strip().rstrip(";").strip() or None

    schema, table = split_qualified_name(match.group("table"))
    _, name = split_qualified_name(match.group("name"))
    return {
        "name": name,
        "table": table,
        "schema": schema,
        "is_unique": bool(match.group("unique")),
        "method": (match.group("method") or "btree").lower(),
        "columns": tuple(split_top_level(inner)),
        "predicate": predicate,
    }


__all__ = [
    "QUALIFIED_NAME",
    "split_statements",
    "extract_parenthesized",
    "split_top_level",
    "find_top_level_keyword",
    "unquote_identifier",
    "split_qualified_name",
    "unquote_literal",
    "parse_index_definition",
]
