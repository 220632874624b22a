# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Core - Run-scoped logging context for sync and gen
# PURPOSE: One log line format for acquisition, diff phases and output
# CREATED: 17 OCT 2026
# ============================================================================
"""
Structured Logging

Every log record is stamped with the run context active when it was
emitted: which schema (or source -> target pair) is being read, which
sync phase is running and which generator is working.

Context is held in a contextvar so it follows awaits inside asyncio.run().

Logs go to stderr: sync scripts and `gen --stdout` output are printed on
stdout and must stay clean. LOG_FORMAT=json (or --json-logs) switches to
one JSON object per line.

Usage:
    from core.logging import ComponentType, get_logger, log_context

    logger = get_logger(__name__, ComponentType.ORCHESTRATOR)

    with log_context(source_schema="dev", target_schema="prod"):
        with log_context(phase="COLUMN OPERATIONS"):
            logger.info("Diffing columns")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Optional, TextIO, Union

# Third-party loggers that are only interesting when debugging
NOISY_LOGGERS = ("psycopg", "asyncio")


class ComponentType(str, Enum):
    """Which part of a run a logger belongs to."""
    ORCHESTRATOR = "orchestrator"
    POLICY = "policy"
    ACQUISITION = "acquisition"
    GENERATOR = "generator"
    CLI = "cli"
    INFRASTRUCTURE = "infrastructure"


# ============================================================================
# RUN CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Fields describing where in a run a record was emitted."""
    schema: Optional[str] = None
    source_schema: Optional[str] = None
    target_schema: Optional[str] = None
    phase: Optional[str] = None
    operation: Optional[str] = None
    object_name: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, extra flattened in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result

    def label(self) -> str:
        """Short inline form: 'dev->prod | COLUMN OPERATIONS | users'."""
        parts = []
        if self.source_schema and self.target_schema:
            parts.append(f"{self.source_schema}->{self.target_schema}")
        elif self.schema:
            parts.append(self.schema)
        for value in (self.phase or self.operation, self.object_name):
            if value:
                parts.append(value)
        return " | ".join(parts)


_CURRENT: ContextVar[LogContext] = ContextVar("schema_sync_log_context", default=LogContext())


def get_current_context() -> LogContext:
    return _CURRENT.get()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[LogContext]:
    """
    Layer fields over the active context for the duration of the block.

    Unknown keyword names go into `extra`.
    """
    parent = _CURRENT.get()
    known = {f.name for f in fields(LogContext)} - {"extra"}
    updates = {k: v for k, v in kwargs.items() if k in known}
    extra = {**parent.extra, **kwargs.get("extra", {})}
    extra.update({k: v for k, v in kwargs.items() if k not in known and k != "extra"})

    context = replace(parent, extra=extra, **updates)
    token = _CURRENT.set(context)
    try:
        yield context
    finally:
        _CURRENT.reset(token)


# ============================================================================
# FORMATTERS
# ============================================================================

def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        component = getattr(record, "component", None)
        if component:
            payload["component"] = component
        context = get_current_context().to_dict()
        if context:
            payload["context"] = context
        data = getattr(record, "data", None)
        if data:
            payload["data"] = data
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line records with the run context in brackets."""

    def format(self, record: logging.LogRecord) -> str:
        label = get_current_context().label()
        text = (
            f"{datetime.now(timezone.utc):%H:%M:%S} {record.levelname:<7} "
            f"{record.name}{f' [{label}]' if label else ''}: {record.getMessage()}"
        )
        data = getattr(record, "data", None)
        if data:
            text += " " + " ".join(f"{k}={v}" for k, v in data.items())
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Adapter that tags records with their component."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        component = self.extra.get("component")
        if component is not None:
            extra.setdefault("component", getattr(component, "value", component))
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    """
    Args:
        name: Logger name, normally __name__
        component: Component tag carried on every record
    """
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        level: Log level name or number
        json_output: JSON lines instead of human-readable text
            (also enabled by LOG_FORMAT=json)
        stream: Output stream, stderr by default
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)


def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named milestone of a run ("phase_completed", "script_written").

    Args:
        name: Checkpoint name
        data: Values attached to the record
        logger: Logger to emit on; "checkpoint" when omitted
    """
    (logger or logging.getLogger("checkpoint")).info(
        f"CHECKPOINT: {name}",
        extra={"data": {"checkpoint": name, **(data or {})}},
    )


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
