# ============================================================================
# PGSCHEMASYNC - COMMAND LINE ENTRY POINT
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: CLI - sync and gen sub-commands
# PURPOSE: Parse arguments, wire sources to the orchestrator / generators
# CREATED: 17 OCT 2026
# USAGE:
#   pgschemasync sync --source-schema dev --target-schema prod --save
#   pgschemasync sync --source-dir ./output/dev --target-dir ./output/prod
#   pgschemasync gen --schema public --output ./output
# ============================================================================
"""
pgschemasync command line.

sync  Compare two schemas (live databases or generated file sets) and
      emit a reviewable migration script for the target.
gen   Write schema.sql, procs.sql and triggers.sql for one schema.

Connection flags override {SOURCE_,TARGET_,}DB_* environment variables,
which may come from a .env file. The script goes to stdout unless
--output or --save is given; logs always go to stderr.

Exit status: 0 on success (scripts with TODO markers included), 1 with a
one-line "Error: ..." on stderr otherwise.
"""

import argparse
import asyncio
import logging
import sys
from contextlib import AsyncExitStack
from typing import List, Optional

from __version__ import __version__
from core.config import ConnectionSettings, GeneratorDefaults, SyncDefaults, load_environment
from core.errors import SchemaSyncError
from core.logging import ComponentType, configure_logging, get_logger
from core.validation import validate_identifier
from generators import GENERATORS, GenerationOptions, GeneratorResult
from infrastructure import (
    DatabaseMetadataSource,
    FileMetadataSource,
    MetadataSource,
    check_connection,
    open_connection,
)
from sync import SchemaSyncOrchestrator, SyncOptions, SyncReport

logger = get_logger(__name__, ComponentType.CLI)

CONNECTION_FIELDS = ("host", "port", "database", "username", "password", "schema")


# ============================================================================
# ARGUMENTS
# ============================================================================

def _add_connection_args(parser: argparse.ArgumentParser, prefix: str = "", label: str = "") -> None:
    group = parser.add_argument_group(f"{label or 'database'} connection")
    flag = f"--{prefix}-" if prefix else "--"
    group.add_argument(f"{flag}host", help="Database host")
    group.add_argument(f"{flag}port", type=int, help="Database port")
    group.add_argument(f"{flag}database", help="Database name")
    group.add_argument(f"{flag}username", help="Database user")
    group.add_argument(f"{flag}password", help="Database password")
    group.add_argument(f"{flag}schema", help="Schema name")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    common.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    common.add_argument("--env-file", help="Load environment from this .env file")

    parser = argparse.ArgumentParser(
        prog="pgschemasync",
        description="PostgreSQL schema sync and generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pgschemasync sync --source-schema dev --target-schema prod            # Script to stdout
  pgschemasync sync --source-schema dev --target-schema prod --save     # schema-sync_dev-to-prod_<ts>.sql
  pgschemasync sync --source-dir out/dev --target-dir out/prod -o x.sql # Compare generated files
  pgschemasync gen --schema public --output ./output                    # schema/procs/triggers.sql

Environment Variables:
  DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD, DB_SCHEMA   gen connection
  SOURCE_DB_* / TARGET_DB_*                                     sync connections
  SCHEMA_SYNC_OUTPUT_DIR, SCHEMA_GEN_OUTPUT_DIR                 output locations
  LOG_FORMAT=json                                               JSON logs
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    sync_parser = commands.add_parser("sync", parents=[common], help="Generate a schema sync script")
    _add_connection_args(sync_parser, "source", "source")
    _add_connection_args(sync_parser, "target", "target")
    sync_parser.add_argument("--source-dir", help="Read the source from generated SQL files")
    sync_parser.add_argument("--target-dir", help="Read the target from generated SQL files")
    sync_parser.add_argument("--output", "-o", help="Write the script to this file")
    sync_parser.add_argument("--save", action="store_true", help="Write to an auto-named file in --output-dir")
    sync_parser.add_argument("--output-dir", help="Directory for --save (default: SCHEMA_SYNC_OUTPUT_DIR or .)")

    gen_parser = commands.add_parser("gen", parents=[common], help="Generate SQL files from a live schema")
    _add_connection_args(gen_parser)
    gen_parser.add_argument("--output", "-o", help="Output directory (default: ./output)")
    gen_parser.add_argument("--stdout", action="store_true", help="Print files instead of writing them")
    only = gen_parser.add_mutually_exclusive_group()
    only.add_argument("--schema-only", action="store_true", help="Only generate schema.sql")
    only.add_argument("--procs-only", action="store_true", help="Only generate procs.sql")
    only.add_argument("--triggers-only", action="store_true", help="Only generate triggers.sql")
    gen_parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Run the remaining generators after one fails",
    )
    return parser


def connection_settings(args: argparse.Namespace, prefix: str = "") -> ConnectionSettings:
    """Environment settings for one side, with command-line overrides applied."""
    env_prefix = f"{prefix.upper()}_" if prefix else ""
    arg_prefix = f"{prefix}_" if prefix else ""
    overrides = {name: getattr(args, f"{arg_prefix}{name}", None) for name in CONNECTION_FIELDS}
    return ConnectionSettings.from_env(env_prefix).with_overrides(**overrides)


# ============================================================================
# COMMANDS
# ============================================================================

async def _open_source(stack: AsyncExitStack, args: argparse.Namespace, side: str) -> MetadataSource:
    directory = getattr(args, f"{side}_dir")
    if directory:
        return FileMetadataSource(directory, schema=getattr(args, f"{side}_schema"))

    settings = connection_settings(args, side)
    validate_identifier(settings.schema, f"{side} schema").raise_for_errors()
    logger.debug(f"Opening {side} connection {settings.redacted()}")
    conn = await stack.enter_async_context(open_connection(settings))
    await check_connection(conn)
    return DatabaseMetadataSource(conn, settings.schema)


async def run_sync(args: argparse.Namespace) -> SyncReport:
    defaults = SyncDefaults.from_env()
    async with AsyncExitStack() as stack:
        source = await _open_source(stack, args, "source")
        target = await _open_source(stack, args, "target")
        options = SyncOptions(
            output_file=args.output,
            save=args.save,
            output_dir=args.output_dir or defaults.output_dir,
            backup_suffix=defaults.generated_backup_suffix if args.target_dir else defaults.backup_suffix,
            defaults=defaults,
        )
        return await SchemaSyncOrchestrator(source, target, options).execute()


async def run_gen(args: argparse.Namespace) -> List[GeneratorResult]:
    defaults = GeneratorDefaults.from_env()
    settings = connection_settings(args)
    results: List[GeneratorResult] = []

    async with open_connection(settings) as conn:
        info = await check_connection(conn)
        source = DatabaseMetadataSource(conn, settings.schema)
        options = GenerationOptions(
            output_dir=args.output or defaults.output_dir,
            to_stdout=args.stdout,
            schema_only=args.schema_only,
            procs_only=args.procs_only,
            triggers_only=args.triggers_only,
            database=info.get("database_name", settings.database),
        )
        for generator_cls in GENERATORS:
            result = await generator_cls(source, options, defaults).execute()
            results.append(result)
            if not result.success and not args.keep_going:
                break
    return results


# ============================================================================
# MAIN
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_environment(args.env_file)
    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        json_output=args.json_logs,
    )

    try:
        if args.command == "sync":
            report = asyncio.run(run_sync(args))
            if report.output_path:
                print(f"Sync script written to {report.output_path}", file=sys.stderr)
            if report.todo_count:
                print(f"{report.todo_count} TODO item(s) need manual review", file=sys.stderr)
            return 0

        results = asyncio.run(run_gen(args))
        failed = [r for r in results if not r.success]
        if failed:
            print(f"Error: {failed[0].error}", file=sys.stderr)
            return 1
        return 0
    except SchemaSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
