"""Salesdb CLI entry points.
This module exposes commands for ingesting sales files and listing the table.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Sequence, TypeVar

from cli.run_spec_command import add_run_spec_command, run_run_spec_command
from core.config import SalesConfig, clamp_worker_count
from core.constants import (
    DEFAULT_DROP_EVERY,
    DEFAULT_MIN_SALE_VALUE,
    DEFAULT_PERIODIC_SCOPE,
    DEFAULT_UPSERT_MODE,
    DEFAULT_VALUE_MODE,
)
from core.errors import SalesConfigError, SalesError
from core.logging_config import configure_log_output, get_logger
from core.report_format import format_file_result, format_sales_listing
from core.types import (
    FilterRules,
    IngestOptions,
    PeriodicScope,
    UpsertMode,
    ValueMode,
    parse_periodic_scope,
    parse_upsert_mode,
    parse_value_mode,
)
from store.sales_sdk import SalesClient

_LOGGER = get_logger(__name__)
_ParsedT = TypeVar("_ParsedT")


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="salesdb", description="Sales records ingest CLI")
    parser.add_argument(
        "-o",
        "--output",
        help="SQLite output file, overrides SALES_DB_PATH (default ./output.db)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_list_command(subparsers)
    add_run_spec_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the salesdb CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_log_output()
    try:
        client = _build_client(args.output)
        if args.command == "ingest":
            return _run_ingest_command(client, args)
        if args.command == "list":
            return _run_list_command(client)
        if args.command == "run-spec":
            return run_run_spec_command(client, args)
    except SalesError as error:
        _LOGGER.error("command_failed", command=args.command, error=str(error))
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(output: str | None) -> SalesClient:
    """Build SDK client with optional output-path override.

    Args:
        output: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = SalesConfig.from_env()
    if output:
        config = replace(config, db_path=Path(output).expanduser())
    return SalesClient(config)


def _run_ingest_command(client: SalesClient, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = IngestOptions(
        file_paths=tuple(args.files),
        upsert_mode=args.upsert_mode,
        value_mode=args.value_mode,
        apply_filter=not args.no_filter,
        filter_rules=FilterRules(min_value=args.min_value, drop_every=args.drop_every),
        periodic_scope=args.periodic_scope,
        workers=clamp_worker_count(args.workers) if args.workers is not None else None,
    )
    report = client.ingest(options)
    for result in report.files:
        print(format_file_result(result))
    return 0


def _run_list_command(client: SalesClient) -> int:
    """Handle list command."""
    for line in format_sales_listing(client.list_sales()):
        print(line)
    return 0


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Ingest one or more sales CSV files")
    parser.add_argument("files", nargs="+", help="CSV files, ingested in order")
    parser.add_argument(
        "-g",
        "--workers",
        type=int,
        help="Parallel filter workers, overrides SALES_WORKERS (default 4, minimum 1)",
    )
    parser.add_argument(
        "--upsert-mode",
        type=_cli_value(parse_upsert_mode),
        default=parse_upsert_mode(DEFAULT_UPSERT_MODE),
        metavar="{" + ",".join(mode.value for mode in UpsertMode) + "}",
        help="Conflict policy for ids already in the table",
    )
    parser.add_argument(
        "--value-mode",
        type=_cli_value(parse_value_mode),
        default=parse_value_mode(DEFAULT_VALUE_MODE),
        metavar="{" + ",".join(mode.value for mode in ValueMode) + "}",
        help="Store the value column as text or as an integer",
    )
    parser.add_argument(
        "--no-filter",
        action="store_true",
        help="Write every deduplicated record without the business filter",
    )
    parser.add_argument(
        "--periodic-scope",
        type=_cli_value(parse_periodic_scope),
        default=parse_periodic_scope(DEFAULT_PERIODIC_SCOPE),
        metavar="{" + ",".join(scope.value for scope in PeriodicScope) + "}",
        help="Unit owning the drop-every-Nth counter: per chunk or whole file",
    )
    parser.add_argument(
        "--min-value",
        type=int,
        default=DEFAULT_MIN_SALE_VALUE,
        help="Minimum sale value kept by the business filter",
    )
    parser.add_argument(
        "--drop-every",
        type=int,
        default=DEFAULT_DROP_EVERY,
        help="Drop every Nth otherwise accepted record, 0 disables",
    )


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    subparsers.add_parser("list", help="Print the content of the sales table")


def _cli_value(parse: Callable[[str], _ParsedT]) -> Callable[[str], _ParsedT]:
    """Adapt a config parser into an argparse ``type`` callable."""

    def _parse(raw_value: str) -> _ParsedT:
        try:
            return parse(raw_value)
        except SalesConfigError as error:
            raise argparse.ArgumentTypeError(str(error)) from error

    return _parse
