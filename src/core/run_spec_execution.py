"""Shared run-spec execution engine for CLI and SDK workflows.

This module maps validated run-spec steps to client operations so different
entry points can execute one declarative pipeline path without drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from core.constants import (
    DEFAULT_DROP_EVERY,
    DEFAULT_MIN_SALE_VALUE,
    DEFAULT_PERIODIC_SCOPE,
    DEFAULT_UPSERT_MODE,
    DEFAULT_VALUE_MODE,
)
from core.errors import SalesRunSpecError
from core.report_format import format_file_result, format_sales_listing
from core.run_spec import RunSpec, RunSpecDefaults, RunSpecStep, load_run_spec
from core.run_spec_fields import (
    file_list,
    int_with_default,
    optional_bool,
    optional_int,
    periodic_scope_with_default,
    upsert_mode_with_default,
    value_mode_with_default,
)
from core.types import FilterRules, IngestOptions, IngestReport, SaleRecord


class RunSpecClient(Protocol):
    """Client API contract required by run-spec execution."""

    def with_db_path(self, db_path: str) -> Any: ...

    def with_workers(self, workers: int) -> Any: ...

    def ingest(self, options: IngestOptions) -> IngestReport: ...

    def list_sales(self) -> list[SaleRecord]: ...


@dataclass(frozen=True)
class RunSpecExecutionContext:
    """In-memory context used to execute run-spec steps."""

    client: RunSpecClient
    defaults: RunSpecDefaults


def execute_run_spec_file(client: RunSpecClient, spec_file: str) -> tuple[str, ...]:
    """Load and execute a run-spec file, returning printable output lines."""
    spec = load_run_spec(spec_file)
    return execute_run_spec(client, spec)


def execute_run_spec(client: RunSpecClient, spec: RunSpec) -> tuple[str, ...]:
    """Execute a parsed run-spec object and return output lines."""
    execution_client = client
    if spec.defaults.db_path:
        execution_client = execution_client.with_db_path(spec.defaults.db_path)
    if spec.defaults.workers is not None:
        execution_client = execution_client.with_workers(spec.defaults.workers)
    context = RunSpecExecutionContext(client=execution_client, defaults=spec.defaults)
    output_lines: list[str] = []
    for step in spec.steps:
        output_lines.extend(_execute_step(context, step))
    return tuple(output_lines)


def _execute_step(context: RunSpecExecutionContext, step: RunSpecStep) -> tuple[str, ...]:
    if step.command == "ingest":
        return _execute_ingest_step(context, step)
    if step.command == "list":
        return format_sales_listing(context.client.list_sales())
    raise SalesRunSpecError(f"Unsupported run-spec command '{step.command}'.")


def _execute_ingest_step(
    context: RunSpecExecutionContext,
    step: RunSpecStep,
) -> tuple[str, ...]:
    defaults = context.defaults
    options = IngestOptions(
        file_paths=file_list(step.args),
        upsert_mode=upsert_mode_with_default(
            step.args, defaults.upsert_mode or DEFAULT_UPSERT_MODE
        ),
        value_mode=value_mode_with_default(step.args, defaults.value_mode or DEFAULT_VALUE_MODE),
        apply_filter=optional_bool(step.args, "filter", default_value=True),
        filter_rules=FilterRules(
            min_value=int_with_default(step.args, "min_value", DEFAULT_MIN_SALE_VALUE),
            drop_every=int_with_default(step.args, "drop_every", DEFAULT_DROP_EVERY),
        ),
        periodic_scope=periodic_scope_with_default(step.args, DEFAULT_PERIODIC_SCOPE),
        workers=optional_int(step.args, "workers"),
    )
    report = context.client.ingest(options)
    return tuple(format_file_result(result) for result in report.files)
