"""Type-safe field parsing helpers for run-spec execution.

This module centralizes primitive parsing so run-spec executors can stay
concise and produce consistent validation errors across CLI and SDK flows.
"""

from __future__ import annotations

from typing import Callable, Mapping, TypeVar

from core.errors import SalesConfigError, SalesRunSpecError
from core.types import (
    PeriodicScope,
    UpsertMode,
    ValueMode,
    parse_periodic_scope,
    parse_upsert_mode,
    parse_value_mode,
)

_ParsedT = TypeVar("_ParsedT")


def optional_string(args: Mapping[str, object], field_name: str) -> str | None:
    """Read an optional string field from a run-spec step."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    raise SalesRunSpecError(f"Run-spec field '{field_name}' must be a string when provided.")


def optional_int(args: Mapping[str, object], field_name: str) -> int | None:
    """Read an optional integer field from a run-spec step."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, bool):
        raise SalesRunSpecError(f"Run-spec field '{field_name}' must be an integer.")
    if isinstance(value, int):
        return value
    raise SalesRunSpecError(f"Run-spec field '{field_name}' must be an integer.")


def int_with_default(args: Mapping[str, object], field_name: str, default_value: int) -> int:
    """Read an integer field while preserving explicit zero values."""
    value = optional_int(args, field_name)
    return default_value if value is None else value


def optional_bool(
    args: Mapping[str, object],
    field_name: str,
    default_value: bool,
) -> bool:
    """Read an optional boolean field from a run-spec step."""
    value = args.get(field_name)
    if value is None:
        return default_value
    if isinstance(value, bool):
        return value
    raise SalesRunSpecError(f"Run-spec field '{field_name}' must be true/false.")


def file_list(args: Mapping[str, object]) -> tuple[str, ...]:
    """Read input files from ``files`` (list) or ``file`` (string).

    Raises:
        SalesRunSpecError: If neither field names at least one file.
    """
    single_file = optional_string(args, "file")
    raw_files = args.get("files")
    if raw_files is None:
        if single_file is None:
            raise SalesRunSpecError(
                "Run-spec ingest step needs 'files' (list) or 'file' (string)."
            )
        return (single_file,)
    if single_file is not None:
        raise SalesRunSpecError("Run-spec ingest step must not set both 'file' and 'files'.")
    if not isinstance(raw_files, list) or not raw_files:
        raise SalesRunSpecError("Run-spec field 'files' must be a non-empty list of paths.")
    paths: list[str] = []
    for raw_path in raw_files:
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise SalesRunSpecError("Run-spec field 'files' must only contain path strings.")
        paths.append(raw_path.strip())
    return tuple(paths)


def upsert_mode_with_default(args: Mapping[str, object], default_value: str) -> UpsertMode:
    """Parse the step upsert mode, falling back to the run default."""
    raw_value = optional_string(args, "upsert_mode") or default_value
    return _as_run_spec_error(parse_upsert_mode, raw_value)


def value_mode_with_default(args: Mapping[str, object], default_value: str) -> ValueMode:
    """Parse the step value mode, falling back to the run default."""
    raw_value = optional_string(args, "value_mode") or default_value
    return _as_run_spec_error(parse_value_mode, raw_value)


def periodic_scope_with_default(
    args: Mapping[str, object],
    default_value: str,
) -> PeriodicScope:
    """Parse the step periodic scope, falling back to the run default."""
    return _as_run_spec_error(
        parse_periodic_scope, optional_string(args, "periodic_scope") or default_value
    )


def _as_run_spec_error(parser: Callable[[str], _ParsedT], raw_value: str) -> _ParsedT:
    try:
        return parser(raw_value)
    except SalesConfigError as error:
        raise SalesRunSpecError(f"Invalid run-spec value: {error}") from error
