"""Shared typed models.

This module defines immutable data models used by ingest, transform,
store, and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TypeVar

from core.constants import (
    DEFAULT_DROP_EVERY,
    DEFAULT_EXCLUDED_ADDRESS_SUFFIXES,
    DEFAULT_MIN_SALE_VALUE,
)
from core.errors import SalesConfigError

_EnumT = TypeVar("_EnumT", bound=Enum)


class UpsertMode(str, Enum):
    """Conflict-resolution policy applied when an id already exists.

    One mode is selected per run and never mixed within it.
    """

    INSERT_IGNORE = "insert-ignore"
    INSERT_IGNORE_REFRESH_IF_OLDER = "insert-ignore-refresh"
    INSERT_REPLACE = "insert-replace"
    INSERT_IGNORE_PURGE_ON_CONFLICT = "insert-ignore-purge"


class ValueMode(str, Enum):
    """How the sale value column is parsed and stored."""

    TEXT = "text"
    NUMERIC = "numeric"


class PeriodicScope(str, Enum):
    """Sequential unit that owns the periodic downsampling counter."""

    CHUNK = "chunk"
    FILE = "file"


@dataclass(frozen=True)
class SaleRecord:
    """Parsed and validated sales entry.

    Attributes:
        id: Source-supplied unique identifier.
        address: Free-form street address.
        suburb: Free-form locality name.
        date: Sale date.
        value: Integer sale amount in numeric mode, raw text otherwise.
    """

    id: int
    address: str
    suburb: str
    date: date
    value: int | str


@dataclass(frozen=True)
class FilterRules:
    """Business filter parameters.

    Attributes:
        min_value: Lowest sale value that is persisted.
        excluded_suffixes: Street-type suffixes rejected on the trimmed address.
        drop_every: Drop every Nth otherwise accepted record; 0 disables.
    """

    min_value: int = DEFAULT_MIN_SALE_VALUE
    excluded_suffixes: tuple[str, ...] = DEFAULT_EXCLUDED_ADDRESS_SUFFIXES
    drop_every: int = DEFAULT_DROP_EVERY


@dataclass(frozen=True)
class IngestOptions:
    """Ingest command options.

    Attributes:
        file_paths: Input files, processed strictly in order.
        upsert_mode: Conflict policy for the whole run.
        value_mode: Text or numeric value parsing.
        apply_filter: Run the business filter before writing.
        filter_rules: Business filter parameters.
        periodic_scope: Unit owning the periodic downsampling counter.
        workers: Optional worker-count override for this run.
    """

    file_paths: tuple[str, ...]
    upsert_mode: UpsertMode = UpsertMode.INSERT_REPLACE
    value_mode: ValueMode = ValueMode.NUMERIC
    apply_filter: bool = True
    filter_rules: FilterRules = field(default_factory=FilterRules)
    periodic_scope: PeriodicScope = PeriodicScope.CHUNK
    workers: int | None = None


@dataclass(frozen=True)
class UpsertStats:
    """Per-file write counters reported by the upsert writer."""

    inserted: int = 0
    ignored: int = 0
    replaced: int = 0
    refreshed: int = 0
    purged: int = 0


@dataclass(frozen=True)
class FileIngestResult:
    """Summary of one committed file transaction.

    Attributes:
        file_path: Input file path.
        parsed_count: Well-formed records parsed from the file.
        blank_count: Blank rows skipped.
        duplicate_id_count: Distinct ids seen more than once.
        dropped_duplicate_count: Records removed by deduplication.
        accepted_count: Records handed to the upsert writer.
        upsert_stats: Write counters.
    """

    file_path: str
    parsed_count: int
    blank_count: int
    duplicate_id_count: int
    dropped_duplicate_count: int
    accepted_count: int
    upsert_stats: UpsertStats


@dataclass(frozen=True)
class IngestReport:
    """Ordered results for every committed file of a run."""

    files: tuple[FileIngestResult, ...]

    @property
    def accepted_count(self) -> int:
        """Total records written across all files."""
        return sum(result.accepted_count for result in self.files)


def parse_upsert_mode(raw_value: str) -> UpsertMode:
    """Parse an upsert mode name.

    Args:
        raw_value: Mode name such as ``insert-ignore``.

    Returns:
        Matching upsert mode.

    Raises:
        SalesConfigError: If the name is unknown.
    """
    return _parse_enum(UpsertMode, raw_value, "upsert mode")


def parse_value_mode(raw_value: str) -> ValueMode:
    """Parse a value mode name."""
    return _parse_enum(ValueMode, raw_value, "value mode")


def parse_periodic_scope(raw_value: str) -> PeriodicScope:
    """Parse a periodic scope name."""
    return _parse_enum(PeriodicScope, raw_value, "periodic scope")


def _parse_enum(enum_type: type[_EnumT], raw_value: str, label: str) -> _EnumT:
    normalized = raw_value.strip().lower()
    for member in enum_type:
        if member.value == normalized:
            return member
    supported = ", ".join(member.value for member in enum_type)
    raise SalesConfigError(f"Unsupported {label} '{raw_value}'. Choose one of: {supported}.")
