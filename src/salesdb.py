"""Public SDK surface for salesdb.

This module provides a stable import path for library users.
It re-exports the primary client and typed option models.
"""

from __future__ import annotations

from core.config import SalesConfig
from core.errors import (
    SalesConfigError,
    SalesError,
    SalesIngestError,
    SalesRowError,
    SalesRunSpecError,
    SalesStoreError,
)
from core.types import (
    FileIngestResult,
    FilterRules,
    IngestOptions,
    IngestReport,
    PeriodicScope,
    SaleRecord,
    UpsertMode,
    UpsertStats,
    ValueMode,
)
from store.sales_sdk import SalesClient

__all__ = [
    "FileIngestResult",
    "FilterRules",
    "IngestOptions",
    "IngestReport",
    "PeriodicScope",
    "SaleRecord",
    "SalesClient",
    "SalesConfig",
    "SalesConfigError",
    "SalesError",
    "SalesIngestError",
    "SalesRowError",
    "SalesRunSpecError",
    "SalesStoreError",
    "UpsertMode",
    "UpsertStats",
    "ValueMode",
]
