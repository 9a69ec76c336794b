"""Salesdb exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SalesError(Exception):
    """Base exception for all salesdb failures."""


class SalesConfigError(SalesError):
    """Raised for invalid runtime configuration or ingest options."""


class SalesIngestError(SalesError):
    """Raised for unreadable input files and delimited-text failures."""


class SalesRowError(SalesIngestError):
    """Raised when a data row cannot be parsed into a sale record.

    Attributes:
        source: Input file the row came from.
        line_number: One-based line number of the row.
    """

    def __init__(self, message: str, source: str, line_number: int) -> None:
        super().__init__(message)
        self.source = source
        self.line_number = line_number


class SalesStoreError(SalesError):
    """Raised for sales table persistence failures."""


class SalesStoreWriteError(SalesStoreError):
    """Raised when a write inside a file transaction fails."""


class SalesStoreConnectionError(SalesStoreError):
    """Raised when the store cannot be opened or prepared."""


class SalesRunSpecError(SalesError):
    """Raised for invalid or unsupported run-spec configuration."""
