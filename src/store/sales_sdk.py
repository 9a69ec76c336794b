"""Python SDK for sales ingest operations.

This module exposes high-level APIs for ingesting files, reading the
sales table back, and running declarative run-spec pipelines.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import SalesConfig, clamp_worker_count
from core.run_spec_execution import execute_run_spec_file
from core.types import IngestOptions, IngestReport, SaleRecord
from ingest.pipeline import ingest_files
from store.sales_store import SalesStore


class SalesClient:
    """Primary SDK entry point for sales ingest workflows."""

    def __init__(self, config: SalesConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or SalesConfig.from_env()

    @property
    def config(self) -> SalesConfig:
        """Runtime configuration used by this client."""
        return self._config

    def ingest(self, options: IngestOptions) -> IngestReport:
        """Ingest files into the sales table, one transaction per file.

        Args:
            options: Ingest options.

        Returns:
            Results for every committed file.

        Raises:
            SalesIngestError: If a file or row is invalid.
            SalesStoreError: If persistence fails.
        """
        return ingest_files(options, self._config)

    def list_sales(self) -> list[SaleRecord]:
        """Return every stored sale ordered by id."""
        with SalesStore(self._config) as store:
            return store.list_sales()

    def with_db_path(self, db_path: str) -> "SalesClient":
        """Clone the client with a different store location.

        Args:
            db_path: New SQLite file path.

        Returns:
            New SDK client instance.
        """
        return SalesClient(replace(self._config, db_path=Path(db_path).expanduser()))

    def with_workers(self, workers: int) -> "SalesClient":
        """Clone the client with a different default worker count."""
        return SalesClient(replace(self._config, workers=clamp_worker_count(workers)))

    def run_spec(self, spec_file: str) -> tuple[str, ...]:
        """Execute a YAML run-spec through the shared execution engine.

        Args:
            spec_file: Path to YAML run-spec file.

        Returns:
            Ordered command output lines.
        """
        return execute_run_spec_file(self, spec_file)
