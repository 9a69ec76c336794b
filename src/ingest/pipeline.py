"""Ingest orchestration for sales files.

This module runs each input file through parse, deduplication,
filtering, and upsert inside one store transaction. Files are handled
strictly in order and the run stops at the first failing file, leaving
earlier files committed.
"""

from __future__ import annotations

import sqlite3

from core.config import SalesConfig, clamp_worker_count
from core.errors import SalesConfigError, SalesError, SalesStoreWriteError
from core.logging_config import get_logger
from core.types import (
    FileIngestResult,
    IngestOptions,
    IngestReport,
    SaleRecord,
    ValueMode,
)
from ingest.filter_pipeline import ConcurrentFilterPipeline
from ingest.input_reader import load_file_records
from store.sales_store import SalesStore, SalesTransaction
from store.upsert_policy import UpsertWriter
from transforms.business_filter import BusinessFilter
from transforms.id_deduplication import drop_duplicate_ids, find_duplicate_ids

_LOGGER = get_logger(__name__)


class IngestPipelineRunner:
    """Sequential per-file transaction controller."""

    def __init__(self, options: IngestOptions, config: SalesConfig, store: SalesStore) -> None:
        _validate_options(options)
        self._options = options
        self._store = store
        self._workers = clamp_worker_count(
            options.workers if options.workers is not None else config.workers
        )
        self._filter_pipeline = ConcurrentFilterPipeline(
            business_filter=BusinessFilter(options.filter_rules),
            workers=self._workers,
            queue_size=config.queue_size,
            periodic_scope=options.periodic_scope,
        )

    def run(self) -> IngestReport:
        """Ingest every file in order and return per-file results.

        Raises:
            SalesError: From the first failing file; later files are skipped.
        """
        self._store.ensure_table(self._options.value_mode)
        results: list[FileIngestResult] = []
        for file_path in self._options.file_paths:
            results.append(self.ingest_file(file_path))
        report = IngestReport(files=tuple(results))
        _LOGGER.info(
            "ingest_completed",
            db_path=self._store.db_path,
            file_count=len(report.files),
            accepted_count=report.accepted_count,
            upsert_mode=self._options.upsert_mode.value,
        )
        return report

    def ingest_file(self, file_path: str) -> FileIngestResult:
        """Ingest one file as a single all-or-nothing transaction.

        Args:
            file_path: Local CSV path.

        Returns:
            Summary of the committed file.

        Raises:
            SalesIngestError: If the file or one of its rows is invalid.
            SalesStoreError: If a write or the commit fails.
        """
        _LOGGER.info("file_ingest_started", file_path=file_path, workers=self._workers)
        try:
            with self._store.transaction() as transaction:
                result = self._process_file(file_path, transaction)
        except SalesError as error:
            _log_rollback(file_path, error)
            raise
        except sqlite3.Error as error:
            _log_rollback(file_path, error)
            raise SalesStoreWriteError(
                f"Store failure while ingesting {file_path}: {error}. "
                "The file transaction was rolled back."
            ) from error
        _LOGGER.info(
            "file_ingest_committed",
            file_path=file_path,
            accepted_count=result.accepted_count,
            inserted=result.upsert_stats.inserted,
            replaced=result.upsert_stats.replaced,
            refreshed=result.upsert_stats.refreshed,
            purged=result.upsert_stats.purged,
        )
        return result

    def _process_file(self, file_path: str, transaction: SalesTransaction) -> FileIngestResult:
        loaded = load_file_records(file_path, self._options.value_mode)
        duplicate_ids = find_duplicate_ids(loaded.records)
        dedup_records = drop_duplicate_ids(loaded.records)
        if duplicate_ids:
            _LOGGER.info(
                "duplicate_ids_dropped",
                file_path=file_path,
                duplicate_id_count=len(duplicate_ids),
                dropped_record_count=len(loaded.records) - len(dedup_records),
            )
        writer = UpsertWriter(transaction, self._options.upsert_mode)
        accepted_count = self._write_records(dedup_records, writer)
        return FileIngestResult(
            file_path=file_path,
            parsed_count=len(loaded.records),
            blank_count=loaded.blank_count,
            duplicate_id_count=len(duplicate_ids),
            dropped_duplicate_count=len(loaded.records) - len(dedup_records),
            accepted_count=accepted_count,
            upsert_stats=writer.finish(),
        )

    def _write_records(self, records: list[SaleRecord], writer: UpsertWriter) -> int:
        if not self._options.apply_filter:
            for record in records:
                writer.write(record)
            return len(records)
        stats = self._filter_pipeline.run(records, writer.write)
        return stats.accepted_count


def ingest_files(options: IngestOptions, config: SalesConfig) -> IngestReport:
    """Run the sales ingest pipeline against the configured store.

    Args:
        options: Ingest request options.
        config: Runtime configuration.

    Returns:
        Results for every committed file.

    Raises:
        SalesConfigError: If options are inconsistent.
        SalesIngestError: If a file or row is invalid.
        SalesStoreError: If persistence fails.
    """
    with SalesStore(config) as store:
        runner = IngestPipelineRunner(options, config, store)
        return runner.run()


def _validate_options(options: IngestOptions) -> None:
    if not options.file_paths:
        raise SalesConfigError("No input files given. Pass at least one CSV file to ingest.")
    if options.apply_filter and options.value_mode is not ValueMode.NUMERIC:
        raise SalesConfigError(
            "The business filter compares sale values and needs value mode 'numeric'. "
            "Switch the value mode or disable filtering."
        )


def _log_rollback(file_path: str, error: BaseException) -> None:
    _LOGGER.error(
        "file_ingest_rolled_back",
        file_path=file_path,
        error_type=type(error).__name__,
        error=str(error),
    )
