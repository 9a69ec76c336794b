"""Delimited sales file readers for ingestion.

This module loads raw rows from local CSV files and converts them
into typed sale records for deduplication and filtering.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path

from core.constants import INPUT_FILE_ENCODING
from core.errors import SalesIngestError
from core.types import SaleRecord, ValueMode
from ingest.record_parser import parse_row


@dataclass(frozen=True)
class LoadedFileRecords:
    """Parsed content of one input file.

    Attributes:
        records: Well-formed records in file order.
        blank_count: Number of blank rows skipped.
    """

    records: list[SaleRecord]
    blank_count: int


def read_sale_rows(file_path: str) -> list[tuple[int, list[str]]]:
    """Read data rows from a CSV file, skipping the header row.

    Args:
        file_path: Local CSV path.

    Returns:
        Ordered ``(line_number, fields)`` pairs. Empty files yield no rows.

    Raises:
        SalesIngestError: If the file is missing, unreadable, or not valid CSV.
    """
    source_path = Path(file_path).expanduser()
    if not source_path.is_file():
        raise SalesIngestError(
            f"Failed to read sales file at {source_path}: file does not exist. "
            "Provide an existing CSV file."
        )
    try:
        with source_path.open("r", encoding=INPUT_FILE_ENCODING, newline="") as handle:
            reader = csv.reader(handle)
            if next(reader, None) is None:
                return []
            return [(reader.line_num, row) for row in reader]
    except (OSError, UnicodeDecodeError) as error:
        raise SalesIngestError(
            f"Failed to read sales file at {source_path}: {error}. "
            "Check file permissions and encoding."
        ) from error
    except csv.Error as error:
        raise SalesIngestError(
            f"Failed to parse CSV at {source_path}: {error}. Fix the file syntax and retry ingest."
        ) from error


def load_file_records(file_path: str, value_mode: ValueMode) -> LoadedFileRecords:
    """Read and parse every data row of a file.

    Args:
        file_path: Local CSV path.
        value_mode: Value parsing mode.

    Returns:
        Parsed records and the blank row count.

    Raises:
        SalesIngestError: If the file cannot be read.
        SalesRowError: On the first malformed row.
    """
    records: list[SaleRecord] = []
    blank_count = 0
    for line_number, row in read_sale_rows(file_path):
        record = parse_row(row, value_mode=value_mode, source=file_path, line_number=line_number)
        if record is None:
            blank_count += 1
            continue
        records.append(record)
    return LoadedFileRecords(records=records, blank_count=blank_count)
