"""Unit tests for input reader module."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import SalesIngestError, SalesRowError
from core.types import ValueMode
from ingest.input_reader import load_file_records, read_sale_rows
from tests.fixture_paths import fixture_path


def test_read_sale_rows_skips_header_and_keeps_line_numbers() -> None:
    """Reader should drop the header row and number data rows by file line."""
    rows = read_sale_rows(str(fixture_path("sales/duplicate_ids.csv")))

    assert [line_number for line_number, _ in rows] == [2, 3, 4, 5]
    assert rows[0][1] == ["1", "7 Elm ST", "Northcote", "1/2/20", "500000"]


def test_read_sale_rows_empty_and_header_only_files_yield_no_rows() -> None:
    """Empty and header-only files should be treated as empty batches."""
    assert read_sale_rows(str(fixture_path("sales/empty.csv"))) == []
    assert read_sale_rows(str(fixture_path("sales/header_only.csv"))) == []


def test_read_sale_rows_raises_for_missing_path(tmp_path: Path) -> None:
    """Reader should fail when the input file is missing."""
    missing_path = tmp_path / "does-not-exist.csv"

    with pytest.raises(SalesIngestError):
        read_sale_rows(str(missing_path))

    assert missing_path.exists() is False


def test_read_sale_rows_tolerates_byte_order_mark(tmp_path: Path) -> None:
    """A UTF-8 BOM before the header should not leak into the data."""
    source_path = tmp_path / "bom.csv"
    source_path.write_text(
        "\ufeffid,address,suburb,date,value\n5,1 Pier ST,Williamstown,7/1/21,410000\n",
        encoding="utf-8",
    )

    rows = read_sale_rows(str(source_path))

    assert rows == [(2, ["5", "1 Pier ST", "Williamstown", "7/1/21", "410000"])]


def test_load_file_records_counts_blank_rows() -> None:
    """Blank rows should be skipped and counted."""
    loaded = load_file_records(str(fixture_path("sales/valid_sales.csv")), ValueMode.NUMERIC)

    assert [record.id for record in loaded.records] == [10, 11, 12, 13, 14, 15]
    assert loaded.blank_count == 1


def test_load_file_records_reports_line_of_malformed_row() -> None:
    """The first malformed row should abort loading with its line number."""
    with pytest.raises(SalesRowError) as error_info:
        load_file_records(str(fixture_path("sales/malformed_date.csv")), ValueMode.NUMERIC)

    assert error_info.value.line_number == 3
