"""Printable renderings of ingest results and stored sales.

CLI and run-spec execution share these so both print identical lines.
"""

from __future__ import annotations

from core.types import FileIngestResult, SaleRecord

SALES_LISTING_HEADER = "Content of sales table: "


def format_file_result(result: FileIngestResult) -> str:
    """Render one committed file as a tab-separated summary line."""
    stats = result.upsert_stats
    return (
        f"{result.file_path}\t"
        f"parsed={result.parsed_count}\t"
        f"duplicates={result.dropped_duplicate_count}\t"
        f"accepted={result.accepted_count}\t"
        f"inserted={stats.inserted}\t"
        f"ignored={stats.ignored}\t"
        f"replaced={stats.replaced}\t"
        f"refreshed={stats.refreshed}\t"
        f"purged={stats.purged}"
    )


def format_sale_row(record: SaleRecord) -> str:
    """Render one stored sale as ``id, address, suburb, date, value``."""
    return (
        f"{record.id}, {record.address}, {record.suburb}, "
        f"{record.date.isoformat()}, {record.value}"
    )


def format_sales_listing(records: list[SaleRecord]) -> tuple[str, ...]:
    """Render the full table listing with its header line."""
    return (SALES_LISTING_HEADER, *(format_sale_row(record) for record in records))
