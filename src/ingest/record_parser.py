"""Sale row parsing and validation.

This module turns one raw delimited row into a typed sale record.
Blank rows are reported as ``None``; malformed rows raise and abort
the file they belong to.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Sequence

from core.constants import (
    SALE_DATE_FORMAT,
    SALE_FIELD_COUNT,
    SQLITE_INTEGER_MAX,
    SQLITE_INTEGER_MIN,
)
from core.errors import SalesRowError
from core.types import SaleRecord, ValueMode

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def is_blank_row(row: Sequence[str]) -> bool:
    """Return whether every field of a row is empty."""
    return all(field == "" for field in row)


def parse_row(
    row: Sequence[str],
    *,
    value_mode: ValueMode,
    source: str = "<input>",
    line_number: int = 0,
) -> SaleRecord | None:
    """Parse one data row into a sale record.

    Args:
        row: Ordered fields: id, address, suburb, date, value.
        value_mode: Whether the value field must be an integer.
        source: Input file name for error context.
        line_number: One-based line number for error context.

    Returns:
        Parsed record, or None for a blank row.

    Raises:
        SalesRowError: If the field count, id, date, or value is invalid.
    """
    if is_blank_row(row):
        return None
    if len(row) != SALE_FIELD_COUNT:
        raise SalesRowError(
            f"Malformed row at {source}:{line_number}: expected {SALE_FIELD_COUNT} fields, "
            f"got {len(row)}. Fix the row and retry ingest.",
            source,
            line_number,
        )
    raw_id, address, suburb, raw_date, raw_value = row
    return SaleRecord(
        id=_parse_integer(raw_id, "id", source, line_number),
        address=address,
        suburb=suburb,
        date=_parse_sale_date(raw_date, source, line_number),
        value=_parse_value(raw_value, value_mode, source, line_number),
    )


def _parse_integer(raw_value: str, field_name: str, source: str, line_number: int) -> int:
    text = raw_value.strip()
    if not _INTEGER_PATTERN.fullmatch(text):
        raise SalesRowError(
            f"Malformed row at {source}:{line_number}: {field_name} '{raw_value}' "
            "is not a base-10 integer.",
            source,
            line_number,
        )
    parsed = int(text)
    if not SQLITE_INTEGER_MIN <= parsed <= SQLITE_INTEGER_MAX:
        raise SalesRowError(
            f"Malformed row at {source}:{line_number}: {field_name} '{raw_value}' "
            "does not fit a signed 64-bit integer.",
            source,
            line_number,
        )
    return parsed


def _parse_sale_date(raw_value: str, source: str, line_number: int) -> date:
    """Parse an ``M/D/YY`` sale date.

    Two-digit years 69-99 map to the 1900s and 00-68 to the 2000s.
    """
    try:
        return datetime.strptime(raw_value, SALE_DATE_FORMAT).date()
    except ValueError as error:
        raise SalesRowError(
            f"Malformed row at {source}:{line_number}: date '{raw_value}' "
            "does not match the M/D/YY layout.",
            source,
            line_number,
        ) from error


def _parse_value(
    raw_value: str,
    value_mode: ValueMode,
    source: str,
    line_number: int,
) -> int | str:
    if value_mode is ValueMode.TEXT:
        return raw_value
    return _parse_integer(raw_value, "value", source, line_number)
