"""Core constants used across salesdb modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DB_PATH = Path("./output.db")
DEFAULT_WORKER_COUNT = 4
DEFAULT_QUEUE_SIZE = 256
QUEUE_POLL_SECONDS = 0.05
SALES_TABLE_NAME = "sales"
SALE_FIELD_NAMES = ("id", "address", "suburb", "date", "value")
SALE_FIELD_COUNT = len(SALE_FIELD_NAMES)
SALE_DATE_FORMAT = "%m/%d/%y"
SQLITE_INTEGER_MIN = -(2**63)
SQLITE_INTEGER_MAX = 2**63 - 1
DEFAULT_MIN_SALE_VALUE = 400000
DEFAULT_EXCLUDED_ADDRESS_SUFFIXES = ("AVE", "CRES", "PL")
DEFAULT_DROP_EVERY = 10
DEFAULT_UPSERT_MODE = "insert-replace"
DEFAULT_VALUE_MODE = "numeric"
DEFAULT_PERIODIC_SCOPE = "chunk"
INPUT_FILE_ENCODING = "utf-8-sig"
RUN_SPEC_VERSION = 1
