"""SQLite-backed sales table.

This module owns the store connection, the sales table definition,
per-file transactions, and read-back of stored rows for the SDK.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator

from core.config import SalesConfig
from core.constants import SALES_TABLE_NAME
from core.errors import SalesStoreConnectionError, SalesStoreError, SalesStoreWriteError
from core.logging_config import get_logger
from core.types import SaleRecord, ValueMode

_LOGGER = get_logger(__name__)


class SalesTransaction:
    """Write handle for one open file transaction.

    Only the thread that opened the transaction may use it.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        """Execute one statement and return the affected row count.

        Raises:
            SalesStoreWriteError: If SQLite rejects the statement.
        """
        try:
            cursor = self._connection.execute(sql, params)
        except sqlite3.Error as error:
            raise SalesStoreWriteError(
                f"Failed to write to the sales table: {error}. The file transaction is rolled back."
            ) from error
        return cursor.rowcount

    def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> tuple[Any, ...] | None:
        """Run a query inside the transaction and return its first row.

        Raises:
            SalesStoreError: If SQLite rejects the query.
        """
        try:
            return self._connection.execute(sql, params).fetchone()
        except sqlite3.Error as error:
            raise SalesStoreError(f"Failed to query the sales table: {error}.") from error


class SalesStore:
    """Persistent sales table implementation.

    This class opens the SQLite file, creates the table when absent,
    and scopes every file ingest to one transaction.
    """

    def __init__(self, config: SalesConfig) -> None:
        """Open the store connection.

        Args:
            config: Runtime configuration.

        Raises:
            SalesStoreConnectionError: If the database cannot be opened.
        """
        self._config = config
        self._connection = _open_connection(config)

    @property
    def db_path(self) -> str:
        """Database file location."""
        return str(self._config.db_path)

    def ensure_table(self, value_mode: ValueMode) -> None:
        """Create the sales table if it does not exist yet.

        The value column type follows the value mode of the first run
        that creates the table. Existing tables are never altered.

        Raises:
            SalesStoreConnectionError: If the table cannot be created.
        """
        value_type = "INTEGER" if value_mode is ValueMode.NUMERIC else "TEXT"
        try:
            self._connection.execute(
                f"CREATE TABLE IF NOT EXISTS {SALES_TABLE_NAME} ("
                "id INTEGER PRIMARY KEY, address TEXT, suburb TEXT, "
                f"date DATE, value {value_type})"
            )
        except sqlite3.Error as error:
            raise SalesStoreConnectionError(
                f"Failed to prepare table '{SALES_TABLE_NAME}' in {self.db_path}: {error}."
            ) from error
        _LOGGER.info("sales_table_ready", db_path=self.db_path, value_type=value_type)

    @contextmanager
    def transaction(self) -> Iterator[SalesTransaction]:
        """Scope writes to one all-or-nothing transaction.

        Commits when the block exits normally and rolls back on any
        exception, which is re-raised.

        Raises:
            SalesStoreConnectionError: If the transaction cannot begin.
            SalesStoreWriteError: If the commit fails.
        """
        try:
            self._connection.execute("BEGIN")
        except sqlite3.Error as error:
            raise SalesStoreConnectionError(
                f"Failed to begin a transaction on {self.db_path}: {error}."
            ) from error
        try:
            yield SalesTransaction(self._connection)
        except BaseException:
            self._connection.rollback()
            raise
        try:
            self._connection.commit()
        except sqlite3.Error as error:
            self._connection.rollback()
            raise SalesStoreWriteError(
                f"Failed to commit sales transaction on {self.db_path}: {error}."
            ) from error

    def list_sales(self) -> list[SaleRecord]:
        """Load every stored sale ordered by id.

        A store whose table was never created holds no sales.

        Raises:
            SalesStoreError: If the table cannot be read.
        """
        if not self._table_exists():
            return []
        try:
            rows = self._connection.execute(
                f"SELECT id, address, suburb, date, value FROM {SALES_TABLE_NAME} ORDER BY id"
            ).fetchall()
        except sqlite3.Error as error:
            raise SalesStoreError(
                f"Failed to read table '{SALES_TABLE_NAME}' from {self.db_path}: {error}."
            ) from error
        return [_record_from_row(row) for row in rows]

    def _table_exists(self) -> bool:
        try:
            row = self._connection.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
                (SALES_TABLE_NAME,),
            ).fetchone()
        except sqlite3.Error as error:
            raise SalesStoreConnectionError(
                f"Failed to inspect sales store at {self.db_path}: {error}."
            ) from error
        return row is not None

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection.close()

    def __enter__(self) -> "SalesStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _open_connection(config: SalesConfig) -> sqlite3.Connection:
    """Open an autocommit connection so transactions are explicit.

    Raises:
        SalesStoreConnectionError: If SQLite cannot open the file.
    """
    db_path = config.db_path
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(db_path), isolation_level=None)
    except (OSError, sqlite3.Error) as error:
        raise SalesStoreConnectionError(
            f"Failed to open sales store at {db_path}: {error}. "
            "Check the output path and its permissions."
        ) from error


def _record_from_row(row: tuple[Any, ...]) -> SaleRecord:
    record_id, address, suburb, raw_date, value = row
    return SaleRecord(
        id=int(record_id),
        address=address,
        suburb=suburb,
        date=date.fromisoformat(str(raw_date)),
        value=value,
    )
