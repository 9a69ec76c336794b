"""Conflict-resolution policies for sales writes.

This module maps each ``UpsertMode`` to the statements issued inside a
file transaction. Modes are mutually exclusive philosophies: keep the
stored row, keep the row with the earliest date, keep the incoming row,
or purge ids that collide with stored rows.
"""

from __future__ import annotations

from core.constants import SALES_TABLE_NAME
from core.logging_config import get_logger
from core.types import SaleRecord, UpsertMode, UpsertStats
from store.sales_store import SalesTransaction

_LOGGER = get_logger(__name__)

_INSERT_IGNORE_SQL = f"INSERT OR IGNORE INTO {SALES_TABLE_NAME} VALUES (?, ?, ?, ?, ?)"
_INSERT_REPLACE_SQL = f"INSERT OR REPLACE INTO {SALES_TABLE_NAME} VALUES (?, ?, ?, ?, ?)"
_EXISTS_SQL = f"SELECT 1 FROM {SALES_TABLE_NAME} WHERE id = ?"
_REFRESH_IF_NOT_NEWER_SQL = (
    f"UPDATE {SALES_TABLE_NAME} SET address = ?, suburb = ?, date = ?, value = ? "
    "WHERE id = ? AND date >= ?"
)
_DELETE_SQL = f"DELETE FROM {SALES_TABLE_NAME} WHERE id = ?"


class UpsertWriter:
    """Apply one upsert mode to records written in a file transaction.

    Records of one file carry distinct ids, so the result does not
    depend on the order in which ``write`` is called.
    """

    def __init__(self, transaction: SalesTransaction, mode: UpsertMode) -> None:
        self._transaction = transaction
        self._mode = mode
        self._conflicting_ids: set[int] = set()
        self._inserted = 0
        self._ignored = 0
        self._replaced = 0
        self._refreshed = 0

    def write(self, record: SaleRecord) -> None:
        """Write one record according to the upsert mode.

        Args:
            record: Deduplicated, accepted record.

        Raises:
            SalesStoreWriteError: If a statement fails.
        """
        if self._mode is UpsertMode.INSERT_REPLACE:
            self._insert_or_replace(record)
            return
        inserted = self._transaction.execute(_INSERT_IGNORE_SQL, _row_params(record)) > 0
        if inserted:
            self._inserted += 1
        else:
            self._ignored += 1
        if self._mode is UpsertMode.INSERT_IGNORE_REFRESH_IF_OLDER and not inserted:
            self._refresh_if_not_newer(record)
        elif self._mode is UpsertMode.INSERT_IGNORE_PURGE_ON_CONFLICT and not inserted:
            self._conflicting_ids.add(record.id)

    def finish(self) -> UpsertStats:
        """Complete the write pass and return counters.

        In purge mode this deletes every id that collided with a stored
        row during the pass.

        Raises:
            SalesStoreWriteError: If a delete fails.
        """
        purged = 0
        for record_id in sorted(self._conflicting_ids):
            purged += self._transaction.execute(_DELETE_SQL, (record_id,))
        if purged:
            _LOGGER.info("purged_conflicting_ids", purged_count=purged)
        return UpsertStats(
            inserted=self._inserted,
            ignored=self._ignored,
            replaced=self._replaced,
            refreshed=self._refreshed,
            purged=purged,
        )

    def _insert_or_replace(self, record: SaleRecord) -> None:
        existed = self._transaction.fetch_one(_EXISTS_SQL, (record.id,)) is not None
        self._transaction.execute(_INSERT_REPLACE_SQL, _row_params(record))
        if existed:
            self._replaced += 1
        else:
            self._inserted += 1

    def _refresh_if_not_newer(self, record: SaleRecord) -> None:
        # Earliest date wins: only an incoming date <= the stored date refreshes.
        iso_date = record.date.isoformat()
        updated = self._transaction.execute(
            _REFRESH_IF_NOT_NEWER_SQL,
            (record.address, record.suburb, iso_date, record.value, record.id, iso_date),
        )
        self._refreshed += updated


def _row_params(record: SaleRecord) -> tuple[object, ...]:
    return (record.id, record.address, record.suburb, record.date.isoformat(), record.value)
