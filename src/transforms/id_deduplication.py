"""Identifier-level duplicate removal transform.

This module drops every record whose id occurs more than once within
one file. No occurrence is chosen as authoritative, so an ambiguous id
has no effect on the store for that file.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from core.types import SaleRecord


def count_ids(records: Iterable[SaleRecord]) -> Counter[int]:
    """Count how often each id occurs.

    Args:
        records: Parsed records of one file.

    Returns:
        Occurrence count keyed by id.
    """
    return Counter(record.id for record in records)


def find_duplicate_ids(records: Sequence[SaleRecord]) -> set[int]:
    """Return ids that occur more than once."""
    return {record_id for record_id, count in count_ids(records).items() if count > 1}


def drop_duplicate_ids(records: Sequence[SaleRecord]) -> list[SaleRecord]:
    """Keep only records whose id occurs exactly once.

    Args:
        records: Parsed records of one file, in file order.

    Returns:
        Order-preserving subset with every duplicated id removed.
    """
    id_counts = count_ids(records)
    return [record for record in records if id_counts[record.id] == 1]
