"""Business eligibility filter for sale records.

This module applies the value threshold, street-type suffix exclusion,
and periodic downsampling rules. The first two are pure per-record
predicates; the downsampling counter belongs to whichever sequential
unit calls ``BusinessFilter.apply``, so splitting a file into chunks
changes which records it drops.
"""

from __future__ import annotations

from typing import Iterable

from core.errors import SalesConfigError
from core.types import FilterRules, SaleRecord


class PeriodicSampler:
    """Rolling counter that rejects every Nth candidate.

    A period of 0 disables sampling. Periods are validated by
    ``BusinessFilter``.
    """

    def __init__(self, period: int) -> None:
        self._period = period
        self._count = 0

    def admit(self) -> bool:
        """Advance the counter and return whether the candidate survives."""
        if self._period == 0:
            return True
        self._count += 1
        if self._count == self._period:
            self._count = 0
            return False
        return True


class BusinessFilter:
    """Decide which deduplicated records are persisted."""

    def __init__(self, rules: FilterRules | None = None) -> None:
        self._rules = rules or FilterRules()
        _validate_rules(self._rules)

    def is_eligible(self, record: SaleRecord) -> bool:
        """Apply the order-independent predicates to one record.

        Args:
            record: Record with a numeric value.

        Returns:
            True when the value meets the threshold and the address
            does not end with an excluded street type.
        """
        if not isinstance(record.value, int):
            raise SalesConfigError(
                f"Business filter requires numeric values, got {record.value!r} "
                f"for id {record.id}. Ingest with value mode 'numeric'."
            )
        if record.value < self._rules.min_value:
            return False
        trimmed_address = record.address.strip()
        return not trimmed_address.endswith(self._rules.excluded_suffixes)

    def apply(self, records: Iterable[SaleRecord]) -> list[SaleRecord]:
        """Filter one sequential unit with a fresh periodic counter.

        Args:
            records: Records of one unit, in unit order.

        Returns:
            Accepted records in unit order.
        """
        sampler = PeriodicSampler(self._rules.drop_every)
        accepted: list[SaleRecord] = []
        for record in records:
            if not self.is_eligible(record):
                continue
            if not sampler.admit():
                continue
            accepted.append(record)
        return accepted


def _validate_rules(rules: FilterRules) -> None:
    if rules.drop_every < 0:
        raise SalesConfigError(
            f"Invalid drop_every value {rules.drop_every}: use 0 to disable "
            "or a positive period."
        )
