"""Runtime configuration model for salesdb.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DB_PATH, DEFAULT_QUEUE_SIZE, DEFAULT_WORKER_COUNT
from core.errors import SalesConfigError


@dataclass(frozen=True)
class SalesConfig:
    """Validated runtime configuration.

    Attributes:
        db_path: SQLite file holding the sales table.
        workers: Default number of parallel filter workers, at least 1.
        queue_size: Capacity of the filter-to-writer handoff queue.
    """

    db_path: Path
    workers: int
    queue_size: int

    @classmethod
    def from_env(cls) -> "SalesConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SalesConfigError: If environment values are invalid.
        """
        db_path_value = os.getenv("SALES_DB_PATH", str(DEFAULT_DB_PATH))
        workers_value = os.getenv("SALES_WORKERS", str(DEFAULT_WORKER_COUNT))
        queue_size_value = os.getenv("SALES_QUEUE_SIZE", str(DEFAULT_QUEUE_SIZE))
        return cls(
            db_path=Path(db_path_value).expanduser(),
            workers=clamp_worker_count(_parse_int("SALES_WORKERS", workers_value)),
            queue_size=_parse_queue_size(queue_size_value),
        )


def clamp_worker_count(workers: int) -> int:
    """Clamp a requested worker count to the minimum of one."""
    return max(workers, 1)


def _parse_int(env_name: str, raw_value: str) -> int:
    """Parse an integer environment value.

    Args:
        env_name: Variable name used in the error message.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        SalesConfigError: If value cannot be parsed into int.
    """
    try:
        return int(raw_value)
    except ValueError as error:
        raise SalesConfigError(
            f"Invalid {env_name} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {env_name} to a numeric value."
        ) from error


def _parse_queue_size(raw_value: str) -> int:
    queue_size = _parse_int("SALES_QUEUE_SIZE", raw_value)
    if queue_size < 1:
        raise SalesConfigError(
            f"Invalid SALES_QUEUE_SIZE value {queue_size}: the handoff queue needs "
            "room for at least one record."
        )
    return queue_size
