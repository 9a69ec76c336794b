"""Concurrent business filtering with single-writer fan-in.

This module splits a deduplicated record set into contiguous chunks,
filters each chunk on its own worker thread, and funnels accepted
records through a bounded queue into one consumer that owns the store
transaction. Record arrival order across workers is not defined.
"""

from __future__ import annotations

import math
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Sequence

from core.config import clamp_worker_count
from core.constants import DEFAULT_QUEUE_SIZE, QUEUE_POLL_SECONDS
from core.logging_config import get_logger
from core.types import PeriodicScope, SaleRecord
from transforms.business_filter import BusinessFilter

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class FilterPipelineStats:
    """Outcome of one pipeline run.

    Attributes:
        chunk_count: Number of sequential filter units.
        candidate_count: Records offered to the filter.
        accepted_count: Records delivered to the consumer.
    """

    chunk_count: int
    candidate_count: int
    accepted_count: int


def partition_records(
    records: Sequence[SaleRecord],
    workers: int,
) -> list[Sequence[SaleRecord]]:
    """Split records into contiguous chunks, one per worker.

    Chunks hold ``ceil(n / workers)`` records except a possibly smaller
    last chunk. Boundaries depend only on ``n`` and ``workers``.

    Args:
        records: Deduplicated records in file order.
        workers: Requested worker count, clamped to at least 1.

    Returns:
        Non-empty chunks covering every record exactly once.
    """
    if not records:
        return []
    chunk_size = math.ceil(len(records) / clamp_worker_count(workers))
    return [records[start : start + chunk_size] for start in range(0, len(records), chunk_size)]


_END_OF_STREAM = None


class _CompletionLatch:
    """Countdown shared by producers; only the last one sees it reach zero."""

    def __init__(self, count: int) -> None:
        self._remaining = count
        self._lock = threading.Lock()

    def count_down(self) -> bool:
        """Record one finished producer and return whether it was the last."""
        with self._lock:
            self._remaining -= 1
            return self._remaining == 0


class ConcurrentFilterPipeline:
    """Parallel filter stage feeding a single consumer.

    With ``PeriodicScope.CHUNK`` every chunk keeps its own periodic
    counter, so the worker count is a parameter of which records the
    downsampling rule drops. ``PeriodicScope.FILE`` filters the whole
    file as one unit, trading parallelism for worker-count independence.
    """

    def __init__(
        self,
        business_filter: BusinessFilter,
        workers: int,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        periodic_scope: PeriodicScope = PeriodicScope.CHUNK,
    ) -> None:
        self._business_filter = business_filter
        self._workers = clamp_worker_count(workers)
        self._queue_size = max(queue_size, 1)
        self._periodic_scope = periodic_scope

    def run(
        self,
        records: Sequence[SaleRecord],
        consume: Callable[[SaleRecord], None],
    ) -> FilterPipelineStats:
        """Filter records concurrently and hand accepted ones to ``consume``.

        ``consume`` runs on the calling thread only. If it raises, workers
        stop emitting, their remaining output is discarded, and the error
        propagates once every worker has returned.

        Args:
            records: Deduplicated records in file order.
            consume: Writer callback invoked once per accepted record.

        Returns:
            Pipeline counters.

        Raises:
            Exception: The first consumer error, else the first worker error.
        """
        chunks = self._partition(records)
        accepted_count = 0
        if chunks:
            accepted_count = self._fan_in(chunks, consume)
        stats = FilterPipelineStats(
            chunk_count=len(chunks),
            candidate_count=len(records),
            accepted_count=accepted_count,
        )
        _LOGGER.info(
            "filter_pipeline_completed",
            workers=self._workers,
            periodic_scope=self._periodic_scope.value,
            chunk_count=stats.chunk_count,
            candidate_count=stats.candidate_count,
            accepted_count=stats.accepted_count,
        )
        return stats

    def _partition(self, records: Sequence[SaleRecord]) -> list[Sequence[SaleRecord]]:
        if self._periodic_scope is PeriodicScope.FILE:
            return partition_records(records, 1)
        return partition_records(records, self._workers)

    def _fan_in(
        self,
        chunks: list[Sequence[SaleRecord]],
        consume: Callable[[SaleRecord], None],
    ) -> int:
        handoff: queue.Queue[SaleRecord | None] = queue.Queue(maxsize=self._queue_size)
        latch = _CompletionLatch(len(chunks))
        abort = threading.Event()
        with ThreadPoolExecutor(
            max_workers=len(chunks),
            thread_name_prefix="sales-filter",
        ) as pool:
            futures = [
                pool.submit(self._filter_chunk, chunk, handoff, latch, abort) for chunk in chunks
            ]
            try:
                accepted_count = _drain(handoff, abort, consume)
            except BaseException:
                abort.set()
                raise
        for future in futures:
            future.result()
        return accepted_count

    def _filter_chunk(
        self,
        chunk: Sequence[SaleRecord],
        handoff: queue.Queue[SaleRecord | None],
        latch: _CompletionLatch,
        abort: threading.Event,
    ) -> int:
        try:
            accepted = self._business_filter.apply(chunk)
            for record in accepted:
                if not _emit(handoff, record, abort):
                    break
            return len(accepted)
        except BaseException:
            abort.set()
            raise
        finally:
            # Every other producer has enqueued its last record by now.
            if latch.count_down():
                _emit(handoff, _END_OF_STREAM, abort)


def _emit(
    handoff: queue.Queue[SaleRecord | None],
    item: SaleRecord | None,
    abort: threading.Event,
) -> bool:
    """Block until the item is enqueued or the run is aborted.

    Returns:
        False when the item was discarded because of an abort.
    """
    while not abort.is_set():
        try:
            handoff.put(item, timeout=QUEUE_POLL_SECONDS)
            return True
        except queue.Full:
            continue
    return False


def _drain(
    handoff: queue.Queue[SaleRecord | None],
    abort: threading.Event,
    consume: Callable[[SaleRecord], None],
) -> int:
    """Consume records until the end-of-stream marker arrives.

    The marker is enqueued by the last producer to finish, after every
    accepted record, so reaching it means the queue has been drained.
    The timed wait only serves to notice an abort.

    Returns:
        Number of records passed to ``consume``.
    """
    consumed = 0
    while not abort.is_set():
        try:
            item = handoff.get(timeout=QUEUE_POLL_SECONDS)
        except queue.Empty:
            continue
        if item is _END_OF_STREAM:
            break
        consume(item)
        consumed += 1
    return consumed
