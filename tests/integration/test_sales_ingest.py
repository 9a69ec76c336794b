"""Integration tests for the end-to-end sales ingest workflow."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

from core.config import SalesConfig
from core.errors import SalesRowError
from core.types import FilterRules, IngestOptions, PeriodicScope, UpsertMode
from salesdb import SalesClient
from tests.fixture_paths import fixture_path

_HEADER = "id,address,suburb,date,value\n"


def _client(tmp_path: Path, workers: int = 4) -> SalesClient:
    config = replace(SalesConfig.from_env(), db_path=tmp_path / "output.db", workers=workers)
    return SalesClient(config)


def _write_csv(path: Path, rows: list[str]) -> str:
    path.write_text(_HEADER + "".join(f"{row}\n" for row in rows), encoding="utf-8")
    return str(path)


def _bulk_rows(count: int) -> list[str]:
    return [
        f"{record_id},{record_id} Long ST,Suburb{record_id % 7},"
        f"{record_id % 12 + 1}/{record_id % 28 + 1}/21,{400000 + record_id * 1000}"
        for record_id in range(1, count + 1)
    ]


def test_end_to_end_example_leaves_store_empty(tmp_path: Path) -> None:
    """Duplicate id 1 and below-threshold id 2 should store nothing."""
    client = _client(tmp_path)

    report = client.ingest(IngestOptions(file_paths=(str(fixture_path("sales/end_to_end.csv")),)))

    assert report.files[0].dropped_duplicate_count == 2 and report.accepted_count == 0
    assert client.list_sales() == []


def test_insert_ignore_ingest_is_idempotent(tmp_path: Path) -> None:
    """Ingesting the same file twice should leave the store unchanged."""
    client = _client(tmp_path)
    options = IngestOptions(
        file_paths=(str(fixture_path("sales/valid_sales.csv")),),
        upsert_mode=UpsertMode.INSERT_IGNORE,
        filter_rules=FilterRules(drop_every=0),
    )

    client.ingest(options)
    first = client.list_sales()
    second_report = client.ingest(options)

    assert client.list_sales() == first
    assert second_report.files[0].upsert_stats.ignored == len(first)


def test_malformed_row_in_middle_rolls_back_whole_file(tmp_path: Path) -> None:
    """A malformed row 50 of 100 should leave nothing from that file stored."""
    client = _client(tmp_path)
    rows = _bulk_rows(100)
    rows[49] = "50,50 Long ST,Suburb1,not-a-date,450000"
    source_path = _write_csv(tmp_path / "broken.csv", rows)

    with pytest.raises(SalesRowError) as error_info:
        client.ingest(IngestOptions(file_paths=(source_path,), apply_filter=False))

    assert error_info.value.line_number == 51
    assert client.list_sales() == []


def test_refresh_mode_keeps_earliest_date_across_files(tmp_path: Path) -> None:
    """Earlier incoming dates should refresh the row; later ones should not."""
    client = _client(tmp_path)
    seed = _write_csv(tmp_path / "seed.csv", ["1,1 First ST,Kew,1/10/20,500000"])
    later = _write_csv(tmp_path / "later.csv", ["1,1 Later ST,Kew,1/15/20,600000"])
    earlier = _write_csv(tmp_path / "earlier.csv", ["1,1 Earlier ST,Kew,1/5/20,700000"])
    options = IngestOptions(
        file_paths=(seed, later),
        upsert_mode=UpsertMode.INSERT_IGNORE_REFRESH_IF_OLDER,
    )

    client.ingest(options)
    after_later = client.list_sales()[0]
    client.ingest(replace(options, file_paths=(earlier,)))
    after_earlier = client.list_sales()[0]

    assert (after_later.address, after_later.date) == ("1 First ST", date(2020, 1, 10))
    assert (after_earlier.address, after_earlier.date) == ("1 Earlier ST", date(2020, 1, 5))


@pytest.mark.parametrize("scope", [PeriodicScope.CHUNK, PeriodicScope.FILE])
def test_results_invariant_to_worker_count_without_periodic_rule(
    tmp_path: Path,
    scope: PeriodicScope,
) -> None:
    """Disabling the periodic rule should make worker count irrelevant."""
    source_path = _write_csv(tmp_path / "bulk.csv", _bulk_rows(120))
    stored: list[list[int]] = []
    for workers in (1, 4):
        client = _client(tmp_path / f"w{workers}", workers=workers)
        client.ingest(
            IngestOptions(
                file_paths=(source_path,),
                filter_rules=FilterRules(drop_every=0),
                periodic_scope=scope,
            )
        )
        stored.append([record.id for record in client.list_sales()])

    assert stored[0] == stored[1] and len(stored[0]) == 120


def test_chunk_scope_periodic_rule_differs_by_bounded_amount(tmp_path: Path) -> None:
    """With chunk scope the accepted counts differ by at most one per chunk."""
    source_path = _write_csv(tmp_path / "bulk.csv", _bulk_rows(95))
    counts: dict[int, int] = {}
    for workers in (1, 4):
        client = _client(tmp_path / f"w{workers}", workers=workers)
        report = client.ingest(IngestOptions(file_paths=(source_path,)))
        counts[workers] = report.accepted_count

    assert counts[1] == 95 - 9
    assert abs(counts[1] - counts[4]) <= 4


def test_file_scope_periodic_rule_ignores_worker_count(tmp_path: Path) -> None:
    """File scope should apply the periodic rule once per file."""
    source_path = _write_csv(tmp_path / "bulk.csv", _bulk_rows(95))
    stored: list[list[int]] = []
    for workers in (1, 4):
        client = _client(tmp_path / f"w{workers}", workers=workers)
        client.ingest(IngestOptions(file_paths=(source_path,), periodic_scope=PeriodicScope.FILE))
        stored.append([record.id for record in client.list_sales()])

    assert stored[0] == stored[1] and len(stored[0]) == 86


def test_purge_mode_removes_ids_seen_again(tmp_path: Path) -> None:
    """Ids arriving again in a later file should be purged from the store."""
    client = _client(tmp_path)
    first = _write_csv(
        tmp_path / "first.csv",
        ["1,1 One ST,Kew,1/1/20,500000", "2,2 Two ST,Kew,1/1/20,500000"],
    )
    second = _write_csv(tmp_path / "second.csv", ["2,2 Two ST,Kew,2/1/20,500000"])

    client.ingest(
        IngestOptions(
            file_paths=(first, second),
            upsert_mode=UpsertMode.INSERT_IGNORE_PURGE_ON_CONFLICT,
        )
    )

    assert [record.id for record in client.list_sales()] == [1]


def test_later_file_failure_keeps_earlier_commits(tmp_path: Path) -> None:
    """Files before the failing one should remain committed."""
    client = _client(tmp_path)
    good = _write_csv(tmp_path / "good.csv", ["1,1 One ST,Kew,1/1/20,500000"])
    bad = _write_csv(tmp_path / "bad.csv", ["2,2 Two ST,Kew,1/1/20"])
    never = _write_csv(tmp_path / "never.csv", ["3,3 Three ST,Kew,1/1/20,500000"])

    with pytest.raises(SalesRowError):
        client.ingest(IngestOptions(file_paths=(good, bad, never)))

    assert [record.id for record in client.list_sales()] == [1]
