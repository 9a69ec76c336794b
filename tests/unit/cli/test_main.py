"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from cli.main import main
from core.report_format import SALES_LISTING_HEADER
from tests.fixture_paths import fixture_path


def test_cli_ingest_prints_file_summary(tmp_path: Path, capsys) -> None:
    """CLI ingest should print one summary line per committed file."""
    source_path = str(fixture_path("sales/valid_sales.csv"))
    args = ["-o", str(tmp_path / "output.db"), "ingest", source_path, "-g", "2"]

    exit_code = main(args)
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0 and len(output) == 1
    assert output[0].startswith(f"{source_path}\tparsed=6\t") and "accepted=3" in output[0]


def test_cli_list_prints_header_and_rows(tmp_path: Path, capsys) -> None:
    """CLI list should print the table header followed by stored rows."""
    db_path = str(tmp_path / "output.db")
    main(["-o", db_path, "ingest", str(fixture_path("sales/valid_sales.csv"))])
    capsys.readouterr()

    exit_code = main(["-o", db_path, "list"])
    output = capsys.readouterr().out.splitlines()

    assert exit_code == 0 and output[0] == SALES_LISTING_HEADER
    assert output[1:] == [
        "10, 1 High ST, Richmond, 2020-01-05, 450000",
        "11, 2 Low RD, Carlton, 2020-02-06, 700000",
        "15, 6 River DR, Hawthorn, 1999-06-10, 1000000",
    ]


def test_cli_list_empty_store_prints_only_header(tmp_path: Path, capsys) -> None:
    """Listing a fresh store should print just the header."""
    exit_code = main(["-o", str(tmp_path / "output.db"), "list"])

    assert exit_code == 0 and capsys.readouterr().out.splitlines() == [SALES_LISTING_HEADER]


def test_cli_ingest_malformed_file_returns_error_code(tmp_path: Path, capsys) -> None:
    """Ingest failures should exit with status 1 and report on stderr."""
    exit_code = main(
        [
            "-o",
            str(tmp_path / "output.db"),
            "ingest",
            str(fixture_path("sales/malformed_date.csv")),
        ]
    )
    captured = capsys.readouterr()

    assert exit_code == 1 and "error:" in captured.err and captured.out == ""


def test_cli_ingest_without_files_is_usage_error(tmp_path: Path) -> None:
    """Omitting input files should be an argparse usage error."""
    with pytest.raises(SystemExit) as exit_info:
        main(["-o", str(tmp_path / "output.db"), "ingest"])

    assert exit_info.value.code == 2


def test_cli_rejects_unknown_upsert_mode(tmp_path: Path) -> None:
    """Unsupported mode names should fail argument parsing."""
    with pytest.raises(SystemExit) as exit_info:
        main(
            [
                "-o",
                str(tmp_path / "output.db"),
                "ingest",
                str(fixture_path("sales/valid_sales.csv")),
                "--upsert-mode",
                "merge",
            ]
        )

    assert exit_info.value.code == 2


def test_cli_no_filter_text_mode_stores_every_unique_record(tmp_path: Path, capsys) -> None:
    """Disabling the filter should allow text value mode."""
    db_path = str(tmp_path / "output.db")
    exit_code = main(
        [
            "-o",
            db_path,
            "ingest",
            str(fixture_path("sales/valid_sales.csv")),
            "--no-filter",
            "--value-mode",
            "text",
        ]
    )
    capsys.readouterr()
    main(["-o", db_path, "list"])

    assert exit_code == 0 and len(capsys.readouterr().out.splitlines()) == 7


@pytest.mark.parametrize(
    "row",
    [
        "99999999999999999999,1 High ST,Kew,1/2/20,500000",
        "1,1 High ST,Kew,1/2/20,99999999999999999999",
    ],
)
def test_cli_ingest_oversized_integer_returns_error_code(
    tmp_path: Path,
    capsys,
    row: str,
) -> None:
    """Integers SQLite cannot store should fail the file with status 1."""
    source_path = tmp_path / "oversized.csv"
    source_path.write_text(f"id,address,suburb,date,value\n{row}\n", encoding="utf-8")
    db_path = str(tmp_path / "output.db")

    exit_code = main(["-o", db_path, "ingest", str(source_path)])
    captured = capsys.readouterr()
    main(["-o", db_path, "list"])

    assert exit_code == 1 and "64-bit" in captured.err
    assert capsys.readouterr().out.splitlines() == [SALES_LISTING_HEADER]
