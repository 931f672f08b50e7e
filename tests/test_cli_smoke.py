from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from helpers import sample_match_entries, write_attributes
from hunt_summary.cli.app import app

T0 = 1_760_000_000 * 1_000_000_000


def test_cli_help_smoke() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "watch" in result.stdout
    assert "inspect" in result.stdout


def test_single_run_writes_table_then_reports_no_new_match(tmp_path: Path) -> None:
    source = tmp_path / "attributes.xml"
    out_dir = tmp_path / "MatchData"
    write_attributes(source, sample_match_entries(), mtime_ns=T0)
    args = ["watch", "--single", "--input", str(source), "--output-dir", str(out_dir)]

    runner = CliRunner()
    first = runner.invoke(app, args)
    assert first.exit_code == 0, first.output
    assert "New player summary saved" in first.stdout
    assert (out_dir / "TEMP.CSV").exists()

    second = runner.invoke(app, args)
    assert second.exit_code == 1
    assert "No new match." in second.stdout
    assert len([p for p in out_dir.glob("*.csv") if p.name != "TEMP.CSV"]) == 1


def test_single_run_with_unreadable_input_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "watch",
            "--single",
            "--input",
            str(tmp_path / "missing.xml"),
            "--output-dir",
            str(tmp_path / "MatchData"),
        ],
    )
    assert result.exit_code == 2


def test_inspect_prints_zero_based_rows(tmp_path: Path) -> None:
    source = tmp_path / "attributes.xml"
    write_attributes(source, sample_match_entries(), mtime_ns=T0)

    runner = CliRunner()
    result = runner.invoke(app, ["inspect", "--input", str(source), "--zero-based"])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0].startswith("team,player,name,profile_id,mmr")
    assert lines[1].startswith("0,0,Solo Hunter,111,2650,2")
    assert "players=3" in lines[-1]
    assert not list(tmp_path.glob("*.csv"))
