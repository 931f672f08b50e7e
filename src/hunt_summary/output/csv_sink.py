from __future__ import annotations

import csv
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from hunt_summary.core.errors import SinkWriteError
from hunt_summary.core.text import parse_bool_text, parse_int_text
from hunt_summary.match.models import MatchSummary, PlayerRecord

logger = logging.getLogger(__name__)

FILENAME_FORMAT = "%Y-%m-%d_%H-%M-%S"

FIELDNAMES: tuple[str, ...] = (
    "team",
    "player",
    "name",
    "profile_id",
    "mmr",
    "kills",
    "deaths",
    "assists",
    "survived",
    "own_team",
)


def _index_offset(zero_based: bool) -> int:
    return 0 if zero_based else 1


def player_to_row(player: PlayerRecord, *, zero_based: bool) -> dict[str, object]:
    offset = _index_offset(zero_based)
    return {
        "team": player.team_index + offset,
        "player": player.player_index + offset,
        "name": player.display_name,
        "profile_id": player.profile_id,
        "mmr": player.mmr,
        "kills": player.kills,
        "deaths": player.deaths,
        "assists": player.assists,
        "survived": int(player.survived),
        "own_team": int(player.is_own_team),
    }


def row_to_player(row: dict[str, str], *, zero_based: bool) -> PlayerRecord:
    offset = _index_offset(zero_based)
    return PlayerRecord(
        team_index=parse_int_text(row["team"]) - offset,
        player_index=parse_int_text(row["player"]) - offset,
        display_name=row.get("name") or "",
        profile_id=row.get("profile_id") or "",
        mmr=parse_int_text(row["mmr"]),
        kills=parse_int_text(row.get("kills") or "0"),
        deaths=parse_int_text(row.get("deaths") or "0"),
        assists=parse_int_text(row.get("assists") or "0"),
        survived=parse_bool_text(row.get("survived") or ""),
        is_own_team=parse_bool_text(row.get("own_team") or ""),
    )


def write_rows_atomic(
    path: Path,
    fieldnames: tuple[str, ...],
    rows: list[dict[str, object]],
) -> None:
    """Write a CSV next to `path` and move it into place, so readers never see half a table."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".hunt-summary-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def list_tables(output_dir: Path, *, exclude: tuple[str, ...] = ()) -> list[Path]:
    """CSV tables in `output_dir`, oldest first by modification time."""

    if not output_dir.is_dir():
        return []
    excluded = {name.lower() for name in exclude}
    tables = [
        p
        for p in output_dir.iterdir()
        if p.is_file() and p.suffix.lower() == ".csv" and p.name.lower() not in excluded
    ]
    tables.sort(key=lambda p: p.stat().st_mtime_ns)
    return tables


@dataclass(frozen=True)
class CsvMatchSink:
    """Writes one timestamped CSV table per emitted match into `output_dir`."""

    output_dir: Path

    def table_path_for(self, timestamp: datetime) -> Path:
        stem = timestamp.strftime(FILENAME_FORMAT)
        candidate = self.output_dir / f"{stem}.csv"
        n = 1
        while candidate.exists():
            candidate = self.output_dir / f"{stem}_{n}.csv"
            n += 1
        return candidate

    def write(
        self,
        summary: MatchSummary,
        *,
        zero_based: bool,
        timestamp: datetime,
        replace: Path | None = None,
    ) -> Path:
        """
        Write `summary` as a table and return its path.

        With `replace`, the given table is rewritten in place instead of creating a
        new timestamped file. Any OS-level failure is raised as SinkWriteError.
        """
        rows = [player_to_row(p, zero_based=zero_based) for p in summary.players]

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = replace if replace is not None else self.table_path_for(timestamp)
            write_rows_atomic(path, FIELDNAMES, rows)
        except OSError as e:
            raise SinkWriteError(f"Could not write match table to {self.output_dir}: {e}") from e

        logger.info("Wrote %d player rows to %s", len(rows), path)
        return path

    def read_table(self, path: Path, *, zero_based: bool) -> list[PlayerRecord]:
        with path.open(newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            return [row_to_player(row, zero_based=zero_based) for row in reader]

    def latest_table(self, *, exclude: tuple[str, ...] = ()) -> Path | None:
        tables = list_tables(self.output_dir, exclude=exclude)
        return tables[-1] if tables else None
