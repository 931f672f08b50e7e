from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import Path

from hunt_summary.attributes.types import SourceMarker
from hunt_summary.core.errors import HistoryError
from hunt_summary.match.fingerprint import compute_fingerprint, compute_roster_key
from hunt_summary.match.models import MatchSummary
from hunt_summary.output.csv_sink import CsvMatchSink, write_rows_atomic

logger = logging.getLogger(__name__)

_MARKER_FIELDS: tuple[str, ...] = ("key", "value")


@dataclass(frozen=True)
class ProcessedHistory:
    """
    What was last emitted. Owned by the watch loop and passed to the detector.
    A new value is produced per emission; instances are never mutated.
    """
    fingerprint: str | None = None
    roster_key: str | None = None
    marker: SourceMarker | None = None
    output_path: Path | None = None
    emitted_at: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return self.fingerprint is None

    def advance(
        self,
        summary: MatchSummary,
        *,
        marker: SourceMarker,
        output_path: Path,
        emitted_at: datetime,
    ) -> ProcessedHistory:
        return replace(
            self,
            fingerprint=summary.source_fingerprint,
            roster_key=summary.roster_key,
            marker=marker,
            output_path=output_path,
            emitted_at=emitted_at,
        )


def _history_to_rows(history: ProcessedHistory) -> list[dict[str, object]]:
    values: dict[str, object] = {
        "fingerprint": history.fingerprint or "",
        "roster_key": history.roster_key or "",
        "mtime_ns": history.marker.mtime_ns if history.marker else "",
        "size": history.marker.size if history.marker else "",
        "output_path": str(history.output_path) if history.output_path else "",
        "emitted_at": history.emitted_at.isoformat() if history.emitted_at else "",
    }
    return [{"key": k, "value": v} for k, v in values.items()]


def save_history(path: Path, history: ProcessedHistory) -> None:
    write_rows_atomic(path, _MARKER_FIELDS, _history_to_rows(history))


def load_history(path: Path) -> ProcessedHistory:
    """Read a marker file. Missing file -> empty history; unreadable content -> HistoryError."""

    if not path.exists():
        return ProcessedHistory()

    try:
        with path.open(newline="", encoding="utf-8") as f:
            values = {row["key"]: row["value"] for row in csv.DictReader(f)}
    except (OSError, KeyError, UnicodeDecodeError, csv.Error) as e:
        raise HistoryError(f"Could not read marker file {path}: {e}") from e

    try:
        marker = None
        if values.get("mtime_ns") and values.get("size"):
            marker = SourceMarker(mtime_ns=int(values["mtime_ns"]), size=int(values["size"]))

        emitted_at = None
        if values.get("emitted_at"):
            emitted_at = datetime.fromisoformat(values["emitted_at"])

        return ProcessedHistory(
            fingerprint=values.get("fingerprint") or None,
            roster_key=values.get("roster_key") or None,
            marker=marker,
            output_path=Path(values["output_path"]) if values.get("output_path") else None,
            emitted_at=emitted_at,
        )
    except ValueError as e:
        raise HistoryError(f"Marker file {path} holds invalid values: {e}") from e


def history_from_latest_table(
    sink: CsvMatchSink,
    *,
    zero_based: bool,
    exclude: tuple[str, ...] = (),
) -> ProcessedHistory:
    """
    Rebuild a history from the newest table in the output directory.

    Used when no marker file exists, so a restart does not re-emit the match that
    was already written. The source marker stays unknown.
    """
    table = sink.latest_table(exclude=exclude)
    if table is None:
        return ProcessedHistory()

    try:
        players = sink.read_table(table, zero_based=zero_based)
    except (OSError, KeyError, ValueError, csv.Error) as e:
        logger.warning("Ignoring unreadable table %s: %s", table, e)
        return ProcessedHistory()

    if not players:
        return ProcessedHistory()

    return ProcessedHistory(
        fingerprint=compute_fingerprint(players),
        roster_key=compute_roster_key(players),
        output_path=table,
        emitted_at=datetime.fromtimestamp(table.stat().st_mtime, tz=UTC),
    )


def resume_history(
    marker_path: Path,
    sink: CsvMatchSink,
    *,
    zero_based: bool,
) -> ProcessedHistory:
    try:
        history = load_history(marker_path)
    except HistoryError as e:
        logger.warning("%s; starting with an empty history", e)
        return ProcessedHistory()

    if not history.is_empty:
        logger.info("Resumed history from %s (last table: %s)", marker_path, history.output_path)
        return history

    history = history_from_latest_table(sink, zero_based=zero_based, exclude=(marker_path.name,))
    if not history.is_empty:
        logger.info("Seeded history from latest table %s", history.output_path)
    return history
