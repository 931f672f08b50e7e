from __future__ import annotations

import csv
import io
from datetime import UTC, datetime
from pathlib import Path

import typer

from hunt_summary.attributes.decoder import decode_attribute_document, read_attribute_file
from hunt_summary.cli.common import resolve_settings
from hunt_summary.core.errors import HuntSummaryError, format_failure_reason
from hunt_summary.match.extractor import extract_match_summary
from hunt_summary.output.csv_sink import FIELDNAMES, player_to_row


def inspect_cmd(
    input_path: Path | None = typer.Option(
        None, "--input", "-i", help="Path of 'attributes.xml'.", dir_okay=False
    ),
    zero_based: bool = typer.Option(
        False, "--zero-based", "-z", help="Zero-based numbering for teams and players."
    ),
) -> None:
    """Print the players of the current match without writing any files."""

    s = resolve_settings(input_path=input_path, zero_based=zero_based or None)

    try:
        raw, marker = read_attribute_file(s.input_path)
        summary = extract_match_summary(
            decode_attribute_document(raw),
            match_timestamp=datetime.fromtimestamp(marker.mtime_ns / 1_000_000_000, tz=UTC),
        )
    except HuntSummaryError as e:
        typer.echo(format_failure_reason(e), err=True)
        raise typer.Exit(code=2) from e

    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=FIELDNAMES, lineterminator="\n")
    writer.writeheader()
    for player in summary.players:
        writer.writerow(player_to_row(player, zero_based=s.zero_based))

    typer.echo(buf.getvalue(), nl=False)
    typer.echo(
        " ".join(
            [
                f"match_time={summary.match_timestamp.isoformat()}",
                f"teams={summary.num_teams}",
                f"players={len(summary.players)}",
                f"fingerprint={summary.source_fingerprint[:12]}",
            ]
        )
    )
