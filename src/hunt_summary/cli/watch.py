from __future__ import annotations

from pathlib import Path

import typer

from hunt_summary.cli.common import resolve_settings
from hunt_summary.core.config import SupersedingPolicy
from hunt_summary.output.csv_sink import CsvMatchSink
from hunt_summary.watch.history import ProcessedHistory, resume_history
from hunt_summary.watch.loop import PollStatus, WatchConfig, WatchLoop

EXIT_NO_NEW_MATCH = 1
EXIT_FAILED = 2


def watch_cmd(
    input_path: Path | None = typer.Option(
        None, "--input", "-i", help="Path of 'attributes.xml'.", dir_okay=False
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Output directory [default: ~/Documents/Hunt/MatchData].",
        file_okay=False,
    ),
    single: bool = typer.Option(
        False, "--single", "-s", help="Check only once for a new match instead of watching."
    ),
    zero_based: bool = typer.Option(
        False, "--zero-based", "-z", help="Zero-based numbering for teams and players."
    ),
    temp_file: str | None = typer.Option(
        None, "--temp-file", help="Filename of the marker file kept in the output directory."
    ),
    poll_interval: float | None = typer.Option(
        None, "--poll-interval", min=0.1, help="Seconds between checks of the input file."
    ),
    superseding_policy: SupersedingPolicy | None = typer.Option(
        None,
        "--superseding-policy",
        help="What to do when the last match is rewritten with corrected stats.",
        case_sensitive=False,
    ),
    no_resume: bool = typer.Option(
        False, "--no-resume", help="Ignore the marker file and tables left by a previous run."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level (e.g. DEBUG)."),
) -> None:
    """Extract player match data (including MMR) from 'attributes.xml' into CSV tables."""

    s = resolve_settings(
        input_path=input_path,
        output_dir=output_dir,
        single=single or None,
        zero_based=zero_based or None,
        temp_file=temp_file,
        poll_interval_s=poll_interval,
        superseding_policy=superseding_policy,
        resume_from_marker=False if no_resume else None,
        log_level=log_level,
    )

    sink = CsvMatchSink(output_dir=s.output_dir)
    history = ProcessedHistory()
    if s.resume_from_marker:
        history = resume_history(s.marker_path, sink, zero_based=s.zero_based)

    loop = WatchLoop(config=WatchConfig.from_settings(s), sink=sink, history=history)

    if s.single:
        result = loop.run_once()
        if result.emitted:
            typer.echo(f"New player summary saved: '{result.output_path}'")
            return
        if result.status in (PollStatus.UNCHANGED, PollStatus.DUPLICATE):
            typer.echo("No new match.")
            raise typer.Exit(code=EXIT_NO_NEW_MATCH)
        typer.echo(f"No summary written ({result.status.value}): {result.error}", err=True)
        raise typer.Exit(code=EXIT_FAILED)

    typer.echo(f"Watching for changes to '{s.input_path}'...")
    try:
        loop.run()
    except KeyboardInterrupt:
        typer.echo("Stopped.")
