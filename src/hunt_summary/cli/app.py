from __future__ import annotations

import typer

from hunt_summary.cli.inspect_match import inspect_cmd
from hunt_summary.cli.watch import watch_cmd

app = typer.Typer(
    no_args_is_help=True,
    help="Extract Hunt: Showdown player match data (including hidden MMR) into CSV tables.",
)
app.command("watch")(watch_cmd)
app.command("inspect")(inspect_cmd)

if __name__ == "__main__":
    app()
