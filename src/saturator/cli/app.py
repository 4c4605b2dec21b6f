"""Main Typer application — entry point for the ``saturator`` CLI."""

from __future__ import annotations

import typer

from saturator import __version__
from saturator.cli.report import report_cmd
from saturator.cli.run import run_cmd

app = typer.Typer(
    name="saturator",
    help="Saturate an HTTP endpoint with concurrent requests and measure it.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Run a load test against a URL.")(run_cmd)
app.command("report", help="Show a saved JSON report.")(report_cmd)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"saturator {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Saturator — HTTP load generator with percentile reporting."""
