"""``saturator report`` — re-render a saved JSON report on the console."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from saturator.report.console import render_summary
from saturator.report.files import read_json

console = Console(stderr=True)
report_console = Console()


def report_cmd(
    report_file: Path = typer.Argument(
        ...,
        help="JSON report written by 'saturator run --output'.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the results of a previously saved run."""
    try:
        summary = read_json(report_file)
    except ValueError as exc:
        console.print(f"[red]Invalid report:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    render_summary(summary, report_console)
