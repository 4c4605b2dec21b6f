"""``saturator run`` — fire a batch of requests and report the statistics."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from saturator._internal.config import LoadConfig, load_defaults
from saturator._internal.errors import ConfigError, SaturatorError
from saturator._internal.logging import setup_logging
from saturator.cli.progress import build_progress, observer_factory
from saturator.engine.runner import run_load_test
from saturator.report.console import render_summary
from saturator.report.files import save_reports
from saturator.request.descriptor import (
    HttpMethod,
    RequestDescriptor,
    parse_auth,
    parse_header,
)

console = Console(stderr=True)
report_console = Console()


def _build_config(
    url: str,
    requests: int | None,
    concurrency: int | None,
    method: HttpMethod,
    auth: str | None,
    headers: list[str],
    body: str | None,
    content_type: str,
    timeout: float | None,
    warmup: int | None,
    insecure: bool,
    output: bool,
    output_dir: Path,
) -> tuple[LoadConfig, int]:
    """Merge CLI flags over environment defaults.

    The warm-up size is resolved here, once, so the start panel, the
    dispatched warm-up batch and the report all echo the same value.

    Returns:
        The validated LoadConfig and the connection pool size.

    Raises:
        ConfigError: If a flag or environment variable is invalid.
    """
    defaults = load_defaults()

    descriptor = RequestDescriptor(
        url=url,
        method=method,
        auth=parse_auth(auth) if auth else None,
        headers=tuple(parse_header(h) for h in headers),
        body=body,
        content_type=content_type,
        timeout=timeout if timeout is not None else defaults.request_timeout,
    )
    config = LoadConfig(
        target=descriptor,
        total_requests=requests if requests is not None else defaults.total_requests,
        concurrency=concurrency if concurrency is not None else defaults.concurrency,
        warmup_requests=warmup,
        insecure=insecure,
        save_report=output,
        output_dir=output_dir,
    )
    config.validate()
    config = replace(config, warmup_requests=config.resolve_warmup())
    return config, defaults.pool_size


def run_cmd(
    url: str = typer.Argument(
        ...,
        help="Target URL.",
    ),
    requests: int | None = typer.Option(
        None,
        "--requests",
        "-n",
        help="Total measured requests (default: 100 or $SATURATOR_REQUESTS).",
        min=0,
    ),
    concurrency: int | None = typer.Option(
        None,
        "--concurrency",
        "-c",
        help="Maximum requests in flight (default: 10 or $SATURATOR_CONCURRENCY).",
        min=1,
    ),
    method: HttpMethod = typer.Option(
        HttpMethod.GET,
        "--method",
        "-m",
        help="HTTP method.",
        case_sensitive=False,
    ),
    auth: str | None = typer.Option(
        None,
        "--auth",
        help="Credential as scheme:value, scheme one of bearer, oauth2, apikey, basic.",
    ),
    header: list[str] | None = typer.Option(
        None,
        "--header",
        "-H",
        help="Extra header as 'Name: value'. Repeatable.",
    ),
    body: str | None = typer.Option(
        None,
        "--body",
        "-b",
        help="Request body.",
    ),
    content_type: str = typer.Option(
        "application/json",
        "--content-type",
        help="Content-Type sent with --body.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Per-request timeout in seconds (default: 30 or $SATURATOR_TIMEOUT).",
    ),
    warmup: int | None = typer.Option(
        None,
        "--warmup",
        "-w",
        help="Discarded warm-up requests (default: 5% of --requests).",
        min=0,
    ),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        "-k",
        help="Skip TLS certificate verification.",
    ),
    output: bool = typer.Option(
        False,
        "--output",
        "-o",
        help="Also write JSON and CSV reports.",
    ),
    output_dir: Path = typer.Option(
        Path("."),
        "--output-dir",
        help="Directory for JSON and CSV reports.",
        file_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit logs as JSON lines.",
    ),
) -> None:
    """Fire a batch of requests at a URL and report latency and throughput."""
    setup_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        json_format=log_json,
    )

    try:
        config, pool_size = _build_config(
            url=url,
            requests=requests,
            concurrency=concurrency,
            method=method,
            auth=auth,
            headers=header or [],
            body=body,
            content_type=content_type,
            timeout=timeout,
            warmup=warmup,
            insecure=insecure,
            output=output,
            output_dir=output_dir,
        )
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(
        Panel(
            f"[bold]Target:[/bold]      {config.target.method.value} {config.target.url}\n"
            f"[bold]Requests:[/bold]    {config.total_requests}\n"
            f"[bold]Concurrency:[/bold] {config.concurrency}\n"
            f"[bold]Warm-up:[/bold]     {config.warmup_requests}",
            title="Saturator",
            border_style="cyan",
        )
    )

    try:
        with build_progress(console) as progress:
            result = run_load_test(
                config,
                observer_for=observer_factory(progress),
                pool_size=pool_size,
            )
    except SaturatorError as exc:
        console.print(f"[red]Setup failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    render_summary(result.summary, report_console)

    if config.save_report:
        json_path, csv_path = save_reports(result.summary, config.output_dir)
        console.print(f"[green]Reports written:[/green] {json_path} {csv_path}")

    console.print("[green]Load test completed.[/green]")
