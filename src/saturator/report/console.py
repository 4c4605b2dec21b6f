"""Rich console rendering of a run's summary statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from saturator.metrics.models import HistogramBucket, SummaryStatistics

HISTOGRAM_BAR_WIDTH = 30


def _ms(value: float | None) -> str:
    return "-" if value is None else f"{value:.2f} ms"


def build_results_table(summary: SummaryStatistics) -> Table:
    """Build the main results table.

    Percentile rows are only present when latencies were recorded.
    """
    table = Table(
        title="Results",
        show_header=True,
        header_style="bold green",
        expand=True,
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Target URL", summary.target_url)
    table.add_row("Warm-up Requests", str(summary.warmup_requests))
    table.add_row("Total Requests", str(summary.total_requests))
    table.add_row("Successful", str(summary.total_successful))
    table.add_row("Failed", str(summary.total_failed))
    table.add_row("Success Rate", f"{summary.success_rate:.2f}%")
    table.add_row("Total Duration", f"{summary.duration_secs:.2f} s")
    table.add_row("Requests/sec", f"{summary.rps:.2f}")
    table.add_row("Average Latency", _ms(summary.avg_latency_ms))

    if summary.has_latencies:
        table.add_row("p50 Latency", _ms(summary.p50))
        table.add_row("p90 Latency", _ms(summary.p90))
        table.add_row("p95 Latency", _ms(summary.p95))
        table.add_row("p99 Latency", _ms(summary.p99))

    table.add_row("Data Received", f"{summary.total_mb:.2f} MB")
    table.add_row("Throughput", f"{summary.throughput_mbps:.2f} Mbps")
    return table


def build_status_table(summary: SummaryStatistics) -> Table:
    """Build the status code distribution table, most frequent first."""
    table = Table(
        title="Status Code Distribution",
        show_header=True,
        header_style="bold cyan",
        expand=True,
    )
    table.add_column("Status")
    table.add_column("Requests", justify="right")

    ordered = sorted(summary.status_codes.items(), key=lambda item: (-item[1], item[0]))
    for label, count in ordered:
        table.add_row(label, str(count))
    return table


def format_histogram(buckets: tuple[HistogramBucket, ...]) -> list[str]:
    """Render histogram buckets as text bars scaled to the sample count."""
    total = sum(bucket.count for bucket in buckets)
    lines: list[str] = []
    for bucket in buckets:
        width = bucket.count * HISTOGRAM_BAR_WIDTH // total if total else 0
        bar = "#" * width
        lines.append(
            f"  {bucket.lower_ms:8.2f}ms - {bucket.upper_ms:8.2f}ms  "
            f"[{bar:<{HISTOGRAM_BAR_WIDTH}}] {bucket.count}"
        )
    return lines


def render_summary(summary: SummaryStatistics, console: Console) -> None:
    """Print the full report: results, status codes and histogram."""
    console.print(build_results_table(summary))

    if summary.status_codes:
        console.print(build_status_table(summary))

    if summary.histogram:
        console.print("\n[bold]Latency Histogram:[/bold]")
        for line in format_histogram(summary.histogram):
            console.print(line, markup=False, highlight=False)
