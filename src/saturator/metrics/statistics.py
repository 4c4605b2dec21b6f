"""Summary statistics derived from a finished ``ResultAccumulator``.

Every function here is pure: the same accumulator always yields the same
``SummaryStatistics``. Percentiles use the nearest-rank method (no
interpolation), so for small samples several ranks share one index; that
is expected.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from saturator.metrics.models import HistogramBucket, SummaryStatistics

if TYPE_CHECKING:
    from collections.abc import Sequence

    from saturator.metrics.accumulator import ResultAccumulator

PERCENTILE_RANKS = (50, 90, 95, 99)
HISTOGRAM_BUCKETS = 10

_BITS_PER_MEGABIT = 1_000_000
_BYTES_PER_MEGABYTE = 1_000_000


def nearest_rank_percentiles(
    latencies_ms: Sequence[float],
    ranks: Sequence[int] = PERCENTILE_RANKS,
) -> dict[int, float]:
    """Compute nearest-rank percentiles.

    For rank ``p`` the value is the sorted sample at index
    ``floor(len * p / 100)``, clamped to the last index.

    Args:
        latencies_ms: Latency samples in any order.
        ranks: Integer percentile ranks.

    Returns:
        Mapping of rank to latency, empty when there are no samples.
    """
    if len(latencies_ms) == 0:
        return {}

    ordered = np.sort(np.asarray(latencies_ms, dtype=np.float64))
    count = len(ordered)
    return {p: float(ordered[min(count * p // 100, count - 1)]) for p in ranks}


def average_latency(latencies_ms: Sequence[float]) -> float | None:
    """Mean latency, or None without samples."""
    if len(latencies_ms) == 0:
        return None
    return float(np.mean(np.asarray(latencies_ms, dtype=np.float64)))


def requests_per_second(total_requests: int, duration_seconds: float) -> float:
    """Processed requests divided by batch duration; 0 for a zero duration."""
    if duration_seconds <= 0:
        return 0.0
    return total_requests / duration_seconds


def throughput_mbps(total_bytes: int, duration_seconds: float) -> float:
    """Received megabits per second, rounded to 2 decimals."""
    if duration_seconds <= 0:
        return 0.0
    megabits = total_bytes * 8 / _BITS_PER_MEGABIT
    return round(megabits / duration_seconds, 2)


def latency_histogram(
    latencies_ms: Sequence[float],
    bucket_count: int = HISTOGRAM_BUCKETS,
) -> tuple[HistogramBucket, ...]:
    """Split latencies into fixed-width buckets spanning ``[min, max]``.

    Buckets are ``[lower, upper)`` except the last, which is ``[lower, max]``,
    so every sample lands in exactly one bucket. When all samples are equal
    the width is zero and they all land in the last bucket.

    Args:
        latencies_ms: Latency samples in any order.
        bucket_count: Number of buckets.

    Returns:
        The buckets in ascending order, empty when there are no samples.
    """
    if len(latencies_ms) == 0:
        return ()

    samples = np.asarray(latencies_ms, dtype=np.float64)
    low = float(samples.min())
    high = float(samples.max())
    width = (high - low) / bucket_count

    edges = [low + i * width for i in range(bucket_count)] + [high]
    # Index of a sample = number of interior edges at or below it.
    indices = np.searchsorted(np.asarray(edges[1:-1]), samples, side="right")
    counts = np.bincount(indices, minlength=bucket_count)

    return tuple(
        HistogramBucket(lower_ms=edges[i], upper_ms=edges[i + 1], count=int(counts[i]))
        for i in range(bucket_count)
    )


def compute_summary(
    accumulator: ResultAccumulator,
    *,
    target_url: str = "",
    warmup_requests: int = 0,
) -> SummaryStatistics:
    """Derive the summary statistics of a finished batch.

    Args:
        accumulator: A finished accumulator.
        target_url: URL echoed in the report.
        warmup_requests: Warm-up size echoed in the report.

    Returns:
        Immutable statistics for the batch.

    Raises:
        ValueError: If the accumulator has not been finished.
    """
    if not accumulator.finished:
        msg = "statistics require a finished accumulator"
        raise ValueError(msg)

    latencies = accumulator.latencies_ms
    total = accumulator.processed
    duration = accumulator.duration_seconds
    percentiles = nearest_rank_percentiles(latencies)
    success_rate = accumulator.success_count / total * 100 if total > 0 else 0.0

    return SummaryStatistics(
        target_url=target_url,
        total_requests=total,
        total_successful=accumulator.success_count,
        total_failed=accumulator.failure_count,
        success_rate=round(success_rate, 2),
        duration_secs=duration,
        rps=requests_per_second(total, duration),
        avg_latency_ms=average_latency(latencies),
        p50=percentiles.get(50),
        p90=percentiles.get(90),
        p95=percentiles.get(95),
        p99=percentiles.get(99),
        total_bytes=accumulator.total_bytes,
        total_mb=round(accumulator.total_bytes / _BYTES_PER_MEGABYTE, 2),
        throughput_mbps=throughput_mbps(accumulator.total_bytes, duration),
        status_codes=accumulator.status_codes,
        histogram=latency_histogram(latencies),
        warmup_requests=warmup_requests,
    )
