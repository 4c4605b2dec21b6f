"""Outcome and summary dataclasses for Saturator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "CSV_FIELDS",
    "HistogramBucket",
    "HttpFailure",
    "NetworkFailure",
    "Outcome",
    "RunResult",
    "Success",
    "SummaryStatistics",
    "TaskFailure",
]


@dataclass(frozen=True)
class Success:
    """A 2xx response.

    Attributes:
        status_code: HTTP status code.
        latency_ms: Time from send to full response, in milliseconds.
        byte_size: Response payload size in bytes.
    """

    status_code: int
    latency_ms: float
    byte_size: int = 0


@dataclass(frozen=True)
class HttpFailure:
    """A response outside the 2xx class.

    Attributes:
        status_code: HTTP status code.
        latency_ms: Time from send to full response, in milliseconds.
        byte_size: Response payload size in bytes.
    """

    status_code: int
    latency_ms: float
    byte_size: int = 0


@dataclass(frozen=True)
class NetworkFailure:
    """No response was received (connection, timeout or TLS error)."""

    error: str


@dataclass(frozen=True)
class TaskFailure:
    """The execution unit itself failed unexpectedly."""

    error: str


Outcome = Success | HttpFailure | NetworkFailure | TaskFailure


@dataclass(frozen=True)
class HistogramBucket:
    """One latency histogram bucket.

    Attributes:
        lower_ms: Inclusive lower bound in milliseconds.
        upper_ms: Upper bound in milliseconds. Exclusive for every bucket
            except the last, whose upper bound is the maximum latency.
        count: Number of latencies in the bucket.
    """

    lower_ms: float
    upper_ms: float
    count: int


# Column order of the persisted CSV report.
CSV_FIELDS = (
    "target_url",
    "total_requests",
    "total_successful",
    "total_failed",
    "avg_latency_ms",
    "success_rate",
    "duration_secs",
    "rps",
    "p50",
    "p90",
    "p95",
    "p99",
    "total_mb",
    "throughput_mbps",
)


@dataclass(frozen=True)
class SummaryStatistics:
    """Aggregate statistics of one measured batch, computed once.

    Latency fields are None when no latency sample was recorded (for
    example when every request failed at the network level).

    Attributes:
        target_url: URL that was load tested.
        total_requests: Outcomes processed.
        total_successful: 2xx responses.
        total_failed: Everything else.
        success_rate: Successful share in percent, 2 decimals.
        duration_secs: Wall-clock duration of the measured batch.
        rps: Requests per second.
        avg_latency_ms: Mean latency.
        p50: 50th percentile latency (nearest rank).
        p90: 90th percentile latency (nearest rank).
        p95: 95th percentile latency (nearest rank).
        p99: 99th percentile latency (nearest rank).
        total_bytes: Response bytes received.
        total_mb: Response megabytes received (10^6 bytes), 2 decimals.
        throughput_mbps: Megabits per second, 2 decimals.
        status_codes: Occurrences keyed by status label, read-only.
        histogram: Ten latency buckets, empty without samples.
        warmup_requests: Discarded warm-up requests sent before the batch.
    """

    target_url: str
    total_requests: int
    total_successful: int
    total_failed: int
    success_rate: float
    duration_secs: float
    rps: float
    avg_latency_ms: float | None = None
    p50: float | None = None
    p90: float | None = None
    p95: float | None = None
    p99: float | None = None
    total_bytes: int = 0
    total_mb: float = 0.0
    throughput_mbps: float = 0.0
    status_codes: Mapping[str, int] = field(default_factory=dict)
    histogram: tuple[HistogramBucket, ...] = ()
    warmup_requests: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "status_codes", MappingProxyType(dict(self.status_codes)))

    @property
    def has_latencies(self) -> bool:
        """True when at least one latency sample was recorded."""
        return self.p50 is not None

    def to_record(self) -> dict[str, Any]:
        """Return the flat row written to the CSV report.

        Floats are rounded to 2 decimals; undefined latencies are None.
        """
        return {
            "target_url": self.target_url,
            "total_requests": self.total_requests,
            "total_successful": self.total_successful,
            "total_failed": self.total_failed,
            "avg_latency_ms": _round(self.avg_latency_ms),
            "success_rate": round(self.success_rate, 2),
            "duration_secs": round(self.duration_secs, 2),
            "rps": round(self.rps, 2),
            "p50": _round(self.p50),
            "p90": _round(self.p90),
            "p95": _round(self.p95),
            "p99": _round(self.p99),
            "total_mb": round(self.total_mb, 2),
            "throughput_mbps": round(self.throughput_mbps, 2),
        }

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON report: the CSV row plus nested details."""
        data = self.to_record()
        data["status_codes"] = dict(self.status_codes)
        data["total_bytes"] = self.total_bytes
        data["warmup_requests"] = self.warmup_requests
        data["histogram"] = [asdict(bucket) for bucket in self.histogram]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SummaryStatistics:
        """Rebuild statistics from a ``to_dict()`` payload.

        Raises:
            KeyError: If a required key is missing.
        """
        return cls(
            target_url=data["target_url"],
            total_requests=int(data["total_requests"]),
            total_successful=int(data["total_successful"]),
            total_failed=int(data["total_failed"]),
            success_rate=float(data["success_rate"]),
            duration_secs=float(data["duration_secs"]),
            rps=float(data["rps"]),
            avg_latency_ms=data.get("avg_latency_ms"),
            p50=data.get("p50"),
            p90=data.get("p90"),
            p95=data.get("p95"),
            p99=data.get("p99"),
            total_bytes=int(data.get("total_bytes", 0)),
            total_mb=float(data.get("total_mb", 0.0)),
            throughput_mbps=float(data.get("throughput_mbps", 0.0)),
            status_codes={str(k): int(v) for k, v in data.get("status_codes", {}).items()},
            histogram=tuple(HistogramBucket(**b) for b in data.get("histogram", [])),
            warmup_requests=int(data.get("warmup_requests", 0)),
        )


def _round(value: float | None) -> float | None:
    return None if value is None else round(value, 2)


@dataclass
class RunResult:
    """Complete result of a load test run.

    Attributes:
        summary: Statistics of the measured batch.
        warmup_requests: Warm-up size that was dispatched.
        peak_in_flight: Highest number of concurrently running requests
            observed during the measured batch.
    """

    summary: SummaryStatistics
    warmup_requests: int = 0
    peak_in_flight: int = 0
