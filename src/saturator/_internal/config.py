"""Configuration for Saturator runs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from saturator._internal.errors import ConfigError
from saturator.request.descriptor import RequestDescriptor

# Warm-up size when none is given, as a percentage of the measured requests.
DEFAULT_WARMUP_PERCENT = 5


@dataclass(frozen=True)
class LoadConfig:
    """Settings for one load test run.

    Shared read-only by every concurrent request execution of a batch.

    Attributes:
        target: The request every unit sends.
        total_requests: Number of measured requests (N).
        concurrency: Maximum requests in flight at once (C).
        warmup_requests: Discarded requests sent before the measured batch.
            None means 5% of ``total_requests``.
        insecure: Skip TLS certificate verification.
        save_report: Persist JSON and CSV reports after the run.
        output_dir: Directory the persisted reports are written to.
    """

    target: RequestDescriptor
    total_requests: int = 100
    concurrency: int = 10
    warmup_requests: int | None = None
    insecure: bool = False
    save_report: bool = False
    output_dir: Path = field(default_factory=Path.cwd)

    def validate(self) -> None:
        """Check the settings before anything is dispatched.

        Raises:
            ConfigError: If any value is out of range.
        """
        if not self.target.url:
            msg = "target URL must not be empty"
            raise ConfigError(msg)
        if self.total_requests < 0:
            msg = f"total requests must be >= 0, got: {self.total_requests}"
            raise ConfigError(msg)
        if self.concurrency < 1:
            msg = f"concurrency must be >= 1, got: {self.concurrency}"
            raise ConfigError(msg)
        if self.warmup_requests is not None and self.warmup_requests < 0:
            msg = f"warm-up requests must be >= 0, got: {self.warmup_requests}"
            raise ConfigError(msg)
        if self.target.timeout <= 0:
            msg = f"timeout must be positive, got: {self.target.timeout}"
            raise ConfigError(msg)

    def resolve_warmup(self) -> int:
        """Return the warm-up size, deriving it from N when unset."""
        if self.warmup_requests is not None:
            return self.warmup_requests
        return self.total_requests * DEFAULT_WARMUP_PERCENT // 100


@dataclass(frozen=True)
class SaturatorDefaults:
    """Environment-level defaults that command-line flags override.

    Attributes:
        total_requests: Default number of measured requests.
        concurrency: Default concurrency limit.
        request_timeout: Default per-request timeout in seconds.
        pool_size: aiohttp connector limit.
    """

    total_requests: int = 100
    concurrency: int = 10
    request_timeout: float = 30.0
    pool_size: int = 100


def _read_int(name: str, default: int, minimum: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got: {raw!r}"
        raise ConfigError(msg) from None
    if value < minimum:
        msg = f"{name} must be >= {minimum}, got: {value}"
        raise ConfigError(msg)
    return value


def load_defaults() -> SaturatorDefaults:
    """Load defaults from environment variables.

    Environment variables:
        SATURATOR_REQUESTS: Measured request count (default: 100).
        SATURATOR_CONCURRENCY: Concurrency limit (default: 10).
        SATURATOR_TIMEOUT: Per-request timeout in seconds (default: 30.0).
        SATURATOR_POOL_SIZE: Connection pool size (default: 100).

    Returns:
        Populated SaturatorDefaults instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    timeout_str = os.environ.get("SATURATOR_TIMEOUT", "30.0")
    try:
        timeout = float(timeout_str)
    except ValueError:
        msg = f"SATURATOR_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if timeout <= 0:
        msg = f"SATURATOR_TIMEOUT must be positive, got: {timeout}"
        raise ConfigError(msg)

    return SaturatorDefaults(
        total_requests=_read_int("SATURATOR_REQUESTS", 100, minimum=0),
        concurrency=_read_int("SATURATOR_CONCURRENCY", 10, minimum=1),
        request_timeout=timeout,
        pool_size=_read_int("SATURATOR_POOL_SIZE", 100, minimum=1),
    )
