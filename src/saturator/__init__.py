"""Saturator — fire N HTTP requests under a concurrency limit and measure them."""

from __future__ import annotations

from saturator._internal.config import LoadConfig
from saturator._internal.errors import (
    ConfigError,
    SaturatorError,
    SetupError,
    TransportError,
)
from saturator.engine.runner import PhaseController, run_load_test
from saturator.metrics.models import RunResult, SummaryStatistics
from saturator.request.descriptor import Auth, AuthScheme, HttpMethod, RequestDescriptor

__version__ = "0.1.0"

__all__ = [
    "Auth",
    "AuthScheme",
    "ConfigError",
    "HttpMethod",
    "LoadConfig",
    "PhaseController",
    "RequestDescriptor",
    "RunResult",
    "SaturatorError",
    "SetupError",
    "SummaryStatistics",
    "TransportError",
    "run_load_test",
]
