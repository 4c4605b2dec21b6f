"""Mutable per-batch aggregate fed by request outcomes."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from saturator._internal.logging import get_logger
from saturator.metrics.models import HttpFailure, NetworkFailure, Success, TaskFailure

if TYPE_CHECKING:
    from saturator.metrics.models import Outcome

logger = get_logger("metrics.accumulator")

NETWORK_ERROR_LABEL = "Network Error"
TASK_ERROR_LABEL = "Task Error"


class ResultAccumulator:
    """Aggregates the outcomes of one batch.

    ``merge()`` is serialized by a ``threading.Lock`` so outcomes may be
    merged from any thread or coroutine without losing an increment. Once
    ``finish()`` has recorded the batch duration the accumulator is sealed
    and only read by the statistics engine.

    Invariants:
        ``success_count + failure_count == processed`` and the status code
        counts sum to the same number.
    """

    def __init__(self) -> None:
        """Initialize an empty accumulator."""
        self._lock = threading.Lock()
        self._latencies_ms: list[float] = []
        self._status_codes: dict[str, int] = {}
        self._success_count = 0
        self._failure_count = 0
        self._total_bytes = 0
        self._duration_seconds = 0.0
        self._finished = False

    def merge(self, outcome: Outcome) -> None:
        """Fold one outcome into the aggregate.

        Args:
            outcome: The classified result of one request.

        Raises:
            RuntimeError: If the accumulator was already finished.
            TypeError: If ``outcome`` is not an Outcome variant.
        """
        with self._lock:
            if self._finished:
                msg = "cannot merge into a finished accumulator"
                raise RuntimeError(msg)

            if isinstance(outcome, (Success, HttpFailure)):
                if isinstance(outcome, Success):
                    self._success_count += 1
                else:
                    self._failure_count += 1
                self._latencies_ms.append(outcome.latency_ms)
                self._total_bytes += outcome.byte_size
                label = str(outcome.status_code)
            elif isinstance(outcome, NetworkFailure):
                self._failure_count += 1
                label = NETWORK_ERROR_LABEL
            elif isinstance(outcome, TaskFailure):
                self._failure_count += 1
                label = TASK_ERROR_LABEL
            else:
                msg = f"unsupported outcome: {outcome!r}"
                raise TypeError(msg)

            self._status_codes[label] = self._status_codes.get(label, 0) + 1

    def finish(self, duration_seconds: float) -> None:
        """Record the batch wall-clock duration and seal the accumulator."""
        with self._lock:
            self._duration_seconds = duration_seconds
            self._finished = True
        logger.debug(
            "Accumulator finished: processed=%d, duration=%.3fs",
            self.processed,
            duration_seconds,
        )

    @property
    def finished(self) -> bool:
        """True once ``finish()`` has been called."""
        return self._finished

    @property
    def latencies_ms(self) -> list[float]:
        """Copy of the recorded latencies, in merge order."""
        with self._lock:
            return list(self._latencies_ms)

    @property
    def status_codes(self) -> dict[str, int]:
        """Copy of the status label counts."""
        with self._lock:
            return dict(self._status_codes)

    @property
    def success_count(self) -> int:
        return self._success_count

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def processed(self) -> int:
        """Number of outcomes merged so far."""
        return self._success_count + self._failure_count

    @property
    def total_bytes(self) -> int:
        return self._total_bytes

    @property
    def duration_seconds(self) -> float:
        return self._duration_seconds
