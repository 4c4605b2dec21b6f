"""Top-level load test orchestration: warm-up and measured phases."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from saturator._internal.logging import get_logger
from saturator.engine.admission import AdmissionController
from saturator.engine.executor import RequestExecutor
from saturator.engine.protocol import NullObserver
from saturator.metrics.accumulator import ResultAccumulator
from saturator.metrics.models import RunResult, TaskFailure
from saturator.metrics.statistics import compute_summary
from saturator.request.transport import HttpTransport

if TYPE_CHECKING:
    from collections.abc import Callable

    from saturator._internal.config import LoadConfig
    from saturator.engine.protocol import ProgressObserver, Transport
    from saturator.metrics.models import Outcome
    from saturator.request.descriptor import RequestDescriptor

    ObserverFactory = Callable[[str, int], ProgressObserver]

logger = get_logger("engine.runner")

WARMUP_PHASE = "warmup"
MEASURED_PHASE = "measured"


def _null_observer_for(phase: str, total: int) -> ProgressObserver:
    return NullObserver()


class PhaseController:
    """Runs an optional warm-up batch, then the measured batch.

    Each batch launches every execution unit up front; the admission
    controller inside each unit keeps at most ``concurrency`` requests in
    flight. Outcomes are merged by this controller alone, in completion
    order, after the unit's permit has been released.

    Attributes:
        config: Settings of the run.
        admission: Concurrency gate shared by both phases.
    """

    def __init__(
        self,
        config: LoadConfig,
        transport: Transport,
        *,
        observer_for: ObserverFactory | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Settings of the run. Validated immediately.
            transport: Transport shared by every unit.
            observer_for: Builds the progress observer of a phase from the
                phase name and its request count.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        config.validate()
        self.config = config
        self.admission = AdmissionController(config.concurrency)
        self._transport = transport
        self._observer_for = observer_for or _null_observer_for

    async def run(self) -> RunResult:
        """Execute warm-up (if any) and the measured batch.

        Returns:
            RunResult holding the measured batch statistics.
        """
        warmup = self.config.resolve_warmup()
        total = self.config.total_requests

        logger.info(
            "Starting load test: url=%s, requests=%d, concurrency=%d, warmup=%d",
            self.config.target.url,
            total,
            self.config.concurrency,
            warmup,
        )

        if warmup > 0:
            await self.run_batch(
                warmup,
                self._observer_for(WARMUP_PHASE, warmup),
                phase=WARMUP_PHASE,
                discard=True,
            )
            logger.info("Warm-up finished: %d requests discarded", warmup)

        self.admission.reset_peak()
        accumulator = await self.run_batch(
            total,
            self._observer_for(MEASURED_PHASE, total),
            phase=MEASURED_PHASE,
        )
        summary = compute_summary(
            accumulator,
            target_url=self.config.target.url,
            warmup_requests=warmup,
        )

        logger.info(
            "Load test completed: duration=%.2fs, total_requests=%d, rps=%.1f, "
            "success_rate=%.2f%%",
            summary.duration_secs,
            summary.total_requests,
            summary.rps,
            summary.success_rate,
        )

        return RunResult(
            summary=summary,
            warmup_requests=warmup,
            peak_in_flight=self.admission.peak_in_flight,
        )

    async def run_batch(
        self,
        count: int,
        observer: ProgressObserver | None = None,
        *,
        phase: str = MEASURED_PHASE,
        discard: bool = False,
    ) -> ResultAccumulator:
        """Dispatch ``count`` requests and collect their outcomes.

        Waits for every unit regardless of individual outcome. A unit that
        raises is recorded as a ``TaskFailure`` instead of aborting the batch.

        Args:
            count: Number of requests in the batch.
            observer: Notified once per completed request.
            phase: Phase name attached to the batch log records.
            discard: Drop outcomes instead of merging them (warm-up).

        Returns:
            A finished accumulator. Empty when ``count`` is 0 or ``discard``
            is set.
        """
        accumulator = ResultAccumulator()
        if count == 0:
            accumulator.finish(0.0)
            return accumulator

        executor = RequestExecutor(self._transport, observer)
        descriptor = self.config.target

        logger.debug(
            "Dispatching %s batch of %d requests",
            phase,
            count,
            extra={"phase": phase, "batch_size": count, "concurrency": self.admission.limit},
        )

        start = time.monotonic()
        tasks = [
            asyncio.create_task(self._run_unit(executor, descriptor), name=f"request-{i}")
            for i in range(count)
        ]

        for next_done in asyncio.as_completed(tasks):
            try:
                outcome: Outcome = await next_done
            except Exception as exc:
                logger.debug("Execution unit failed", exc_info=True)
                outcome = TaskFailure(error=f"{type(exc).__name__}: {exc}")
            if not discard:
                accumulator.merge(outcome)

        accumulator.finish(time.monotonic() - start)
        return accumulator

    async def _run_unit(
        self,
        executor: RequestExecutor,
        descriptor: RequestDescriptor,
    ) -> Outcome:
        """One execution unit: wait for a permit, send, release."""
        permit = await self.admission.acquire()
        try:
            return await executor.execute(descriptor)
        finally:
            permit.release()


async def _run(
    config: LoadConfig,
    observer_for: ObserverFactory | None,
    pool_size: int,
) -> RunResult:
    async with HttpTransport(
        insecure=config.insecure,
        pool_size=max(pool_size, config.concurrency),
    ) as transport:
        controller = PhaseController(config, transport, observer_for=observer_for)
        return await controller.run()


def run_load_test(
    config: LoadConfig,
    *,
    observer_for: ObserverFactory | None = None,
    pool_size: int = 100,
) -> RunResult:
    """Run a complete load test against a real HTTP target.

    Validates the configuration, opens a pooled aiohttp transport and runs
    the warm-up and measured phases on a fresh event loop.

    Args:
        config: Settings of the run.
        observer_for: Progress observer factory, see ``PhaseController``.
        pool_size: Connection pool size; raised to the concurrency if lower.

    Returns:
        RunResult holding the measured batch statistics.

    Raises:
        ConfigError: If the configuration is invalid.
        SetupError: If the HTTP client cannot be created.
    """
    config.validate()
    return asyncio.run(_run(config, observer_for, pool_size))
