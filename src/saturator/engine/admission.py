"""Bounded-concurrency gate for request execution units."""

from __future__ import annotations

import asyncio

from saturator._internal.errors import ConfigError


class Permit:
    """A slot handed out by ``AdmissionController.acquire()``.

    Releasing returns the slot to the controller. ``release()`` is
    idempotent so it is safe to call from a ``finally`` block.
    """

    def __init__(self, controller: AdmissionController) -> None:
        self._controller = controller
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Return the slot to the controller."""
        if self._released:
            return
        self._released = True
        self._controller._release()


class AdmissionController:
    """Counting-semaphore gate allowing at most ``limit`` permits out at once.

    Waiters are woken in roughly FIFO order by ``asyncio.Semaphore``. The
    controller also tracks how many permits are outstanding and the highest
    value seen, which the engine logs and the tests assert on.

    Attributes:
        limit: Maximum outstanding permits (the concurrency C).
    """

    def __init__(self, limit: int) -> None:
        """Initialize the gate.

        Args:
            limit: Maximum outstanding permits. Must be at least 1.

        Raises:
            ConfigError: If limit is lower than 1.
        """
        if limit < 1:
            msg = f"concurrency must be >= 1, got: {limit}"
            raise ConfigError(msg)

        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def in_flight(self) -> int:
        """Permits currently outstanding."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of permits outstanding at any instant."""
        return self._peak_in_flight

    def reset_peak(self) -> None:
        """Forget the recorded peak, e.g. between warm-up and measurement."""
        self._peak_in_flight = self._in_flight

    async def acquire(self) -> Permit:
        """Wait until fewer than ``limit`` permits are out, then take one."""
        await self._semaphore.acquire()
        self._in_flight += 1
        if self._in_flight > self._peak_in_flight:
            self._peak_in_flight = self._in_flight
        return Permit(self)

    def _release(self) -> None:
        self._in_flight -= 1
        self._semaphore.release()
