"""Single request/response cycle with timing and outcome classification."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from saturator._internal.errors import TransportError
from saturator._internal.logging import get_logger
from saturator.engine.protocol import NullObserver
from saturator.metrics.models import HttpFailure, NetworkFailure, Success

if TYPE_CHECKING:
    from saturator.engine.protocol import ProgressObserver, Transport
    from saturator.metrics.models import Outcome
    from saturator.request.descriptor import RequestDescriptor

logger = get_logger("engine.executor")


def is_success_status(status_code: int) -> bool:
    """True for 2xx status codes."""
    return 200 <= status_code < 300


class RequestExecutor:
    """Runs one request through a transport and classifies the result.

    No retries are attempted: a transport failure is terminal for the
    request slot and comes back as ``NetworkFailure``. Anything else the
    transport raises propagates to the caller, which records it as a task
    failure.
    """

    def __init__(
        self,
        transport: Transport,
        observer: ProgressObserver | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            transport: Shared transport performing the HTTP exchange.
            observer: Notified once per ``execute()`` call.
        """
        self._transport = transport
        self._observer = observer or NullObserver()

    async def execute(self, descriptor: RequestDescriptor) -> Outcome:
        """Send one request and return its classified outcome.

        Args:
            descriptor: The request to send.

        Returns:
            ``Success`` for 2xx, ``HttpFailure`` for other statuses,
            ``NetworkFailure`` when no response was received.
        """
        start = time.monotonic()
        try:
            meta = await self._transport.send(descriptor)
        except TransportError as exc:
            logger.debug("Request to %s failed: %s", descriptor.url, exc)
            return NetworkFailure(error=str(exc))
        else:
            latency_ms = (time.monotonic() - start) * 1000
            outcome_cls = Success if is_success_status(meta.status_code) else HttpFailure
            return outcome_cls(
                status_code=meta.status_code,
                latency_ms=latency_ms,
                byte_size=meta.content_length or 0,
            )
        finally:
            self._observer.on_request_completed()
