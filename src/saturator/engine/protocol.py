"""Interfaces between the engine and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from saturator.request.descriptor import RequestDescriptor


@dataclass(frozen=True)
class ResponseMeta:
    """What the engine needs to know about a received response.

    Attributes:
        status_code: HTTP status code.
        content_length: Response payload size in bytes, None if unknown.
    """

    status_code: int
    content_length: int | None = None


class Transport(Protocol):
    """Performs one request/response cycle.

    Implementations raise ``TransportError`` when no response is received
    and must be safe to share across concurrently running units.
    """

    async def send(self, descriptor: RequestDescriptor) -> ResponseMeta: ...


class ProgressObserver(Protocol):
    """Notified once per completed request, whatever its outcome."""

    def on_request_completed(self) -> None: ...


class NullObserver:
    """Progress observer that ignores every notification."""

    def on_request_completed(self) -> None:
        """Do nothing."""
