"""aiohttp-backed transport shared by every unit of a run."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiohttp

from saturator._internal.errors import SetupError, TransportError
from saturator._internal.logging import get_logger
from saturator.engine.protocol import ResponseMeta

if TYPE_CHECKING:
    from saturator.request.descriptor import RequestDescriptor

logger = get_logger("request.transport")


class HttpTransport:
    """Async HTTP transport wrapping one pooled ``aiohttp.ClientSession``.

    The session is opened by ``__aenter__`` and shared by all concurrent
    units; connection pooling is left to aiohttp's ``TCPConnector``.

    Attributes:
        insecure: If True, TLS certificates are not verified.
        pool_size: Maximum simultaneous connections held by the connector.
    """

    def __init__(self, *, insecure: bool = False, pool_size: int = 100) -> None:
        """Initialize the transport.

        Args:
            insecure: Skip TLS certificate verification.
            pool_size: Connector limit. Should be at least the concurrency,
                otherwise requests queue inside aiohttp and latency grows.
        """
        self.insecure = insecure
        self.pool_size = pool_size
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpTransport:
        """Open the underlying aiohttp session.

        Raises:
            SetupError: If the connector or its TLS context cannot be built.
        """
        try:
            connector = aiohttp.TCPConnector(
                limit=self.pool_size,
                ssl=not self.insecure,
            )
            self._session = aiohttp.ClientSession(connector=connector)
        except (OSError, ValueError, aiohttp.ClientError) as exc:
            msg = f"could not create HTTP client: {exc}"
            raise SetupError(msg) from exc
        logger.debug(
            "HTTP session opened (pool_size=%d, insecure=%s)",
            self.pool_size,
            self.insecure,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def send(self, descriptor: RequestDescriptor) -> ResponseMeta:
        """Send one request and read the full response body.

        Args:
            descriptor: The request to send.

        Returns:
            Status code and payload size of the response.

        Raises:
            RuntimeError: If used outside of ``async with``.
            TransportError: If no response was received (connection error,
                timeout, TLS failure).
        """
        if self._session is None:
            msg = "HttpTransport must be used as an async context manager"
            raise RuntimeError(msg)

        try:
            async with self._session.request(
                descriptor.method.value,
                descriptor.url,
                headers=descriptor.build_headers(),
                data=descriptor.body,
                timeout=aiohttp.ClientTimeout(total=descriptor.timeout),
            ) as resp:
                payload = await resp.read()
                return ResponseMeta(
                    status_code=resp.status,
                    content_length=len(payload),
                )
        except TimeoutError as exc:
            msg = f"request timed out after {descriptor.timeout:g}s"
            raise TransportError(msg) from exc
        except (aiohttp.ClientError, OSError) as exc:
            msg = f"{type(exc).__name__}: {exc}"
            raise TransportError(msg) from exc
