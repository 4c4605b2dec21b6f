"""Shared test fixtures for the Saturator test suite."""

from __future__ import annotations

import asyncio
import socket
import threading
from typing import TYPE_CHECKING, Any

import pytest
from aiohttp import web

from saturator.engine.protocol import ResponseMeta

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator

    from saturator.request.descriptor import RequestDescriptor


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


@pytest.fixture
def closed_port_url() -> str:
    """URL of a localhost port nothing listens on."""
    return f"http://127.0.0.1:{_get_free_port()}/"


# =============================================================================
# Target HTTP server handlers
# =============================================================================


async def _ok_handler(request: web.Request) -> web.Response:
    """Plain 200 response."""
    return web.Response(text="ok")


async def _status_handler(request: web.Request) -> web.Response:
    """Return a configurable status (query param: ?code=500)."""
    code = int(request.query.get("code", "500"))
    return web.Response(status=code, text="status")


async def _delay_handler(request: web.Request) -> web.Response:
    """Respond after a configurable delay (query param: ?ms=50)."""
    delay_ms = float(request.query.get("ms", "50"))
    await asyncio.sleep(delay_ms / 1000)
    return web.Response(text="delayed")


async def _bytes_handler(request: web.Request) -> web.Response:
    """Return a body of ``n`` bytes (query param: ?n=1000)."""
    size = int(request.query.get("n", "1000"))
    return web.Response(body=b"x" * size)


RECEIVED_KEY = web.AppKey("received", list)


async def _echo_handler(request: web.Request) -> web.Response:
    """Record request details in the app's received list and echo them as JSON."""
    body = await request.read()
    details = {
        "method": request.method,
        "headers": dict(request.headers),
        "body": body.decode("utf-8", errors="replace"),
    }
    request.app[RECEIVED_KEY].append(details)
    return web.json_response(details)


def _create_target_app(received: list[dict[str, Any]]) -> web.Application:
    """Build the target server app with all test routes."""
    app = web.Application()
    app[RECEIVED_KEY] = received
    app.router.add_get("/ok", _ok_handler)
    app.router.add_route("*", "/status", _status_handler)
    app.router.add_get("/delay", _delay_handler)
    app.router.add_get("/bytes", _bytes_handler)
    app.router.add_route("*", "/echo", _echo_handler)
    return app


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def received_requests() -> list[dict[str, Any]]:
    """Requests the target server received on /echo, in arrival order."""
    return []


@pytest.fixture
async def target_server(received_requests: list[dict[str, Any]]) -> AsyncIterator[str]:
    """Aiohttp target server fixture.

    Returns the base URL (e.g., 'http://127.0.0.1:54321').
    """
    app = _create_target_app(received_requests)
    port = _get_free_port()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    yield f"http://127.0.0.1:{port}"
    await runner.cleanup()


@pytest.fixture
def sync_target_server(received_requests: list[dict[str, Any]]) -> Iterator[str]:
    """Target server running in a background thread for sync tests.

    Needed by CLI tests, where ``asyncio.run`` blocks the main thread.
    """
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        app = _create_target_app(received_requests)
        runner = web.AppRunner(app)
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield f"http://127.0.0.1:{port}"

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


# =============================================================================
# In-memory transport
# =============================================================================


class ScriptedTransport:
    """Transport replaying scripted responses without any network.

    ``script`` maps the zero-based call index to either a ``ResponseMeta``
    or an exception to raise. ``delay`` maps the call index to seconds
    spent "on the wire". The transport records how many calls overlap.
    """

    def __init__(
        self,
        script: Callable[[int], ResponseMeta | BaseException] | None = None,
        delay: Callable[[int], float] | None = None,
    ) -> None:
        self._script = script or (lambda _i: ResponseMeta(status_code=200, content_length=0))
        self._delay = delay or (lambda _i: 0.001)
        self.calls = 0
        self.in_flight = 0
        self.peak_in_flight = 0

    async def send(self, descriptor: RequestDescriptor) -> ResponseMeta:
        index = self.calls
        self.calls += 1
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._delay(index))
            result = self._script(index)
            if isinstance(result, BaseException):
                raise result
            return result
        finally:
            self.in_flight -= 1


@pytest.fixture
def scripted_transport() -> type[ScriptedTransport]:
    """Return the ScriptedTransport class for tests to instantiate."""
    return ScriptedTransport


class CountingObserver:
    """Progress observer counting notifications."""

    def __init__(self) -> None:
        self.count = 0

    def on_request_completed(self) -> None:
        self.count += 1


@pytest.fixture
def counting_observer() -> type[CountingObserver]:
    """Return the CountingObserver class for tests to instantiate."""
    return CountingObserver
