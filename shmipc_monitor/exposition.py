"""Scrape endpoint: a FastAPI app serving one registry, run by uvicorn on a background thread.

Each ``ExpositionServer`` owns its socket, event loop and thread, so several
registries (e.g. in tests) can serve side by side without shared routing state.
"""

import socket
import threading
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional, Tuple

import uvicorn
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel

from shmipc_monitor.errors import StartupError
from shmipc_monitor.observability import get_logger

if TYPE_CHECKING:
    from shmipc_monitor.registry import MetricsRegistry

DEFAULT_START_TIMEOUT = 5.0
HEALTH_PATH = "/health"

_logger = get_logger("shmipc_monitor.exposition")


class HealthResponse(BaseModel):
    """Response for GET /health."""
    uptime_sec: int
    gauges: int


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` into its parts. An empty host means all interfaces."""
    host, sep, port = (address or "").strip().rpartition(":")
    if not sep:
        raise StartupError(f"listen address {address!r} must be host:port", address)
    try:
        port_num = int(port)
    except ValueError:
        raise StartupError(f"invalid port in listen address {address!r}", address) from None
    if not 0 <= port_num <= 65535:
        raise StartupError(f"port out of range in listen address {address!r}", address)
    host = host.strip("[]") or "0.0.0.0"
    return host, port_num


def create_app(registry: "MetricsRegistry", scrape_path: str) -> FastAPI:
    """Build the app: GET <scrape_path> renders the registry, GET /health reports uptime."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = time.time()
        yield

    app = FastAPI(title="shmipc monitor", lifespan=lifespan, docs_url=None, redoc_url=None)
    app.state.started_at = time.time()

    def scrape() -> Response:
        return Response(content=registry.render(), media_type=CONTENT_TYPE_LATEST)

    def health() -> HealthResponse:
        return HealthResponse(
            uptime_sec=int(time.time() - app.state.started_at),
            gauges=len(registry.gauge_names()),
        )

    app.add_api_route(scrape_path, scrape, methods=["GET"], include_in_schema=False)
    if scrape_path != HEALTH_PATH:
        app.add_api_route(HEALTH_PATH, health, methods=["GET"], response_model=HealthResponse)
    return app


class ExpositionServer:
    """uvicorn server over a pre-bound socket, running on a daemon thread."""

    def __init__(self, app: FastAPI, host: str, port: int) -> None:
        self._app = app
        self._host = host
        self._port = port
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port); port is the real one when 0 was requested."""
        if self._socket is None:
            return None
        host, port = self._socket.getsockname()[:2]
        return host, port

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self._host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self._host, self._port))
            sock.listen(128)
        except OSError:
            sock.close()
            raise
        return sock

    def start(self, timeout: float = DEFAULT_START_TIMEOUT) -> None:
        """Bind synchronously, then serve in the background. Raises StartupError on failure."""
        address = f"{self._host}:{self._port}"
        try:
            self._socket = self._bind()
        except OSError as e:
            _logger.error("exposition_bind_failed", extra={"address": address, "error": str(e)})
            raise StartupError(f"unable to bind scrape endpoint on {address}: {e}", address) from e

        config = uvicorn.Config(self._app, log_config=None, access_log=False, lifespan="on")
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [self._socket]},
            name=f"shmipc-monitor-exposition-{self._port}",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive():
                self._release()
                _logger.error("exposition_exited_on_startup", extra={"address": address})
                raise StartupError(f"scrape endpoint on {address} exited during startup", address)
            if time.monotonic() >= deadline:
                self.stop()
                _logger.error("exposition_start_timeout", extra={"address": address, "timeout": timeout})
                raise StartupError(f"scrape endpoint on {address} did not start within {timeout}s", address)
            time.sleep(0.01)
        _logger.info("exposition_started", extra={"address": self.address})

    def stop(self, timeout: float = DEFAULT_START_TIMEOUT) -> None:
        """Ask uvicorn to exit, join the thread and close the socket. Idempotent."""
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                _logger.warning("exposition_stop_timeout", extra={"timeout": timeout})
        self._release()

    def _release(self) -> None:
        if self._socket is not None:
            self._socket.close()
        self._socket = None
        self._server = None
        self._thread = None
