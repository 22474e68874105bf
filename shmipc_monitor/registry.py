"""Gauge registry backed by a private prometheus_client CollectorRegistry."""

import threading
from typing import Dict, Iterable, List, Optional, Tuple

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from shmipc_monitor.errors import StartupError
from shmipc_monitor.exposition import (
    DEFAULT_START_TIMEOUT,
    ExpositionServer,
    create_app,
    parse_listen_address,
)
from shmipc_monitor.metrics import MetricField
from shmipc_monitor.observability import get_logger


class MetricsRegistry:
    """Owns a fixed set of named gauges and the scrape endpoint that exposes them.

    Every instance has its own CollectorRegistry and its own server, so two
    registries never collide on metric names or routes.
    """

    def __init__(self) -> None:
        self._registry = CollectorRegistry(auto_describe=True)
        self._gauges: Dict[str, Gauge] = {}
        self._lock = threading.Lock()
        self._server: Optional[ExpositionServer] = None
        self._logger = get_logger("shmipc_monitor.registry")

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._registry

    def declare_gauge(self, name: str, help: str) -> Gauge:
        """
        Create one gauge and register it.
        A duplicate name is a programming error and raises ValueError.
        """
        with self._lock:
            if name in self._gauges:
                raise ValueError(f"gauge {name!r} is already declared")
            gauge = Gauge(name, help, registry=self._registry)
            self._gauges[name] = gauge
        return gauge

    def declare_fields(self, fields: Iterable[MetricField]) -> None:
        """Declare one gauge per field, in order."""
        count = 0
        for field in fields:
            self.declare_gauge(field.gauge_name, field.help)
            count += 1
        self._logger.info("gauges_declared", extra={"count": count})

    def set_gauge(self, name: str, value: float) -> None:
        """Overwrite the exposed value. Unknown names raise KeyError."""
        self._gauges[name].set(float(value))

    def get_gauge(self, name: str) -> float:
        """Current value of a declared gauge."""
        value = self._registry.get_sample_value(name)
        if value is None:
            raise KeyError(name)
        return value

    def gauge_names(self) -> List[str]:
        with self._lock:
            return list(self._gauges)

    def render(self) -> bytes:
        """Text exposition of every declared gauge with its help line."""
        return generate_latest(self._registry)

    # ---- Scrape endpoint lifecycle ----

    @property
    def server_address(self) -> Optional[Tuple[str, int]]:
        if self._server is None:
            return None
        return self._server.address

    def initialize(
        self,
        listen_address: str,
        scrape_path: str = "/metrics",
        timeout: float = DEFAULT_START_TIMEOUT,
    ) -> Tuple[str, int]:
        """
        Serve this registry at scrape_path on listen_address from a background thread.
        Returns the bound (host, port). Raises StartupError instead of exiting the process.
        """
        if self._server is not None and self._server.running:
            raise StartupError("scrape endpoint is already running", listen_address)
        if not scrape_path.startswith("/"):
            scrape_path = "/" + scrape_path
        host, port = parse_listen_address(listen_address)
        server = ExpositionServer(create_app(self, scrape_path), host, port)
        server.start(timeout)
        self._server = server
        self._logger.info(
            "scrape_endpoint_ready",
            extra={"address": listen_address, "path": scrape_path},
        )
        return server.address

    def shutdown(self) -> None:
        """Stop the scrape endpoint, if any. Safe to call more than once."""
        if self._server is None:
            return
        self._server.stop()
        self._server = None
        self._logger.info("scrape_endpoint_stopped")
