"""Scrape endpoint: app routes, live HTTP serving and startup failures."""

import socket

import httpx
import pytest
from fastapi.testclient import TestClient

from shmipc_monitor import (
    MetricsRegistry,
    PerformanceMetrics,
    ShareMemoryMetrics,
    SnapshotCollector,
    StabilityMetrics,
    StartupError,
)
from shmipc_monitor.exposition import create_app, parse_listen_address


def test_parse_listen_address() -> None:
    assert parse_listen_address("localhost:9090") == ("localhost", 9090)
    assert parse_listen_address(":9090") == ("0.0.0.0", 9090)
    assert parse_listen_address("[::1]:8000") == ("::1", 8000)
    for bad in ("localhost", "localhost:http", "localhost:70000", ""):
        with pytest.raises(StartupError):
            parse_listen_address(bad)


def test_scrape_route_serves_gauges(
    collector: SnapshotCollector,
    performance: PerformanceMetrics,
    stability: StabilityMetrics,
    share_memory: ShareMemoryMetrics,
) -> None:
    collector.on_emit_session_metrics(performance, stability, share_memory)
    client = TestClient(create_app(collector.registry, "/metrics"))

    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    body = response.text
    assert "# HELP receive_sync_event_count The SyncEvent count that session had received" in body
    assert "\nreceive_sync_event_count 10.0\n" in body
    assert "\nhot_restart_error_count 8.0\n" in body


def test_health_route(collector: SnapshotCollector) -> None:
    client = TestClient(create_app(collector.registry, "/custom/path"))
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["gauges"] == 16
    assert data["uptime_sec"] >= 0
    assert client.get("/custom/path").status_code == 200
    assert client.get("/metrics").status_code == 404


def test_live_scrape_matches_state(
    collector: SnapshotCollector,
    performance: PerformanceMetrics,
    stability: StabilityMetrics,
    share_memory: ShareMemoryMetrics,
) -> None:
    host, port = collector.registry.initialize("127.0.0.1:0", "metrics")
    assert port != 0
    assert collector.registry.server_address == (host, port)

    collector.on_emit_session_metrics(performance, stability, share_memory)
    response = httpx.get(f"http://127.0.0.1:{port}/metrics", timeout=5.0)
    assert response.status_code == 200
    assert "\nsend_queue_count 50.0\n" in response.text
    assert "\nactive_stream_count 6.0\n" in response.text

    collector.registry.shutdown()
    assert collector.registry.server_address is None


def test_initialize_twice_fails(registry: MetricsRegistry) -> None:
    registry.initialize("127.0.0.1:0")
    with pytest.raises(StartupError):
        registry.initialize("127.0.0.1:0")


def test_address_in_use_raises_startup_error(registry: MetricsRegistry) -> None:
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    port = blocker.getsockname()[1]
    try:
        with pytest.raises(StartupError) as exc_info:
            registry.initialize(f"127.0.0.1:{port}")
        assert isinstance(exc_info.value.__cause__, OSError)
        assert registry.server_address is None
    finally:
        blocker.close()


def test_two_registries_serve_side_by_side() -> None:
    first, second = MetricsRegistry(), MetricsRegistry()
    first.declare_gauge("active_stream_count", "streams")
    second.declare_gauge("active_stream_count", "streams")
    first.set_gauge("active_stream_count", 1)
    second.set_gauge("active_stream_count", 2)
    try:
        _, first_port = first.initialize("127.0.0.1:0")
        _, second_port = second.initialize("127.0.0.1:0")
        first_body = httpx.get(f"http://127.0.0.1:{first_port}/metrics", timeout=5.0).text
        second_body = httpx.get(f"http://127.0.0.1:{second_port}/metrics", timeout=5.0).text
    finally:
        first.shutdown()
        second.shutdown()
    assert "\nactive_stream_count 1.0\n" in first_body
    assert "\nactive_stream_count 2.0\n" in second_body
