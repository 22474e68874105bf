"""Pytest fixtures for monitor tests."""

from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest

from shmipc_monitor import (
    MetricsRegistry,
    PerformanceMetrics,
    ShareMemoryMetrics,
    SnapshotCollector,
    StabilityMetrics,
)

FIXED_NOW = datetime(2023, 5, 1, 12, 30, 45)


@pytest.fixture()
def registry() -> Iterator[MetricsRegistry]:
    """A fresh registry; its scrape endpoint (if started) is stopped afterwards."""
    reg = MetricsRegistry()
    yield reg
    reg.shutdown()


@pytest.fixture()
def collector(registry: MetricsRegistry, tmp_path: Path) -> SnapshotCollector:
    """Collector flushing into the test's tmp dir with a fixed clock."""
    return SnapshotCollector(registry=registry, flush_dir=tmp_path, clock=lambda: FIXED_NOW)


@pytest.fixture()
def performance() -> PerformanceMetrics:
    return PerformanceMetrics(
        receive_sync_event_count=10,
        send_sync_event_count=20,
        out_flow_bytes=30,
        in_flow_bytes=40,
        send_queue_count=50,
        receive_queue_count=60,
    )


@pytest.fixture()
def stability() -> StabilityMetrics:
    return StabilityMetrics(
        alloc_shm_error_count=1,
        fallback_write_count=2,
        fallback_read_count=3,
        event_conn_error_count=4,
        queue_full_error_count=5,
        active_stream_count=6,
        hot_restart_success_count=7,
        hot_restart_error_count=8,
    )


@pytest.fixture()
def share_memory() -> ShareMemoryMetrics:
    return ShareMemoryMetrics(
        capacity_of_share_memory_in_bytes=1024 * 1024,
        all_in_used_share_memory_in_bytes=512 * 1024,
    )
