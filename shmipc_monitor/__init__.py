"""Prometheus monitor for shared-memory IPC sessions (gauges + latest-state flush)."""

from shmipc_monitor.collector import PrometheusMonitor, SnapshotCollector
from shmipc_monitor.config import MonitorConfig
from shmipc_monitor.errors import MonitorError, PersistenceError, StartupError
from shmipc_monitor.metrics import (
    FIELDS,
    MetricField,
    PerformanceMetrics,
    ShareMemoryMetrics,
    StabilityMetrics,
)
from shmipc_monitor.monitor import Monitor
from shmipc_monitor.registry import MetricsRegistry

__all__ = [
    "FIELDS",
    "MetricField",
    "MetricsRegistry",
    "Monitor",
    "MonitorConfig",
    "MonitorError",
    "PerformanceMetrics",
    "PersistenceError",
    "PrometheusMonitor",
    "ShareMemoryMetrics",
    "SnapshotCollector",
    "StabilityMetrics",
    "StartupError",
]
