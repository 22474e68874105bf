"""SnapshotCollector: feeds session snapshots into the gauges and a latest-state map."""

import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from shmipc_monitor.errors import PersistenceError
from shmipc_monitor.metrics import (
    FIELDS,
    FIELDS_BY_KEY,
    PerformanceMetrics,
    ShareMemoryMetrics,
    StabilityMetrics,
    collect_values,
)
from shmipc_monitor.monitor import Monitor
from shmipc_monitor.registry import MetricsRegistry

FLUSH_FILE_PREFIX = "MonitorInfo_"
FLUSH_FILE_SUFFIX = ".log"
FLUSH_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def flush_file_name(when: datetime) -> str:
    """MonitorInfo_<YYYYMMDDHHMMSS>.log"""
    return f"{FLUSH_FILE_PREFIX}{when.strftime(FLUSH_TIMESTAMP_FORMAT)}{FLUSH_FILE_SUFFIX}"


def format_flush_line(name: str, value: float) -> str:
    return f"{name}: {value:f}\n"


def parse_flush_line(line: str) -> Tuple[str, float]:
    """Inverse of format_flush_line: 'name: 12.000000' -> ('name', 12.0)."""
    name, sep, value = line.rstrip("\n").partition(": ")
    if not sep:
        raise ValueError(f"not a flush line: {line!r}")
    return name, float(value)


class SnapshotCollector(Monitor):
    """
    Monitor that exposes every session metric as a gauge and keeps the latest
    values in memory for inspection and flushing to disk.

    Ingestion and flush may run on different threads; the state map is guarded
    by a lock. Gauges are set outside the lock (last write wins).
    """

    def __init__(
        self,
        registry: Optional[MetricsRegistry] = None,
        flush_dir: Union[str, Path] = ".",
        clock: Optional[Callable[[], datetime]] = None,
        monitor_id: str = "prometheus",
    ) -> None:
        super().__init__(monitor_id)
        self._registry = registry or MetricsRegistry()
        self._registry.declare_fields(FIELDS)
        self._flush_dir = Path(flush_dir)
        self._clock = clock or datetime.now
        self._state: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._snapshots_ingested: int = 0
        self._last_session: Optional[int] = None

    @property
    def registry(self) -> MetricsRegistry:
        return self._registry

    @property
    def flush_dir(self) -> Path:
        return self._flush_dir

    @property
    def snapshots_ingested(self) -> int:
        return self._snapshots_ingested

    @property
    def last_session(self) -> Optional[int]:
        """id() of the session that produced the latest snapshot, if one was passed."""
        return self._last_session

    # ---- Ingestion ----

    def on_emit_session_metrics(
        self,
        performance: PerformanceMetrics,
        stability: StabilityMetrics,
        share_memory: ShareMemoryMetrics,
        session: Optional[Any] = None,
    ) -> None:
        """Write one snapshot into both sinks. No I/O; never raises for well-formed groups."""
        values = collect_values(performance, stability, share_memory)
        self._update_gauges(values)
        self._update_state(values)
        self._last_session = id(session) if session is not None else None
        self._snapshots_ingested += 1
        self._logger.debug(
            "snapshot_ingested",
            extra={"fields": len(values), "session": self._last_session},
        )

    on_snapshot = on_emit_session_metrics

    def _update_gauges(self, values: Dict[str, float]) -> None:
        for key, value in values.items():
            self._registry.set_gauge(FIELDS_BY_KEY[key].gauge_name, value)

    def _update_state(self, values: Dict[str, float]) -> None:
        with self._lock:
            self._state.update(values)

    # ---- Inspection ----

    def snapshot(self) -> Dict[str, float]:
        """Copy of the latest-state map (empty until the first snapshot)."""
        with self._lock:
            return dict(self._state)

    def gauge_value(self, key: str) -> float:
        """Exposed gauge value for a state-map key such as 'capacityBytes'."""
        return self._registry.get_gauge(FIELDS_BY_KEY[key].gauge_name)

    # ---- Persistence ----

    def flush(self, directory: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the latest state to MonitorInfo_<timestamp>.log, one 'name: value' line per entry.
        Returns the file path. Raises PersistenceError if the file cannot be written.
        """
        state = self.snapshot()
        target_dir = Path(directory) if directory is not None else self._flush_dir
        path = target_dir / flush_file_name(self._clock())
        try:
            with open(path, "w", encoding="utf-8") as f:
                for name, value in state.items():
                    f.write(format_flush_line(name, value))
        except OSError as e:
            self._logger.error(
                "flush_failed",
                extra={"path": str(path), "error": str(e)},
            )
            raise PersistenceError(f"failed to write {path}: {e}", str(path)) from e
        self._logger.info("flush_written", extra={"path": str(path), "entries": len(state)})
        return path


# Name kept for callers that know the monitor as the Prometheus monitor.
PrometheusMonitor = SnapshotCollector
