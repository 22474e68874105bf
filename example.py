"""Example: a fake IPC session reporting to the Prometheus monitor, then a flush."""

import logging
import random
import threading

from shmipc_monitor import (
    MonitorConfig,
    PerformanceMetrics,
    ShareMemoryMetrics,
    SnapshotCollector,
    StabilityMetrics,
    StartupError,
)

logging.basicConfig(level=logging.INFO)

CAPACITY = 32 * 1024 * 1024


class FakeSession:
    """Emits growing counters to a monitor every interval seconds on its own timer thread."""

    def __init__(self, monitor: SnapshotCollector, interval: float = 1.0) -> None:
        self._monitor = monitor
        self._interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="fake-session-timer", daemon=True)
        self._events = 0

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self._events += random.randint(10, 100)
            self._monitor.on_emit_session_metrics(
                PerformanceMetrics(
                    receive_sync_event_count=self._events,
                    send_sync_event_count=self._events,
                    out_flow_bytes=self._events * 512,
                    in_flow_bytes=self._events * 256,
                    send_queue_count=random.randint(0, 8),
                    receive_queue_count=random.randint(0, 8),
                ),
                StabilityMetrics(active_stream_count=random.randint(1, 16)),
                ShareMemoryMetrics(
                    capacity_of_share_memory_in_bytes=CAPACITY,
                    all_in_used_share_memory_in_bytes=random.randint(0, CAPACITY),
                ),
                self,
            )

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        self._stop.set()
        self._thread.join()


def main() -> None:
    config = MonitorConfig.from_env()
    monitor = SnapshotCollector(flush_dir=config.flush_dir)
    try:
        host, port = monitor.registry.initialize(
            config.listen_address, config.scrape_path, config.start_timeout
        )
    except StartupError as e:
        logging.error("scrape endpoint unavailable: %s", e)
        raise SystemExit(1)
    logging.info("scrape at http://%s:%d%s", host, port, config.scrape_path)

    session = FakeSession(monitor)
    session.start()
    try:
        threading.Event().wait(5)
    finally:
        session.close()
        logging.info("latest state written to %s", monitor.flush())
        monitor.registry.shutdown()


if __name__ == "__main__":
    main()
