"""Session metric groups and the fixed table of exposed fields."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

GROUP_PERFORMANCE = "performance"
GROUP_STABILITY = "stability"
GROUP_SHARE_MEMORY = "shareMemory"


# ---- Snapshot groups (produced by the session, read-only here) ----

@dataclass(frozen=True)
class PerformanceMetrics:
    """Throughput counters and queue depths of one session."""
    receive_sync_event_count: int = 0
    send_sync_event_count: int = 0
    out_flow_bytes: int = 0
    in_flow_bytes: int = 0
    send_queue_count: int = 0
    receive_queue_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StabilityMetrics:
    """Error and lifecycle counters of one session."""
    alloc_shm_error_count: int = 0
    fallback_write_count: int = 0
    fallback_read_count: int = 0
    event_conn_error_count: int = 0
    queue_full_error_count: int = 0
    active_stream_count: int = 0
    hot_restart_success_count: int = 0
    hot_restart_error_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ShareMemoryMetrics:
    """Shared memory capacity and usage in bytes."""
    capacity_of_share_memory_in_bytes: int = 0
    all_in_used_share_memory_in_bytes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---- Field table ----

@dataclass(frozen=True)
class MetricField:
    """One exposed metric: state-map key, gauge name, help text and where to read it."""
    key: str
    gauge_name: str
    help: str
    group: str
    attribute: str


FIELDS: Tuple[MetricField, ...] = (
    MetricField(
        "receivedSyncEvents", "receive_sync_event_count",
        "The SyncEvent count that session had received",
        GROUP_PERFORMANCE, "receive_sync_event_count",
    ),
    MetricField(
        "sentSyncEvents", "send_sync_event_count",
        "The SyncEvent count that session had sent",
        GROUP_PERFORMANCE, "send_sync_event_count",
    ),
    MetricField(
        "outboundBytes", "out_flow_bytes",
        "The out flow in bytes that session had sent",
        GROUP_PERFORMANCE, "out_flow_bytes",
    ),
    MetricField(
        "inboundBytes", "in_flow_bytes",
        "The in flow in bytes that session had received",
        GROUP_PERFORMANCE, "in_flow_bytes",
    ),
    MetricField(
        "sendQueueDepth", "send_queue_count",
        "The pending count of send queue",
        GROUP_PERFORMANCE, "send_queue_count",
    ),
    MetricField(
        "receiveQueueDepth", "receive_queue_count",
        "The pending count of receive queue",
        GROUP_PERFORMANCE, "receive_queue_count",
    ),
    MetricField(
        "shmAllocErrors", "alloc_shm_error_count",
        "The error count of allocating share memory",
        GROUP_STABILITY, "alloc_shm_error_count",
    ),
    MetricField(
        "fallbackWrites", "fallback_write_count",
        "The count of the fallback data write to unix/tcp connection",
        GROUP_STABILITY, "fallback_write_count",
    ),
    MetricField(
        "fallbackReads", "fallback_read_count",
        "The error count of receiving fallback data from unix/tcp connection every period",
        GROUP_STABILITY, "fallback_read_count",
    ),
    MetricField(
        "eventConnErrors", "event_conn_error_count",
        "The error count of unix/tcp connection which usually happened in that "
        "the peer's process exit(crashed or other reason)",
        GROUP_STABILITY, "event_conn_error_count",
    ),
    MetricField(
        "queueFullErrors", "queue_full_error_count",
        "The error count due to the IO-Queue(SendQueue or ReceiveQueue) is full "
        "which usually happened in that the peer was busy",
        GROUP_STABILITY, "queue_full_error_count",
    ),
    MetricField(
        "activeStreams", "active_stream_count",
        "Current all active stream count",
        GROUP_STABILITY, "active_stream_count",
    ),
    MetricField(
        "hotRestartSuccesses", "hot_restart_success_count",
        "The successful count of hot restart",
        GROUP_STABILITY, "hot_restart_success_count",
    ),
    MetricField(
        "hotRestartFailures", "hot_restart_error_count",
        "The failed count of hot restart",
        GROUP_STABILITY, "hot_restart_error_count",
    ),
    MetricField(
        "capacityBytes", "capacity_of_share_memory",
        "The capacity of the share memory in bytes",
        GROUP_SHARE_MEMORY, "capacity_of_share_memory_in_bytes",
    ),
    MetricField(
        "inUseBytes", "all_in_used_share_memory",
        "The amount of share memory in bytes that is currently in use",
        GROUP_SHARE_MEMORY, "all_in_used_share_memory_in_bytes",
    ),
)

FIELD_KEYS: Tuple[str, ...] = tuple(f.key for f in FIELDS)
FIELDS_BY_KEY: Dict[str, MetricField] = {f.key: f for f in FIELDS}


def collect_values(
    performance: PerformanceMetrics,
    stability: StabilityMetrics,
    share_memory: ShareMemoryMetrics,
) -> Dict[str, float]:
    """Read every field out of the three groups, widened to float, keyed by field key."""
    groups = {
        GROUP_PERFORMANCE: performance,
        GROUP_STABILITY: stability,
        GROUP_SHARE_MEMORY: share_memory,
    }
    return {
        f.key: float(getattr(groups[f.group], f.attribute))
        for f in FIELDS
    }
