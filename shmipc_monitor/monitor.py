"""Abstract Monitor: the callback contract an IPC session reports metrics to."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from shmipc_monitor.observability import get_logger

if TYPE_CHECKING:
    from shmipc_monitor.metrics import (
        PerformanceMetrics,
        ShareMemoryMetrics,
        StabilityMetrics,
    )


class Monitor(ABC):
    """Receives periodic session metrics and can persist what it has seen."""

    def __init__(self, monitor_id: str) -> None:
        self._monitor_id = monitor_id
        self._logger = get_logger(f"shmipc_monitor.monitor.{monitor_id}")

    @property
    def monitor_id(self) -> str:
        return self._monitor_id

    @abstractmethod
    def on_emit_session_metrics(
        self,
        performance: "PerformanceMetrics",
        stability: "StabilityMetrics",
        share_memory: "ShareMemoryMetrics",
        session: Optional[Any] = None,
    ) -> None:
        """
        Called by the session on every reporting tick, possibly from its timer thread.
        Implementations must stay cheap: no I/O, no blocking.
        """
        pass

    @abstractmethod
    def flush(self) -> Any:
        """Persist the latest known state."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._monitor_id!r})"
