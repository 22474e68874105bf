"""Error types raised by the monitor.

Duplicate gauge names and unknown field keys are programmer errors and surface
as ``ValueError`` / ``KeyError``; they are not part of this hierarchy.
"""

from typing import Optional


class MonitorError(Exception):
    """Base class for recoverable monitor failures."""


class StartupError(MonitorError):
    """The scrape endpoint could not be brought up (bind failure, bad address, timeout)."""

    def __init__(self, message: str, address: Optional[str] = None) -> None:
        super().__init__(message)
        self.address = address


class PersistenceError(MonitorError, OSError):
    """Writing the latest state to disk failed. In-memory state is untouched."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
