"""Observability helpers for the monitor itself."""

from shmipc_monitor.observability.logger import get_logger

__all__ = ["get_logger"]
