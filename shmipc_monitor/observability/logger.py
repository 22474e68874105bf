"""Structured logging for monitor events (declare, scrape server, ingest, flush)."""

import logging
import sys

_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a logger under the ``shmipc_monitor`` namespace with a stdout handler."""
    if not name.startswith("shmipc_monitor"):
        name = f"shmipc_monitor.{name}"
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
