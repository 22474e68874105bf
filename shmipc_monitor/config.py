"""Monitor configuration from the environment (and .env, if present)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_LISTEN_ADDRESS = "localhost:9090"
DEFAULT_SCRAPE_PATH = "/metrics"
DEFAULT_FLUSH_DIR = "."
DEFAULT_START_TIMEOUT = 5.0


@dataclass
class MonitorConfig:
    """Where to serve the scrape endpoint and where flushes land."""
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    scrape_path: str = DEFAULT_SCRAPE_PATH
    flush_dir: Path = Path(DEFAULT_FLUSH_DIR)
    start_timeout: float = DEFAULT_START_TIMEOUT

    @classmethod
    def from_env(cls) -> "MonitorConfig":
        load_dotenv(find_dotenv(usecwd=True))
        listen_address = (os.environ.get("SHMIPC_MONITOR_ADDR") or "").strip() or DEFAULT_LISTEN_ADDRESS
        scrape_path = (os.environ.get("SHMIPC_MONITOR_PATH") or "").strip() or DEFAULT_SCRAPE_PATH
        if not scrape_path.startswith("/"):
            scrape_path = "/" + scrape_path
        flush_dir = (os.environ.get("SHMIPC_MONITOR_FLUSH_DIR") or "").strip() or DEFAULT_FLUSH_DIR
        try:
            start_timeout = float(os.environ.get("SHMIPC_MONITOR_START_TIMEOUT", DEFAULT_START_TIMEOUT))
        except (ValueError, TypeError):
            start_timeout = DEFAULT_START_TIMEOUT
        if start_timeout <= 0:
            start_timeout = DEFAULT_START_TIMEOUT
        return cls(
            listen_address=listen_address,
            scrape_path=scrape_path,
            flush_dir=Path(flush_dir),
            start_timeout=start_timeout,
        )
