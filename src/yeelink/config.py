"""
yeelink Configuration — Unified settings for the client library and CLI

Load order: env vars > <data dir>/config.env > defaults
The data dir is $YEELINK_DATA_DIR, or ~/.yeelink when unset.
"""

import os
from pathlib import Path


def _data_dir() -> Path:
    return Path(os.environ.get("YEELINK_DATA_DIR", str(Path.home() / ".yeelink")))


def _load_config_env():
    """Load key=value pairs from <data dir>/config.env if it exists."""
    config_file = _data_dir() / "config.env"
    if not config_file.exists():
        return
    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


# Load config.env before reading env vars
_load_config_env()


class Config:
    # Identity
    NAME = "yeelink"
    VERSION = "0.1.0"

    # Device protocol
    DEFAULT_PORT = int(os.environ.get("YEELINK_PORT", "55443"))
    TIMEOUT_MS = int(os.environ.get("YEELINK_TIMEOUT", "5000"))
    NOTIFY_BUFFER = int(os.environ.get("YEELINK_NOTIFY_BUFFER", "10"))
    MUSIC_ACCEPT_TIMEOUT = float(os.environ.get("YEELINK_MUSIC_TIMEOUT", "10"))

    # Discovery
    MULTICAST_ADDR = ("239.255.255.250", 1982)
    DISCOVERY_BIND_PORT = int(os.environ.get("YEELINK_DISCOVERY_PORT", "0"))

    # Paths
    DATA_DIR = _data_dir()
    LOG_DIR = DATA_DIR / "logs"

    # Logging (never to stdout, the CLI prints results there)
    LOG_LEVEL = os.environ.get("YEELINK_LOG_LEVEL", "INFO")
    LOG_FILE = LOG_DIR / "yeelink.log"
    ERROR_LOG = LOG_DIR / "yeelink-errors.log"

    @classmethod
    def ensure_dirs(cls):
        """Create required directories."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
