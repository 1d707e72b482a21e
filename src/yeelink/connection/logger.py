"""
File-only logger — never writes to stdout (the CLI prints device replies there)

Every module logger is a child of "yeelink"; the file handlers live on that
parent once, so all modules share one log file and one error log.
"""

import logging
import sys

from yeelink.config import Config

ROOT = "yeelink"
_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT)
    if root.handlers:
        return root

    Config.ensure_dirs()
    root.setLevel(getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    fh = logging.FileHandler(Config.LOG_FILE, encoding="utf-8", delay=True)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    root.addHandler(fh)

    eh = logging.FileHandler(Config.ERROR_LOG, encoding="utf-8", delay=True)
    eh.setLevel(logging.ERROR)
    eh.setFormatter(formatter)
    root.addHandler(eh)

    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a yeelink.<name> logger that writes to file only."""
    _root_logger()
    return logging.getLogger(f"{ROOT}.{name}")


def set_level(level: str, echo: bool = False):
    """
    Change the level of every yeelink logger at runtime.

    echo also mirrors records to stderr, for the CLI's --verbose flag.
    """
    root = _root_logger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if echo and not any(getattr(h, "_yeelink_echo", False) for h in root.handlers):
        sh = logging.StreamHandler(sys.stderr)
        sh._yeelink_echo = True
        sh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        root.addHandler(sh)
