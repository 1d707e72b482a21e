"""Tests for the file-only logger."""

import logging
import sys

from yeelink.connection.logger import ROOT, get_logger, set_level


class TestLogger:
    def test_module_loggers_share_root_handlers(self):
        reader = get_logger("reader")
        writer = get_logger("writer")
        assert reader.name == "yeelink.reader"
        assert reader.parent is writer.parent is logging.getLogger(ROOT)
        assert not reader.handlers

    def test_never_logs_to_stdout(self):
        get_logger("bulb")
        root = logging.getLogger(ROOT)
        assert root.propagate is False
        assert not any(getattr(h, "stream", None) is sys.stdout for h in root.handlers)
        assert sum(isinstance(h, logging.FileHandler) for h in root.handlers) >= 2

    def test_set_level(self):
        root = logging.getLogger(ROOT)
        original = root.level
        try:
            set_level("debug")
            assert get_logger("sink").getEffectiveLevel() == logging.DEBUG
        finally:
            root.setLevel(original)

    def test_echo_added_once(self):
        root = logging.getLogger(ROOT)
        original = (root.level, list(root.handlers))
        try:
            set_level("DEBUG", echo=True)
            set_level("DEBUG", echo=True)
            echoes = [h for h in root.handlers if getattr(h, "_yeelink_echo", False)]
            assert len(echoes) == 1
        finally:
            root.setLevel(original[0])
            root.handlers = original[1]
