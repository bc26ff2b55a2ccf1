"""
Tests for the structured logger.
"""

import json
import unittest

import pytest

from typedstore.types.models import LogLevel
from typedstore.utils.logging import StructuredLogger, get_logger, timed


class Worker:
    def __init__(self, logger):
        self.logger = logger

    @timed("worker.run")
    def run(self, value):
        return value * 2


class TestStructuredLogger(unittest.TestCase):
    """Test cases for StructuredLogger."""

    @pytest.fixture(autouse=True)
    def _tmp_path(self, tmp_path):
        self.tmp_path = tmp_path

    def test_level_filtering(self):
        """Test that entries below the level are dropped."""
        logger = StructuredLogger("test_levels", level="WARNING")

        logger.info("ignored")
        logger.warning("kept")

        entries = logger.get_recent_logs()
        self.assertEqual(["kept"], [e.message for e in entries])

    def test_context_and_errors(self):
        """Test that context and errors are captured on the entry."""
        logger = StructuredLogger("test_context", level="DEBUG")

        logger.error("failed", error=ValueError("bad"), service="Test", key="k")

        entry = logger.get_recent_logs(level=LogLevel.ERROR)[0]
        self.assertEqual("ValueError: bad", entry.error)
        self.assertEqual("Test", entry.service)
        self.assertEqual({"key": "k"}, entry.context)

    def test_with_context(self):
        logger = StructuredLogger("test_with_context", level="DEBUG")

        logger.with_context(request="abc").with_context(user=1).info("hello")

        self.assertEqual({"request": "abc", "user": 1}, logger.get_recent_logs()[0].context)

    def test_invalid_level(self):
        with self.assertRaises(ValueError):
            StructuredLogger("test_invalid", level="LOUD")

    def test_limit(self):
        logger = StructuredLogger("test_limit", level="DEBUG", max_memory_entries=3)
        for i in range(5):
            logger.info(f"message {i}")

        self.assertEqual(["message 3", "message 4"], [e.message for e in logger.get_recent_logs(limit=2)])
        self.assertEqual(3, len(logger.get_recent_logs()))

    def test_file_output(self):
        """Test daily log files."""
        logger = StructuredLogger("test_files", level="DEBUG", log_dir=self.tmp_path)

        logger.info("written", service="Test")
        logger.error("broken")

        paths = logger._get_log_file_paths()
        self.assertIn("written", paths["main"].read_text())
        self.assertIn("broken", paths["error"].read_text())
        lines = paths["json"].read_text().splitlines()
        self.assertEqual("written", json.loads(lines[0])["message"])

    def test_timed_logs_duration(self):
        """Test that the timing decorator records a performance entry."""
        logger = StructuredLogger("test_timed", level="DEBUG")

        self.assertEqual(4, Worker(logger).run(2))

        entry = logger.get_recent_logs()[-1]
        self.assertEqual("worker.run", entry.operation)
        self.assertIsNotNone(entry.duration_ms)

    def test_get_logger_uses_configuration(self):
        logger = get_logger("configured")

        self.assertEqual(LogLevel.DEBUG, logger.level)
        self.assertIsNone(logger.log_dir)
