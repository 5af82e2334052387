# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from dk_search.config.logging_config import setup_logging
from dk_search.config.settings import Settings


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Use a temp log dir and start from a handler-free logger."""
        self._tmp = tempfile.TemporaryDirectory()
        self.log_dir = Path(self._tmp.name) / "logs"
        patcher = patch.object(Settings, "CONSOLE_LOG_LEVEL", "WARNING")
        patcher.start()
        self.addCleanup(patcher.stop)
        self._clear_handlers()

    def tearDown(self) -> None:
        """Close handlers so the temp dir can be removed."""
        self._clear_handlers()
        self._tmp.cleanup()

    @staticmethod
    def _clear_handlers() -> None:
        package_logger = logging.getLogger("dk_search")
        for handler in list(package_logger.handlers):
            handler.close()
            package_logger.removeHandler(handler)

    @staticmethod
    def _handlers() -> tuple[list[logging.Handler], list[logging.Handler]]:
        handlers = logging.getLogger("dk_search").handlers
        files = [h for h in handlers if isinstance(h, logging.FileHandler)]
        streams = [h for h in handlers if h not in files]
        return files, streams

    def test_creates_named_log_file(self) -> None:
        """The run log exists and is named run_YYYYMMDD_HHMMSS.log."""
        log_path = setup_logging(self.log_dir)
        self.assertTrue(log_path.exists())
        self.assertEqual(log_path.parent, self.log_dir)
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_defaults_to_settings_logs_dir(self) -> None:
        """Without an argument the log lands in Settings.LOGS_DIR."""
        with patch.object(Settings, "LOGS_DIR", self.log_dir):
            log_path = setup_logging()
        self.assertEqual(log_path.parent, self.log_dir)

    def test_handler_levels(self) -> None:
        """File handler at DEBUG, console handler at the configured level."""
        setup_logging(self.log_dir)
        files, streams = self._handlers()
        self.assertEqual(len(files), 1)
        self.assertEqual(len(streams), 1)
        self.assertEqual(files[0].level, logging.DEBUG)
        self.assertEqual(streams[0].level, logging.WARNING)
        self.assertEqual(logging.getLogger("dk_search").level, logging.DEBUG)

    def test_console_level_from_settings(self) -> None:
        """CONSOLE_LOG_LEVEL is case-insensitive."""
        with patch.object(Settings, "CONSOLE_LOG_LEVEL", "info"):
            setup_logging(self.log_dir)
        _, streams = self._handlers()
        self.assertEqual(streams[0].level, logging.INFO)

    def test_unknown_console_level_falls_back(self) -> None:
        """An unrecognised level name means WARNING."""
        with patch.object(Settings, "CONSOLE_LOG_LEVEL", "chatty"):
            setup_logging(self.log_dir)
        _, streams = self._handlers()
        self.assertEqual(streams[0].level, logging.WARNING)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """Calling setup_logging twice does not duplicate handlers."""
        setup_logging(self.log_dir)
        count_before = len(logging.getLogger("dk_search").handlers)
        setup_logging(self.log_dir)
        self.assertEqual(
            len(logging.getLogger("dk_search").handlers), count_before
        )

    def test_sdk_loggers_capped(self) -> None:
        """OpenAI SDK and HTTP client loggers are held at WARNING."""
        setup_logging(self.log_dir)
        for name in ("openai", "httpx"):
            with self.subTest(logger=name):
                self.assertEqual(
                    logging.getLogger(name).level, logging.WARNING
                )

    def test_child_loggers_reach_the_file(self) -> None:
        """Records from dk_search.* modules land in the run log."""
        log_path = setup_logging(self.log_dir)
        logging.getLogger("dk_search.fetcher").debug("probe record")
        for handler in logging.getLogger("dk_search").handlers:
            handler.flush()
        content = log_path.read_text(encoding="utf-8")
        self.assertIn("probe record", content)
        self.assertIn("dk_search.fetcher", content)


if __name__ == "__main__":
    unittest.main()
