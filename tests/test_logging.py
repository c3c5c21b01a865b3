"""
Tests for logging configuration module.
"""

import logging
import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

from container_versions.logging_config import (
    LOGGER_NAME,
    ColoredFormatter,
    get_logger,
    setup_logging,
)


def make_record(level=logging.INFO, msg="Test message"):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestSetupLogging:
    """Test logging setup and configuration."""

    def test_setup_logging_default(self):
        """Test default logging setup."""
        logger = setup_logging()
        assert logger is not None
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.INFO

    def test_setup_logging_verbose(self):
        """Test verbose logging enables DEBUG level."""
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_setup_logging_quiet(self):
        """Test quiet mode only lets warnings through."""
        logger = setup_logging(quiet=True)
        assert logger.level == logging.WARNING

    def test_console_handler_writes_to_stderr(self):
        """Console output goes to stderr so JSON on stdout stays clean."""
        logger = setup_logging()
        console_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert len(console_handlers) == 1
        assert console_handlers[0].stream is sys.stderr

    def test_setup_logging_clears_handlers(self):
        """Repeated setup does not stack handlers."""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_setup_logging_with_file(self):
        """Test logging to file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "test.log"
            logger = setup_logging(log_file=str(log_file))

            file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
            assert len(file_handlers) > 0

            logger.info("Test message")
            for handler in file_handlers:
                handler.flush()

            assert log_file.exists()
            assert "Test message" in log_file.read_text()

            for handler in file_handlers:
                handler.close()
            setup_logging()

    def test_setup_logging_creates_log_directory(self):
        """Test that log directory is created if it doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "subdir" / "test.log"
            logger = setup_logging(log_file=str(log_file))

            logger.info("Test")
            assert log_file.parent.exists()

            for handler in logger.handlers:
                handler.close()
            setup_logging()

    def test_setup_logging_custom_level(self):
        """Test custom log level."""
        logger = setup_logging(level="WARNING")
        assert logger.level == logging.WARNING

    def test_module_loggers_are_children(self):
        """Module loggers inherit the package configuration."""
        setup_logging(level="ERROR")
        child = logging.getLogger("container_versions.update")
        assert child.getEffectiveLevel() == logging.ERROR


class TestGetLogger:
    """Test logger retrieval."""

    def test_get_logger_returns_instance(self):
        """Test get_logger returns logger instance."""
        logger = get_logger()
        assert isinstance(logger, logging.Logger)

    def test_get_logger_singleton(self):
        """Test get_logger returns same instance."""
        assert get_logger() is get_logger()


class TestColoredFormatter:
    """Test colored log formatter."""

    def test_colored_formatter_with_colors(self):
        """Test formatter with colors enabled."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=True)
        formatted = formatter.format(make_record())
        assert "Test message" in formatted
        assert "\033[" in formatted

    def test_colored_formatter_without_colors(self):
        """Test formatter with colors disabled."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=False)
        formatted = formatter.format(make_record())
        assert formatted == "INFO Test message"

    def test_colored_formatter_all_levels(self):
        """Test formatter with all log levels."""
        formatter = ColoredFormatter("%(levelname_colored)s", use_colors=True)
        for level in [logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL]:
            formatted = formatter.format(make_record(level, "Test"))
            assert logging.getLevelName(level) in formatted


class TestVlog:
    """Test verbose-gated logging through vlog."""

    def test_vlog_integration(self, caplog):
        """Test vlog uses the package logger."""
        from container_versions.common import vlog

        setup_logging(level="INFO", propagate=True)
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            vlog("Test vlog message", verbose=True)
            assert "Test vlog message" in caplog.text

    def test_vlog_respects_verbose_flag(self, caplog):
        """Test vlog is silent without verbose."""
        from container_versions.common import vlog

        setup_logging(level="INFO", propagate=True)
        with patch.dict(os.environ, {"CONTAINER_VERSIONS_DEBUG": "0"}):
            with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
                caplog.clear()
                vlog("Should not appear", verbose=False)
                assert "Should not appear" not in caplog.text

    def test_vlog_debug_environment(self, caplog):
        """CONTAINER_VERSIONS_DEBUG=1 forces verbose messages."""
        from container_versions.common import vlog

        setup_logging(level="INFO", propagate=True)
        with patch.dict(os.environ, {"CONTAINER_VERSIONS_DEBUG": "1"}):
            with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
                vlog("Forced message", verbose=False)
                assert "Forced message" in caplog.text
