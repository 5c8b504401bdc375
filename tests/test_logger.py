"""
Tests for logging infrastructure.

Verifies logger configuration, file creation and shutdown.
"""

import logging
from unittest.mock import patch

import inkpolish.utils.logger as logger_module
from inkpolish.utils.logger import get_log_dir, get_logger, shutdown_logging


class TestLoggerConfiguration:
    """Tests for logger setup and configuration."""

    def test_get_logger_returns_logger(self):
        logger = get_logger("inkpolish.test")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "inkpolish.test"

    def test_get_logger_singleton(self):
        assert get_logger("inkpolish") is get_logger("inkpolish")

    def test_log_directory_exists(self):
        log_dir = get_log_dir()
        assert log_dir.exists()
        assert log_dir.is_dir()

    def test_logger_writes_to_file(self, tmp_path):
        shutdown_logging()
        with patch.object(logger_module, "get_log_dir", return_value=tmp_path):
            logger = get_logger("inkpolish")
            logger.info("Test message")
            for handler in logger.handlers:
                handler.flush()

        try:
            content = (tmp_path / "app.log").read_text()
            assert "Test message" in content
            assert "INFO" in content
        finally:
            shutdown_logging()

    def test_root_logger_does_not_propagate(self):
        root = get_logger("inkpolish")
        assert root.propagate is False


class TestShutdown:
    def test_shutdown_removes_handlers(self, tmp_path):
        with patch.object(logger_module, "get_log_dir", return_value=tmp_path):
            shutdown_logging()
            get_logger("inkpolish")

        shutdown_logging()

        assert logging.getLogger("inkpolish").handlers == []
        assert logger_module._logger_instance is None
