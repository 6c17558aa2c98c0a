"""Tests for logging setup."""

import logging

from rich.logging import RichHandler

from ytsage.config.logging import setup_logging


class TestSetupLogging:
    def test_default_level(self):
        logger = setup_logging()
        assert logger.name == "ytsage"
        assert logger.level == logging.WARNING
        assert not logger.propagate
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_verbose_forces_debug(self):
        assert setup_logging(verbose=True, level="ERROR").level == logging.DEBUG

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        """Test records are also written to the log file."""
        log_file = tmp_path / "logs" / "ytsage.log"
        logger = setup_logging(log_file=log_file, level="INFO")

        logging.getLogger("ytsage.test").info("hello from test")
        for handler in logger.handlers:
            handler.flush()

        assert "hello from test" in log_file.read_text()
        setup_logging()
