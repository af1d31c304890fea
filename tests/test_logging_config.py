"""Test logging configuration."""

import logging

from rich.logging import RichHandler

from rtext.logging_config import PACKAGE_LOGGER, setup_logging


class TestSetupLogging:
    """Test logging setup."""

    def test_console_handler(self) -> None:
        logger = setup_logging("WARNING")
        assert logger.name == PACKAGE_LOGGER
        assert logger.level == logging.DEBUG
        (handler,) = logger.handlers
        assert isinstance(handler, RichHandler)
        assert handler.level == logging.WARNING

    def test_repeated_setup_replaces_handlers(self) -> None:
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path) -> None:
        log_file = tmp_path / "logs" / "rtext.log"
        logger = setup_logging(logging.INFO, log_file)
        logging.getLogger("rtext.codec").debug("file only message")
        for handler in logger.handlers:
            handler.flush()
        assert "file only message" in log_file.read_text(encoding="utf-8")
        setup_logging()
