"""
Logging configuration for the RText tools.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler

from .config import LOG_FILE_BACKUPS, LOG_FILE_FORMAT, LOG_FILE_MAX_BYTES

PACKAGE_LOGGER = "rtext"


def setup_logging(
    level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Setup package logging with a rich console handler and an optional rotating file.

    Args:
        level: Console level, as a logging constant or a name such as "DEBUG"
        log_file: When given, everything down to DEBUG is also written there
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)

    # Clear any existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(show_path=False, markup=False, rich_tracebacks=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(LOG_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(file_handler)

    logger.debug(f"Logging configured: console={logging.getLevelName(level)}, file={log_file}")
    return logger
