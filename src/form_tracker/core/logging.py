"""Logging configuration and utilities.

Library code only obtains loggers; handlers are attached by the embedding
application (or the replay script) through ``setup_logging``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from form_tracker.core.config import LoggingSettings

ROOT_LOGGER_NAME = "form_tracker"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Library default: stay silent unless the application configures handlers
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def setup_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Attach console and optional file handlers to the package logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file

    Returns:
        The configured package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(log_level)
    package_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger


def setup_logging_from_settings(settings: LoggingSettings) -> logging.Logger:
    """Configure logging from the ``LOG_`` settings section."""
    return setup_logging(level=settings.level, log_file=settings.file)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger under the form_tracker namespace
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
