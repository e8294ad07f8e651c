"""
Logger Configuration Module

One ``occupancy`` logger carries the console and file handlers; module
loggers (``occupancy.pipeline``, ``occupancy.data.loader``, ...) reach
them through propagation. Level, format and log file come from the
``logging`` section of the YAML config.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from occupancy.utils.config_manager import ConfigManager
from occupancy.utils.exceptions import ConfigurationError


PROJECT_LOGGER = "occupancy"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _parse_level(level: str) -> int:
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ConfigurationError('logging.level', f"unknown level '{level}'")
    return value


def setup_logger(
    name: str = PROJECT_LOGGER,
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file; receives DEBUG and above
        log_format: Optional custom log format string

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        ConfigurationError: If level is not a logging level name
    """
    numeric_level = _parse_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else numeric_level)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(log_format or DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def configure_logging(config: ConfigManager, verbose: bool = False) -> logging.Logger:
    """
    Configure the project logger from the ``logging`` config section.

    Args:
        config: Loaded configuration
        verbose: Force DEBUG on the console

    Returns:
        The project logger
    """
    level = 'DEBUG' if verbose else config.get('logging.level', 'INFO')
    return setup_logger(
        PROJECT_LOGGER,
        level=level,
        log_file=config.get('logging.file'),
        log_format=config.get('logging.format'),
    )


def get_logger(name: str = PROJECT_LOGGER) -> logging.Logger:
    """
    Get a logger, configuring the project logger on first use.

    Args:
        name: Logger name, normally ``__name__``

    Returns:
        logging.Logger: Logger instance
    """
    logger = logging.getLogger(name)

    if not logger.hasHandlers():
        setup_logger(PROJECT_LOGGER)

    return logger
