"""
Centralized logging configuration for the Watchlist Sync module.
"""
import logging
import sys
from typing import Iterable, Optional

PACKAGE_LOGGER = "watchlist_sync"

# Provider SDKs that log every HTTP round trip at INFO/DEBUG
NOISY_LOGGERS = ("yfinance", "urllib3", "peewee")


def setup_logger(
    name: str,
    level: str = "INFO",
    log_format: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with a stdout handler.

    Args:
        name: Logger name (usually the package name)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Avoid duplicate handlers when a script is re-entered
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(logging.Formatter(
        log_format or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    logger.addHandler(handler)

    return logger


def configure_logging(logging_config, quiet: Iterable[str] = NOISY_LOGGERS) -> logging.Logger:
    """
    Configure the package root logger from a LoggingConfig section.

    Module loggers obtained with get_logger(__name__) propagate to it.
    """
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
    return setup_logger(
        PACKAGE_LOGGER,
        level=logging_config.level,
        log_format=logging_config.format,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; handlers live on the package root logger."""
    return logging.getLogger(name)
