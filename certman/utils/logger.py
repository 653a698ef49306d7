"""Logging configuration."""

import logging
import sys
from pathlib import Path
from typing import Optional

from certman.models.config import AppConfig

LOGGER_NAME = "certman"


def setup_logger(config: Optional[AppConfig] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure application logger.

    Args:
        config: Application configuration
        verbose: Force DEBUG output on the console

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Reconfiguring replaces handlers from an earlier call in the same process
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level = logging.WARNING
    if config is not None:
        level = getattr(logging, config.logging.level.upper(), logging.WARNING)
    if verbose:
        level = logging.DEBUG

    logger.setLevel(level)
    logger.propagate = False

    # Console handler; stdout is reserved for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    # File handler (if configured)
    if config is not None and config.logging.file:
        log_file = Path(config.logging.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(config.logging.format))
        logger.addHandler(file_handler)

    return logger
