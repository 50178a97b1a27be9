"""Logging setup for the payment processing package."""
import logging
import sys
from typing import Optional

from .config import get_settings

PACKAGE_LOGGER = "invoice_payments"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger with a console handler.

    Args:
        level: Logging level name; defaults to the configured LOG_LEVEL

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    level_name = (level or get_settings().LOG_LEVEL).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Already configured
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    logger.addHandler(handler)
    return logger
