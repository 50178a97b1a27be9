"""Utility modules."""

from .config import get_settings, Settings
from .logging_utils import setup_logging

__all__ = ["get_settings", "Settings", "setup_logging"]
