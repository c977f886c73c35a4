"""Core utilities for the rejection service."""

from rejector.app.core.config import Settings, settings
from rejector.app.core.logging import get_logger, sanitize_for_logging, setup_logging

__all__ = [
    "Settings",
    "settings",
    "get_logger",
    "sanitize_for_logging",
    "setup_logging",
]
