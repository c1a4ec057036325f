"""
Logging utilities for the Finance Tracker backend.

Provides standardized logger configuration following privacy rules.

PRIVACY RULES:
- NEVER log Supabase Auth tokens or API keys
- NEVER log raw bulk-upload file contents (they hold a user's full ledger)
- NEVER log individual transaction amounts or budget targets

Acceptable logging:
- High-level events (e.g., "Bulk upload parsed", "Budget progress fetched")
- Non-sensitive metadata (record IDs, section counts, transaction types)
- Error codes and sanitized error messages
"""

import logging
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_level(level_name: str) -> int:
    """Map a LOG_LEVEL name (e.g. "debug") to a logging level, defaulting to INFO."""
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from finance_tracker.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
