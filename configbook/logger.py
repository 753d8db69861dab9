"""
Unified Logging Module
======================

Provides the shared logging setup for the configbook package.

Usage:
    from configbook.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Reading sheet: %s", sheet)
    logger.warning("Lookup miss for %s=%s", column, token)
"""

import logging
import sys
from typing import Optional

# Default log format with timestamp, level, and module name
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = logging.INFO

PACKAGE_LOGGER = "configbook"

# Global flag to track if the package logger has been configured
_root_configured = False


def _configure_root_logger() -> None:
    """
    Attach a console handler to the package logger.

    Runs once; guarded by the module-level ``_root_configured`` flag.
    Output goes to stderr so that documents written to stdout stay clean.
    """
    global _root_configured
    if _root_configured:
        return

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)

    formatter = logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger(PACKAGE_LOGGER)
    root_logger.setLevel(DEFAULT_LEVEL)
    root_logger.addHandler(console_handler)
    root_logger.propagate = False

    _root_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return a logger for *name*, configuring the package logger on first use.

    Args:
        name: logger name, usually the calling module's ``__name__``
        level: optional level for this logger; inherits the package level otherwise

    Returns:
        a configured ``logging.Logger``
    """
    _configure_root_logger()

    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    return logger


def set_level(level: int, logger_name: Optional[str] = None) -> None:
    """
    Set the level of *logger_name*, or of the package logger when omitted.

    Examples:
        set_level(logging.DEBUG)  # debug for every configbook module
        set_level(logging.DEBUG, "configbook.mapping.lookup")  # lookups only
    """
    if logger_name:
        logger = logging.getLogger(logger_name)
    else:
        _configure_root_logger()
        logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
