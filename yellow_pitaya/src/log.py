"""Logging setup for the wire trace and the rest of the core."""

import os
import sys

from loguru import logger

from .defaults import DEFAULT_LOGLEVEL

# Commands are traced at INFO, replies at DEBUG.
COMMAND_LEVEL = "INFO"
REPLY_LEVEL = "DEBUG"


def level_from_verbosity(verbosity: int) -> str:
    """Map a count of -v flags to a loguru level name."""
    if verbosity >= 2:
        return REPLY_LEVEL
    if verbosity == 1:
        return COMMAND_LEVEL
    return DEFAULT_LOGLEVEL


def start_log(log_level=DEFAULT_LOGLEVEL, log_path=None, log_to_stderr=True):
    # first remove (default) stderr output
    logger.remove()

    if log_to_stderr:
        logger.add(sys.stderr, level=log_level, colorize=True)
    if log_path:
        log_path = os.path.abspath(log_path)
        logger.add(log_path, level=log_level, colorize=False)
        logger.info("Log started at {}", log_path)


def shutdown_log():
    logger.remove()
