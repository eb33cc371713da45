"""
Logging setup for console and persistent log file.

Console output keeps the colour-coded level flags operators see on the
device; the file copy is timestamped, colour-free, and size-rotated.
"""

import sys
from typing import Optional, TextIO

from loguru import logger

from .constants import (
    LOG_CONSOLE_FORMAT,
    LOG_FILE_FORMAT,
    LOG_PATH,
    LOG_ROTATION,
)


def setup_logging(
    log_path: Optional[str] = LOG_PATH,
    verbose: bool = False,
    stream: TextIO = None,
) -> None:
    """
    Configure loguru sinks for the run.

    Args:
        log_path: File to append to, or None to log to the console only
        verbose: Emit DEBUG messages on the console
        stream: Console stream (default: stderr, keeping stdout for events)
    """
    logger.remove()
    logger.add(
        stream or sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=LOG_CONSOLE_FORMAT,
        colorize=None,
    )

    if not log_path:
        return

    try:
        logger.add(
            log_path,
            level="DEBUG",
            format=LOG_FILE_FORMAT,
            colorize=False,
            rotation=LOG_ROTATION,
            retention=1,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning(f"Log file {log_path} unavailable, console only: {e}")
