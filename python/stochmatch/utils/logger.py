"""
Loguru configuration for stochmatch.

The package logs through ``from loguru import logger`` everywhere but is
disabled on import, so library users see nothing unless they opt in.
Applications call ``setup_logger()`` once at startup to enable the
``stochmatch`` namespace and install:
  - **stderr**: coloured, compact format, at the requested level.
  - **File** (optional): DEBUG and above with source location, rotated
    at 10 MB and kept for 30 days.
"""
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def setup_logger(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
):
    """Configure and return the global Loguru logger.

    Args:
        level: Minimum level for the stderr sink.
        log_file: Optional path of a log file; its directory is created
                  if it does not exist.

    Returns:
        The configured ``logger`` instance.
    """
    logger.remove()
    logger.enable("stochmatch")

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
                "{name}:{function}:{line} - {message}"
            ),
            encoding="utf-8",
        )

    return logger
