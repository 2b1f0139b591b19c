"""Logging infrastructure for nosr.

Diagnostics go to stderr (and optionally a rotating log file) so that
stdout stays reserved for the per-repository progress lines.
"""

import logging
import logging.handlers
import os
import sys
from typing import Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
ISO8601 = "%Y-%m-%dT%H:%M:%S"


def setup_logger(
    name: str,
    log_dir: str = "/var/log/nosr",
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the "nosr" logger tree for one sync run.

    Component loggers from get_logger("nosr.<component>") propagate to
    the handlers attached here.

    Args:
        name: Logger name (typically "nosr")
        log_dir: Directory for "<name>.log" when file_logging is set
        level: One of LOG_LEVELS, case-insensitive
        log_format: Record format, DEFAULT_FORMAT if None
        date_format: Timestamp format, ISO 8601 if None
        file_logging: Also log to a rotating file in log_dir
        console_logging: Log to stderr
        max_bytes: Log file size that triggers rotation
        backup_count: Rotated log files to keep

    Returns:
        Configured logger instance

    Raises:
        ValueError: If level is not one of LOG_LEVELS
    """
    logger = logging.getLogger(name)

    # Validate and set log level
    level_upper = level.upper()
    if level_upper not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. Must be one of: {', '.join(LOG_LEVELS)}"
        )
    logger.setLevel(getattr(logging, level_upper))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(log_format or DEFAULT_FORMAT, datefmt=date_format or ISO8601)

    # Rotating file next to the other nosr state
    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, f"{name}.log"),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # stdout belongs to the progress output
    if console_logging:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a nosr component, e.g. "nosr.fetch"."""
    return logging.getLogger(name)
