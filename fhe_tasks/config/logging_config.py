"""
Logging configuration for the FHE task runner.

Provides:
- ISO-8601 timestamped console output (one line per task step)
- Optional file rotation (1 file per day) when FHE_TASKS_LOG_DIR is set
- Separate error log next to the daily file
"""

import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Optional


# Log formats
TASK_FORMAT = "%(asctime)s :: %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

ROOT_LOGGER_NAME = "fhe_tasks"
LOG_DIR_ENV = "FHE_TASKS_LOG_DIR"


class IsoFormatter(logging.Formatter):
    """Formatter rendering asctime as UTC ISO-8601 with milliseconds."""

    def formatTime(self, record, datefmt=None):
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_log_dir() -> Optional[Path]:
    """Directory for file logs, or None when file logging is disabled."""
    raw = os.getenv(LOG_DIR_ENV)
    if not raw:
        return None
    path = Path(raw)
    path.mkdir(parents=True, exist_ok=True)
    return path


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    detailed: bool = False,
) -> logging.Logger:
    """
    Setup a logger with console and (optionally) file handlers.

    Args:
        name: Logger name (defaults to the package root so module loggers inherit it)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file name (defaults to name.log)
        console: Whether to log to stdout
        detailed: Whether to use detailed format (includes file/line)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(level=logging.DEBUG)
        >>> logging.getLogger("fhe_tasks.commands.simple").info("Loading wallet")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = IsoFormatter(DETAILED_FORMAT if detailed else TASK_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    log_dir = get_log_dir()
    if log_dir is None:
        return logger

    if log_file is None:
        log_file = f"{name}.log"

    file_handler = TimedRotatingFileHandler(
        log_dir / log_file,
        when="midnight",
        interval=1,
        backupCount=30,  # Keep 30 days of logs
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    error_handler = RotatingFileHandler(
        log_dir / f"{name}_errors.log",
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(IsoFormatter(DETAILED_FORMAT))
    logger.addHandler(error_handler)

    return logger

