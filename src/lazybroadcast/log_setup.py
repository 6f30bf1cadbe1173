#!/usr/bin/env python3
"""
Logging configuration for applications using the data managers.

The library modules only declare their loggers, they never install
handlers. Applications call `configure_logging()` once at startup.

---
LazyBroadcast - Lazily-loaded data broadcasting

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging, logging.handlers
from pathlib import Path
from typing import Optional

# Internal libraries
from .manager_config import ManagerConfig

LOGGING_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class ColorFormatter(logging.Formatter):
    """
    Log formatter that colors only the log level name.
    """

    COLORS = {
        "DEBUG": "\033[94m",  # Blue
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[41m",  # White on Red
        "RESET": "\033[0m",  # Reset color
    }

    def __init__(self):
        super().__init__(LOGGING_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so that other handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def configure_logging(
    level: str = "INFO", log_file: Optional[str | Path] = None
) -> logging.Logger:
    """
    Configure the root logger.

    Logs are printed in the standard error stream. If a file is given,
    logs are also saved with a time rotating strategy: a new file is
    created at midnight and they are kept up to 7 days.

    Args:
        level (str): Minimal level name to log.
        log_file (Optional[str | Path]): Log file path, or `None` for
            console logging only.

    Returns:
        logging.Logger: The root logger.

    Raises:
        ValueError: Unknown level name.
    """
    numeric = logging.getLevelNamesMapping().get(level.upper())
    if numeric is None:
        raise ValueError(f"Unknown logging level '{level}'.")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColorFormatter())
    handlers: list[logging.Handler] = [console_handler]

    if log_file is not None:
        handlers.append(
            logging.handlers.TimedRotatingFileHandler(
                filename=log_file,
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
        )

    # Handlers without a formatter get the plain format
    logging.basicConfig(
        level=numeric,
        format=LOGGING_FORMAT,
        handlers=handlers,
        force=True,
    )
    return logging.getLogger()


def configure_from(
    config: ManagerConfig, log_file: Optional[str | Path] = None
) -> logging.Logger:
    """
    Configure the root logger with the level of the given configuration.
    """
    return configure_logging(config.log_level, log_file)
