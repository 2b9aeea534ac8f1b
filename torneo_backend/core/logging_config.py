# torneo_backend/core/logging_config.py
"""
Logging configuration for the tournament engine.

Engine modules only ever call get_logger(__name__). Programs that embed the
engine (the demo script, the surrounding admin app) call setup_logging() once
at startup.
"""

import logging
from typing import Optional

# Log format templates
DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"
)
CONSOLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    enable_console: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Setup application-wide logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Whether to log to the console
        log_file: Optional path of a file that receives the detailed format
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    root_logger.debug(f"Logging initialized - Level: {level}, Console: {enable_console}, File: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module (typically called with __name__)."""
    return logging.getLogger(name)
