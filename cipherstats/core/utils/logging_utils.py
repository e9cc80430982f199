"""Logging helpers shared by the analytics engine, tracker and CLI."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        session_name: Optional[str] = None
) -> None:
    """Configure root logging for command-line runs.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file. If None, logs only to stdout
        session_name: Optional label appended to the log file name
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = _create_log_file_path(log_file, session_name)
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(numeric_level)


def _create_log_file_path(log_file: str, session_name: Optional[str]) -> str:
    """Build the log file path, stamping it with the session name and time.

    Args:
        log_file: Base log file path
        session_name: Optional session label

    Returns:
        Final log file path
    """
    if not session_name:
        return log_file

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = Path(log_file)
    return str(path.parent / f"{path.stem}_{session_name}_{timestamp}{path.suffix}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
