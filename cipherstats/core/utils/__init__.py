"""Utility modules for cipherstats."""

from .logging_utils import setup_logging, get_logger
from .file_utils import FileManager, FileOperationResult
from .scheduler import RefreshScheduler

__all__ = ["setup_logging", "get_logger", "FileManager", "FileOperationResult", "RefreshScheduler"]
