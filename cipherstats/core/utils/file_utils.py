"""File management utilities for safe report and record file operations."""

import json
from pathlib import Path
from typing import Any, Optional, Union
from dataclasses import dataclass

from .logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class FileOperationResult:
    """Result of a file operation."""

    success: bool
    source_path: Optional[str] = None
    destination_path: Optional[str] = None
    error_message: Optional[str] = None
    files_processed: int = 0
    data: Any = None


class FileManager:
    """Reads and writes analytics files with error handling and logging.

    Failures are reported through ``FileOperationResult`` instead of raised,
    so callers decide whether a missing or unreadable file is fatal.
    """

    def __init__(self):
        """Initialize the file manager."""
        self.logger = get_logger(__name__)

    def write_json_file(
            self,
            data: Any,
            file_path: Union[str, Path],
            indent: int = 2,
            create_dirs: bool = True
    ) -> FileOperationResult:
        """Write data to a JSON file.

        Args:
            data: JSON-serializable data
            file_path: Path to JSON file
            indent: JSON indentation level
            create_dirs: Whether to create parent directories

        Returns:
            FileOperationResult with operation details
        """
        path = Path(file_path)

        try:
            if create_dirs:
                path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, 'w') as f:
                json.dump(data, f, indent=indent)

            self.logger.info(f"Wrote JSON file: {path}")
            return FileOperationResult(
                success=True,
                destination_path=str(path),
                files_processed=1
            )

        except (OSError, TypeError, ValueError) as e:
            error_msg = f"Failed to write JSON file: {e}"
            self.logger.error(error_msg)
            return FileOperationResult(
                success=False,
                destination_path=str(path),
                error_message=error_msg
            )

    def read_json_file(self, file_path: Union[str, Path]) -> FileOperationResult:
        """Read a JSON file.

        Args:
            file_path: Path to JSON file

        Returns:
            FileOperationResult whose ``data`` holds the parsed content
        """
        path = Path(file_path)

        if not path.exists():
            error_msg = f"File does not exist: {path}"
            self.logger.error(error_msg)
            return FileOperationResult(
                success=False,
                source_path=str(path),
                error_message=error_msg
            )

        try:
            with open(path, 'r') as f:
                data = json.load(f)

            self.logger.debug(f"Read JSON file: {path}")
            return FileOperationResult(
                success=True,
                source_path=str(path),
                files_processed=1,
                data=data
            )

        except (OSError, ValueError) as e:
            error_msg = f"Failed to read JSON file {path}: {e}"
            self.logger.error(error_msg)
            return FileOperationResult(
                success=False,
                source_path=str(path),
                error_message=error_msg
            )

    def write_text_file(
            self,
            text: str,
            file_path: Union[str, Path],
            create_dirs: bool = True
    ) -> FileOperationResult:
        """Write plain text to a file.

        Args:
            text: Text content
            file_path: Path to text file
            create_dirs: Whether to create parent directories

        Returns:
            FileOperationResult with operation details
        """
        path = Path(file_path)

        try:
            if create_dirs:
                path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, 'w') as f:
                f.write(text)

            self.logger.info(f"Wrote text file: {path}")
            return FileOperationResult(
                success=True,
                destination_path=str(path),
                files_processed=1
            )

        except OSError as e:
            error_msg = f"Failed to write text file: {e}"
            self.logger.error(error_msg)
            return FileOperationResult(
                success=False,
                destination_path=str(path),
                error_message=error_msg
            )

    def delete_file(self, file_path: Union[str, Path]) -> FileOperationResult:
        """Delete a file if it exists.

        Args:
            file_path: Path to file to delete

        Returns:
            FileOperationResult with operation details
        """
        path = Path(file_path)

        if not path.exists():
            self.logger.warning(f"File does not exist: {path}")
            return FileOperationResult(
                success=True,
                source_path=str(path),
                files_processed=0
            )

        try:
            path.unlink()
            self.logger.info(f"Deleted file: {path}")
            return FileOperationResult(
                success=True,
                source_path=str(path),
                files_processed=1
            )

        except OSError as e:
            error_msg = f"Failed to delete file: {e}"
            self.logger.error(error_msg)
            return FileOperationResult(
                success=False,
                source_path=str(path),
                error_message=error_msg
            )
