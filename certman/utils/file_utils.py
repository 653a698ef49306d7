"""File system utilities."""

import logging
import os
from pathlib import Path

logger = logging.getLogger("certman")


class FileUtils:
    """Utility class for file operations."""

    @staticmethod
    def ensure_directory(path: Path) -> None:
        """
        Ensure directory exists, create if not.

        Args:
            path: Directory path to ensure
        """
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Ensured directory exists: {path}")

    @staticmethod
    def read_binary_file(path: Path) -> bytes:
        """
        Read file contents as bytes.

        Args:
            path: File path to read

        Returns:
            File contents as bytes
        """
        with open(path, "rb") as f:
            return f.read()

    @staticmethod
    def write_file(path: Path, content: str) -> None:
        """
        Write string content to file.

        Args:
            path: File path to write
            content: Content to write
        """
        FileUtils.ensure_directory(path.parent)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug(f"Wrote file: {path}")

    @staticmethod
    def write_private_file(path: Path, content: str) -> None:
        """
        Write string content to a file readable only by its owner.

        The file is created with mode 0600 before any content is written, so
        key material is never briefly world-readable.

        Args:
            path: File path to write
            content: Content to write
        """
        FileUtils.ensure_directory(path.parent)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        # O_CREAT leaves the mode of an existing file alone
        os.chmod(path, 0o600)
        logger.debug(f"Wrote private file: {path}")
