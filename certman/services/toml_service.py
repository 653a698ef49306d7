"""TOML file operations service."""

import logging
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Dict

import tomli_w

logger = logging.getLogger("certman")


class TOMLService:
    """Service for TOML file operations."""

    @staticmethod
    def load_toml(file_path: Path) -> Dict[str, Any]:
        """
        Load TOML file and return as dictionary.

        Args:
            file_path: Path to TOML file

        Returns:
            Parsed TOML content as dictionary

        Raises:
            FileNotFoundError: If file doesn't exist
            tomllib.TOMLDecodeError: If file is not valid TOML
        """
        if not file_path.exists():
            raise FileNotFoundError(f"TOML file not found: {file_path}")

        with open(file_path, "rb") as f:
            try:
                data = tomllib.load(f)
                logger.debug(f"Loaded TOML from: {file_path}")
                return data
            except tomllib.TOMLDecodeError as e:
                logger.error(f"Error parsing TOML file {file_path}: {e}")
                raise

    @staticmethod
    def save_toml(file_path: Path, data: Dict[str, Any]) -> None:
        """
        Save dictionary to TOML file.

        Path and Enum values are written as strings; ``None`` values are
        dropped because TOML has no null.

        Args:
            file_path: Path to save TOML file
            data: Data to save

        Raises:
            TypeError: If data contains values TOML cannot represent
        """
        # Ensure parent directory exists
        file_path.parent.mkdir(parents=True, exist_ok=True)

        document = tomli_w.dumps(TOMLService._format_nested_dict(data))
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(document)
        logger.debug(f"Saved TOML to: {file_path}")

    @staticmethod
    def _format_value(value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, dict):
            return TOMLService._format_nested_dict(value)
        if isinstance(value, (list, tuple)):
            return [TOMLService._format_value(item) for item in value]
        return value

    @staticmethod
    def _format_nested_dict(data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively format nested dictionaries, converting Path and Enum objects.

        Args:
            data: Dictionary to format

        Returns:
            Formatted dictionary
        """
        return {key: TOMLService._format_value(value) for key, value in data.items() if value is not None}
