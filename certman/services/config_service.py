"""Configuration loading service."""

import logging
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from certman.exceptions import ConfigError
from certman.models.config import AppConfig, CASettings
from certman.services.toml_service import TOMLService

logger = logging.getLogger("certman")

CONFIG_FILE_NAME = "config.toml"


class ConfigService:
    """Locate, load and bootstrap the certman configuration file."""

    def __init__(self, config_dir: Path, data_dir: Path):
        """
        Initialize config service.

        Args:
            config_dir: Directory holding the default config.toml
            data_dir: Directory under which the default CA lives
        """
        self.config_dir = config_dir
        self.data_dir = data_dir

    @property
    def default_config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def default_config(self) -> AppConfig:
        """Build the configuration written on first run."""
        return AppConfig(ca=CASettings(default_ca_path=self.data_dir / "ca", vality_time_days=365))

    def load(self, config_path: Optional[Path] = None) -> AppConfig:
        """
        Load configuration.

        An explicitly requested file must exist. Without one, the default
        location is used and populated with defaults when absent.

        Args:
            config_path: Optional explicit configuration file

        Returns:
            Parsed configuration

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise ConfigError(f"can't find config file {config_path}")
            return self._read(config_path)

        path = self.default_config_path
        if path.exists():
            return self._read(path)

        config = self.default_config()
        try:
            TOMLService.save_toml(path, config.model_dump(exclude_none=True, exclude={"certs"}))
        except OSError as e:
            raise ConfigError(f"can't create config file {path}: {e}") from e
        logger.info(f"Created default configuration at {path}")
        return config

    @staticmethod
    def _read(path: Path) -> AppConfig:
        try:
            data = TOMLService.load_toml(path)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"can't parse config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"can't read config file {path}: {e}") from e

        try:
            config = AppConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid config file {path}: {e}") from e

        # Relative CA paths are resolved against the config file's directory
        ca_path = config.ca.default_ca_path.expanduser()
        if not ca_path.is_absolute():
            ca_path = (path.parent / ca_path).resolve()
        config.ca.default_ca_path = ca_path
        return config
