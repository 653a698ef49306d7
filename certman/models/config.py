"""Application configuration models."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

# Leaf certificates fall back to this validity when neither the command line
# nor the configuration names one.
LEAF_VALIDITY_DAYS = 30


class CASettings(BaseModel):
    """Certificate authority defaults."""

    default_ca_path: Path
    vality_time_days: int = Field(365, gt=0)


class CertsSettings(BaseModel):
    """Leaf certificate defaults."""

    vality_time_days: Optional[int] = Field(None, gt=0)


class LoggingSettings(BaseModel):
    """Logging settings."""

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class AppConfig(BaseModel):
    """Main application configuration."""

    ca: CASettings
    certs: CertsSettings = CertsSettings()
    logging: LoggingSettings = LoggingSettings()
