"""Issuance plan model."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

CA_CERT_NAME = "ca_cert"


class CertRole(str, Enum):
    """What kind of certificate a plan issues."""

    CA = "ca"
    CERT = "cert"


class IssuancePlan(BaseModel):
    """Everything needed to issue (or show) one certificate.

    Derived from command-line flags and configuration, never persisted.
    """

    model_config = ConfigDict(frozen=True)

    role: CertRole
    name: str = Field(..., min_length=1)
    output_dir: Path
    validity_days: int = Field(..., gt=0)
    self_signed: bool = False
    generate: bool = False
    force: bool = False
    interactive: bool = True
    ca_dir: Optional[Path] = None

    @model_validator(mode="after")
    def check_signer(self):
        """A leaf certificate that is not self-signed needs a CA directory."""
        if self.role is CertRole.CA and not self.self_signed:
            raise ValueError("CA certificates are always self-signed")
        if self.role is CertRole.CERT and not self.self_signed and self.ca_dir is None:
            raise ValueError("a CA directory is required unless the certificate is self-signed")
        return self

    @property
    def is_ca(self) -> bool:
        return self.role is CertRole.CA

    @property
    def needs_signer(self) -> bool:
        return not self.self_signed

    @property
    def cert_path(self) -> Path:
        return self.output_dir / f"{self.name}.pem"

    @property
    def key_path(self) -> Path:
        return self.output_dir / f"{self.name}.key"
