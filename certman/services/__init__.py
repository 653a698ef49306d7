"""Business logic services."""

from .certificate_engine import (
    CertificateAuthority,
    CertificateEngine,
    CertProfile,
    CryptographyEngine,
    IssuedCertificate,
)
from .config_service import ConfigService
from .issuance_service import IssuanceResult, IssuanceService
from .metadata_store import MetadataStore
from .parser_service import CertificateParser
from .plan_service import build_plan
from .prompt_service import Prompter
from .toml_service import TOMLService

__all__ = [
    "CertificateAuthority",
    "CertificateEngine",
    "CertificateParser",
    "CertProfile",
    "ConfigService",
    "CryptographyEngine",
    "IssuanceResult",
    "IssuanceService",
    "IssuedCertificate",
    "MetadataStore",
    "Prompter",
    "TOMLService",
    "build_plan",
]
