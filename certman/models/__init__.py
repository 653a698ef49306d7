"""Data models for certman."""

from .config import LEAF_VALIDITY_DAYS, AppConfig, CASettings, CertsSettings, LoggingSettings
from .plan import CA_CERT_NAME, CertRole, IssuancePlan
from .san import SanEntry, SanKind, SubjectAltNames
from .subject import DistinguishedName

__all__ = [
    "AppConfig",
    "CASettings",
    "CertsSettings",
    "LoggingSettings",
    "LEAF_VALIDITY_DAYS",
    "CA_CERT_NAME",
    "CertRole",
    "IssuancePlan",
    "SanEntry",
    "SanKind",
    "SubjectAltNames",
    "DistinguishedName",
]
