"""Exception types raised by certman."""


class CertmanError(Exception):
    """Base class for every error certman reports to the operator."""


class ConfigError(CertmanError):
    """Configuration file is missing, unreadable or invalid."""


class MetadataParseError(CertmanError):
    """A DN or SAN side file could not be parsed or validated."""


class InteractiveInputError(CertmanError):
    """Input stream closed or interrupted while prompting."""


class InvalidPlanError(CertmanError, ValueError):
    """The issuance plan cannot be carried out as requested.

    Raised when a required side file is missing and interaction is disabled,
    when the CA directory is missing or unusable, or when output files
    already exist and overwriting was not forced.
    """
