"""Distinguished name model."""

from cryptography import x509
from cryptography.x509.oid import NameOID
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class DistinguishedName(BaseModel):
    """Certificate subject information.

    All five fields are required. Earlier releases wrote the organization
    under the key ``orgiazation``; that spelling is still accepted on read.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "country": "DE",
                "state_or_province": "Hessen",
                "locality": "Frankfurt",
                "organization": "ACME Corp",
                "common_name": "ACME Root CA",
            }
        },
    )

    country: str = Field(..., pattern=r"^[A-Za-z]{2}$")
    state_or_province: str = Field(..., min_length=1)
    locality: str = Field(..., min_length=1)
    organization: str = Field(..., min_length=1, validation_alias=AliasChoices("organization", "orgiazation"))
    common_name: str = Field(..., min_length=1, max_length=64)

    @model_validator(mode="after")
    def check_x509_limits(self):
        """Reject values X.509 cannot encode (length limits count UTF-8 bytes)."""
        self.to_x509_name()
        return self

    def to_x509_name(self) -> x509.Name:
        """Build the X.509 name, most significant component first."""
        return x509.Name(
            [
                x509.NameAttribute(NameOID.COUNTRY_NAME, self.country),
                x509.NameAttribute(NameOID.STATE_OR_PROVINCE_NAME, self.state_or_province),
                x509.NameAttribute(NameOID.LOCALITY_NAME, self.locality),
                x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.organization),
                x509.NameAttribute(NameOID.COMMON_NAME, self.common_name),
            ]
        )
