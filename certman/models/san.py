"""Subject alternative name models."""

import ipaddress
from enum import Enum
from typing import Any, Dict, Iterable, List

from cryptography import x509
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class SanKind(str, Enum):
    """Supported SAN kinds, in canonical order."""

    DNS = "dns"
    IP = "ip"
    EMAIL = "email"
    URI = "uri"


_KIND_ORDER = {kind: index for index, kind in enumerate(SanKind)}


class SanEntry(BaseModel):
    """A single subject alternative name."""

    model_config = ConfigDict(frozen=True)

    kind: SanKind
    value: str = Field(..., min_length=1)

    @field_validator("value", mode="after")
    @classmethod
    def check_value(cls, v: str, info: ValidationInfo) -> str:
        """
        Validate a SAN value for its kind.

        IP addresses are stored in compressed form. DNS names, e-mail
        addresses and URIs must be ASCII; internationalized names go in
        their A-label (punycode) form.
        """
        kind = info.data.get("kind")
        if kind is SanKind.IP:
            try:
                return ipaddress.ip_address(v).compressed
            except ValueError:
                raise ValueError(f"Invalid IP address in SAN: {v!r}")
        if kind is not None and not v.isascii():
            raise ValueError(f"SAN {kind.value} value must be ASCII (use the punycode form for IDNs): {v!r}")
        return v

    def to_general_name(self) -> x509.GeneralName:
        if self.kind is SanKind.DNS:
            return x509.DNSName(self.value)
        if self.kind is SanKind.IP:
            return x509.IPAddress(ipaddress.ip_address(self.value))
        if self.kind is SanKind.EMAIL:
            return x509.RFC822Name(self.value)
        return x509.UniformResourceIdentifier(self.value)


class SubjectAltNames(BaseModel):
    """Ordered set of subject alternative names.

    Entries are kept grouped by kind (dns, ip, email, uri) with insertion
    order preserved inside each kind, which is also the order the TOML side
    file stores them in. A value read back from disk therefore compares
    equal to the value that was written.

    Example:
        >>> sans = SubjectAltNames.from_toml_dict({"dns": ["a.example"], "ip": ["10.0.0.1"]})
        >>> sans.to_toml_dict()
        {'dns': ['a.example'], 'ip': ['10.0.0.1']}
    """

    model_config = ConfigDict(frozen=True)

    entries: List[SanEntry] = Field(default_factory=list)

    @field_validator("entries", mode="after")
    @classmethod
    def canonical_order(cls, v: List[SanEntry]) -> List[SanEntry]:
        """Group entries by kind and drop exact duplicates."""
        seen = set()
        unique = []
        for entry in v:
            key = (entry.kind, entry.value)
            if key not in seen:
                seen.add(key)
                unique.append(entry)
        return sorted(unique, key=lambda entry: _KIND_ORDER[entry.kind])

    @classmethod
    def of(cls, kind: SanKind, values: Iterable[str]) -> "SubjectAltNames":
        """Build a set holding only names of one kind."""
        return cls(entries=[SanEntry(kind=kind, value=value) for value in values])

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "SubjectAltNames":
        """
        Build from the side-file layout of four optional lists.

        Args:
            data: Parsed TOML document

        Returns:
            SubjectAltNames instance

        Raises:
            ValueError: On unknown keys, non-list values or invalid entries
        """
        known = {kind.value for kind in SanKind}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown SAN kind(s): {', '.join(unknown)}")

        entries = []
        for kind in SanKind:
            values = data.get(kind.value, [])
            if not isinstance(values, list):
                raise ValueError(f"SAN '{kind.value}' must be a list")
            entries.extend(SanEntry(kind=kind, value=str(value)) for value in values)
        return cls(entries=entries)

    def to_toml_dict(self) -> Dict[str, List[str]]:
        """Serialize to the side-file layout, omitting empty lists."""
        data: Dict[str, List[str]] = {}
        for entry in self.entries:
            data.setdefault(entry.kind.value, []).append(entry.value)
        return data

    def values(self, kind: SanKind) -> List[str]:
        return [entry.value for entry in self.entries if entry.kind is kind]

    def to_x509_extension(self) -> x509.SubjectAlternativeName:
        return x509.SubjectAlternativeName([entry.to_general_name() for entry in self.entries])

    def __bool__(self) -> bool:
        return bool(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
