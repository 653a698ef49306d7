"""Certificate parsing service."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

logger = logging.getLogger("certman")


class CertificateParser:
    """Service for parsing X.509 certificates."""

    @staticmethod
    def parse_certificate(cert_path: Path) -> Dict[str, Any]:
        """
        Parse X.509 Certificate from file and extract all relevant data.

        Args:
            cert_path: Path to certificate file

        Returns:
            Dictionary with parsed certificate data

        Raises:
            FileNotFoundError: If certificate file not found
            ValueError: If certificate cannot be parsed
        """
        if not cert_path.exists():
            raise FileNotFoundError(f"Certificate not found: {cert_path}")

        with open(cert_path, "rb") as f:
            cert_pem = f.read()

        return CertificateParser.parse_certificate_pem(cert_pem.decode("utf-8"))

    @staticmethod
    def parse_certificate_pem(cert_pem: str) -> Dict[str, Any]:
        """
        Parse X.509 Certificate from PEM content.

        Args:
            cert_pem: PEM-encoded certificate content

        Returns:
            Dictionary with parsed certificate data

        Raises:
            ValueError: If certificate cannot be parsed
        """
        try:
            cert = x509.load_pem_x509_certificate(cert_pem.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Error parsing certificate: {e}")
            raise ValueError(f"Failed to parse certificate: {e}")

        return {
            "subject": cert.subject.rfc4514_string(),
            "issuer": cert.issuer.rfc4514_string(),
            "self_signed": cert.subject == cert.issuer,
            "not_before": cert.not_valid_before_utc,
            "not_after": cert.not_valid_after_utc,
            "serial_number": format(cert.serial_number, "X"),
            "public_key_algorithm": CertificateParser._key_algorithm(cert.public_key()),
            "fingerprint_sha256": cert.fingerprint(hashes.SHA256()).hex(":").upper(),
            "sans": CertificateParser._extract_sans(cert),
            "is_ca": CertificateParser._is_ca(cert),
            "key_usage": CertificateParser._extract_key_usage(cert),
        }

    @staticmethod
    def _key_algorithm(public_key) -> str:
        if isinstance(public_key, rsa.RSAPublicKey):
            return f"RSA {public_key.key_size}"
        if isinstance(public_key, ec.EllipticCurvePublicKey):
            return f"ECDSA {public_key.curve.name}"
        if isinstance(public_key, ed25519.Ed25519PublicKey):
            return "Ed25519"
        return "Unknown"

    @staticmethod
    def _extract_sans(cert: x509.Certificate) -> List[str]:
        """
        Extract Subject Alternative Names.

        Args:
            cert: Certificate object

        Returns:
            List of SANs, each prefixed with its kind (e.g. ``DNS:host``)
        """
        try:
            san_ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        except x509.ExtensionNotFound:
            return []

        prefixes = {
            x509.DNSName: "DNS",
            x509.IPAddress: "IP",
            x509.RFC822Name: "email",
            x509.UniformResourceIdentifier: "URI",
        }
        return [f"{prefixes.get(type(name), 'other')}:{name.value}" for name in san_ext.value]

    @staticmethod
    def _is_ca(cert: x509.Certificate) -> bool:
        try:
            bc = cert.extensions.get_extension_for_class(x509.BasicConstraints)
            return bc.value.ca
        except x509.ExtensionNotFound:
            return False

    @staticmethod
    def _extract_key_usage(cert: x509.Certificate) -> List[str]:
        """
        Extract Key Usage extension values.

        Args:
            cert: Certificate object

        Returns:
            List of Key Usage strings (e.g., ["digitalSignature", "keyEncipherment"])
        """
        try:
            ku = cert.extensions.get_extension_for_class(x509.KeyUsage).value
        except x509.ExtensionNotFound:
            return []

        # Map cryptography attributes to OpenSSL-style names
        flags = [
            ("digital_signature", "digitalSignature"),
            ("content_commitment", "nonRepudiation"),
            ("key_encipherment", "keyEncipherment"),
            ("data_encipherment", "dataEncipherment"),
            ("key_agreement", "keyAgreement"),
            ("key_cert_sign", "keyCertSign"),
            ("crl_sign", "cRLSign"),
        ]
        return [name for attr, name in flags if getattr(ku, attr)]

    @staticmethod
    def get_validity_status(not_before: datetime, not_after: datetime, now: Optional[datetime] = None) -> str:
        """
        Get validity status of certificate.

        Args:
            not_before: Certificate start date
            not_after: Certificate end date
            now: Reference time (default: current UTC time)

        Returns:
            Human-readable status
        """
        if now is None:
            now = datetime.now(timezone.utc)

        if now < not_before:
            return "Not yet valid"
        elif now > not_after:
            return "Expired"
        else:
            # Check if expiring soon (within 30 days)
            days_remaining = (not_after - now).days
            if days_remaining <= 30:
                return f"Expires in {days_remaining} days"
            else:
                return "Valid"

    @staticmethod
    def summary_rows(cert_info: Dict[str, Any]) -> List[List[str]]:
        """Build FIELD/VALUE rows for table output."""
        return [
            ["FIELD", "VALUE"],
            ["subject", cert_info["subject"]],
            ["issuer", "(self-signed)" if cert_info["self_signed"] else cert_info["issuer"]],
            ["ca", "yes" if cert_info["is_ca"] else "no"],
            ["not_before", cert_info["not_before"].strftime("%Y-%m-%dT%H:%M:%SZ")],
            ["not_after", cert_info["not_after"].strftime("%Y-%m-%dT%H:%M:%SZ")],
            ["status", CertificateParser.get_validity_status(cert_info["not_before"], cert_info["not_after"])],
            ["serial", cert_info["serial_number"]],
            ["key", cert_info["public_key_algorithm"]],
            ["key_usage", ", ".join(cert_info["key_usage"])],
            ["sans", ", ".join(cert_info["sans"])],
            ["sha256", cert_info["fingerprint_sha256"]],
        ]
