"""Certificate generation and CA loading."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes

from certman.exceptions import InvalidPlanError
from certman.models.plan import CA_CERT_NAME
from certman.models.san import SubjectAltNames
from certman.models.subject import DistinguishedName
from certman.utils.file_utils import FileUtils

logger = logging.getLogger("certman")


class CertProfile(str, Enum):
    """Key usage profile applied to a new certificate."""

    CA = "ca"
    LEAF = "leaf"


@dataclass(frozen=True)
class IssuedCertificate:
    """PEM output of one issuance."""

    cert_pem: str
    key_pem: str


@dataclass(frozen=True)
class CertificateAuthority:
    """A loaded CA certificate and its private key."""

    certificate: x509.Certificate
    private_key: CertificateIssuerPrivateKeyTypes

    @property
    def subject(self) -> x509.Name:
        return self.certificate.subject


class CertificateEngine(Protocol):
    """Boundary to the library that does the cryptographic work."""

    def issue(
        self,
        profile: CertProfile,
        dn: DistinguishedName,
        sans: SubjectAltNames,
        validity_days: int,
        signer: Optional[CertificateAuthority] = None,
    ) -> IssuedCertificate: ...

    def load_authority(self, ca_dir: Path) -> CertificateAuthority: ...


class CryptographyEngine:
    """Certificate engine backed by the ``cryptography`` package.

    Keys are ECDSA P-256 and certificates are signed with SHA-256.
    """

    curve = ec.SECP256R1()

    def issue(
        self,
        profile: CertProfile,
        dn: DistinguishedName,
        sans: SubjectAltNames,
        validity_days: int,
        signer: Optional[CertificateAuthority] = None,
    ) -> IssuedCertificate:
        """
        Generate a key pair and a certificate for it.

        Args:
            profile: CA or leaf key usage profile
            dn: Subject distinguished name
            sans: Subject alternative names (ignored when empty)
            validity_days: Days from now until the certificate expires
            signer: CA to sign with; self-signed when None

        Returns:
            IssuedCertificate with PEM certificate and PEM (PKCS#8) key
        """
        private_key = ec.generate_private_key(self.curve)
        public_key = private_key.public_key()
        subject = dn.to_x509_name()

        now = datetime.now(timezone.utc)
        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(signer.subject if signer else subject)
            .public_key(public_key)
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + timedelta(days=validity_days))
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
        )

        if profile is CertProfile.CA:
            builder = builder.add_extension(x509.BasicConstraints(ca=True, path_length=1), critical=True)
            builder = builder.add_extension(_key_usage(key_cert_sign=True), critical=True)
        else:
            builder = builder.add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
            builder = builder.add_extension(_key_usage(key_cert_sign=False), critical=True)

        if sans:
            builder = builder.add_extension(sans.to_x509_extension(), critical=False)

        if signer is not None:
            builder = builder.add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(signer.private_key.public_key()),
                critical=False,
            )
            signing_key = signer.private_key
        else:
            signing_key = private_key

        certificate = builder.sign(private_key=signing_key, algorithm=_signature_hash(signing_key))
        logger.debug(f"Signed {profile.value} certificate for '{dn.common_name}' (serial {certificate.serial_number:X})")

        return IssuedCertificate(
            cert_pem=certificate.public_bytes(serialization.Encoding.PEM).decode("utf-8"),
            key_pem=private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            ).decode("utf-8"),
        )

    def load_authority(self, ca_dir: Path) -> CertificateAuthority:
        """
        Load ``ca_cert.pem`` and ``ca_cert.key`` from a CA directory.

        Args:
            ca_dir: CA directory

        Returns:
            CertificateAuthority ready to sign with

        Raises:
            InvalidPlanError: If either file is missing or unreadable, or the
                key does not belong to the certificate
        """
        cert_path = ca_dir / f"{CA_CERT_NAME}.pem"
        key_path = ca_dir / f"{CA_CERT_NAME}.key"

        try:
            certificate = x509.load_pem_x509_certificate(FileUtils.read_binary_file(cert_path))
        except OSError as e:
            raise InvalidPlanError(f"can't load CA certificate {cert_path}: {e}") from e
        except ValueError as e:
            raise InvalidPlanError(f"can't parse CA certificate {cert_path}: {e}") from e

        try:
            private_key = serialization.load_pem_private_key(FileUtils.read_binary_file(key_path), password=None)
        except OSError as e:
            raise InvalidPlanError(f"can't load CA key {key_path}: {e}") from e
        except (TypeError, ValueError) as e:
            raise InvalidPlanError(f"can't parse CA key {key_path}: {e}") from e

        if not _same_public_key(certificate, private_key):
            raise InvalidPlanError(f"CA key {key_path} does not match certificate {cert_path}")

        logger.debug(f"Loaded CA '{certificate.subject.rfc4514_string()}' from {ca_dir}")
        return CertificateAuthority(certificate=certificate, private_key=private_key)


def _key_usage(key_cert_sign: bool) -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=True,
        content_commitment=False,
        key_encipherment=True,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=key_cert_sign,
        crl_sign=False,
        encipher_only=False,
        decipher_only=False,
    )


def _signature_hash(key) -> Optional[hashes.HashAlgorithm]:
    # EdDSA keys sign without a separate digest
    if isinstance(key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
        return None
    return hashes.SHA256()


def _same_public_key(certificate: x509.Certificate, private_key) -> bool:
    """Compare the certificate's public key with the one derived from the private key."""

    def spki(key) -> bytes:
        return key.public_bytes(
            encoding=serialization.Encoding.DER, format=serialization.PublicFormat.SubjectPublicKeyInfo
        )

    return spki(certificate.public_key()) == spki(private_key.public_key())
