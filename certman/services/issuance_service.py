"""Certificate issuance workflow."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from certman.exceptions import CertmanError, InvalidPlanError
from certman.models.plan import IssuancePlan
from certman.models.san import SubjectAltNames
from certman.models.subject import DistinguishedName
from certman.services.certificate_engine import CertificateAuthority, CertificateEngine, CertProfile
from certman.services.metadata_store import MetadataStore
from certman.services.parser_service import CertificateParser
from certman.services.prompt_service import Prompter
from certman.utils.file_utils import FileUtils

logger = logging.getLogger("certman")


@dataclass(frozen=True)
class IssuanceResult:
    """Files produced by one issuance."""

    cert_path: Path
    key_path: Path
    dn: DistinguishedName
    sans: SubjectAltNames
    signed_by: Optional[str] = None


class IssuanceService:
    """Carry out an issuance plan: resolve metadata, sign, persist."""

    def __init__(self, engine: CertificateEngine, prompter: Prompter):
        """
        Initialize issuance service.

        Args:
            engine: Certificate engine that generates keys and signs
            prompter: Operator prompts used when interaction is enabled
        """
        self.engine = engine
        self.prompter = prompter

    def should_show(self, plan: IssuancePlan) -> bool:
        """
        Decide whether a plan shows an existing certificate instead of issuing.

        ``ca`` without ``--gen`` always shows. ``certs`` shows only when the
        certificate already exists and neither ``--gen`` nor ``--force`` was
        given.
        """
        if plan.generate:
            return False
        if plan.is_ca:
            return True
        return not plan.force and plan.cert_path.exists()

    def show(self, plan: IssuancePlan) -> Dict[str, Any]:
        """
        Parse the certificate a plan points at.

        Returns:
            Parsed certificate data (see CertificateParser)

        Raises:
            InvalidPlanError: If the certificate does not exist
            CertmanError: If it cannot be parsed
        """
        path = plan.cert_path
        if not path.exists():
            hint = "; use --gen to create one" if plan.is_ca else ""
            raise InvalidPlanError(f"no certificate at {path}{hint}")
        try:
            return CertificateParser.parse_certificate(path)
        except ValueError as e:
            raise CertmanError(f"can't read certificate {path}: {e}") from e

    def issue(self, plan: IssuancePlan) -> IssuanceResult:
        """
        Issue the certificate described by a plan.

        Output files are checked and the signing CA is loaded before the
        operator is asked anything, so a plan that cannot succeed fails
        without prompting and without writing.

        Args:
            plan: Issuance plan

        Returns:
            IssuanceResult describing what was written

        Raises:
            InvalidPlanError: If outputs exist without force, the CA cannot be
                loaded, or metadata is missing with interaction disabled
            MetadataParseError: If a side file is malformed
            InteractiveInputError: If prompting fails
            CertmanError: If the engine cannot encode the certificate
            OSError: If writing the outputs fails
        """
        existing = [path for path in (plan.cert_path, plan.key_path) if path.exists()]
        if existing and not plan.force:
            names = ", ".join(str(path) for path in existing)
            raise InvalidPlanError(f"{names} already exists; use --force to overwrite")

        signer = self._load_signer(plan)
        store = MetadataStore(plan.output_dir)

        dn, dn_replaced = self._resolve_dn(plan, store)
        if plan.is_ca:
            sans, sans_replaced = SubjectAltNames(), False
        else:
            sans, sans_replaced = self._resolve_sans(plan, store)

        profile = CertProfile.CA if plan.is_ca else CertProfile.LEAF
        try:
            issued = self.engine.issue(profile, dn, sans, plan.validity_days, signer)
        except ValueError as e:
            raise CertmanError(f"can't build certificate for '{plan.name}': {e}") from e

        FileUtils.ensure_directory(plan.output_dir)
        FileUtils.write_file(plan.cert_path, issued.cert_pem)
        FileUtils.write_private_file(plan.key_path, issued.key_pem)

        store.save_dn(plan.name, dn, force=plan.force or dn_replaced)
        if not plan.is_ca:
            store.save_san(plan.name, sans, force=plan.force or sans_replaced)

        signed_by = signer.subject.rfc4514_string() if signer is not None else None
        logger.info(
            f"Issued {profile.value} certificate '{dn.common_name}' -> {plan.cert_path} "
            f"({plan.validity_days} days, {'signed by ' + signed_by if signed_by else 'self-signed'})"
        )
        return IssuanceResult(
            cert_path=plan.cert_path, key_path=plan.key_path, dn=dn, sans=sans, signed_by=signed_by
        )

    def _load_signer(self, plan: IssuancePlan) -> Optional[CertificateAuthority]:
        if plan.is_ca or not plan.needs_signer:
            return None
        if plan.ca_dir is None or not plan.ca_dir.is_dir():
            raise InvalidPlanError(
                f"CA directory {plan.ca_dir} not found; create it with 'certman ca --gen' or use --self-signed"
            )
        return self.engine.load_authority(plan.ca_dir)

    def _resolve_dn(self, plan: IssuancePlan, store: MetadataStore) -> Tuple[DistinguishedName, bool]:
        """
        Pick the distinguished name for a plan.

        Returns:
            The DN and whether the operator chose it over a stored one
        """
        stored = store.load_dn(plan.name)
        if stored is not None:
            if not plan.interactive:
                return stored, False
            self.prompter.notice(f"Stored distinguished name ({store.dn_path(plan.name)}):")
            for field, value in stored.model_dump().items():
                self.prompter.notice(f"  {field} = {value}")
            if self.prompter.confirm("Use the stored distinguished name?"):
                return stored, False
            return self.prompter.prompt_dn(), True

        if not plan.interactive:
            raise InvalidPlanError(f"{store.dn_path(plan.name)} not found and input disabled")
        return self.prompter.prompt_dn(), False

    def _resolve_sans(self, plan: IssuancePlan, store: MetadataStore) -> Tuple[SubjectAltNames, bool]:
        """
        Pick the subject alternative names for a plan.

        Returns:
            The SANs and whether the operator chose them over stored ones
        """
        stored = store.load_san(plan.name)
        if stored is not None:
            if not plan.interactive:
                return stored, False
            self.prompter.notice(f"Stored subject alt names ({store.san_path(plan.name)}):")
            for kind, values in stored.to_toml_dict().items():
                self.prompter.notice(f"  {kind} = {', '.join(values)}")
            if self.prompter.confirm("Use the stored subject alt names?"):
                return stored, False
            return self.prompter.prompt_sans(), True

        if not plan.interactive:
            raise InvalidPlanError(f"{store.san_path(plan.name)} not found and input disabled")
        return self.prompter.prompt_sans(), False
