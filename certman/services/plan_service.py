"""Issuance plan construction."""

from argparse import Namespace
from pathlib import Path

from certman.models.config import LEAF_VALIDITY_DAYS, AppConfig
from certman.models.plan import CA_CERT_NAME, CertRole, IssuancePlan


def build_plan(command: str, args: Namespace, config: AppConfig, cwd: Path) -> IssuancePlan:
    """
    Merge command-line flags and configuration into an issuance plan.

    Explicit flags always win over configuration, and configuration wins
    over built-in defaults.

    Args:
        command: Subcommand name, ``ca`` or ``certs``
        args: Parsed arguments of that subcommand
        config: Loaded configuration
        cwd: Directory leaf certificates are written to without ``--out``

    Returns:
        IssuancePlan for the command

    Raises:
        ValueError: If the command is unknown
    """
    if command == "ca":
        return IssuancePlan(
            role=CertRole.CA,
            name=CA_CERT_NAME,
            output_dir=args.out or args.ca_dir or config.ca.default_ca_path,
            validity_days=_first(args.days, config.ca.vality_time_days),
            self_signed=True,
            generate=args.gen,
            force=args.force,
            interactive=not args.non_interactive,
        )

    if command == "certs":
        return IssuancePlan(
            role=CertRole.CERT,
            name=args.name,
            output_dir=args.out or cwd,
            validity_days=_first(args.days, config.certs.vality_time_days, LEAF_VALIDITY_DAYS),
            self_signed=args.self_signed,
            generate=args.gen,
            force=args.force,
            interactive=not args.non_interactive,
            ca_dir=args.ca_dir or config.ca.default_ca_path,
        )

    raise ValueError(f"Unknown command: {command}")


def _first(*values):
    """Return the first value that is not None."""
    return next(value for value in values if value is not None)
