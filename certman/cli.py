"""Command-line entry point: argument parser and command dispatchers."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from platformdirs import user_config_dir, user_data_dir

from certman import __version__
from certman.exceptions import CertmanError
from certman.models.config import AppConfig
from certman.services.certificate_engine import CertificateEngine, CryptographyEngine
from certman.services.config_service import ConfigService
from certman.services.issuance_service import IssuanceService
from certman.services.parser_service import CertificateParser
from certman.services.plan_service import build_plan
from certman.services.prompt_service import Prompter
from certman.utils.logger import setup_logger
from certman.utils.render import fmt_table
from certman.utils.validators import validate_cert_name

APP_NAME = "certman"

logger = logging.getLogger("certman")


def _positive_days(raw: str) -> int:
    try:
        days = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid day count: {raw!r}")
    if days <= 0:
        raise argparse.ArgumentTypeError("day count must be greater than zero")
    return days


def _cert_name(raw: str) -> str:
    try:
        return validate_cert_name(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _add_issue_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--gen", action="store_true", help="Generate a new certificate instead of showing the existing one")
    p.add_argument("--days", type=_positive_days, default=None, help="Validity in days (overrides the config file)")
    p.add_argument("--out", type=Path, default=None, help="Directory to write the certificate to")
    p.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; fail when a DN or SAN file is missing",
    )
    p.add_argument("-f", "--force", action="store_true", help="Overwrite existing certificate, key and side files")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Create a local certificate authority and issue certificates from it",
    )
    p.add_argument("--config", type=Path, default=None, help="Config file (default: user config directory)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    ca = sub.add_parser("ca", help="Show or generate the certificate authority")
    _add_issue_flags(ca)
    ca.add_argument("ca_dir", nargs="?", type=Path, default=None, metavar="CA_DIR", help="CA directory")
    ca.set_defaults(func=cmd_ca)

    certs = sub.add_parser("certs", help="Show or issue a certificate")
    _add_issue_flags(certs)
    certs.add_argument("--self-signed", action="store_true", help="Sign the certificate with its own key")
    certs.add_argument("name", type=_cert_name, metavar="NAME", help="Certificate name (file stem)")
    certs.add_argument(
        "ca_dir", nargs="?", type=Path, default=None, metavar="CA_DIR", help="CA directory to sign with"
    )
    certs.set_defaults(func=cmd_certs)

    return p


def cmd_ca(args, config: AppConfig, service: IssuanceService, cwd: Path) -> None:
    _generate_or_show(build_plan("ca", args, config, cwd), service)


def cmd_certs(args, config: AppConfig, service: IssuanceService, cwd: Path) -> None:
    _generate_or_show(build_plan("certs", args, config, cwd), service)


def _generate_or_show(plan, service: IssuanceService) -> None:
    if service.should_show(plan):
        info = service.show(plan)
        print(fmt_table(CertificateParser.summary_rows(info)))
        return

    result = service.issue(plan)
    print(f"certificate: {result.cert_path}")
    print(f"private key: {result.key_path}")


def _enable_line_editing() -> None:
    # input() picks up history and editing once readline is imported
    try:
        import readline  # noqa: F401
    except ImportError:
        pass


def main(
    argv: Optional[Sequence[str]] = None,
    prompter: Optional[Prompter] = None,
    engine: Optional[CertificateEngine] = None,
    config_dir: Optional[Path] = None,
    data_dir: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> int:
    """
    Run certman.

    Args:
        argv: Command-line arguments (default: ``sys.argv[1:]``)
        prompter: Operator prompts (default: stdin line reader)
        engine: Certificate engine (default: CryptographyEngine)
        config_dir: Directory of the default config file
        data_dir: Directory of the default CA
        cwd: Output directory for leaf certificates without ``--out``

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logger(verbose=args.verbose)
    config_service = ConfigService(
        config_dir=config_dir or Path(user_config_dir(APP_NAME)),
        data_dir=data_dir or Path(user_data_dir(APP_NAME)),
    )

    try:
        config = config_service.load(args.config)
        setup_logger(config, verbose=args.verbose)

        if prompter is None:
            _enable_line_editing()
            prompter = Prompter()
        service = IssuanceService(engine or CryptographyEngine(), prompter)

        args.func(args, config, service, cwd or Path.cwd())
    except CertmanError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130

    return 0


def run() -> None:
    sys.exit(main())
