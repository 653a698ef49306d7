"""End-to-end tests through the command line."""

from datetime import timedelta

import pytest
from cryptography import x509

from certman import __version__
from certman.cli import build_parser, main
from certman.services.metadata_store import MetadataStore
from certman.services.toml_service import TOMLService


@pytest.fixture
def run_cli(work_dir, make_prompter):
    """Run certman with isolated config, data and working directories."""

    def runner(*argv, answers=()):
        return main(
            list(argv),
            prompter=make_prompter(answers),
            config_dir=work_dir / "config",
            data_dir=work_dir / "data",
            cwd=work_dir,
        )

    return runner


@pytest.fixture
def default_ca_dir(work_dir):
    return work_dir / "data" / "ca"


@pytest.fixture
def leaf_side_files(work_dir, sample_dn):
    """DN and SAN files for 'myhost' in an output directory."""
    out = work_dir / "out"
    TOMLService.save_toml(out / "myhost.dn.toml", sample_dn.model_dump())
    TOMLService.save_toml(out / "myhost.san.toml", {"dns": ["myhost.example"]})
    return out


@pytest.mark.integration
class TestCLI:
    """Test complete command runs with the cryptography engine."""

    def test_ca_gen_into_empty_directory(self, run_cli, work_dir, sample_ca_dn, capsys):
        """Test ca --gen prompts for the DN and creates the CA pair."""
        ca_dir = work_dir / "myca"
        answers = ["DE", "Hessen", "Frankfurt", "Test Organization", "Test Root CA"]

        assert run_cli("ca", "--gen", str(ca_dir), answers=answers) == 0

        assert (ca_dir / "ca_cert.pem").exists()
        assert (ca_dir / "ca_cert.key").exists()
        assert MetadataStore(ca_dir).load_dn("ca_cert") == sample_ca_dn
        assert f"certificate: {ca_dir / 'ca_cert.pem'}" in capsys.readouterr().out

    def test_ca_gen_uses_config_default(self, run_cli, default_ca_dir, work_dir, sample_ca_dn):
        """Test ca --gen without a directory writes to the configured CA path."""
        MetadataStore(default_ca_dir).save_dn("ca_cert", sample_ca_dn)

        assert run_cli("ca", "--gen", "--non-interactive") == 0

        assert (default_ca_dir / "ca_cert.pem").exists()
        assert (work_dir / "config" / "config.toml").exists()

    def test_certs_signed_by_ca(self, run_cli, default_ca_dir, sample_ca_dn, sample_dn, leaf_side_files):
        """Test certs issues a leaf signed by the CA with SANs from the side file."""
        MetadataStore(default_ca_dir).save_dn("ca_cert", sample_ca_dn)
        assert run_cli("ca", "--gen", "--non-interactive") == 0

        assert run_cli("certs", "--non-interactive", "--out", str(leaf_side_files), "myhost") == 0

        ca_cert = x509.load_pem_x509_certificate((default_ca_dir / "ca_cert.pem").read_bytes())
        cert = x509.load_pem_x509_certificate((leaf_side_files / "myhost.pem").read_bytes())
        cert.verify_directly_issued_by(ca_cert)
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert san.get_values_for_type(x509.DNSName) == ["myhost.example"]
        assert (leaf_side_files / "myhost.key").exists()
        assert cert.not_valid_after_utc - cert.not_valid_before_utc == timedelta(days=30)

        store = MetadataStore(leaf_side_files)
        assert store.load_dn("myhost") == sample_dn
        assert store.load_san("myhost").to_toml_dict() == {"dns": ["myhost.example"]}

    def test_certs_self_signed_without_ca(self, run_cli, default_ca_dir, leaf_side_files):
        """Test --self-signed needs no CA directory."""
        args = ("certs", "--self-signed", "--non-interactive", "--days", "90", "--out", str(leaf_side_files))
        assert run_cli(*args, "myhost") == 0

        cert = x509.load_pem_x509_certificate((leaf_side_files / "myhost.pem").read_bytes())
        assert cert.issuer == cert.subject
        assert not default_ca_dir.exists()

    def test_certs_without_ca_fails(self, run_cli, leaf_side_files, capsys):
        """Test a CA-signed leaf fails when the CA directory does not exist."""
        assert run_cli("certs", "--non-interactive", "--out", str(leaf_side_files), "myhost") == 1

        assert "error: CA directory" in capsys.readouterr().err
        assert not (leaf_side_files / "myhost.pem").exists()

    def test_non_interactive_without_dn_fails(self, run_cli, work_dir, capsys):
        """Test a missing DN file with --non-interactive exits non-zero and writes nothing."""
        out = work_dir / "out"

        assert run_cli("certs", "--self-signed", "--non-interactive", "--out", str(out), "myhost") == 1

        assert "not found and input disabled" in capsys.readouterr().err
        assert not (out / "myhost.pem").exists()
        assert not (out / "myhost.key").exists()

    def test_non_ascii_prompted_name_is_asked_again(self, run_cli, work_dir, sample_dn_answers, capsys):
        """Test a non-ASCII DNS answer is refused and re-asked instead of crashing."""
        out = work_dir / "out"
        answers = sample_dn_answers + ["bücher.example"]

        assert run_cli("certs", "--self-signed", "--out", str(out), "myhost", answers=answers) == 1

        err = capsys.readouterr().err
        assert "error: input stream closed" in err
        assert "Traceback" not in err
        assert not (out / "myhost.pem").exists()

    def test_punycode_answer_after_rejected_name(self, run_cli, work_dir, sample_dn_answers):
        """Test the A-label form given after a rejected name is issued and stored."""
        out = work_dir / "out"
        answers = sample_dn_answers + ["bücher.example", "xn--bcher-kva.example"]

        assert run_cli("certs", "--self-signed", "--out", str(out), "myhost", answers=answers) == 0

        cert = x509.load_pem_x509_certificate((out / "myhost.pem").read_bytes())
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert san.get_values_for_type(x509.DNSName) == ["xn--bcher-kva.example"]
        assert MetadataStore(out).load_san("myhost").to_toml_dict() == {"dns": ["xn--bcher-kva.example"]}

    def test_non_ascii_san_file_fails(self, run_cli, leaf_side_files, capsys):
        """Test a SAN file holding a non-ASCII e-mail address exits non-zero and writes nothing."""
        TOMLService.save_toml(leaf_side_files / "myhost.san.toml", {"email": ["jörg@example.com"]})

        args = ("certs", "--self-signed", "--non-interactive", "--out", str(leaf_side_files), "myhost")
        assert run_cli(*args) == 1

        err = capsys.readouterr().err
        assert "error:" in err
        assert "invalid contents" in err
        assert not (leaf_side_files / "myhost.pem").exists()
        assert not (leaf_side_files / "myhost.key").exists()

    def test_non_ascii_country_file_fails(self, run_cli, leaf_side_files, sample_dn, capsys):
        """Test a DN file with a non-ASCII country code exits non-zero and writes nothing."""
        TOMLService.save_toml(leaf_side_files / "myhost.dn.toml", {**sample_dn.model_dump(), "country": "ÄÖ"})

        args = ("certs", "--self-signed", "--non-interactive", "--out", str(leaf_side_files), "myhost")
        assert run_cli(*args) == 1

        assert "invalid contents" in capsys.readouterr().err
        assert not (leaf_side_files / "myhost.pem").exists()

    def test_ca_show(self, run_cli, default_ca_dir, sample_ca_dn, capsys):
        """Test ca without --gen prints the CA summary."""
        MetadataStore(default_ca_dir).save_dn("ca_cert", sample_ca_dn)
        assert run_cli("ca", "--gen", "--non-interactive") == 0
        capsys.readouterr()

        assert run_cli("ca") == 0

        out = capsys.readouterr().out
        assert out.splitlines()[0].split() == ["FIELD", "VALUE"]
        assert "CN=Test Root CA" in out

    def test_ca_show_missing(self, run_cli, capsys):
        """Test ca without --gen and without a CA suggests --gen."""
        assert run_cli("ca") == 1

        assert "--gen" in capsys.readouterr().err

    def test_certs_existing_shows_summary(self, run_cli, leaf_side_files, capsys):
        """Test certs for an existing certificate shows it instead of reissuing."""
        args = ("certs", "--self-signed", "--non-interactive", "--out", str(leaf_side_files), "myhost")
        assert run_cli(*args) == 0
        before = (leaf_side_files / "myhost.pem").read_bytes()
        capsys.readouterr()

        assert run_cli(*args) == 0

        assert "FIELD" in capsys.readouterr().out
        assert (leaf_side_files / "myhost.pem").read_bytes() == before

    def test_gen_refuses_overwrite_without_force(self, run_cli, leaf_side_files, capsys):
        """Test --gen over an existing certificate needs --force."""
        args = ("certs", "--self-signed", "--non-interactive", "--out", str(leaf_side_files), "myhost")
        assert run_cli(*args) == 0
        before = (leaf_side_files / "myhost.pem").read_bytes()

        assert run_cli("certs", "--gen", *args[1:]) == 1
        assert "already exists" in capsys.readouterr().err
        assert (leaf_side_files / "myhost.pem").read_bytes() == before

        assert run_cli("certs", "--gen", "--force", *args[1:]) == 0
        assert (leaf_side_files / "myhost.pem").read_bytes() != before

    def test_missing_config_file(self, run_cli, work_dir, capsys):
        """Test an explicit --config path must exist."""
        assert run_cli("--config", str(work_dir / "missing.toml"), "ca") == 1

        assert "can't find config file" in capsys.readouterr().err

    def test_config_file_days(self, run_cli, work_dir, leaf_side_files):
        """Test [certs] validity from an explicit config file."""
        config = work_dir / "custom.toml"
        TOMLService.save_toml(
            config, {"ca": {"default_ca_path": str(work_dir / "ca")}, "certs": {"vality_time_days": 7}}
        )

        args = ("--config", str(config), "certs", "--self-signed", "--non-interactive", "--out", str(leaf_side_files))
        assert run_cli(*args, "myhost") == 0

        cert = x509.load_pem_x509_certificate((leaf_side_files / "myhost.pem").read_bytes())
        assert (cert.not_valid_after_utc - cert.not_valid_before_utc).days == 7


@pytest.mark.unit
class TestParser:
    """Test argument parsing."""

    def test_unsafe_name_rejected(self, capsys):
        """Test a certificate name with a path separator is a usage error."""
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["certs", "../evil"])

        assert exc.value.code == 2
        assert "Invalid certificate name" in capsys.readouterr().err

    @pytest.mark.parametrize("days", ["0", "-3", "soon"])
    def test_bad_days_rejected(self, days):
        """Test --days must be a positive integer."""
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["ca", "--days", days])

        assert exc.value.code == 2

    def test_command_required(self):
        """Test a subcommand is required."""
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args([])

        assert exc.value.code == 2

    def test_version(self, capsys):
        """Test --version prints the package version."""
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--version"])

        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_certs_flags(self):
        """Test certs flags and positionals."""
        args = build_parser().parse_args(["certs", "-f", "--self-signed", "--days", "90", "myhost", "/srv/ca"])

        assert args.command == "certs"
        assert args.force is True
        assert args.self_signed is True
        assert args.days == 90
        assert args.name == "myhost"
        assert str(args.ca_dir) == "/srv/ca"
