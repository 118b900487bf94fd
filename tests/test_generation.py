"""Tests for commands/generation.py module."""

import base64
import json
import stat

import pytest
import yaml

from k8s_secret_manifest import manifest
from k8s_secret_manifest.commands.generation import build_docker_config, copy, from_env, generate
from k8s_secret_manifest.exceptions import (
    FileAccessError,
    FormatError,
    PathEscapeError,
    SpecViolationError,
)
from k8s_secret_manifest.models import CopyArgs, FromEnvArgs, GenerateArgs


class TestGenerate:
    """Tests for the generate command."""

    def test_generate_to_stdout(self, workdir, capsys):
        """Test a basic secret is printed to stdout."""
        generate(GenerateArgs(name="app", namespace="prod", sets=("user=admin", "dsn=a=b")))

        body = yaml.safe_load(capsys.readouterr().out)
        assert body["metadata"] == {"name": "app", "namespace": "prod"}
        assert body["type"] == "Opaque"
        assert base64.b64decode(body["data"]["dsn"]).decode() == "a=b"

    def test_generate_to_file(self, workdir, load):
        """Test output files are written with mode 0600."""
        generate(GenerateArgs(name="app", sets=("user=admin",), output="app.yaml"))

        assert load("app.yaml") == {"user": "admin"}
        assert stat.S_IMODE((workdir / "app.yaml").stat().st_mode) == 0o600

    def test_metadata(self, workdir):
        """Test type, labels, annotations and immutable are applied."""
        generate(
            GenerateArgs(
                name="app",
                secret_type="kubernetes.io/basic-auth",
                labels=("app=web", "tier=backend"),
                annotations=("owner=team-a",),
                immutable=True,
                output="app.yaml",
            )
        )

        secret = manifest.from_file("app.yaml")
        assert secret.type == "kubernetes.io/basic-auth"
        assert secret.metadata.labels == {"app": "web", "tier": "backend"}
        assert secret.metadata.annotations == {"owner": "team-a"}
        assert secret.immutable is True

    def test_set_file(self, workdir, load):
        """Test --set-file stores file contents."""
        (workdir / "key.pem").write_text("PEM DATA")
        generate(GenerateArgs(name="app", set_files=("key=key.pem",), output="app.yaml"))
        assert load("app.yaml") == {"key": "PEM DATA"}

    def test_set_file_escape(self, workdir):
        """Test --set-file paths are guarded."""
        with pytest.raises(PathEscapeError, match="--set-file"):
            generate(GenerateArgs(name="app", set_files=("key=../key.pem",)))

    def test_set_file_missing(self, workdir):
        """Test an unreadable --set-file source fails."""
        with pytest.raises(FileAccessError, match="--set-file key"):
            generate(GenerateArgs(name="app", set_files=("key=missing.pem",)))

    def test_invalid_set_key(self, workdir):
        """Test data keys from --set are validated."""
        with pytest.raises(SpecViolationError, match="--set: .*invalid characters"):
            generate(GenerateArgs(name="app", sets=("bad key=x",)))

    def test_set_without_equals(self, workdir):
        """Test a --set without '=' fails."""
        with pytest.raises(FormatError, match="missing '='"):
            generate(GenerateArgs(name="app", sets=("novalue",)))

    def test_tls(self, workdir, load):
        """Test the TLS helper stores both files and sets the type."""
        (workdir / "tls.crt").write_text("CERT")
        (workdir / "tls.key").write_text("KEY")

        generate(GenerateArgs(name="web-tls", tls_cert="tls.crt", tls_key="tls.key", output="tls.yaml"))

        assert manifest.from_file("tls.yaml").type == "kubernetes.io/tls"
        assert load("tls.yaml") == {"tls.crt": "CERT", "tls.key": "KEY"}

    def test_tls_explicit_type_wins(self, workdir):
        """Test --type takes precedence over the TLS helper default."""
        (workdir / "tls.crt").write_text("CERT")
        (workdir / "tls.key").write_text("KEY")

        generate(
            GenerateArgs(
                name="web", secret_type="Opaque", tls_cert="tls.crt", tls_key="tls.key", output="tls.yaml"
            )
        )

        assert manifest.from_file("tls.yaml").type == "Opaque"

    def test_tls_requires_both(self, workdir):
        """Test giving only one TLS file fails."""
        with pytest.raises(FormatError, match="--tls-cert and --tls-key must both be provided"):
            generate(GenerateArgs(name="web", tls_cert="tls.crt"))

    def test_docker_registry(self, workdir):
        """Test the docker helper builds .dockerconfigjson."""
        generate(
            GenerateArgs(
                name="regcred",
                docker_server="ghcr.io",
                docker_username="bot",
                docker_password="tok",
                output="reg.yaml",
            )
        )

        secret = manifest.from_file("reg.yaml")
        assert secret.type == "kubernetes.io/dockerconfigjson"
        config = json.loads(manifest.get_plain_value(secret, ".dockerconfigjson"))
        assert config["auths"]["ghcr.io"]["auth"] == base64.b64encode(b"bot:tok").decode()

    def test_docker_requires_all_three(self, workdir):
        """Test partial registry credentials fail."""
        with pytest.raises(FormatError, match="are all required"):
            generate(GenerateArgs(name="regcred", docker_server="ghcr.io", docker_username="bot"))

    def test_entries(self, workdir, load):
        """Test --entry flags build the paired lists in order."""
        generate(
            GenerateArgs(
                name="backend",
                entries_key="USERS",
                entries_val="PASSWORDS",
                entries=("alice:pass1", "bob:p:w"),
                output="backend.yaml",
            )
        )

        assert load("backend.yaml") == {"PASSWORDS": "pass1;p:w", "USERS": "alice;bob"}

    def test_entries_require_both_keys(self, workdir):
        """Test --entry without --entries-val fails."""
        with pytest.raises(FormatError, match="--entries-key and --entries-val are both required"):
            generate(GenerateArgs(name="backend", entries_key="USERS", entries=("alice:pass1",)))

    @pytest.mark.parametrize(
        ("entries", "message"),
        [
            (("alice",), "expected format key:value"),
            ((":pass",), "key must not be empty"),
            (("alice:1", "alice:2"), "duplicate --entry key 'alice'"),
        ],
    )
    def test_bad_entries(self, workdir, entries, message):
        """Test malformed --entry flags fail."""
        with pytest.raises(FormatError, match=message):
            generate(GenerateArgs(name="b", entries_key="U", entries_val="P", entries=entries))

    def test_failure_writes_nothing(self, workdir):
        """Test a failed generate leaves no output file."""
        with pytest.raises(FormatError):
            generate(GenerateArgs(name="app", sets=("novalue",), output="app.yaml"))
        assert not (workdir / "app.yaml").exists()


class TestBuildDockerConfig:
    """Tests for the .dockerconfigjson builder."""

    def test_email_omitted_when_empty(self):
        """Test the email field is left out when not given."""
        config = json.loads(build_docker_config("r.io", "u", "p"))
        assert "email" not in config["auths"]["r.io"]

    def test_email_included(self):
        """Test the email field is present when given."""
        config = json.loads(build_docker_config("r.io", "u", "p", "u@example.com"))
        assert config["auths"]["r.io"]["email"] == "u@example.com"


class TestFromEnv:
    """Tests for the from-env command."""

    def test_from_env(self, workdir, load):
        """Test .env values and --set overrides are combined."""
        (workdir / ".env").write_text('# db\nexport DB_USER=admin\nDB_PASS="s3 cret"\nMODE=dev\n')

        from_env(FromEnvArgs(name="app", env_file=".env", sets=("MODE=prod",), output="app.yaml"))

        assert load("app.yaml") == {"DB_PASS": "s3 cret", "DB_USER": "admin", "MODE": "prod"}

    def test_invalid_key_in_env_file(self, workdir):
        """Test env keys are validated."""
        (workdir / ".env").write_text("BAD KEY=x\n")
        with pytest.raises(SpecViolationError, match="invalid characters"):
            from_env(FromEnvArgs(name="app", env_file=".env"))

    def test_malformed_env_file(self, workdir):
        """Test a malformed line is reported with its number."""
        (workdir / ".env").write_text("A=1\nBROKEN\n")
        with pytest.raises(FormatError, match="parse env file: line 2"):
            from_env(FromEnvArgs(name="app", env_file=".env"))

    def test_env_file_escape(self, workdir):
        """Test the env file path is guarded."""
        with pytest.raises(PathEscapeError, match="--env-file"):
            from_env(FromEnvArgs(name="app", env_file="../.env"))


class TestCopy:
    """Tests for the copy command."""

    def test_copy(self, secret_file, load, capsys):
        """Test name and namespace change and everything else is kept."""
        copy(CopyArgs(input="secret.yaml", name="copied", namespace="staging", output="copy.yaml"))

        copied = manifest.from_file("copy.yaml")
        assert copied.metadata.name == "copied"
        assert copied.metadata.namespace == "staging"
        assert load("copy.yaml") == load("secret.yaml")
        assert "Copied to staging/copied" in capsys.readouterr().err
