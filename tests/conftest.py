"""Shared test fixtures for k8s-secret-manifest tests."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from icecream import ic

from k8s_secret_manifest import manifest


def b64(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


@pytest.fixture(autouse=True)
def _quiet_debug():
    """Keep icecream output out of test captures."""
    ic.disable()
    yield
    ic.disable()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test inside an empty temporary working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def runner():
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def sample_secret_yaml():
    """Sample secret YAML content."""
    return f"""apiVersion: v1
kind: Secret
metadata:
  name: test-secret
  namespace: default
type: Opaque
data:
  username: {b64("username")}
  password: {b64("password")}
"""


@pytest.fixture
def entries_secret_yaml():
    """Secret holding a paired index-list under BACKEND_USERS / BACKEND_PASSWORDS."""
    return f"""apiVersion: v1
kind: Secret
metadata:
  name: backend
  namespace: apps
type: Opaque
data:
  BACKEND_USERS: {b64("alice;bob")}
  BACKEND_PASSWORDS: {b64("pass1;pass2")}
"""


@pytest.fixture
def secret_file(workdir, sample_secret_yaml):
    """Write the sample secret to secret.yaml in the working directory."""
    path = workdir / "secret.yaml"
    path.write_text(sample_secret_yaml)
    return path


@pytest.fixture
def entries_file(workdir, entries_secret_yaml):
    """Write the paired index-list secret to backend.yaml in the working directory."""
    path = workdir / "backend.yaml"
    path.write_text(entries_secret_yaml)
    return path


@pytest.fixture
def write_binary_secret(workdir):
    """Write a secret holding raw bytes under the key 'bin' and return its path."""

    def _write(filename, raw):
        path = workdir / filename
        path.write_text(
            "apiVersion: v1\nkind: Secret\nmetadata:\n  name: blob\n  namespace: default\n"
            f"type: Opaque\ndata:\n  bin: {base64.b64encode(raw).decode()}\n"
        )
        return path

    return _write


@pytest.fixture
def load():
    """Load a secret file and return its plain data."""

    def _load(path):
        return manifest.plain_data(manifest.from_file(path))

    return _load


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for command execution."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0, stdout="", stderr="")
        yield mock
