"""Data models for k8s-secret-manifest.

This module provides type-safe data structures for the application:
the well-known Secret types, validation findings, global options and
one frozen argument record per command.
"""

from dataclasses import dataclass, field
from enum import Enum


class SecretType(str, Enum):
    """Well-known Kubernetes secret types.

    Inherits from str so members compare equal to the raw type string
    found in a manifest.
    """

    OPAQUE = "Opaque"
    TLS = "kubernetes.io/tls"
    DOCKER_CONFIG_JSON = "kubernetes.io/dockerconfigjson"
    BASIC_AUTH = "kubernetes.io/basic-auth"
    SSH_AUTH = "kubernetes.io/ssh-auth"
    SERVICE_ACCOUNT_TOKEN = "kubernetes.io/service-account-token"


class Severity(str, Enum):
    """Severity of a validation finding."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Issue:
    """A single validation finding.

    Attributes:
        severity: Whether the finding is an error or a likely mistake.
        message: Human-readable description.

    """

    severity: Severity
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message}"


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Options shared by every command.

    Attributes:
        namespace: Default namespace for new or copied secrets.
        kubeseal_path: Path or name of the kubeseal binary.

    """

    namespace: str = "default"
    kubeseal_path: str = "kubeseal"


@dataclass(frozen=True, slots=True)
class GenerateArgs:
    """Arguments for the generate command."""

    name: str
    namespace: str = "default"
    sets: tuple[str, ...] = ()
    set_files: tuple[str, ...] = ()
    secret_type: str = ""
    labels: tuple[str, ...] = ()
    annotations: tuple[str, ...] = ()
    immutable: bool = False
    tls_cert: str = ""
    tls_key: str = ""
    docker_server: str = ""
    docker_username: str = ""
    docker_password: str = field(default="", repr=False)
    docker_email: str = ""
    entries_key: str = ""
    entries_val: str = ""
    entries: tuple[str, ...] = ()
    separator: str = ";"
    output: str = ""


@dataclass(frozen=True, slots=True)
class FromEnvArgs:
    """Arguments for the from-env command."""

    name: str
    env_file: str
    namespace: str = "default"
    secret_type: str = ""
    labels: tuple[str, ...] = ()
    annotations: tuple[str, ...] = ()
    immutable: bool = False
    sets: tuple[str, ...] = ()
    output: str = ""


@dataclass(frozen=True, slots=True)
class ExportEnvArgs:
    """Arguments for the export-env command."""

    input: str
    output: str = ""


@dataclass(frozen=True, slots=True)
class CopyArgs:
    """Arguments for the copy command."""

    input: str
    name: str
    namespace: str = "default"
    output: str = ""


@dataclass(frozen=True, slots=True)
class UpdateArgs:
    """Arguments for the update command."""

    input: str
    output: str = ""
    sets: tuple[str, ...] = ()
    set_files: tuple[str, ...] = ()
    delete_keys: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()
    annotations: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RotateArgs:
    """Arguments for the rotate command."""

    input: str
    keys: tuple[str, ...]
    output: str = ""
    length: int = 32
    charset: str = "alphanumeric"


@dataclass(frozen=True, slots=True)
class AddEntryArgs:
    """Arguments for the add-entry command.

    Attributes:
        index: Insert position, or None to append.

    """

    input: str
    entries_key: str
    entries_val: str
    key: str
    value: str = field(repr=False)
    output: str = ""
    index: int | None = None
    separator: str = ";"


@dataclass(frozen=True, slots=True)
class RemoveEntryArgs:
    """Arguments for the remove-entry command."""

    input: str
    entries_key: str
    entries_val: str
    key: str = ""
    value: str = field(default="", repr=False)
    output: str = ""
    separator: str = ";"


@dataclass(frozen=True, slots=True)
class EditArgs:
    """Arguments for the edit command."""

    input: str
    output: str = ""


@dataclass(frozen=True, slots=True)
class ShowArgs:
    """Arguments for the show command."""

    input: str
    key: str = ""


@dataclass(frozen=True, slots=True)
class ListArgs:
    """Arguments for the list command."""

    input: str


@dataclass(frozen=True, slots=True)
class DiffArgs:
    """Arguments for the diff command."""

    from_path: str
    to_path: str
    show_unchanged: bool = False


@dataclass(frozen=True, slots=True)
class ValidateArgs:
    """Arguments for the validate command."""

    input: str


@dataclass(frozen=True, slots=True)
class SealArgs:
    """Arguments for the seal command."""

    input: str
    output: str = ""
    kubeseal_path: str = "kubeseal"
    controller_name: str = "sealed-secrets-controller"
    controller_namespace: str = "kube-system"
    cert: str = ""
    scope: str = ""
