"""k8s-secret-manifest: create, edit, inspect and seal Kubernetes Secret manifests.

This package works on plain Secret YAML files on disk. It never talks to
a cluster; encryption is handed off to the kubeseal binary.

Example usage:
    from k8s_secret_manifest import entrylist, manifest

    secret = manifest.from_file("secret.yaml")
    entries = entrylist.parse(
        manifest.get_plain_value(secret, "BACKEND_USERS"),
        manifest.get_plain_value(secret, "BACKEND_PASSWORDS"),
    )
    entries = entrylist.add(entries, "dave", "s3cret")
"""

__version__ = "1.0.0"

from k8s_secret_manifest.cli import build_cli, main
from k8s_secret_manifest.exceptions import (
    BinaryNotFoundError,
    DuplicateKeyError,
    EditorError,
    EmptyKeyError,
    EntryListError,
    FileAccessError,
    FormatError,
    IndexOutOfRangeError,
    LengthMismatchError,
    LockAcquisitionError,
    NotFoundError,
    PathEscapeError,
    SealingError,
    SecretManifestError,
    SecretParsingError,
    SpecViolationError,
)

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "build_cli",
    "main",
    # Exceptions
    "SecretManifestError",
    "FormatError",
    "EntryListError",
    "LengthMismatchError",
    "EmptyKeyError",
    "DuplicateKeyError",
    "IndexOutOfRangeError",
    "NotFoundError",
    "PathEscapeError",
    "LockAcquisitionError",
    "BinaryNotFoundError",
    "SealingError",
    "EditorError",
    "SpecViolationError",
    "SecretParsingError",
    "FileAccessError",
]
