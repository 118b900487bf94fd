"""Custom exceptions for k8s-secret-manifest.

This module defines the exception hierarchy used throughout the application
to provide meaningful error messages and proper error handling.
"""


class SecretManifestError(Exception):
    """Base exception for all k8s-secret-manifest errors.

    All custom exceptions in this package inherit from this class,
    allowing the CLI to turn any of them into a clean error message
    with a single except clause.
    """

    pass


class FormatError(SecretManifestError):
    """Raised when user input does not have the expected shape.

    This can occur when:
    - A --set/--label/--annotation value is missing the '=' separator
    - An --entry value is missing the ':' separator
    - A .env line is not in KEY=value form
    """

    pass


class EntryListError(SecretManifestError):
    """Base exception for paired index-list violations."""

    pass


class LengthMismatchError(EntryListError):
    """Raised when the key list and value list have different lengths."""

    def __init__(self, key_count: int, value_count: int) -> None:
        self.key_count = key_count
        self.value_count = value_count
        super().__init__(f"entry list mismatch: {key_count} key(s) but {value_count} value(s)")


class EmptyKeyError(EntryListError):
    """Raised when an entry key is empty."""

    def __init__(self, index: int | None = None) -> None:
        self.index = index
        if index is None:
            super().__init__("key must not be empty")
        else:
            super().__init__(f"empty key at index {index}")


class DuplicateKeyError(EntryListError):
    """Raised when adding an entry whose key already exists."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"entry {key!r} already exists")


class IndexOutOfRangeError(EntryListError):
    """Raised when an insert position lies outside [0, len(entries)]."""

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f"index {index} out of range [0, {length}]")


class NotFoundError(SecretManifestError):
    """Raised when a requested key or value is absent.

    This can occur when:
    - A data key named by --key/--delete-key is not in the secret
    - A paired index-list entry cannot be matched by key or value
    """

    pass


class PathEscapeError(SecretManifestError):
    """Raised when a user-supplied path resolves outside the working directory."""

    pass


class LockAcquisitionError(SecretManifestError):
    """Raised when the advisory lock next to an output file cannot be taken."""

    pass


class BinaryNotFoundError(SecretManifestError):
    """Raised when a required binary (kubeseal, editor) is not found.

    This can occur when:
    - The binary is not installed
    - The binary is not in the system PATH
    - --kubeseal-path or $EDITOR points at a missing file
    """

    pass


class SealingError(SecretManifestError):
    """Raised when kubeseal exits non-zero or produces no output."""

    pass


class EditorError(SecretManifestError):
    """Raised when the interactive editor exits non-zero."""

    pass


class SpecViolationError(SecretManifestError):
    """Raised when a secret breaks a Kubernetes Secret rule.

    Used both for single data-key checks on user input and for the
    overall outcome of the validate command.
    """

    pass


class SecretParsingError(SecretManifestError):
    """Raised when parsing a secret file fails.

    This can occur when:
    - The file does not exist or cannot be read
    - The file is not valid YAML
    - The YAML does not represent a v1 Secret
    - A data value is not valid base64
    """

    pass


class FileAccessError(SecretManifestError):
    """Raised when an auxiliary input file cannot be read or an output file written."""

    pass
