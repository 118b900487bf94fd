"""Read-modify-write commands: update, rotate, add-entry, remove-entry and edit.

Each command loads, mutates and rewrites its output file while holding
the exclusive lock for that file, so two invocations against the same
path serialise instead of losing an update.
"""

import contextlib
import os
import secrets
import shutil
import string
import subprocess
import tempfile
from pathlib import Path

from icecream import ic
from kubernetes.client import V1Secret

from k8s_secret_manifest import console, entrylist, manifest
from k8s_secret_manifest.commands.common import (
    apply_set_files,
    check_data_key,
    load_entries,
    load_secret,
    parse_key_value_pairs,
    rmw_output,
    split_key_value,
    store_entries,
    write_secret_to,
)
from k8s_secret_manifest.envfile import parse_env_file
from k8s_secret_manifest.exceptions import (
    BinaryNotFoundError,
    EditorError,
    FileAccessError,
    FormatError,
    NotFoundError,
)
from k8s_secret_manifest.models import AddEntryArgs, EditArgs, RemoveEntryArgs, RotateArgs, UpdateArgs
from k8s_secret_manifest.safety import exclusive_lock, safe_path

# Rotation character sets
CHARSETS: dict[str, str] = {
    "alphanumeric": string.ascii_letters + string.digits,
    "hex": "0123456789abcdef",
    "base64url": string.ascii_letters + string.digits + "-_",
}

MAX_ROTATE_LENGTH = 4096
DEFAULT_EDITOR = "vi"
EDIT_FILE_NAME = "secret.env"


def update(args: UpdateArgs) -> None:
    """Set, load from file, or delete data keys and merge labels/annotations.

    Raises:
        SecretManifestError: On the first invalid flag or missing key.

    """
    input_path = safe_path("--input", args.input)
    output = rmw_output(input_path, args.output)

    with exclusive_lock(output):
        secret = load_secret("--input", input_path)

        for pair in args.sets:
            key, value = split_key_value(pair)
            check_data_key("--set", key)
            manifest.set_plain_value(secret, key, value)

        apply_set_files(secret, args.set_files)

        for key in args.delete_keys:
            if not manifest.has_key(secret, key):
                raise NotFoundError(f"--delete-key {key!r}: key not found in secret data")
            manifest.delete_value(secret, key)

        if args.labels:
            labels = dict(secret.metadata.labels or {})
            labels.update(parse_key_value_pairs(args.labels, "--label"))
            secret.metadata.labels = labels

        if args.annotations:
            annotations = dict(secret.metadata.annotations or {})
            annotations.update(parse_key_value_pairs(args.annotations, "--annotation"))
            secret.metadata.annotations = annotations

        write_secret_to(output, secret)

    console.success(f"Updated {console.highlight(output)}")


def resolve_charset(name: str) -> str:
    """Return the characters of a named charset, matched case-insensitively.

    Raises:
        FormatError: If the name is not a known charset.

    """
    try:
        return CHARSETS[name.lower()]
    except KeyError:
        raise FormatError(f"unknown charset {name!r}: use alphanumeric, hex, or base64url") from None


def check_length(length: int) -> None:
    """Reject a rotation length that is not positive or exceeds the maximum.

    Raises:
        FormatError: If length is out of bounds.

    """
    if length <= 0:
        raise FormatError("length must be positive")
    if length > MAX_ROTATE_LENGTH:
        raise FormatError(f"length {length} exceeds maximum of {MAX_ROTATE_LENGTH}")


def random_string(length: int, charset: str) -> str:
    """Draw length characters uniformly from charset using a CSPRNG.

    Raises:
        FormatError: If length is out of bounds.

    """
    check_length(length)
    return "".join(secrets.choice(charset) for _ in range(length))


def rotate(args: RotateArgs) -> None:
    """Replace existing keys with fresh random values.

    New values are printed to stderr as KEY=value so they can be recorded;
    the old values are gone once the file is written.

    Raises:
        SecretManifestError: If the charset or length is invalid or a key
            is not in the secret.

    """
    charset = resolve_charset(args.charset)
    check_length(args.length)

    input_path = safe_path("--input", args.input)
    output = rmw_output(input_path, args.output)

    with exclusive_lock(output):
        secret = load_secret("--input", input_path)

        rotated: list[tuple[str, str]] = []
        for key in dict.fromkeys(args.keys):
            if not manifest.has_key(secret, key):
                raise NotFoundError(f"key {key!r} not found in secret data")
            value = random_string(args.length, charset)
            manifest.set_plain_value(secret, key, value)
            rotated.append((key, value))
        ic(output, [key for key, _ in rotated])

        write_secret_to(output, secret)

    for key, value in rotated:
        console.plain(f"{key}={value}")
    console.success(f"Rotated {len(rotated)} key(s) in {console.highlight(output)}")


def add_entry(args: AddEntryArgs) -> None:
    """Append or insert one entry into a paired index-list.

    Raises:
        SecretManifestError: If the lists are inconsistent, the key is empty
            or already present, or the index is out of range.

    """
    input_path = safe_path("--input", args.input)
    output = rmw_output(input_path, args.output)

    with exclusive_lock(output):
        secret = load_secret("--input", input_path)
        entries = load_entries(secret, args.entries_key, args.entries_val, args.separator)

        if args.index is None:
            entries = entrylist.add(entries, args.key, args.value)
        else:
            entries = entrylist.insert(entries, args.index, args.key, args.value)
        ic(args.key, args.index, len(entries))

        store_entries(secret, args.entries_key, args.entries_val, args.separator, entries)
        write_secret_to(output, secret)

    console.success(f"Added entry {console.highlight(repr(args.key))} to {console.highlight(output)}")


def remove_entry(args: RemoveEntryArgs) -> None:
    """Remove one entry from a paired index-list by key or by value.

    Raises:
        FormatError: If neither or both of key and value are given.
        SecretManifestError: If the lists are inconsistent or nothing matches.

    """
    if not args.key and not args.value:
        raise FormatError("one of --key or --value is required")
    if args.key and args.value:
        raise FormatError("--key and --value are mutually exclusive")

    input_path = safe_path("--input", args.input)
    output = rmw_output(input_path, args.output)

    with exclusive_lock(output):
        secret = load_secret("--input", input_path)
        entries = load_entries(secret, args.entries_key, args.entries_val, args.separator)

        if args.key:
            entries = entrylist.remove(entries, args.key)
            removed = f"key {args.key!r}"
        else:
            entries = entrylist.remove_by_value(entries, args.value)
            removed = "entry matching --value"
        ic(len(entries))

        store_entries(secret, args.entries_key, args.entries_val, args.separator, entries)
        write_secret_to(output, secret)

    console.success(f"Removed {removed} from {console.highlight(output)}")


def resolve_editor() -> str:
    """Return the absolute path of $EDITOR, falling back to vi.

    Raises:
        BinaryNotFoundError: If the editor is not on PATH.

    """
    editor = os.environ.get("EDITOR") or DEFAULT_EDITOR
    resolved = shutil.which(editor)
    if resolved is None:
        raise BinaryNotFoundError(f"editor {editor!r} not found in PATH")
    return resolved


def _decoded_lines(secret: V1Secret) -> str:
    return "".join(f"{key}={manifest.get_raw_text(secret, key)}\n" for key in manifest.data_keys(secret))


def _write_private(path: Path, text: str) -> None:
    """Create path exclusively with mode 0600 and write text to it."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8", errors=manifest.RAW_TEXT_ERRORS) as handle:
        handle.write(text)


def edit(args: EditArgs) -> None:
    """Open the decoded data in $EDITOR and write back what the user saves.

    The decoded values sit in a private temp directory only while the
    editor runs; the directory is removed afterwards in every case. The
    edited file replaces the data wholesale, so deleted lines delete keys.

    Raises:
        BinaryNotFoundError: If the editor cannot be found.
        EditorError: If the editor exits non-zero.
        SecretManifestError: If the edited file is malformed or a key is invalid.

    """
    input_path = safe_path("--input", args.input)
    output = rmw_output(input_path, args.output)
    editor = resolve_editor()
    ic(editor, output)

    with exclusive_lock(output):
        secret = load_secret("--input", input_path)

        tmp_dir = tempfile.mkdtemp(prefix="k8s-secret-edit-")
        try:
            tmp_path = Path(tmp_dir) / EDIT_FILE_NAME
            try:
                _write_private(tmp_path, _decoded_lines(secret))
            except OSError as err:
                raise FileAccessError(f"create temp file: {err.strerror}") from err

            console.info(f"Waiting for {console.highlight(os.path.basename(editor))} to close the file")
            try:
                subprocess.run([editor, str(tmp_path)], check=True)
            except subprocess.CalledProcessError as err:
                raise EditorError(f"editor {editor!r} exited with status {err.returncode}") from err

            try:
                edited = parse_env_file(tmp_path, errors=manifest.RAW_TEXT_ERRORS)
            except FormatError as err:
                raise FormatError(f"parse edited file: {err}") from None
        finally:
            with contextlib.suppress(OSError):
                shutil.rmtree(tmp_dir)

        for key in edited:
            check_data_key("edited file", key)

        secret.data = {}
        for key, value in edited.items():
            manifest.set_raw_text(secret, key, value)

        write_secret_to(output, secret)

    console.success(f"Updated {console.highlight(output)}")
