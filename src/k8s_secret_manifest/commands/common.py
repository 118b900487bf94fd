"""Helpers shared by the command handlers.

Flag parsing (key=value, key:value), paired index-list loading and
storing, and output writing live here so every command treats them
the same way.
"""

import contextlib
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

import click
from icecream import ic
from kubernetes.client import V1Secret

from k8s_secret_manifest import entrylist, manifest
from k8s_secret_manifest.entrylist import Entry
from k8s_secret_manifest.exceptions import FileAccessError, FormatError, SecretParsingError, SpecViolationError
from k8s_secret_manifest.safety import safe_path
from k8s_secret_manifest.validation import validate_data_key

OUTPUT_MODE = 0o600


def split_key_value(pair: str) -> tuple[str, str]:
    """Split 'key=value' on the first '='; the value may itself contain '='.

    Raises:
        FormatError: If there is no '='.

    """
    key, sep, value = pair.partition("=")
    if not sep:
        raise FormatError(f"invalid key=value format: {pair!r} (missing '=')")
    return key, value


def parse_key_value_pairs(pairs: Iterable[str], flag: str) -> dict[str, str]:
    """Parse repeated key=value flags into a mapping; later pairs win.

    Args:
        pairs: Raw flag values.
        flag: The flag name used to prefix error messages.

    Raises:
        FormatError: If a pair has no '='.

    """
    result: dict[str, str] = {}
    for pair in pairs:
        try:
            key, value = split_key_value(pair)
        except FormatError as err:
            raise FormatError(f"{flag}: {err}") from None
        result[key] = value
    return result


def check_data_key(flag: str, key: str) -> None:
    """Validate a user-supplied data key, naming the flag it came from.

    Raises:
        SpecViolationError: If the key is empty or has invalid characters.

    """
    try:
        validate_data_key(key)
    except SpecViolationError as err:
        raise SpecViolationError(f"{flag}: {err}") from None


def parse_entry_flags(flags: Iterable[str]) -> list[Entry]:
    """Parse repeated --entry 'key:value' flags.

    The first ':' separates key from value, so values may contain colons.

    Raises:
        FormatError: If a flag has no ':', an empty key, or repeats a key.

    """
    entries: list[Entry] = []
    seen: set[str] = set()
    for flag in flags:
        key, sep, value = flag.partition(":")
        if not sep:
            raise FormatError(f"invalid --entry {flag!r}: expected format key:value")
        if not key:
            raise FormatError(f"invalid --entry {flag!r}: key must not be empty")
        if key in seen:
            raise FormatError(f"duplicate --entry key {key!r}")
        seen.add(key)
        entries.append(Entry(key=key, value=value))
    return entries


def load_entries(secret: V1Secret, entries_key: str, entries_val: str, separator: str) -> list[Entry]:
    """Decode the two list keys of a secret into entries.

    A missing pair of keys reads as an empty list so the first entry can
    be added freely.
    """
    keys_text = manifest.get_plain_value(secret, entries_key) if manifest.has_key(secret, entries_key) else ""
    values_text = manifest.get_plain_value(secret, entries_val) if manifest.has_key(secret, entries_val) else ""

    if not keys_text and not values_text:
        return []
    return entrylist.parse(keys_text, values_text, separator)


def store_entries(
    secret: V1Secret,
    entries_key: str,
    entries_val: str,
    separator: str,
    entries: list[Entry],
) -> None:
    """Serialise entries back into the two list keys of a secret."""
    keys_text, values_text = entrylist.serialize(entries, separator)
    manifest.set_plain_value(secret, entries_key, keys_text)
    manifest.set_plain_value(secret, entries_val, values_text)


def read_input_file(flag: str, path: str) -> bytes:
    """Read an auxiliary input file such as a certificate or a --set-file source.

    Raises:
        FileAccessError: If the file cannot be read.

    """
    try:
        return Path(path).read_bytes()
    except OSError as err:
        raise FileAccessError(f"{flag}: cannot read '{path}': {err.strerror}") from err


def apply_set_files(secret: V1Secret, set_files: Iterable[str]) -> None:
    """Store the contents of each key=path file under key.

    Raises:
        FormatError: If a pair has no '='.
        SpecViolationError: If a key is invalid.
        PathEscapeError: If a path leaves the working directory.
        FileAccessError: If a file cannot be read.

    """
    for pair in set_files:
        try:
            key, path = split_key_value(pair)
        except FormatError as err:
            raise FormatError(f"--set-file: {err}") from None
        check_data_key("--set-file", key)
        path = safe_path("--set-file", path)
        ic(key, path)
        manifest.set_value(secret, key, read_input_file(f"--set-file {key}", path))


def write_output(path: str, data: str) -> None:
    """Write data to path, or to stdout when path is empty.

    Files are written to a sibling temp file with mode 0600 and then
    renamed over the target, so a failure never leaves a truncated file.

    Raises:
        FileAccessError: If the file cannot be written.

    """
    if not path:
        click.echo(data, nl=False)
        return

    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = ""
    try:
        with tempfile.NamedTemporaryFile(
            "w", dir=directory, prefix=".tmp-", suffix=".yaml", delete=False
        ) as tmp_file:
            tmp_path = tmp_file.name
            os.chmod(tmp_path, OUTPUT_MODE)
            tmp_file.write(data)
        os.replace(tmp_path, path)
    except OSError as err:
        if tmp_path:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
        raise FileAccessError(f"write '{path}': {err.strerror or err}") from err
    ic(path)


def write_secret_to(path: str, secret: V1Secret) -> None:
    """Serialise a secret and write it to path or stdout."""
    write_output(path, manifest.to_yaml(secret))


def rmw_output(input_path: str, output_path: str) -> str:
    """Return the guarded output path of a read-modify-write command.

    The output defaults to the input so edits happen in place.
    """
    return safe_path("--output", output_path) if output_path else input_path


def load_secret(flag: str, path: str) -> V1Secret:
    """Guard and load the manifest named by a path flag.

    Raises:
        PathEscapeError: If the path leaves the working directory.
        SecretParsingError: If the manifest cannot be read or parsed.

    """
    path = safe_path(flag, path)
    ic(flag, path)
    try:
        return manifest.from_file(path)
    except SecretParsingError as err:
        raise SecretParsingError(f"load secret: {err}") from err
