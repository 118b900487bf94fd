"""Paired index-list engine.

Two data keys of a Secret can hold two parallel delimiter-separated lists
whose elements pair up by position:

    BACKEND_USERS:     alice;bob;carol
    BACKEND_PASSWORDS: pass1;pass2;pass3

Index 0 of the keys pairs with index 0 of the values, and so on. Values
handled here are plain text; base64 is the manifest layer's concern.

Every mutation returns a new list and leaves its input untouched.
"""

from collections.abc import Sequence
from typing import NamedTuple

from k8s_secret_manifest.exceptions import (
    DuplicateKeyError,
    EmptyKeyError,
    IndexOutOfRangeError,
    LengthMismatchError,
    NotFoundError,
)

DEFAULT_SEPARATOR = ";"


class Entry(NamedTuple):
    """One key/value pair from a paired index-list."""

    key: str
    value: str


def _split_trimmed(text: str, separator: str) -> list[str]:
    """Split text by separator, trim whitespace and drop empty tokens."""
    if not text.strip():
        return []
    return [token.strip() for token in text.split(separator) if token.strip()]


def parse(keys_text: str, values_text: str, separator: str = DEFAULT_SEPARATOR) -> list[Entry]:
    """Decode two plain-text delimiter-separated strings into entries.

    Args:
        keys_text: The joined key list.
        values_text: The joined value list.
        separator: The list separator.

    Returns:
        Entries in list order.

    Raises:
        LengthMismatchError: If the filtered key and value counts differ.
        EmptyKeyError: If a key position lines up with a value but is blank.

    """
    keys = _split_trimmed(keys_text, separator)
    values = _split_trimmed(values_text, separator)

    if len(keys) != len(values):
        # A blank key token that still lines up with the value list is a hole
        # at that position, not a stray separator.
        raw_keys = [token.strip() for token in keys_text.split(separator)] if keys_text.strip() else []
        if len(raw_keys) == len(values) and "" in raw_keys:
            raise EmptyKeyError(raw_keys.index(""))
        raise LengthMismatchError(len(keys), len(values))

    return [Entry(key=key, value=value) for key, value in zip(keys, values)]


def serialize(entries: Sequence[Entry], separator: str = DEFAULT_SEPARATOR) -> tuple[str, str]:
    """Join entries back into the two delimiter-separated strings.

    Empty values are written as empty tokens; they are not filtered here.
    """
    return (
        separator.join(entry.key for entry in entries),
        separator.join(entry.value for entry in entries),
    )


def _check_new_key(entries: Sequence[Entry], key: str) -> None:
    if key == "":
        raise EmptyKeyError()
    if any(entry.key == key for entry in entries):
        raise DuplicateKeyError(key)


def add(entries: Sequence[Entry], key: str, value: str) -> list[Entry]:
    """Append a new entry.

    Raises:
        EmptyKeyError: If key is empty.
        DuplicateKeyError: If key already exists.

    """
    _check_new_key(entries, key)
    return [*entries, Entry(key=key, value=value)]


def insert(entries: Sequence[Entry], index: int, key: str, value: str) -> list[Entry]:
    """Insert a new entry at index; 0 prepends and len(entries) appends.

    Raises:
        EmptyKeyError: If key is empty.
        IndexOutOfRangeError: If index is outside [0, len(entries)].
        DuplicateKeyError: If key already exists.

    """
    if key == "":
        raise EmptyKeyError()
    if index < 0 or index > len(entries):
        raise IndexOutOfRangeError(index, len(entries))
    _check_new_key(entries, key)
    return [*entries[:index], Entry(key=key, value=value), *entries[index:]]


def remove(entries: Sequence[Entry], key: str) -> list[Entry]:
    """Remove the entry with the given key.

    Raises:
        NotFoundError: If no entry has that key.

    """
    result = [entry for entry in entries if entry.key != key]
    if len(result) == len(entries):
        raise NotFoundError(f"entry with key {key!r} not found")
    return result


def remove_by_value(entries: Sequence[Entry], value: str) -> list[Entry]:
    """Remove the first entry whose value matches.

    Raises:
        NotFoundError: If no entry has that value.

    """
    for position, entry in enumerate(entries):
        if entry.value == value:
            return [*entries[:position], *entries[position + 1 :]]
    raise NotFoundError(f"entry with value {value!r} not found")


def keys(entries: Sequence[Entry]) -> list[str]:
    """Return the entry keys in order."""
    return [entry.key for entry in entries]
