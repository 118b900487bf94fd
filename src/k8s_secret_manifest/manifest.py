"""Secret manifest loading, storing and value access.

Secrets are held as kubernetes client ``V1Secret`` objects. Their ``data``
mapping carries base64 text exactly as it appears in YAML; the accessors
here are the only place that encodes or decodes it, so callers only ever
see plain values.

A loaded or newly created secret always has a dict for ``data`` and a
``V1ObjectMeta`` for ``metadata``, never None.
"""

import base64
import binascii
from pathlib import Path
from typing import Any

import yaml
from kubernetes.client import ApiClient, V1ObjectMeta, V1Secret

from k8s_secret_manifest.exceptions import NotFoundError, SecretParsingError
from k8s_secret_manifest.models import SecretType

API_VERSION = "v1"
KIND = "Secret"
RAW_TEXT_ERRORS = "surrogateescape"


def new_secret(name: str, namespace: str) -> V1Secret:
    """Return an Opaque v1 Secret with empty data."""
    return V1Secret(
        api_version=API_VERSION,
        kind=KIND,
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        type=SecretType.OPAQUE.value,
        data={},
    )


def set_value(secret: V1Secret, key: str, raw: bytes) -> None:
    """Store raw bytes under key."""
    if secret.data is None:
        secret.data = {}
    secret.data[key] = base64.b64encode(raw).decode("ascii")


def set_plain_value(secret: V1Secret, key: str, plaintext: str) -> None:
    """Store a plain-text value under key."""
    set_value(secret, key, plaintext.encode("utf-8"))


def get_value(secret: V1Secret, key: str) -> bytes:
    """Return the raw bytes stored under key.

    Raises:
        NotFoundError: If key is not in the secret data.

    """
    data = secret.data or {}
    if key not in data:
        raise NotFoundError(f"key {key!r} not found in secret data")
    return base64.b64decode(data[key])


def get_plain_value(secret: V1Secret, key: str) -> str:
    """Return the plain-text value stored under key.

    Raises:
        NotFoundError: If key is not in the secret data.

    """
    return get_value(secret, key).decode("utf-8", errors="replace")


def get_raw_text(secret: V1Secret, key: str) -> str:
    """Return the value under key as text that encodes back to the same bytes.

    Bytes that are not valid UTF-8 are carried as lone surrogates; pair with
    set_raw_text() to write the value back unchanged.

    Raises:
        NotFoundError: If key is not in the secret data.

    """
    return get_value(secret, key).decode("utf-8", errors=RAW_TEXT_ERRORS)


def set_raw_text(secret: V1Secret, key: str, text: str) -> None:
    """Store text produced by get_raw_text(), restoring any non-UTF-8 bytes."""
    set_value(secret, key, text.encode("utf-8", errors=RAW_TEXT_ERRORS))


def delete_value(secret: V1Secret, key: str) -> None:
    """Remove key from the secret data.

    Raises:
        NotFoundError: If key is not in the secret data.

    """
    data = secret.data or {}
    if key not in data:
        raise NotFoundError(f"key {key!r} not found in secret data")
    del data[key]


def has_key(secret: V1Secret, key: str) -> bool:
    return key in (secret.data or {})


def data_keys(secret: V1Secret) -> list[str]:
    """Return the data keys in sorted order."""
    return sorted(secret.data or {})


def plain_data(secret: V1Secret) -> dict[str, str]:
    """Return all data values decoded to plain text, sorted by key."""
    return {key: get_plain_value(secret, key) for key in data_keys(secret)}


def to_yaml(secret: V1Secret) -> str:
    """Serialise a secret to Kubernetes YAML.

    An empty data mapping is left out of the output.
    """
    body: dict[str, Any] = ApiClient().sanitize_for_serialization(secret)
    if not body.get("data"):
        body.pop("data", None)
    return yaml.safe_dump(body, default_flow_style=False, sort_keys=True)


def _from_camel(model: type, mapping: dict[str, Any]) -> dict[str, Any]:
    """Translate a camelCase YAML mapping into model constructor kwargs."""
    by_json_name = {json_name: attr for attr, json_name in model.attribute_map.items()}
    return {by_json_name[key]: value for key, value in mapping.items() if key in by_json_name}


def from_yaml(text: str, source: str = "<input>") -> V1Secret:
    """Parse a v1 Secret manifest.

    Args:
        text: The YAML document.
        source: Name used in error messages.

    Returns:
        The parsed secret, with data normalised to a dict.

    Raises:
        SecretParsingError: If the YAML is malformed, holds more than one
            document, is not a mapping, is not apiVersion=v1 kind=Secret,
            or has a data value that is not valid base64.

    """
    try:
        docs = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as err:
        raise SecretParsingError(f"File '{source}' contains malformed YAML: {err}") from err

    if len(docs) > 1:
        raise SecretParsingError(
            f"File '{source}' contains multiple YAML documents. Only single document files are supported."
        )
    body = docs[0] if docs else {}
    if not isinstance(body, dict):
        raise SecretParsingError(f"File '{source}' does not contain a valid YAML mapping.")

    api_version = body.get("apiVersion")
    kind = body.get("kind")
    if api_version != API_VERSION or kind != KIND:
        raise SecretParsingError(
            f"expected apiVersion={API_VERSION} kind={KIND}, got apiVersion={api_version} kind={kind}"
        )

    data = body.get("data") or {}
    if not isinstance(data, dict):
        raise SecretParsingError(f"File '{source}' has a data field that is not a mapping")
    for key, value in data.items():
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, TypeError, ValueError) as err:
            raise SecretParsingError(f"File '{source}': data key {key!r} is not valid base64") from err

    metadata = body.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise SecretParsingError(f"File '{source}' has a metadata field that is not a mapping")

    kwargs = _from_camel(V1Secret, body)
    kwargs["metadata"] = V1ObjectMeta(**_from_camel(V1ObjectMeta, metadata))
    kwargs["data"] = {str(key): value for key, value in data.items()}
    return V1Secret(**kwargs)


def from_file(path: str | Path) -> V1Secret:
    """Read and parse a secret manifest from disk.

    Raises:
        SecretParsingError: If the file cannot be read or parsed.

    """
    try:
        text = Path(path).read_text()
    except FileNotFoundError as err:
        raise SecretParsingError(f"Secret file '{path}' does not exist") from err
    except OSError as err:
        raise SecretParsingError(f"read file '{path}': {err.strerror}") from err
    return from_yaml(text, source=str(path))
