"""Kubernetes Secret validation rules.

validate_secret() never stops early: every check runs and all findings
are returned, errors and warnings alike. Deciding whether the run failed
is left to the caller.
"""

import re

from kubernetes.client import V1Secret

from k8s_secret_manifest import manifest
from k8s_secret_manifest.exceptions import SpecViolationError
from k8s_secret_manifest.models import Issue, SecretType, Severity

# Kubernetes DNS subdomain name validation (RFC 1123)
_DNS_SUBDOMAIN_MAX_LENGTH = 253
_DNS_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")

# Kubernetes DNS label validation (RFC 1123), used for namespaces
_DNS_LABEL_MAX_LENGTH = 63
_DNS_LABEL_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")

_DATA_KEY_PATTERN = re.compile(r"^[-._a-zA-Z0-9]+$")

_REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    SecretType.TLS.value: ("tls.crt", "tls.key"),
    SecretType.DOCKER_CONFIG_JSON.value: (".dockerconfigjson",),
    SecretType.SSH_AUTH.value: ("ssh-privatekey",),
    SecretType.SERVICE_ACCOUNT_TOKEN.value: ("token",),
}

_RECOMMENDED_KEYS: dict[str, tuple[str, ...]] = {
    SecretType.BASIC_AUTH.value: ("username", "password"),
}


def _error(message: str) -> Issue:
    return Issue(Severity.ERROR, message)


def _warning(message: str) -> Issue:
    return Issue(Severity.WARNING, message)


def check_name(secret: V1Secret) -> list[Issue]:
    """Check metadata.name against DNS subdomain rules."""
    name = secret.metadata.name or ""
    if not name:
        return [_error("name must not be empty")]
    if len(name) > _DNS_SUBDOMAIN_MAX_LENGTH:
        return [_error(f"name {name!r} exceeds {_DNS_SUBDOMAIN_MAX_LENGTH} characters")]
    if not _DNS_SUBDOMAIN_PATTERN.match(name):
        return [
            _error(
                f"name {name!r} is not a valid DNS subdomain "
                "(lowercase alphanumeric, '-' or '.'; must start and end with an alphanumeric character)"
            )
        ]
    return []


def check_namespace(secret: V1Secret) -> list[Issue]:
    """Check metadata.namespace against DNS label rules."""
    namespace = secret.metadata.namespace or ""
    if not namespace:
        return [_error("namespace must not be empty")]
    if len(namespace) > _DNS_LABEL_MAX_LENGTH:
        return [_error(f"namespace {namespace!r} exceeds {_DNS_LABEL_MAX_LENGTH} characters")]
    if not _DNS_LABEL_PATTERN.match(namespace):
        return [
            _error(
                f"namespace {namespace!r} is not a valid DNS label "
                "(lowercase alphanumeric or '-'; must start and end with an alphanumeric character)"
            )
        ]
    return []


def check_data_keys(secret: V1Secret) -> list[Issue]:
    """Warn on empty data and flag keys with invalid characters."""
    issues: list[Issue] = []
    data_keys = manifest.data_keys(secret)
    if not data_keys:
        issues.append(_warning("secret has no data keys"))
    for key in data_keys:
        if not _DATA_KEY_PATTERN.match(key):
            issues.append(
                _error(f"data key {key!r} contains invalid characters (allowed: alphanumeric, '-', '_', '.')")
            )
    return issues


def check_type_requirements(secret: V1Secret) -> list[Issue]:
    """Check the data keys a declared secret type requires or expects."""
    secret_type = secret.type or ""
    present = set(manifest.data_keys(secret))

    issues = [
        _error(f'type {secret_type} requires data key "{key}"')
        for key in _REQUIRED_KEYS.get(secret_type, ())
        if key not in present
    ]
    issues.extend(
        _warning(f'type {secret_type} typically requires data key "{key}"')
        for key in _RECOMMENDED_KEYS.get(secret_type, ())
        if key not in present
    )
    return issues


def validate_secret(secret: V1Secret) -> list[Issue]:
    """Run every check and return all findings.

    Findings are ordered name, namespace, data keys, type requirements.

    Args:
        secret: The secret to validate.

    Returns:
        A possibly empty list of issues.

    """
    return [
        *check_name(secret),
        *check_namespace(secret),
        *check_data_keys(secret),
        *check_type_requirements(secret),
    ]


def validate_data_key(key: str) -> None:
    """Check a single user-supplied data key.

    Raises:
        SpecViolationError: If the key is empty or has invalid characters.

    """
    if not key:
        raise SpecViolationError("data key must not be empty")
    if not _DATA_KEY_PATTERN.match(key):
        raise SpecViolationError(
            f"data key {key!r} contains invalid characters (allowed: alphanumeric, '-', '_', '.')"
        )
