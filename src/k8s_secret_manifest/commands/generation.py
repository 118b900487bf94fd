"""Commands that produce a new manifest: generate, from-env and copy."""

import base64
import json

from icecream import ic
from kubernetes.client import V1Secret

from k8s_secret_manifest import console, manifest
from k8s_secret_manifest.commands.common import (
    apply_set_files,
    check_data_key,
    load_secret,
    parse_entry_flags,
    parse_key_value_pairs,
    read_input_file,
    split_key_value,
    store_entries,
    write_secret_to,
)
from k8s_secret_manifest.envfile import parse_env_file
from k8s_secret_manifest.exceptions import FormatError
from k8s_secret_manifest.models import CopyArgs, FromEnvArgs, GenerateArgs, SecretType
from k8s_secret_manifest.safety import safe_path

DOCKER_CONFIG_KEY = ".dockerconfigjson"
TLS_CERT_KEY = "tls.crt"
TLS_PRIVATE_KEY = "tls.key"


def _apply_metadata(
    secret: V1Secret,
    secret_type: str,
    labels: tuple[str, ...],
    annotations: tuple[str, ...],
    immutable: bool,
) -> None:
    """Set the type, labels, annotations and immutable flag of a new secret."""
    if secret_type:
        secret.type = secret_type
    if labels:
        secret.metadata.labels = parse_key_value_pairs(labels, "--label")
    if annotations:
        secret.metadata.annotations = parse_key_value_pairs(annotations, "--annotation")
    if immutable:
        secret.immutable = True


def _report(title: str, secret: V1Secret, output: str) -> None:
    """Show a summary panel when the manifest went to a file."""
    if not output:
        return
    console.newline()
    console.summary_panel(
        title,
        {
            "Name": secret.metadata.name,
            "Namespace": secret.metadata.namespace,
            "Type": secret.type,
            "Keys": str(len(manifest.data_keys(secret))),
            "Output": output,
        },
    )


def apply_tls(secret: V1Secret, cert_path: str, key_path: str, explicit_type: str) -> None:
    """Load a certificate/key pair into tls.crt and tls.key.

    The secret becomes kubernetes.io/tls unless a type was given explicitly.

    Args:
        secret: The secret being built.
        cert_path: Path to the PEM certificate.
        key_path: Path to the PEM private key.
        explicit_type: The --type value, empty if not given.

    Raises:
        PathEscapeError: If either path leaves the working directory.
        FileAccessError: If either file cannot be read.

    """
    cert_path = safe_path("--tls-cert", cert_path)
    key_path = safe_path("--tls-key", key_path)

    cert = read_input_file("--tls-cert", cert_path)
    key = read_input_file("--tls-key", key_path)

    if not explicit_type:
        secret.type = SecretType.TLS.value
    manifest.set_value(secret, TLS_CERT_KEY, cert)
    manifest.set_value(secret, TLS_PRIVATE_KEY, key)


def build_docker_config(server: str, username: str, password: str, email: str = "") -> str:
    """Return the .dockerconfigjson document for a single registry.

    Args:
        server: Registry host, e.g. ghcr.io.
        username: Registry user.
        password: Registry password or token.
        email: Optional email, omitted from the document when empty.

    Returns:
        Compact JSON text.

    """
    auth = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    credentials = {"username": username, "password": password}
    if email:
        credentials["email"] = email
    credentials["auth"] = auth
    return json.dumps({"auths": {server: credentials}}, separators=(",", ":"))


def apply_docker_registry(
    secret: V1Secret,
    server: str,
    username: str,
    password: str,
    email: str,
    explicit_type: str,
) -> None:
    """Store registry credentials under .dockerconfigjson.

    The secret becomes kubernetes.io/dockerconfigjson unless a type was
    given explicitly.
    """
    if not explicit_type:
        secret.type = SecretType.DOCKER_CONFIG_JSON.value
    manifest.set_plain_value(secret, DOCKER_CONFIG_KEY, build_docker_config(server, username, password, email))


def generate(args: GenerateArgs) -> None:
    """Build a new secret from flags and write it out.

    Args:
        args: Parsed generate arguments.

    Raises:
        SecretManifestError: On the first invalid flag; nothing is written.

    """
    ic(args.name, args.namespace, args.output)
    output = safe_path("--output", args.output) if args.output else ""

    secret = manifest.new_secret(args.name, args.namespace)
    _apply_metadata(secret, args.secret_type, args.labels, args.annotations, args.immutable)

    for pair in args.sets:
        key, value = split_key_value(pair)
        check_data_key("--set", key)
        manifest.set_plain_value(secret, key, value)

    apply_set_files(secret, args.set_files)

    if args.tls_cert or args.tls_key:
        if not (args.tls_cert and args.tls_key):
            raise FormatError("--tls-cert and --tls-key must both be provided")
        apply_tls(secret, args.tls_cert, args.tls_key, args.secret_type)

    if args.docker_server or args.docker_username or args.docker_password:
        if not (args.docker_server and args.docker_username and args.docker_password):
            raise FormatError("--docker-server, --docker-username, and --docker-password are all required")
        apply_docker_registry(
            secret,
            args.docker_server,
            args.docker_username,
            args.docker_password,
            args.docker_email,
            args.secret_type,
        )

    if args.entries_key or args.entries_val or args.entries:
        if not (args.entries_key and args.entries_val):
            raise FormatError("--entries-key and --entries-val are both required when using --entry flags")
        check_data_key("--entries-key", args.entries_key)
        check_data_key("--entries-val", args.entries_val)
        entries = parse_entry_flags(args.entries)
        ic(args.entries_key, args.entries_val, len(entries))
        store_entries(secret, args.entries_key, args.entries_val, args.separator, entries)

    write_secret_to(output, secret)
    _report("Secret Manifest Generated", secret, output)


def from_env(args: FromEnvArgs) -> None:
    """Build a new secret from a .env file plus --set overrides.

    Raises:
        SecretManifestError: If the file cannot be read, a line is malformed,
            or a key is invalid.

    """
    env_file = safe_path("--env-file", args.env_file)
    output = safe_path("--output", args.output) if args.output else ""
    ic(env_file, output)

    try:
        pairs = parse_env_file(env_file)
    except FormatError as err:
        raise FormatError(f"parse env file: {err}") from None

    secret = manifest.new_secret(args.name, args.namespace)
    _apply_metadata(secret, args.secret_type, args.labels, args.annotations, args.immutable)

    for key, value in pairs.items():
        check_data_key(env_file, key)
        manifest.set_plain_value(secret, key, value)

    for key, value in parse_key_value_pairs(args.sets, "--set").items():
        check_data_key("--set", key)
        manifest.set_plain_value(secret, key, value)

    write_secret_to(output, secret)
    _report("Secret Manifest Generated", secret, output)


def copy(args: CopyArgs) -> None:
    """Write an existing secret under a new name and namespace.

    Type, data, labels, annotations and the immutable flag carry over.
    """
    secret = load_secret("--input", args.input)
    output = safe_path("--output", args.output) if args.output else ""

    secret.metadata.name = args.name
    secret.metadata.namespace = args.namespace

    write_secret_to(output, secret)
    console.success(f"Copied to {console.highlight(f'{args.namespace}/{args.name}')}")
