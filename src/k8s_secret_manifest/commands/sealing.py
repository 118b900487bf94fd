"""Secret sealing through the kubeseal binary.

The plain manifest is piped through kubeseal on stdin/stdout; the input
file is left unchanged.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path

from icecream import ic

from k8s_secret_manifest import console
from k8s_secret_manifest.commands.common import write_output
from k8s_secret_manifest.exceptions import BinaryNotFoundError, FileAccessError, SealingError
from k8s_secret_manifest.models import SealArgs
from k8s_secret_manifest.safety import safe_path

INSTALL_URL = "https://github.com/bitnami-labs/sealed-secrets#installation"


@dataclass(frozen=True, slots=True)
class SealOptions:
    """How to invoke kubeseal.

    Attributes:
        kubeseal_path: Path or name of the kubeseal binary.
        controller_name: Name of the sealed-secrets controller.
        controller_namespace: Namespace of the sealed-secrets controller.
        cert: Public certificate for offline sealing, empty to ask the controller.
        scope: Sealing scope, empty for kubeseal's default.

    """

    kubeseal_path: str = "kubeseal"
    controller_name: str = "sealed-secrets-controller"
    controller_namespace: str = "kube-system"
    cert: str = ""
    scope: str = ""

    def command(self) -> list[str]:
        """Build the kubeseal command line."""
        cmd = [
            self.kubeseal_path,
            "--format",
            "yaml",
            "--controller-name",
            self.controller_name,
            "--controller-namespace",
            self.controller_namespace,
        ]
        if self.scope:
            cmd.extend(["--scope", self.scope])
        if self.cert:
            cmd.extend(["--cert", self.cert])
        return cmd


def seal_secret(secret_yaml: str, options: SealOptions) -> str:
    """Pipe a plain manifest through kubeseal and return the SealedSecret YAML.

    Args:
        secret_yaml: The plain Secret manifest.
        options: How to invoke kubeseal.

    Returns:
        The sealed manifest text.

    Raises:
        BinaryNotFoundError: If the kubeseal binary cannot be executed.
        SealingError: If kubeseal exits non-zero or prints nothing.

    """
    cmd = options.command()
    ic(cmd)

    try:
        with console.spinner("Sealing secret with kubeseal..."):
            result = subprocess.run(cmd, input=secret_yaml, capture_output=True, text=True, check=True)
    except FileNotFoundError as err:
        raise BinaryNotFoundError(
            f"kubeseal not found at {options.kubeseal_path!r}; install it or set --kubeseal-path\n  {INSTALL_URL}"
        ) from err
    except subprocess.CalledProcessError as err:
        message = (err.stderr or "").strip() or str(err)
        raise SealingError(f"kubeseal failed: {message}") from err

    if not result.stdout:
        raise SealingError("kubeseal produced no output")

    if result.stderr and result.stderr.strip():
        console.warning(result.stderr.strip())
    console.success("Sealed successfully")
    return result.stdout


def seal(args: SealArgs) -> None:
    """Seal the input manifest and write the result to a file or stdout.

    Raises:
        SecretManifestError: If a path is unsafe, the input cannot be read,
            or kubeseal fails.

    """
    input_path = safe_path("--input", args.input)
    output = safe_path("--output", args.output) if args.output else ""
    cert = safe_path("--cert", args.cert) if args.cert else ""

    try:
        secret_yaml = Path(input_path).read_text()
    except OSError as err:
        raise FileAccessError(f"read input file '{input_path}': {err.strerror}") from err

    options = SealOptions(
        kubeseal_path=args.kubeseal_path,
        controller_name=args.controller_name,
        controller_namespace=args.controller_namespace,
        cert=cert,
        scope=args.scope,
    )
    write_output(output, seal_secret(secret_yaml, options))
