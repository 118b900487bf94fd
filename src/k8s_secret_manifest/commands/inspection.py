"""Read-only commands: show, list, diff, validate and export-env.

These print data to stdout and never take the output lock, so they may
observe a file that another invocation is rewriting.
"""

import os

import click
from icecream import ic
from kubernetes.client import V1Secret

from k8s_secret_manifest import console, manifest
from k8s_secret_manifest.commands.common import load_secret, write_output
from k8s_secret_manifest.envfile import format_env
from k8s_secret_manifest.exceptions import SpecViolationError
from k8s_secret_manifest.models import DiffArgs, ExportEnvArgs, ListArgs, ShowArgs, ValidateArgs
from k8s_secret_manifest.safety import safe_path
from k8s_secret_manifest.validation import validate_secret


def _qualified_name(secret: V1Secret) -> str:
    return f"{secret.metadata.namespace}/{secret.metadata.name}"


def _echo_mapping(title: str, mapping: dict[str, str] | None) -> None:
    if not mapping:
        return
    click.echo(f"  {title}:")
    for key in sorted(mapping):
        click.echo(f"    {key}: {mapping[key]}")


def show(args: ShowArgs) -> None:
    """Print the decoded secret, or just one value when a key is given.

    Raises:
        NotFoundError: If the requested key is absent.

    """
    secret = load_secret("--input", args.input)

    if args.key:
        click.echo(manifest.get_plain_value(secret, args.key))
        return

    click.echo(f"Secret: {_qualified_name(secret)}")
    click.echo(f"  type: {secret.type}")
    if secret.immutable:
        click.echo("  immutable: true")
    _echo_mapping("labels", secret.metadata.labels)
    _echo_mapping("annotations", secret.metadata.annotations)

    click.echo("  data:")
    for key, value in manifest.plain_data(secret).items():
        click.echo(f"    {key}: {value}")


def list_keys(args: ListArgs) -> None:
    """Print the secret header followed by its sorted data keys."""
    secret = load_secret("--input", args.input)
    data_keys = manifest.data_keys(secret)

    click.echo(f"Secret: {_qualified_name(secret)}  type: {secret.type}  ({len(data_keys)} key(s))")
    for key in data_keys:
        click.echo(f"  {key}")


def _styler(color: bool):
    def style(text: str, fg: str) -> str:
        return click.style(text, fg=fg) if color else text

    return style


def diff(args: DiffArgs) -> int:
    """Print the differences between two secrets.

    Metadata changes are shown as '~' lines, data changes as '-'/'+' lines
    with decoded values. Values are compared as raw bytes, so changes in
    non-UTF-8 data are reported even where the decoded text looks equal.
    Colour is off when NO_COLOR is set; click.echo drops it when stdout is
    not a terminal.

    Returns:
        The number of differences found.

    """
    before = load_secret("--from", args.from_path)
    after = load_secret("--to", args.to_path)
    style = _styler(not os.environ.get("NO_COLOR"))

    click.echo(f"--- {args.from_path} ({_qualified_name(before)}  type: {before.type})")
    click.echo(f"+++ {args.to_path} ({_qualified_name(after)}  type: {after.type})")

    changed = 0
    for field, fg, old, new in (
        ("name", "red", before.metadata.name, after.metadata.name),
        ("namespace", "yellow", before.metadata.namespace, after.metadata.namespace),
        ("type", "yellow", before.type, after.type),
    ):
        if old != new:
            click.echo(style(f"~ {field}: {old} → {new}", fg))
            changed += 1

    old_data = manifest.plain_data(before)
    new_data = manifest.plain_data(after)
    for key in sorted(old_data.keys() | new_data.keys()):
        if key not in new_data:
            click.echo(style(f"- {key}={old_data[key]}", "red"))
        elif key not in old_data:
            click.echo(style(f"+ {key}={new_data[key]}", "green"))
        elif manifest.get_value(before, key) != manifest.get_value(after, key):
            click.echo(style(f"- {key}={old_data[key]}", "red"))
            click.echo(style(f"+ {key}={new_data[key]}", "green"))
        else:
            if args.show_unchanged:
                click.echo(f"  {key}={old_data[key]}")
            continue
        changed += 1

    if changed == 0:
        click.echo("(no differences)")
    ic(changed)
    return changed


def validate(args: ValidateArgs) -> None:
    """Print every validation finding, then fail if any is an error.

    Raises:
        SpecViolationError: If at least one finding has error severity.

    """
    secret = load_secret("--input", args.input)
    issues = validate_secret(secret)

    for finding in issues:
        console.issue(finding)

    errors = sum(1 for finding in issues if finding.is_error)
    if errors:
        raise SpecViolationError(f"validation failed with {errors} error(s)")
    if issues:
        console.success(f"validation passed with {len(issues)} warning(s)")
    else:
        console.success("validation passed")


def export_env(args: ExportEnvArgs) -> None:
    """Write the decoded data as sorted, quoted KEY=value lines."""
    secret = load_secret("--input", args.input)
    output = safe_path("--output", args.output) if args.output else ""
    write_output(output, format_env(manifest.plain_data(secret)))
    if output:
        console.success(f"Exported {len(secret.data)} key(s) to {console.highlight(output)}")
