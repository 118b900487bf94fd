#!/usr/bin/env python
"""Command-line interface for k8s-secret-manifest.

Commands are plain ``click.Command`` objects listed in ``COMMANDS``;
``build_cli()`` attaches them to a fresh group at the entry point so
nothing is registered on a shared root at import time.
"""

from collections.abc import Callable
from typing import TypeVar

import click
from icecream import ic

from k8s_secret_manifest import __version__, commands
from k8s_secret_manifest.exceptions import SecretManifestError
from k8s_secret_manifest.models import (
    AddEntryArgs,
    CopyArgs,
    DiffArgs,
    EditArgs,
    ExportEnvArgs,
    FromEnvArgs,
    GenerateArgs,
    GlobalOptions,
    ListArgs,
    RemoveEntryArgs,
    RotateArgs,
    SealArgs,
    ShowArgs,
    UpdateArgs,
    ValidateArgs,
)

ENV_PREFIX = "K8S_SECRET_MANIFEST"

A = TypeVar("A")


def _run(handler: Callable[[A], object], args: A) -> None:
    """Run a handler and turn package errors into a clean CLI failure."""
    ic(args)
    try:
        handler(args)
    except SecretManifestError as e:
        raise click.ClickException(str(e)) from None


def _globals(ctx: click.Context) -> GlobalOptions:
    return ctx.find_object(GlobalOptions) or GlobalOptions()


# Reusable option decorators
_input_option = click.option("--input", "-i", "input_path", required=True, help="input secret manifest file")
_output_option = click.option("--output", "-o", default="", help="output file path (default: stdout)")
_rmw_output_option = click.option("--output", "-o", default="", help="output file path (default: same as --input)")
_namespace_option = click.option("--namespace", "-n", default=None, help="namespace (overrides the global option)")
_separator_option = click.option(
    "--separator", "-S", default=";", show_default=True, help="separator used between entries in the list values"
)


def _metadata_options(func: Callable) -> Callable:
    func = click.option("--immutable", is_flag=True, help="mark the secret immutable")(func)
    func = click.option(
        "--annotation", "-a", "annotations", multiple=True, help="annotation key=value; repeatable"
    )(func)
    func = click.option("--label", "-l", "labels", multiple=True, help="label key=value; repeatable")(func)
    func = click.option("--type", "-t", "secret_type", default="", help="secret type (default: Opaque)")(func)
    return func


@click.command(help="Generate a new Secret manifest")
@click.option("--name", required=True, help="secret name")
@_namespace_option
@click.option("--set", "-s", "sets", multiple=True, help="key=value data entry; repeatable")
@click.option("--set-file", "-f", "set_files", multiple=True, help="key=path to load a value from a file; repeatable")
@_metadata_options
@click.option("--tls-cert", default="", help="path to a PEM certificate (TLS helper)")
@click.option("--tls-key", default="", help="path to a PEM private key (TLS helper)")
@click.option("--docker-server", default="", help="registry server (docker-registry helper)")
@click.option("--docker-username", default="", help="registry username")
@click.option("--docker-password", default="", help="registry password")
@click.option("--docker-email", default="", help="registry email (optional)")
@click.option("--entries-key", default="", help="data key holding the entry key list")
@click.option("--entries-val", default="", help="data key holding the entry value list")
@click.option("--entry", "-e", "entries", multiple=True, help="key:value entry for the paired lists; repeatable")
@_separator_option
@_output_option
@click.pass_context
def generate(ctx: click.Context, name: str, namespace: str | None, output: str, **options) -> None:
    """Generate a Secret manifest from flags."""
    _run(
        commands.generate,
        GenerateArgs(
            name=name,
            namespace=namespace or _globals(ctx).namespace,
            output=output,
            **options,
        ),
    )


@click.command("from-env", help="Generate a Secret manifest from a .env file")
@click.option("--name", required=True, help="secret name")
@_namespace_option
@click.option("--env-file", "-e", required=True, help="path to the .env file")
@_metadata_options
@click.option("--set", "-s", "sets", multiple=True, help="additional key=value to set or overwrite; repeatable")
@_output_option
@click.pass_context
def from_env(ctx: click.Context, name: str, namespace: str | None, env_file: str, output: str, **options) -> None:
    """Generate a Secret manifest from a .env file."""
    _run(
        commands.from_env,
        FromEnvArgs(
            name=name,
            env_file=env_file,
            namespace=namespace or _globals(ctx).namespace,
            output=output,
            **options,
        ),
    )


@click.command("export-env", help="Export Secret data as a .env file")
@_input_option
@_output_option
def export_env(input_path: str, output: str) -> None:
    """Export decoded data as KEY=value lines."""
    _run(commands.export_env, ExportEnvArgs(input=input_path, output=output))


@click.command(help="Copy a Secret manifest under a new name and namespace")
@_input_option
@click.option("--name", required=True, help="new secret name")
@_namespace_option
@_output_option
@click.pass_context
def copy(ctx: click.Context, input_path: str, name: str, namespace: str | None, output: str) -> None:
    """Copy a secret to a new name and namespace."""
    _run(
        commands.copy,
        CopyArgs(input=input_path, name=name, namespace=namespace or _globals(ctx).namespace, output=output),
    )


@click.command(help="Update data, labels or annotations of an existing Secret manifest")
@_input_option
@_rmw_output_option
@click.option("--set", "-s", "sets", multiple=True, help="key=value to set; repeatable")
@click.option("--set-file", "-f", "set_files", multiple=True, help="key=path to load a value from a file; repeatable")
@click.option("--delete-key", "-d", "delete_keys", multiple=True, help="data key to remove; repeatable")
@click.option("--label", "-l", "labels", multiple=True, help="label key=value to merge; repeatable")
@click.option("--annotation", "-a", "annotations", multiple=True, help="annotation key=value to merge; repeatable")
def update(input_path: str, output: str, **options) -> None:
    """Update an existing secret in place."""
    _run(commands.update, UpdateArgs(input=input_path, output=output, **options))


@click.command(help="Replace values with freshly generated random strings")
@_input_option
@_rmw_output_option
@click.option("--key", "-k", "keys", multiple=True, required=True, help="key to rotate; repeatable")
@click.option("--length", "-l", default=32, show_default=True, type=int, help="length of the generated value")
@click.option(
    "--charset",
    "-c",
    default="alphanumeric",
    show_default=True,
    help="character set: alphanumeric, hex, base64url",
)
def rotate(input_path: str, output: str, keys: tuple[str, ...], length: int, charset: str) -> None:
    """Rotate one or more keys."""
    _run(
        commands.rotate,
        RotateArgs(input=input_path, output=output, keys=keys, length=length, charset=charset),
    )


@click.command("list", help="List the data keys of a Secret manifest")
@_input_option
def list_keys(input_path: str) -> None:
    """List the data keys."""
    _run(commands.list_keys, ListArgs(input=input_path))


@click.command(help="Show the decoded contents of a Secret manifest")
@_input_option
@click.option("--key", "-k", default="", help="print only the value of this key")
def show(input_path: str, key: str) -> None:
    """Show a decoded secret."""
    _run(commands.show, ShowArgs(input=input_path, key=key))


@click.command(help="Show the differences between two Secret manifests")
@click.option("--from", "from_path", required=True, help="original secret manifest")
@click.option("--to", "to_path", required=True, help="changed secret manifest")
@click.option("--unchanged", "show_unchanged", is_flag=True, help="also print unchanged keys")
def diff(from_path: str, to_path: str, show_unchanged: bool) -> None:
    """Diff two secrets."""
    _run(commands.diff, DiffArgs(from_path=from_path, to_path=to_path, show_unchanged=show_unchanged))


@click.command(help="Seal a Secret manifest using kubeseal")
@_input_option
@_output_option
@click.option("--kubeseal-path", "-p", default=None, help="path to kubeseal (overrides the global option)")
@click.option(
    "--controller-name",
    "-c",
    default="sealed-secrets-controller",
    show_default=True,
    help="kubeseal --controller-name",
)
@click.option(
    "--controller-namespace",
    "-C",
    default="kube-system",
    show_default=True,
    help="kubeseal --controller-namespace",
)
@click.option("--cert", "-r", default="", help="public certificate for offline sealing (kubeseal --cert)")
@click.option("--scope", default="", help="sealing scope: strict, namespace-wide or cluster-wide")
@click.pass_context
def seal(ctx: click.Context, input_path: str, output: str, kubeseal_path: str | None, **options) -> None:
    """Seal a secret with kubeseal."""
    _run(
        commands.seal,
        SealArgs(
            input=input_path,
            output=output,
            kubeseal_path=kubeseal_path or _globals(ctx).kubeseal_path,
            **options,
        ),
    )


@click.command("add-entry", help="Add an entry to a paired index-list")
@_input_option
@_rmw_output_option
@click.option("--entries-key", required=True, help="data key holding the entry key list")
@click.option("--entries-val", required=True, help="data key holding the entry value list")
@click.option("--key", "-k", required=True, help="entry key")
@click.option("--value", "-V", required=True, help="entry value")
@click.option("--index", "-x", default=None, type=int, help="insert position (0 = first, default: append)")
@_separator_option
def add_entry(input_path: str, output: str, **options) -> None:
    """Add an entry to the paired lists."""
    _run(commands.add_entry, AddEntryArgs(input=input_path, output=output, **options))


@click.command("remove-entry", help="Remove an entry from a paired index-list")
@_input_option
@_rmw_output_option
@click.option("--entries-key", required=True, help="data key holding the entry key list")
@click.option("--entries-val", required=True, help="data key holding the entry value list")
@click.option("--key", "-k", default="", help="remove the entry with this key")
@click.option("--value", "-V", default="", help="remove the first entry with this value")
@_separator_option
def remove_entry(input_path: str, output: str, **options) -> None:
    """Remove an entry from the paired lists."""
    _run(commands.remove_entry, RemoveEntryArgs(input=input_path, output=output, **options))


@click.command(help="Validate a Secret manifest against Kubernetes rules")
@_input_option
def validate(input_path: str) -> None:
    """Validate a secret."""
    _run(commands.validate, ValidateArgs(input=input_path))


@click.command(help="Edit the decoded data of a Secret manifest in $EDITOR")
@_input_option
@_rmw_output_option
def edit(input_path: str, output: str) -> None:
    """Edit a secret interactively."""
    _run(commands.edit, EditArgs(input=input_path, output=output))


COMMANDS: tuple[click.Command, ...] = (
    generate,
    from_env,
    export_env,
    copy,
    update,
    rotate,
    list_keys,
    show,
    diff,
    seal,
    add_entry,
    remove_entry,
    validate,
    edit,
)


def build_cli(command_table: tuple[click.Command, ...] = COMMANDS) -> click.Group:
    """Build the root command group from a command table.

    Args:
        command_table: Commands to attach to the group.

    Returns:
        A new click group.

    """

    @click.group(help="Create, edit, inspect and seal Kubernetes Secret manifests")
    @click.version_option(__version__, "--version", "-v", message="%(version)s")
    @click.option("--namespace", "-n", default="default", show_default=True, help="default namespace")
    @click.option("--kubeseal-path", "-p", default="kubeseal", show_default=True, help="path to the kubeseal binary")
    @click.option("--debug", is_flag=True, help="print debug information")
    @click.pass_context
    def cli(ctx: click.Context, namespace: str, kubeseal_path: str, debug: bool) -> None:
        """Store the global options for the subcommands."""
        if debug:
            ic.enable()
        else:
            ic.disable()
        ctx.obj = GlobalOptions(namespace=namespace, kubeseal_path=kubeseal_path)

    for command in command_table:
        cli.add_command(command)
    return cli


def main() -> None:
    """Console script entry point."""
    build_cli()(auto_envvar_prefix=ENV_PREFIX)


if __name__ == "__main__":
    main()
