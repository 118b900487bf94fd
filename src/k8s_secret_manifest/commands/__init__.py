"""Command handlers.

Each handler takes one frozen argument record from
``k8s_secret_manifest.models`` and raises a ``SecretManifestError``
subclass on failure.
"""

from k8s_secret_manifest.commands.editing import add_entry, edit, remove_entry, rotate, update
from k8s_secret_manifest.commands.generation import copy, from_env, generate
from k8s_secret_manifest.commands.inspection import diff, export_env, list_keys, show, validate
from k8s_secret_manifest.commands.sealing import SealOptions, seal, seal_secret

__all__ = [
    # generation
    "generate",
    "from_env",
    "copy",
    # editing
    "update",
    "rotate",
    "add_entry",
    "remove_entry",
    "edit",
    # inspection
    "show",
    "list_keys",
    "diff",
    "validate",
    "export_env",
    # sealing
    "SealOptions",
    "seal",
    "seal_secret",
]
