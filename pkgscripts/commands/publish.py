"""Publish the package when a commit message asks for it."""
from __future__ import annotations

# SPDX-License-Identifier: MIT

import logging
from argparse import _SubParsersAction
from pathlib import Path
from typing import Mapping

from pkgscripts.commands.base import ensure_tools_exist, register, run_subprocess
from pkgscripts.manifest import load_manifest
from pkgscripts.settings import PublishSettings, ScriptsSettings

LOGGER = logging.getLogger(__name__)


def build_parser(subparsers: _SubParsersAction[object]) -> None:
    parser = subparsers.add_parser(
        "publish",
        help="Publish to the package registry if the commit message contains the marker",
    )
    parser.set_defaults(command="publish", handler=handle)
    parser.add_argument("message", help="Commit message that triggered the run.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Forward --dry-run to the publish command.",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="Path to the package manifest (default: package.json).",
    )
    parser.add_argument(
        "--token-env",
        default=None,
        help="Environment variable holding the registry token (default: NPM_TOKEN).",
    )


def publish(
    message: str,
    *,
    settings: PublishSettings,
    environ: Mapping[str, str],
    dry_run: bool = False,
) -> int:
    """Run the publish command if *message* and the token allow it.

    Both skip paths print a hint and return ``0``; manifest and publish
    failures propagate as :class:`~pkgscripts.commands.base.CommandError`.
    """

    if settings.marker not in message:
        print(f'Please include "{settings.marker}" in your commit message')
        LOGGER.debug("Commit message has no publish marker; skipping.")
        return 0
    if not environ.get(settings.token_env):
        print(f"Please set the {settings.token_env} environment variable")
        LOGGER.debug("%s is unset or empty; skipping.", settings.token_env)
        return 0

    manifest = load_manifest(settings.manifest)
    print(
        f"Publish of {manifest.name} v{manifest.version} "
        f"triggered by commit message: {message}"
    )

    command = [*settings.command]
    if dry_run:
        command.append("--dry-run")
    ensure_tools_exist([command[0]])
    LOGGER.info("Publishing %s %s…", manifest.name, manifest.version)
    run_subprocess(command, env=environ)
    LOGGER.info("Publish completed.")
    return 0


@register("publish")
def handle(args: object) -> int:
    namespace = getattr(args, "__dict__", args)
    settings: ScriptsSettings = namespace["settings"]
    overrides = {
        key: value
        for key, value in (
            ("manifest", namespace.get("manifest")),
            ("token_env", namespace.get("token_env")),
        )
        if value is not None
    }
    publish_settings = settings.publish.model_copy(update=overrides)
    return publish(
        namespace["message"],
        settings=publish_settings,
        environ=namespace["environ"],
        dry_run=bool(namespace.get("dry_run", False)),
    )
