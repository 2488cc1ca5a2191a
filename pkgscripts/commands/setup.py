"""Run the build script and swap the compiled artifact into its place."""
from __future__ import annotations

# SPDX-License-Identifier: MIT

import logging
import os
import shutil
from argparse import BooleanOptionalAction, _SubParsersAction
from pathlib import Path
from typing import Iterable, Mapping

from pkgscripts.commands.base import CommandError, ensure_tools_exist, register, run_subprocess
from pkgscripts.manifest import load_manifest
from pkgscripts.runtime import EXIT_CODES, build_environment
from pkgscripts.settings import ScriptsSettings, SetupSettings

LOGGER = logging.getLogger(__name__)


def build_parser(subparsers: _SubParsersAction[object]) -> None:
    parser = subparsers.add_parser(
        "setup",
        help="Run the build script, drop build inputs and install the artifact",
    )
    parser.set_defaults(command="setup", handler=handle)
    parser.add_argument(
        "--propagate-version",
        action=BooleanOptionalAction,
        default=None,
        help="Pass the manifest version to the build script as VERSION.",
    )
    parser.add_argument(
        "--script",
        type=Path,
        default=None,
        help="Build script to execute and later replace (default: main.sh).",
    )
    parser.add_argument(
        "--artifact",
        type=Path,
        default=None,
        help="File produced by the build script (default: a.out).",
    )


def build_child_environment(
    settings: SetupSettings,
    environ: Mapping[str, str],
    *,
    propagate_version: bool,
) -> Mapping[str, str]:
    overrides = dict(settings.environment)
    if propagate_version:
        overrides["VERSION"] = load_manifest(settings.manifest).version
    return build_environment(overrides, base=environ)


def remove_build_inputs(patterns: Iterable[str], root: Path | None = None) -> list[Path]:
    """Delete everything under *root* matching *patterns*.

    Absent paths are fine; any other filesystem error aborts the run. Like the
    shell, wildcards do not match names starting with ``.`` unless the pattern
    does.
    """

    base = root or Path.cwd()
    removed: list[Path] = []
    for pattern in patterns:
        for path in sorted(base.glob(pattern)):
            if path.name.startswith(".") and not pattern.startswith("."):
                continue
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise CommandError(
                    f"Unable to remove {path}: {exc}", exit_code=EXIT_CODES["io_failure"]
                ) from exc
            removed.append(path)
    return removed


def replace_script(artifact: Path, script: Path) -> None:
    """Move *artifact* over *script*."""

    try:
        os.replace(artifact, script)
    except FileNotFoundError as exc:
        raise CommandError(
            f"Build artifact {artifact} was not produced", exit_code=EXIT_CODES["io_failure"]
        ) from exc
    except OSError as exc:
        raise CommandError(
            f"Unable to move {artifact} to {script}: {exc}", exit_code=EXIT_CODES["io_failure"]
        ) from exc


def setup(
    *,
    settings: SetupSettings,
    environ: Mapping[str, str],
    propagate_version: bool | None = None,
) -> int:
    """Build, clean up and install the artifact in the working directory.

    There is no rollback: if the artifact is missing after a successful build,
    the cleanup has already happened and the original script stays in place.
    """

    propagate = settings.propagate_version if propagate_version is None else propagate_version
    env = build_child_environment(settings, environ, propagate_version=propagate)

    ensure_tools_exist([settings.shell])
    LOGGER.info("Running build script %s…", settings.script)
    run_subprocess([settings.shell, str(settings.script)], env=env)

    removed = remove_build_inputs(settings.cleanup)
    LOGGER.debug("Removed build inputs: %s", ", ".join(map(str, removed)) or "none")

    replace_script(settings.artifact, settings.script)
    LOGGER.info("Installed %s as %s.", settings.artifact, settings.script)
    return 0


@register("setup")
def handle(args: object) -> int:
    namespace = getattr(args, "__dict__", args)
    settings: ScriptsSettings = namespace["settings"]
    overrides = {
        key: value
        for key, value in (
            ("script", namespace.get("script")),
            ("artifact", namespace.get("artifact")),
        )
        if value is not None
    }
    return setup(
        settings=settings.setup.model_copy(update=overrides),
        environ=namespace["environ"],
        propagate_version=namespace.get("propagate_version"),
    )
