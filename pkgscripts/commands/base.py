"""Common helper utilities shared between CLI commands."""
from __future__ import annotations

# SPDX-License-Identifier: MIT
import logging
import shlex
import shutil
import subprocess
from typing import Callable, Iterable, Mapping, MutableMapping, Sequence

from pkgscripts.runtime import EXIT_CODES

LOGGER = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when a command cannot be executed successfully."""

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = EXIT_CODES["internal_error"] if exit_code is None else exit_code


class SubprocessError(CommandError):
    """Raised when a child process exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. See output above for details.",
            exit_code=returncode if returncode > 0 else EXIT_CODES["internal_error"],
        )


_REGISTRY: MutableMapping[str, Callable[[object], int]] = {}


def register(name: str) -> Callable[[Callable[[object], int]], Callable[[object], int]]:
    """Decorator used by subcommand modules to expose their handlers."""

    def decorator(func: Callable[[object], int]) -> Callable[[object], int]:
        _REGISTRY[name] = func
        return func

    return decorator


def get_handler(name: str) -> Callable[[object], int]:
    try:
        return _REGISTRY[name]
    except KeyError as exc:  # pragma: no cover - argparse rejects unknown commands
        raise CommandError(
            f"Unknown command '{name}'", exit_code=EXIT_CODES["invalid_arguments"]
        ) from exc


def run_subprocess(
    command: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Execute *command* with the parent's standard streams.

    Output is neither captured nor buffered so interactive prompts stay usable.
    When *env* is given it becomes the child's complete environment. A non-zero
    exit raises :class:`SubprocessError`.
    """

    display = " ".join(shlex.quote(part) for part in command)
    LOGGER.debug("Executing command: %s", display)

    result = subprocess.run(
        list(command),
        env=dict(env) if env is not None else None,
        check=False,
    )
    if result.returncode != 0:
        raise SubprocessError(command, result.returncode)
    return result


def ensure_tools_exist(tool_names: Iterable[str]) -> None:
    """Ensure that required executables are present in ``PATH``."""

    missing = [tool for tool in tool_names if shutil.which(tool) is None]
    if missing:
        raise CommandError(
            "Required tooling is missing: "
            + ", ".join(missing)
            + ". Install the tools or adjust your PATH.",
            exit_code=EXIT_CODES["missing_resource"],
        )
