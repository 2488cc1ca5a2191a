"""Unified entry point for the package publish and build scripts."""
from __future__ import annotations

# SPDX-License-Identifier: MIT

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Sequence

from pkgscripts.commands import CommandError
from pkgscripts.commands import base as command_base
from pkgscripts.runtime import EXIT_CODES, build_environment, configure_logging, parse_env_file
from pkgscripts.settings import load_settings

LOGGER = logging.getLogger(__name__)
DEFAULT_ENV_PATHS = (Path(".env"),)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (can be provided multiple times).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Decrease log verbosity (can be provided multiple times).",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Explicit path to an environment file. Defaults to .env.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file. Defaults to pkgscripts.yaml when present.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    from pkgscripts.commands import publish, setup

    publish.build_parser(subparsers)
    setup.build_parser(subparsers)

    return parser


def _determine_log_level(verbose: int, quiet: int) -> int:
    base_level = logging.INFO
    level = base_level - (verbose * 10) + (quiet * 10)
    return max(logging.DEBUG, min(logging.CRITICAL, level))


def _load_environment(env_file: Path | None) -> Mapping[str, str]:
    candidates = [env_file] if env_file else list(DEFAULT_ENV_PATHS)
    for candidate in candidates:
        try:
            env = parse_env_file(candidate)
        except (OSError, UnicodeDecodeError) as exc:
            raise CommandError(
                f"Unable to read environment file {candidate}: {exc}",
                exit_code=EXIT_CODES["io_failure"],
            ) from exc
        if env:
            LOGGER.debug("Loaded environment overrides from %s", candidate)
            return build_environment(env.variables, base=os.environ)
    return build_environment(base=os.environ)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(_determine_log_level(args.verbose, args.quiet))

    try:
        args.environ = _load_environment(args.env_file)
        args.settings = load_settings(args.config)
        handler = command_base.get_handler(getattr(args, "command"))
        return handler(args)
    except CommandError as exc:
        LOGGER.error("%s", exc)
        return exc.exit_code
    except KeyboardInterrupt:
        LOGGER.error("Interrupted.")
        return EXIT_CODES["interrupted"]


def publish_main(argv: Sequence[str] | None = None) -> int:
    """Console entry point equivalent to ``pkgscripts publish``."""

    return main(["publish", *(sys.argv[1:] if argv is None else argv)])


def setup_main(argv: Sequence[str] | None = None) -> int:
    """Console entry point equivalent to ``pkgscripts setup``."""

    return main(["setup", *(sys.argv[1:] if argv is None else argv)])


if __name__ == "__main__":  # pragma: no cover - exercised by CLI
    raise SystemExit(main())
