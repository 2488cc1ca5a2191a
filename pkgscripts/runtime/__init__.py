"""Public runtime helpers for the packaging scripts."""

from __future__ import annotations

# SPDX-License-Identifier: MIT
from ._core import (
    LoadedEnvironment,
    UTCFormatter,
    build_environment,
    configure_logging,
    parse_env_file,
)
from .exit_codes import EXIT_CODES
from .textio import read_text, write_text

__all__ = [
    "EXIT_CODES",
    "LoadedEnvironment",
    "UTCFormatter",
    "build_environment",
    "configure_logging",
    "parse_env_file",
    "read_text",
    "write_text",
]
