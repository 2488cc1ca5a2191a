"""Command implementations for the packaging scripts CLI."""

from __future__ import annotations

# SPDX-License-Identifier: MIT
from .base import CommandError, SubprocessError, register

__all__ = ["CommandError", "SubprocessError", "register"]
