"""Validated configuration for the packaging scripts.

Settings come from an optional YAML document (``pkgscripts.yaml`` by default)
with one section per command::

    publish:
      token_env: NPM_TOKEN
      command: [npm, publish, --access, public]
    setup:
      propagate_version: true
      cleanup: [inc, "*.hxx", "*.cxx"]

Every key is optional; omitted keys keep the defaults below. Command line
flags override individual values for a single run.
"""

from __future__ import annotations

# SPDX-License-Identifier: MIT

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pkgscripts.commands.base import CommandError
from pkgscripts.runtime import EXIT_CODES

LOGGER = logging.getLogger(__name__)
DEFAULT_SETTINGS_PATH = Path("pkgscripts.yaml")

__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "PublishSettings",
    "ScriptsSettings",
    "SettingsError",
    "SetupSettings",
    "load_settings",
]


class SettingsError(CommandError):
    """Raised when the settings file cannot be loaded or validated."""

    def __init__(self, message: str) -> None:
        super().__init__(message, exit_code=EXIT_CODES["invalid_arguments"])


def _non_empty_command(value: tuple[str, ...]) -> tuple[str, ...]:
    if not value or not value[0].strip():
        raise ValueError("command must name an executable")
    return value


class PublishSettings(BaseModel):
    """Options for the commit-message gated publish."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    marker: str = "[publish]"
    token_env: str = "NPM_TOKEN"
    manifest: Path = Path("package.json")
    command: tuple[str, ...] = ("npm", "publish")

    @field_validator("marker", "token_env")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("value cannot be empty")
        return value

    @field_validator("command")
    @classmethod
    def _validate_command(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _non_empty_command(value)


class SetupSettings(BaseModel):
    """Options for the build script runner."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    script: Path = Path("main.sh")
    shell: str = "bash"
    artifact: Path = Path("a.out")
    manifest: Path = Path("package.json")
    environment: dict[str, str] = Field(default_factory=lambda: {"DOWNLOAD": "0", "RUN": "0"})
    propagate_version: bool = False
    cleanup: tuple[str, ...] = ("inc", "*.hxx", "*.cxx")

    @field_validator("shell")
    @classmethod
    def _validate_shell(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("shell cannot be empty")
        return candidate

    @field_validator("cleanup")
    @classmethod
    def _validate_cleanup(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for pattern in value:
            parts = Path(pattern).parts
            if not pattern.strip() or Path(pattern).is_absolute() or ".." in parts:
                raise ValueError(
                    f"cleanup pattern {pattern!r} must be relative to the working directory"
                )
        return value


class ScriptsSettings(BaseModel):
    """Top-level settings document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    publish: PublishSettings = Field(default_factory=PublishSettings)
    setup: SetupSettings = Field(default_factory=SetupSettings)


def _read_yaml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise SettingsError(f"Settings file {path} is not valid YAML: {exc}") from exc
    except OSError as exc:
        raise SettingsError(f"Unable to read settings file {path}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise SettingsError(f"Settings file {path} must contain a mapping at the top level")
    return payload


def load_settings(path: Path | None = None) -> ScriptsSettings:
    """Load settings from *path*, falling back to defaults.

    A missing default file is not an error; a missing explicit file is.
    """

    explicit = path is not None
    candidate = path if path is not None else DEFAULT_SETTINGS_PATH
    if not candidate.exists():
        if explicit:
            raise SettingsError(f"Settings file {candidate} does not exist")
        LOGGER.debug("No settings file at %s; using defaults", candidate)
        return ScriptsSettings()

    payload = _read_yaml(candidate)
    try:
        settings = ScriptsSettings.model_validate(payload)
    except ValidationError as exc:
        raise SettingsError(f"Settings file {candidate} is invalid: {exc}") from exc
    LOGGER.debug("Loaded settings from %s", candidate)
    return settings
