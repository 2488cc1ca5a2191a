"""Read access to the project's ``package.json`` manifest."""
from __future__ import annotations

# SPDX-License-Identifier: MIT

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from pkgscripts.commands.base import CommandError
from pkgscripts.runtime import EXIT_CODES, read_text

LOGGER = logging.getLogger(__name__)
DEFAULT_MANIFEST = Path("package.json")


class ManifestError(CommandError):
    """Raised when the manifest is missing, unreadable or malformed."""


class PackageManifest(BaseModel):
    """The subset of ``package.json`` used by the scripts."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    version: str

    @field_validator("name", "version")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("must not be empty")
        return candidate


def load_manifest(path: str | Path = DEFAULT_MANIFEST) -> PackageManifest:
    manifest_path = Path(path)
    try:
        text = read_text(manifest_path)
    except FileNotFoundError as exc:
        raise ManifestError(
            f"Manifest {manifest_path} does not exist", exit_code=EXIT_CODES["missing_resource"]
        ) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(
            f"Unable to read manifest {manifest_path}: {exc}", exit_code=EXIT_CODES["io_failure"]
        ) from exc

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(
            f"Manifest {manifest_path} is not valid JSON: {exc}",
            exit_code=EXIT_CODES["invalid_manifest"],
        ) from exc

    try:
        manifest = PackageManifest.model_validate(payload)
    except ValidationError as exc:
        raise ManifestError(
            f"Manifest {manifest_path} is invalid: {exc}",
            exit_code=EXIT_CODES["invalid_manifest"],
        ) from exc

    LOGGER.debug("Loaded manifest %s (%s %s)", manifest_path, manifest.name, manifest.version)
    return manifest
