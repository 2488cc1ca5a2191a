# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for the packaging scripts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test inside an isolated working directory."""

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_manifest(workdir: Path) -> Callable[..., Path]:
    def _write(name: str = "pkg", version: str = "1.2.3", **extra: object) -> Path:
        path = workdir / "package.json"
        path.write_text(json.dumps({"name": name, "version": version, **extra}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def tools_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend every executable exists so mocked commands are not rejected."""

    monkeypatch.setattr(
        "pkgscripts.commands.base.shutil.which", lambda tool: f"/usr/bin/{tool}"
    )
