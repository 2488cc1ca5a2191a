from __future__ import annotations

# SPDX-License-Identifier: MIT
import os
import shutil
import subprocess
from pathlib import Path
from unittest import mock

import pytest

from pkgscripts.commands.base import CommandError, SubprocessError
from pkgscripts.commands.setup import remove_build_inputs, replace_script, setup
from pkgscripts.manifest import ManifestError
from pkgscripts.runtime import EXIT_CODES
from pkgscripts.settings import SetupSettings

ARTIFACT = b"\x7fELF compiled graph tool"


@pytest.fixture
def build_tree(workdir: Path) -> Path:
    (workdir / "main.sh").write_text("g++ main.cxx\n", encoding="utf-8")
    (workdir / "main.cxx").write_text("int main() {}\n", encoding="utf-8")
    (workdir / "options.hxx").write_text("#pragma once\n", encoding="utf-8")
    inc = workdir / "inc"
    inc.mkdir()
    (inc / "io.hxx").write_text("#pragma once\n", encoding="utf-8")
    (workdir / "package.json").write_text(
        '{"name": "graph-tool", "version": "2.0.1"}', encoding="utf-8"
    )
    return workdir


@pytest.fixture
def fake_build(build_tree: Path, tools_on_path):
    """Simulate a build script that produces ``a.out``."""

    def _run(args, **kwargs):
        (build_tree / "a.out").write_bytes(ARTIFACT)
        return subprocess.CompletedProcess(args, 0)

    with mock.patch("pkgscripts.commands.base.subprocess.run", side_effect=_run) as mocked:
        yield mocked


def _assert_cleaned(root: Path) -> None:
    assert not (root / "inc").exists()
    assert list(root.glob("*.hxx")) == []
    assert list(root.glob("*.cxx")) == []


def test_setup_builds_cleans_and_installs(build_tree: Path, fake_build) -> None:
    environ = {"PATH": "/usr/bin", "RUN": "1"}

    assert setup(settings=SetupSettings(), environ=environ) == 0

    fake_build.assert_called_once()
    args, kwargs = fake_build.call_args
    assert args[0] == ["bash", "main.sh"]
    assert kwargs["env"]["DOWNLOAD"] == "0"
    assert kwargs["env"]["RUN"] == "0"
    assert kwargs["env"]["PATH"] == "/usr/bin"
    assert "VERSION" not in kwargs["env"]
    assert environ == {"PATH": "/usr/bin", "RUN": "1"}

    _assert_cleaned(build_tree)
    assert (build_tree / "main.sh").read_bytes() == ARTIFACT
    assert not (build_tree / "a.out").exists()
    assert (build_tree / "package.json").exists()


def test_setup_propagates_manifest_version(build_tree: Path, fake_build) -> None:
    setup(settings=SetupSettings(), environ={}, propagate_version=True)

    assert fake_build.call_args.kwargs["env"]["VERSION"] == "2.0.1"


def test_setup_version_flag_from_settings(build_tree: Path, fake_build) -> None:
    setup(settings=SetupSettings(propagate_version=True), environ={})
    assert fake_build.call_args.kwargs["env"]["VERSION"] == "2.0.1"

    (build_tree / "main.sh").write_text("rebuild\n", encoding="utf-8")
    setup(settings=SetupSettings(propagate_version=True), environ={}, propagate_version=False)
    assert "VERSION" not in fake_build.call_args.kwargs["env"]


def test_setup_version_requires_manifest(build_tree: Path, fake_build) -> None:
    (build_tree / "package.json").unlink()

    with pytest.raises(ManifestError):
        setup(settings=SetupSettings(), environ={}, propagate_version=True)
    fake_build.assert_not_called()


def test_build_failure_skips_cleanup(build_tree: Path, tools_on_path) -> None:
    with mock.patch("pkgscripts.commands.base.subprocess.run") as mocked:
        mocked.return_value = subprocess.CompletedProcess(["bash", "main.sh"], 2)
        with pytest.raises(SubprocessError) as excinfo:
            setup(settings=SetupSettings(), environ={})

    assert excinfo.value.exit_code == 2
    mocked.assert_called_once()
    assert (build_tree / "inc" / "io.hxx").exists()
    assert (build_tree / "main.cxx").exists()
    assert (build_tree / "main.sh").read_text(encoding="utf-8") == "g++ main.cxx\n"


def test_missing_artifact_leaves_script_after_cleanup(build_tree: Path, tools_on_path) -> None:
    with mock.patch("pkgscripts.commands.base.subprocess.run") as mocked:
        mocked.return_value = subprocess.CompletedProcess(["bash", "main.sh"], 0)
        with pytest.raises(CommandError) as excinfo:
            setup(settings=SetupSettings(), environ={})

    assert excinfo.value.exit_code == EXIT_CODES["io_failure"]
    _assert_cleaned(build_tree)
    assert (build_tree / "main.sh").read_text(encoding="utf-8") == "g++ main.cxx\n"


def test_remove_build_inputs_is_best_effort(tmp_path: Path) -> None:
    (tmp_path / "keep.txt").write_text("x", encoding="utf-8")
    (tmp_path / "a.cxx").write_text("x", encoding="utf-8")

    removed = remove_build_inputs(["inc", "*.hxx", "*.cxx"], root=tmp_path)

    assert removed == [tmp_path / "a.cxx"]
    assert (tmp_path / "keep.txt").exists()
    assert remove_build_inputs(["inc", "*.cxx"], root=tmp_path) == []


def test_replace_script_overwrites_target(tmp_path: Path) -> None:
    artifact = tmp_path / "a.out"
    script = tmp_path / "main.sh"
    artifact.write_bytes(ARTIFACT)
    script.write_text("old", encoding="utf-8")

    replace_script(artifact, script)

    assert script.read_bytes() == ARTIFACT
    assert not artifact.exists()


@pytest.mark.skipif(shutil.which("bash") is None, reason="bash is required")
def test_setup_runs_real_build_script(workdir: Path) -> None:
    (workdir / "main.sh").write_text(
        'if [ "$DOWNLOAD" != 0 ] || [ "$RUN" != 0 ]; then exit 3; fi\n'
        'printf "built %s" "$VERSION" > a.out\n',
        encoding="utf-8",
    )
    (workdir / "package.json").write_text('{"name": "x", "version": "9.9.9"}', encoding="utf-8")
    (workdir / "inc").mkdir()
    (workdir / "main.cxx").write_text("int main() {}\n", encoding="utf-8")

    assert setup(settings=SetupSettings(), environ=os.environ, propagate_version=True) == 0

    assert (workdir / "main.sh").read_text(encoding="utf-8") == "built 9.9.9"
    _assert_cleaned(workdir)


def test_cleanup_failure_aborts_with_io_failure(build_tree: Path, fake_build, monkeypatch) -> None:
    def _deny(path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(os, "rmdir", _deny)

    with pytest.raises(CommandError) as excinfo:
        setup(settings=SetupSettings(), environ={})
    monkeypatch.undo()

    assert excinfo.value.exit_code == EXIT_CODES["io_failure"]
    assert "inc" in str(excinfo.value)
    assert (build_tree / "a.out").exists()
    assert (build_tree / "main.sh").read_text(encoding="utf-8") == "g++ main.cxx\n"


def test_remove_build_inputs_skips_hidden_names(tmp_path: Path) -> None:
    (tmp_path / ".cache.hxx").write_text("x", encoding="utf-8")
    (tmp_path / "graph.hxx").write_text("x", encoding="utf-8")

    removed = remove_build_inputs(["*.hxx"], root=tmp_path)

    assert removed == [tmp_path / "graph.hxx"]
    assert (tmp_path / ".cache.hxx").exists()
