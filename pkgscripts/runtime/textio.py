"""Text file helpers with explicit line-ending handling."""
from __future__ import annotations

# SPDX-License-Identifier: MIT
import os
import re
from pathlib import Path

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def read_text(path: str | Path) -> str:
    """Read *path* as UTF-8 and normalise every line ending to ``\\n``."""

    data = Path(path).read_bytes().decode("utf-8")
    return _LINE_BREAK.sub("\n", data)


def write_text(path: str | Path, text: str) -> None:
    """Write *text* to *path* using the host platform's line separator."""

    data = _LINE_BREAK.sub(lambda _: os.linesep, text)
    Path(path).write_bytes(data.encode("utf-8"))
