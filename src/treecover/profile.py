"""Merge Go coverage profiles

A profile starts with a ``mode: <name>`` header followed by lines of the
form ``<file>:<start>,<end> <numStatements> <count>``. Fragments from
several packages are merged by dropping their headers, concatenating the
bodies in the order they were collected and prepending one canonical
header.
"""

import logging
import os
import pathlib
import string
import tempfile

logger = logging.getLogger(__name__)

MODE_PREFIX = "mode: "
OUTPUT_FILE_MODE = 0o644


class OutputError(Exception):
    """The merged profile could not be written"""

    def __init__(self, path: pathlib.Path, cause: Exception) -> None:
        super().__init__(f"error writing to: {path}, {cause}")
        self.path = path
        self.cause = cause


def is_mode_header(line: str) -> bool:
    """Is ``line`` exactly ``mode: <lowercase letters>`` plus newline?"""
    if not line.startswith(MODE_PREFIX) or not line.endswith("\n"):
        return False
    name = line[len(MODE_PREFIX) : -1]
    return bool(name) and all(c in string.ascii_lowercase for c in name)


def strip_mode_headers(text: str) -> str:
    """Remove every mode header line, wherever it occurs"""
    kept: list[str] = []
    start = 0
    while start < len(text):
        end = text.find("\n", start)
        end = len(text) if end == -1 else end + 1
        line = text[start:end]
        if not is_mode_header(line):
            kept.append(line)
        start = end
    return "".join(kept)


def header(mode: str) -> str:
    return f"{MODE_PREFIX}{mode}\n"


class MergedProfile:
    """Accumulates fragment bodies under a single header"""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        self._bodies: list[str] = []

    def append(self, fragment: str) -> None:
        body = strip_mode_headers(fragment)
        if body and not body.endswith("\n"):
            # keep the last line from fusing with the next fragment
            body += "\n"
        self._bodies.append(body)

    def __len__(self) -> int:
        return len(self._bodies)

    def render(self) -> str:
        return header(self.mode) + "".join(self._bodies)

    def write(self, path: pathlib.Path) -> pathlib.Path:
        write_profile(path, self.render())
        return path


def merge(fragments: list[str], mode: str) -> str:
    """Merge raw fragments into one normalized profile"""
    profile = MergedProfile(mode)
    for fragment in fragments:
        profile.append(fragment)
    return profile.render()


def write_profile(path: pathlib.Path, text: str) -> None:
    """Atomically replace ``path`` with ``text``

    The content goes to a temporary file in the same directory, which is
    renamed over the target. An existing file is left untouched when any
    step fails.
    """
    path = pathlib.Path(path)
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp_name, OUTPUT_FILE_MODE)
        os.replace(tmp_name, path)
    except OSError as err:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputError(path, err) from err
    logger.debug("wrote %d bytes to %s", len(text.encode("utf-8")), path)
