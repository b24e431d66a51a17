from __future__ import annotations

import collections
import enum
import logging
import os
import pathlib
import typing

from . import dirfilter, settings

logger = logging.getLogger(__name__)

DEFAULT_IGNORES = ".git,vendor"
OUTPUT_FILENAME = "treecover.coverprofile"


class CoverMode(str, enum.Enum):
    """Coverage instrumentation mode passed to ``go test -covermode``"""

    SET = "set"
    COUNT = "count"
    ATOMIC = "atomic"


def validate_gopath(gopath: str) -> str:
    """Return the cleaned GOPATH

    Raises ValueError when the cleaned path is empty or the current
    directory.
    """
    cleaned = os.path.normpath(gopath) if gopath else "."
    if cleaned == ".":
        raise ValueError(f"invalid GOPATH '{cleaned}'")
    return cleaned


class CoverageContext:
    def __init__(
        self,
        root: pathlib.Path,
        cover_mode: CoverMode | str = CoverMode.COUNT,
        ignores: dirfilter.IgnoreSet | typing.Iterable[str] | None = None,
        short: bool = False,
        go_cmd: str = "go",
        test_command: typing.Sequence[str] | None = None,
        output_filename: str = OUTPUT_FILENAME,
    ):
        root = pathlib.Path(root)
        if not root.is_dir():
            raise ValueError(f"invalid root directory '{root}'")
        self.root = root.absolute()
        self.cover_mode = CoverMode(cover_mode)
        if ignores is None:
            ignores = dirfilter.parse_ignores(DEFAULT_IGNORES)
        elif not isinstance(ignores, dirfilter.IgnoreSet):
            ignores = dirfilter.IgnoreSet(ignores)
        self.ignores = ignores
        self.short = short
        if test_command is None:
            test_command = [go_cmd, "test"]
        self.test_command: list[str] = list(test_command)
        self.output_file = self.root / output_filename

        # storing metrics
        self.time_store: dict[str, float] = collections.OrderedDict()

    @classmethod
    def from_settings(
        cls,
        root: pathlib.Path,
        active_settings: settings.SettingsFile,
        *,
        cover_mode: CoverMode | str | None = None,
        ignores: dirfilter.IgnoreSet | None = None,
        short: bool | None = None,
        go_cmd: str | None = None,
    ) -> CoverageContext:
        """Create a context, letting explicit values override the settings file"""
        if ignores is None:
            if active_settings.ignore is not None:
                ignores = dirfilter.IgnoreSet(active_settings.ignore)
            else:
                ignores = dirfilter.parse_ignores(DEFAULT_IGNORES)
        return cls(
            root=root,
            cover_mode=cover_mode or active_settings.covermode,
            ignores=ignores,
            short=active_settings.short if short is None else short,
            go_cmd=go_cmd or active_settings.go,
        )

    def relative(self, path: pathlib.Path | str) -> str:
        """Path of a directory relative to the traversal root"""
        return os.path.relpath(path, self.root)
