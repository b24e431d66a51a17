"""Classify directories visited by the tree walker"""

import dataclasses
import enum
import logging
import os
import pathlib
import typing

logger = logging.getLogger(__name__)

TEST_FILE_SUFFIX = "_test.go"


class DirClass(enum.Enum):
    IGNORED = "ignored"
    SKIP_NO_TESTS = "skip-no-tests"
    ELIGIBLE = "eligible"


class IgnoreSet:
    """Immutable set of root-relative directory paths to prune

    Membership is exact string equality against the normalized relative
    path: ``build/output`` matches only that nested directory, not every
    directory named ``output``.
    """

    def __init__(self, paths: typing.Iterable[str] = ()) -> None:
        stripped = (p.strip() for p in paths)
        self._paths = frozenset(os.path.normpath(p) for p in stripped if p)

    def __contains__(self, rel: object) -> bool:
        if not isinstance(rel, str):
            return False
        return os.path.normpath(rel) in self._paths

    def __iter__(self) -> typing.Iterator[str]:
        return iter(sorted(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IgnoreSet):
            return self._paths == other._paths
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._paths)

    def __repr__(self) -> str:
        return f"IgnoreSet({sorted(self._paths)!r})"


def parse_ignores(value: str) -> IgnoreSet:
    """Build an IgnoreSet from a comma separated list"""
    return IgnoreSet(value.split(","))


@dataclasses.dataclass(frozen=True)
class TraversalNode:
    path: pathlib.Path
    """Absolute path of the directory"""

    rel: str
    """Path relative to the traversal root, ``.`` for the root"""


def has_test_files(path: pathlib.Path) -> bool:
    """Does the directory contain at least one Go test file?"""
    with os.scandir(path) as it:
        for entry in it:
            if entry.name.endswith(TEST_FILE_SUFFIX) and entry.is_file():
                return True
    return False


def classify(node: TraversalNode, ignores: IgnoreSet) -> DirClass:
    if node.rel in ignores:
        return DirClass.IGNORED
    if not has_test_files(node.path):
        return DirClass.SKIP_NO_TESTS
    return DirClass.ELIGIBLE
