import json
import logging
import pathlib
import sys
import typing

import pytest
from click.testing import CliRunner

from treecover import context

TESTDATA_PATH = pathlib.Path(__file__).parent.absolute() / "testdata"
FAKE_GO = TESTDATA_PATH / "fake_go.py"

TreeSpec = dict[str, typing.Any]


def make_tree(root: pathlib.Path, spec: TreeSpec) -> pathlib.Path:
    """Create files (str values) and directories (dict values) under root"""
    root.mkdir(parents=True, exist_ok=True)
    for name, value in spec.items():
        if isinstance(value, dict):
            make_tree(root / name, value)
        else:
            (root / name).write_text(value)
    return root


def read_go_log(filename: pathlib.Path) -> list[dict[str, typing.Any]]:
    if not filename.exists():
        return []
    return [json.loads(line) for line in filename.read_text().splitlines()]


GO_SOURCE = "package pkg\n\nfunc F() int {\n\treturn 1\n}\n"
GO_TEST = "package pkg\n\nimport \"testing\"\n\nfunc TestF(t *testing.T) {}\n"

# a: tested, b: tested, nodoc: sources only with a tested child,
# vendor: tested but ignored by default
SAMPLE_TREE: TreeSpec = {
    "go.mod": "module example.com/tree\n",
    "a": {"a.go": GO_SOURCE, "a_test.go": GO_TEST},
    "b": {"b.go": GO_SOURCE, "b_test.go": GO_TEST},
    "nodoc": {
        "nodoc.go": GO_SOURCE,
        "inner": {"inner.go": GO_SOURCE, "inner_test.go": GO_TEST},
    },
    "vendor": {
        "dep": {"dep.go": GO_SOURCE, "dep_test.go": GO_TEST},
    },
}


@pytest.fixture
def testdata_path() -> typing.Generator[pathlib.Path, None, None]:
    yield TESTDATA_PATH


@pytest.fixture
def fake_go_cmd() -> list[str]:
    return [sys.executable, str(FAKE_GO), "test"]


@pytest.fixture
def go_log(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> pathlib.Path:
    filename = tmp_path / "go-invocations.log"
    monkeypatch.setenv("FAKE_GO_LOG", str(filename))
    return filename


@pytest.fixture
def sample_tree(tmp_path: pathlib.Path) -> pathlib.Path:
    return make_tree(tmp_path / "tree", SAMPLE_TREE)


@pytest.fixture
def tree_context(
    sample_tree: pathlib.Path, fake_go_cmd: list[str], go_log: pathlib.Path
) -> context.CoverageContext:
    return context.CoverageContext(
        root=sample_tree,
        cover_mode="count",
        test_command=fake_go_cmd,
    )


@pytest.fixture(autouse=True)
def restore_logging() -> typing.Generator[None, None, None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    factory = logging.getLogRecordFactory()
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.setLogRecordFactory(factory)


@pytest.fixture
def cli_runner(
    tmp_path: pathlib.Path,
) -> typing.Generator[CliRunner, None, None]:
    """Click CLI runner"""
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path):
        yield runner
