"""Run ``go test`` with coverage for one package directory"""

import dataclasses
import logging
import pathlib
import shlex
import subprocess
import tempfile

from . import context, dirfilter, external_commands, metrics

logger = logging.getLogger(__name__)

PROFILE_FILENAME = "profile.coverprofile"
SCRATCH_PREFIX = "treecover"


@dataclasses.dataclass(frozen=True)
class Success:
    fragment: str
    """Raw coverage profile written by the test command"""


@dataclasses.dataclass(frozen=True)
class TestFailure:
    returncode: int
    output: str
    """Combined stdout and stderr of the test command"""

    __test__ = False


@dataclasses.dataclass(frozen=True)
class TransientError:
    cause: OSError | UnicodeDecodeError


ExecutionOutcome = Success | TestFailure | TransientError


def go_test_cmd(ctx: context.CoverageContext, outputdir: pathlib.Path) -> list[str]:
    cmd = list(ctx.test_command)
    if ctx.short:
        cmd.append("-short")
    cmd.extend(
        [
            f"-covermode={ctx.cover_mode.value}",
            f"-coverprofile={PROFILE_FILENAME}",
            f"-outputdir={outputdir}",
        ]
    )
    return cmd


@metrics.timeit(description="run tests with coverage")
def run_tests(
    *,
    ctx: context.CoverageContext,
    node: dirfilter.TraversalNode,
) -> ExecutionOutcome:
    """Run the tests of one package and collect its coverage profile

    The command runs with the package directory as its working directory.
    The scratch directory holding the profile is removed before returning,
    whatever the outcome.
    """
    try:
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch:
            outputdir = pathlib.Path(scratch)
            cmd = go_test_cmd(ctx, outputdir)
            logger.debug("processing: %s", shlex.join(cmd))
            try:
                external_commands.run(cmd, cwd=node.path)
            except subprocess.CalledProcessError as err:
                return TestFailure(returncode=err.returncode, output=err.output or "")
            fragment = (outputdir / PROFILE_FILENAME).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        logger.debug("environment error: %s", err)
        return TransientError(cause=err)
    return Success(fragment=fragment)
