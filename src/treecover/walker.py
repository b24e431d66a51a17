"""Walk a source tree and aggregate the coverage of every tested package"""

import logging
import os
import pathlib
import typing

from . import context, dirfilter, executor, log, metrics, profile, progress

logger = logging.getLogger(__name__)


class AggregationError(Exception):
    """The walk was aborted, no output was written"""


class WalkingError(AggregationError):
    def __init__(self, root: pathlib.Path, cause: Exception) -> None:
        super().__init__(f"could not walk working directory '{root}': {cause}")
        self.root = root
        self.cause = cause


class GoTestError(AggregationError):
    def __init__(self, directory: str, returncode: int, output: str) -> None:
        super().__init__(
            f"error from go test in '{directory}': exit status {returncode}\n"
            f"output: {output}"
        )
        self.directory = directory
        self.returncode = returncode
        self.output = output


class ExecutionError(AggregationError):
    def __init__(self, directory: str, cause: Exception) -> None:
        super().__init__(f"could not run go test in '{directory}': {cause}")
        self.directory = directory
        self.cause = cause


def iter_nodes(
    ctx: context.CoverageContext,
) -> typing.Iterator[tuple[dirfilter.TraversalNode, dirfilter.DirClass]]:
    """Yield every visited directory with its classification

    Depth-first, pre-order, entries in lexical order. Ignored directories
    are yielded but their subtrees are pruned.
    """

    def onerror(err: OSError) -> None:
        raise WalkingError(ctx.root, err) from err

    for dirpath, dirnames, _ in os.walk(ctx.root, onerror=onerror):
        dirnames.sort()
        node = dirfilter.TraversalNode(
            path=pathlib.Path(dirpath), rel=ctx.relative(dirpath)
        )
        try:
            dirclass = dirfilter.classify(node, ctx.ignores)
        except OSError as err:
            raise WalkingError(ctx.root, err) from err
        if dirclass == dirfilter.DirClass.IGNORED:
            dirnames.clear()
        yield node, dirclass


def walk(ctx: context.CoverageContext) -> profile.MergedProfile:
    """Run the tests of every eligible directory and merge their profiles

    Raises :exc:`AggregationError` on the first failure.
    """
    logger.debug("working dir: %s", ctx.root)
    merged = profile.MergedProfile(ctx.cover_mode.value)
    for node, dirclass in progress.progress(iter_nodes(ctx), desc="directories"):
        if dirclass == dirfilter.DirClass.IGNORED:
            logger.debug("ignoring dir: %s", node.rel)
            continue
        if dirclass == dirfilter.DirClass.SKIP_NO_TESTS:
            logger.debug("No Go test files in dir: %s, skipping", node.rel)
            continue

        logger.info("processing dir: %s", node.rel)
        with log.directory_ctxvar_context(node.rel):
            outcome = executor.run_tests(ctx=ctx, node=node)
        match outcome:
            case executor.Success(fragment=fragment):
                merged.append(fragment)
            case executor.TestFailure(returncode=returncode, output=output):
                raise GoTestError(node.rel, returncode, output)
            case executor.TransientError(cause=cause):
                raise ExecutionError(node.rel, cause) from cause
    return merged


def aggregate(ctx: context.CoverageContext) -> pathlib.Path:
    """Walk the tree and write the merged profile to the output file"""
    merged = walk(ctx)
    merged.write(ctx.output_file)
    logger.info(
        "wrote coverage for %d packages to %s", len(merged), ctx.output_file.name
    )
    metrics.summarize(ctx, "coverage:")
    return ctx.output_file
