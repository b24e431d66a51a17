import functools
import logging
import time
import typing
from datetime import timedelta

from . import context, dirfilter


def timeit(description: str) -> typing.Callable:
    def timeit_decorator(func: typing.Callable) -> typing.Callable:
        @functools.wraps(func)
        def wrapper_timeit(
            *,
            ctx: context.CoverageContext,
            node: dirfilter.TraversalNode,
            **kwargs: typing.Any,
        ) -> typing.Any:
            start = time.perf_counter()
            try:
                return func(ctx=ctx, node=node, **kwargs)
            finally:
                runtime = time.perf_counter() - start
                # get the logger for the module from which this function was called
                logger = logging.getLogger(func.__module__)
                logger.debug(
                    f"{func.__name__} took {timedelta(seconds=runtime)} to {description}"
                )
                ctx.time_store[node.rel] = ctx.time_store.get(node.rel, 0) + runtime

        return wrapper_timeit

    return timeit_decorator


def summarize(ctx: context.CoverageContext, prefix: str) -> None:
    logger = logging.getLogger(__name__)
    total_time = sum(ctx.time_store.values())
    logger.info(
        f"{prefix} {len(ctx.time_store)} packages took {timedelta(seconds=total_time)} total"
    )
    for rel, time_taken in ctx.time_store.items():
        logger.debug(f"{prefix} {rel} took {timedelta(seconds=time_taken)}")
