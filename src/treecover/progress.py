import sys
import typing

import tqdm as _tqdm

__all__ = ("progress",)


def progress(
    it: typing.Iterable[typing.Any],
    *,
    unit: str = "dir",
    disable: bool | None = None,
    **kwargs: typing.Any,
) -> typing.Iterator[typing.Any]:
    """tqdm progress counter

    The total is unknown while the tree is walked, so tqdm shows a running
    count. The counter is hidden when stderr is not a terminal.
    """
    if disable is None:
        disable = not sys.stderr.isatty()
    if not sys.stdout.isatty():
        # wider progress bar in CI
        kwargs.setdefault("ncols", 78)
    yield from _tqdm.tqdm(it, unit=unit, disable=disable, **kwargs)
