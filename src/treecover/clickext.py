import os
import pathlib

import click

from . import context, dirfilter


class ClickPath(click.Path):
    """ClickPath that returns pathlib.Path"""

    def convert(
        self,
        value: str | os.PathLike[str],
        param: click.core.Parameter | None,
        ctx: click.core.Context | None,
    ) -> pathlib.Path:
        path = super().convert(value=value, param=param, ctx=ctx)
        if isinstance(path, bytes):
            return pathlib.Path(os.fsdecode(path))
        return pathlib.Path(path)


class CoverModeType(click.Choice):
    """Cover mode type that returns a CoverMode"""

    name = "covermode"

    def __init__(self) -> None:
        super().__init__([m.value for m in context.CoverMode])

    def convert(
        self,
        value: str | context.CoverMode,
        param: click.core.Parameter | None,
        ctx: click.core.Context | None,
    ) -> context.CoverMode:
        if isinstance(value, context.CoverMode):
            return value
        try:
            return context.CoverMode(value)
        except ValueError:
            self.fail(
                f"invalid covermode '{value}', allowed values are {[m.value for m in context.CoverMode]}",
                param,
                ctx,
            )


class IgnoreSetType(click.ParamType):
    """Comma separated directory list that returns an IgnoreSet"""

    name = "dir1,dir2,..."

    def convert(
        self,
        value: str | dirfilter.IgnoreSet,
        param: click.core.Parameter | None,
        ctx: click.core.Context | None,
    ) -> dirfilter.IgnoreSet:
        if isinstance(value, dirfilter.IgnoreSet):
            return value
        return dirfilter.parse_ignores(value)
