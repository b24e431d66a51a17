import contextlib
import contextvars
import logging
import typing

TERSE_LOG_FMT = "%(message)s"
VERBOSE_LOG_FMT = "%(levelname)s:%(name)s:%(lineno)d: %(message)s"
FILE_LOG_FMT = "%(asctime)s %(levelname)s:%(name)s:%(lineno)d: %(message)s"

directory_ctxvar: contextvars.ContextVar[str] = contextvars.ContextVar("directory")


@contextlib.contextmanager
def directory_ctxvar_context(rel: str) -> typing.Generator[None, None, None]:
    """Context manager for directory_ctxvar"""
    token = directory_ctxvar.set(rel)
    try:
        yield None
    finally:
        directory_ctxvar.reset(token)


def get_log_prefix() -> str | None:
    """Prefix for the directory being processed, if any"""
    try:
        return directory_ctxvar.get()
    except LookupError:
        return None


class DirectoryLogRecord(logging.LogRecord):
    """Logger record factory to add the package directory from context var

    The class prepends f"{rel}: " to every log message if-and-only-if
    ``directory_ctxvar`` is set for the current context.

    ::
        with directory_ctxvar_context(node.rel):
            run_tests(ctx, node)
    """

    def getMessage(self) -> str:  # noqa: N802
        msg = super().getMessage()
        prefix = get_log_prefix()
        if prefix is None:
            return msg
        return f"{prefix}: {msg}"
