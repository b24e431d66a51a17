import logging
import os
import pathlib
import shlex
import subprocess
import typing

from . import log

logger = logging.getLogger(__name__)


def run(
    cmd: typing.Sequence[str],
    *,
    cwd: pathlib.Path | str | None = None,
    extra_environ: dict[str, typing.Any] | None = None,
) -> str:
    """Call the subprocess while logging output

    stdout and stderr are combined. Raises
    :exc:`subprocess.CalledProcessError` with the captured output when the
    command exits non-zero, and :exc:`OSError` when it cannot be started.
    """
    if extra_environ is None:
        extra_environ = {}
    env = os.environ.copy()
    env.update(extra_environ)

    logger.debug(
        "running: %s %s in %s",
        " ".join(f"{k}={shlex.quote(v)}" for k, v in extra_environ.items()),
        " ".join(shlex.quote(str(s)) for s in cmd),
        cwd or ".",
    )
    completed = subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )
    output = (
        completed.stdout.decode("utf-8", errors="replace") if completed.stdout else ""
    )

    # Add directory prefix to continuation lines for greppability
    prefix = log.get_log_prefix()
    formatted_output = None

    if output:
        if prefix:
            # DirectoryLogRecord handles first line, we handle continuation lines
            formatted_output = output.rstrip("\n").replace("\n", f"\n{prefix}: ")
        else:
            formatted_output = output

    if completed.returncode != 0:
        # the caller reports the failure with the captured output
        if formatted_output and prefix:
            output_to_log = f"\n{prefix}: {formatted_output}"
        elif formatted_output:
            output_to_log = f"\n{formatted_output}"
        else:
            output_to_log = ""
        logger.debug(
            "command failed with exit code %d: %s%s",
            completed.returncode,
            shlex.join(str(s) for s in cmd),
            output_to_log,
        )
        raise subprocess.CalledProcessError(completed.returncode, cmd, output)

    if formatted_output:
        logger.debug(formatted_output)

    return output
