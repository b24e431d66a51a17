#!/usr/bin/env python3

import logging
import pathlib

import click

from . import clickext, context, dirfilter, log, profile, settings, walker

logger = logging.getLogger(__name__)


@click.command(
    help="""
treecover runs coverage tests on a package and all its sub-packages. The
coverage profile is output as a single file called 'treecover.coverprofile'
for use by tools such as goveralls.
"""
)
@click.version_option(package_name="treecover")
@click.option(
    "--covermode",
    type=clickext.CoverModeType(),
    default=None,
    help="Mode to run when testing files  [default: count]",
)
@click.option(
    "--ignore",
    type=clickext.IgnoreSetType(),
    default=None,
    help=f"Comma separated list of directory names to ignore  [default: {context.DEFAULT_IGNORES}]",
)
@click.option(
    "--short/--no-short",
    default=None,
    help="Tell long-running tests to shorten their run time",
)
@click.option(
    "-v",
    "--verbose",
    default=False,
    is_flag=True,
    help="report more detail to the console",
)
@click.option(
    "--log-file",
    type=clickext.ClickPath(),
    help="save detailed report of actions to file",
)
@click.option(
    "--error-log-file",
    type=clickext.ClickPath(),
    help="save error messages to a file",
)
@click.option(
    "--settings-file",
    default=settings.DEFAULT_SETTINGS_FILE,
    type=clickext.ClickPath(),
    help="location of the settings file",
    show_default=True,
)
@click.option(
    "--go",
    "go_cmd",
    default=None,
    help="go binary used to run the tests  [default: go]",
)
@click.option(
    "--gopath",
    envvar="GOPATH",
    default=None,
    help="Go workspace, must not be empty or '.' when set",
)
def main(
    covermode: context.CoverMode | None,
    ignore: dirfilter.IgnoreSet | None,
    short: bool | None,
    verbose: bool,
    log_file: pathlib.Path | None,
    error_log_file: pathlib.Path | None,
    settings_file: pathlib.Path,
    go_cmd: str | None,
    gopath: str | None,
) -> None:
    _setup_logging(verbose, log_file, error_log_file)

    try:
        if gopath is not None:
            logger.debug("GOPATH: %s", context.validate_gopath(gopath))
        wkctx = context.CoverageContext.from_settings(
            root=pathlib.Path.cwd(),
            active_settings=settings.load(settings_file),
            cover_mode=covermode,
            ignores=ignore,
            short=short,
            go_cmd=go_cmd,
        )
    except (ValueError, TypeError, RuntimeError) as err:
        logger.error(str(err))
        raise SystemExit(1) from err

    logger.debug(f"cover mode: {wkctx.cover_mode.value}")
    logger.debug(f"ignored dirs: {', '.join(wkctx.ignores)}")
    logger.debug(f"short tests: {wkctx.short}")

    try:
        walker.aggregate(wkctx)
    except (walker.AggregationError, profile.OutputError) as err:
        logger.error(f"\n{err}")
        raise SystemExit(1) from err


def _setup_logging(
    verbose: bool,
    log_file: pathlib.Path | None,
    error_log_file: pathlib.Path | None,
) -> None:
    logging.setLogRecordFactory(log.DirectoryLogRecord)
    # Set the overall logger level to debug and allow the handlers to filter
    # messages at their own level.
    logging.getLogger().setLevel(logging.DEBUG)
    # Configure a stream handler for console messages at the requested verbosity
    # level.
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    stream_formatter = logging.Formatter(
        log.VERBOSE_LOG_FMT if verbose else log.TERSE_LOG_FMT
    )
    stream_handler.setFormatter(stream_formatter)
    logging.getLogger().addHandler(stream_handler)
    # If we're given an error log file, configure a file handler for all error
    # messages to make them easier to find without sifting through the full
    # debug log.
    if error_log_file:
        error_handler = logging.FileHandler(error_log_file)
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter(log.FILE_LOG_FMT))
        logging.getLogger().addHandler(error_handler)
    if log_file:
        # Always log to the file at debug level
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log.FILE_LOG_FMT))
        logging.getLogger().addHandler(file_handler)
        logger.info("logging debug information to %s", log_file)
    if error_log_file:
        logger.info("logging errors to %s", error_log_file)


def invoke_main() -> None:
    # Wrapper for the click main command that ensures any exceptions
    # are logged so that CI outputs include the traceback.
    try:
        main(auto_envvar_prefix="TREECOVER")
    except Exception as err:
        logger.exception(err)
        raise


if __name__ == "__main__":
    invoke_main()
