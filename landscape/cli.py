"""CLI entrypoint and logging/argument utilities for the landscape builder.

This module implements the command-line interface of the project. It is a
thin orchestration layer: argument parsing, logging setup and translation of
the build outcome into an exit status. All the work is delegated to
:mod:`landscape.pipeline.builder` and the loaders.

Commands
--------
``landscape build``
    Build the landscape website from the data, settings and logos sources.
``landscape validate data`` / ``landscape validate settings``
    Load and validate a single document without building anything.

Errors are reported through the centralized taxonomy of
:mod:`landscape.exceptions`: any ``AppError`` is logged once, at ``ERROR``
level, and the process exits with status 1.

Examples
--------
>>> # In shell
>>> landscape build --data-file landscape.yml --settings-file settings.yml \\
...     --logos-path hosted_logos --output-dir build
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import aiohttp

from landscape.config import LOG_DIR, LOG_FILENAME_BUILD, LOG_FORMAT, default_cache_dir
from landscape.exceptions import AppError
from landscape.pipeline.builder import BuildArgs, build
from landscape.pipeline.loaders import (
    DocumentSource,
    LogosSource,
    get_landscape_data,
    get_landscape_settings,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", enable_file: bool = True) -> None:
    r"""Configure logging output for the CLI.

    Sets up a console handler (always) and, optionally, a file handler
    writing to ``LOG_DIR / LOG_FILENAME_BUILD`` with ``LOG_FORMAT``. A file
    handler that cannot be created is skipped so the command still runs.

    Parameters
    ----------
    level : str, optional
        The logging level to use, e.g. "DEBUG", "INFO", "WARNING".
        Defaults to "INFO".
    enable_file : bool, optional
        Whether to add the file handler. Defaults to True.

    Notes
    -----
    All handlers of the root logger are removed and replaced.

    Examples
    --------
    >>> from landscape.cli import configure_logging
    >>> configure_logging("DEBUG", enable_file=False)
    """
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if enable_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(
                0, logging.FileHandler(LOG_DIR / LOG_FILENAME_BUILD, mode="a")
            )
        except OSError:
            logging.getLogger(__name__).debug("File logging disabled: %s", LOG_DIR)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def _add_document_source(
    parser: argparse.ArgumentParser, name: str, required: bool = True
) -> None:
    group = parser.add_mutually_exclusive_group(required=required)
    group.add_argument(f"--{name}-file", type=Path, help=f"{name} file (local)")
    group.add_argument(f"--{name}-url", type=str, help=f"{name} file url")


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the ``landscape`` command."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level", type=str, default=os.environ.get("LOG_LEVEL", "INFO")
    )
    parser = argparse.ArgumentParser(
        prog="landscape", description="Landscape website builder."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    build_cmd = commands.add_parser(
        "build", parents=[common], help="Build landscape website"
    )
    _add_document_source(build_cmd, "data")
    _add_document_source(build_cmd, "settings")
    logos = build_cmd.add_mutually_exclusive_group(required=True)
    logos.add_argument("--logos-path", type=Path, help="Local path where the logos are stored")
    logos.add_argument("--logos-url", type=str, help="Base url where the logos are hosted")
    build_cmd.add_argument(
        "--cache-dir", type=Path, default=None, help="Cache directory"
    )
    build_cmd.add_argument(
        "--output-dir", type=Path, required=True, help="Output directory"
    )

    validate_cmd = commands.add_parser("validate", help="Validate landscape files")
    targets = validate_cmd.add_subparsers(dest="target", required=True)
    _add_document_source(
        targets.add_parser("data", parents=[common], help="Validate landscape data"),
        "data",
    )
    _add_document_source(
        targets.add_parser(
            "settings", parents=[common], help="Validate landscape settings"
        ),
        "settings",
    )
    return parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line.

    Raises
    ------
    SystemExit
        On invalid arguments (argparse behaviour).
    """
    return build_parser().parse_args(argv)


def build_args_from(ns: argparse.Namespace) -> BuildArgs:
    """Translate parsed ``build`` arguments into ``BuildArgs``."""
    return BuildArgs(
        data_source=DocumentSource(file=ns.data_file, url=ns.data_url),
        settings_source=DocumentSource(file=ns.settings_file, url=ns.settings_url),
        logos_source=LogosSource(path=ns.logos_path, url=ns.logos_url),
        cache_dir=ns.cache_dir or default_cache_dir(),
        output_dir=ns.output_dir,
    )


async def validate(ns: argparse.Namespace) -> None:
    """Load the document selected by ``validate`` and report it is valid."""
    async with aiohttp.ClientSession() as session:
        if ns.target == "data":
            source = DocumentSource(file=ns.data_file, url=ns.data_url)
            await get_landscape_data(source, session)
        else:
            source = DocumentSource(file=ns.settings_file, url=ns.settings_url)
            await get_landscape_settings(source, session)
    logger.info("Landscape %s is valid: %s", ns.target, source.describe())


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit status.

    Returns
    -------
    int
        0 on success, 1 when the command failed.
    """
    ns = parse_arguments(argv)
    configure_logging(ns.log_level, enable_file=not os.environ.get("DISABLE_FILE_LOGS"))
    try:
        if ns.command == "build":
            asyncio.run(build(build_args_from(ns)))
        else:
            asyncio.run(validate(ns))
    except AppError as error:
        logger.error("%s", error)
        return 1
    return 0


def run() -> None:
    """Console script entrypoint."""
    sys.exit(main())


if __name__ == "__main__":
    run()
