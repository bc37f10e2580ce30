"""Main CLI entry point for the docpub command.

This module provides the Typer application that serves as the entry point
for the docpub command-line tool. Global options (verbosity, log directory,
color, config path) are taken by the app callback and shared with the
subcommands through the Typer context.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from docpub import __version__
from docpub.errors import PublishError
from docpub.cli.init_command import InitCommand
from docpub.cli.models import BACKEND_FILESYSTEM, ExitCode, StorageConfig
from docpub.cli.output import OutputHandler
from docpub.cli.publish_command import PublishCommand

app = typer.Typer(
    name="docpub",
    help="""Publish documentation spaces as immutable, content-addressed builds.

QUICK START:
  docpub init "Acme Docs" --content-dir ./docs    # Create site and config
  docpub publish                                  # Publish a new build
  docpub builds                                   # List builds
  docpub revert <build_id>                        # Make an earlier build live
  docpub status                                   # Show the live build""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


class CLIContext:
    """Options shared by every subcommand."""

    def __init__(self, config_path: str, verbosity: int, no_color: bool):
        self.config_path = config_path
        self.verbosity = verbosity
        self.no_color = no_color

    def output(self) -> OutputHandler:
        return OutputHandler(verbosity=self.verbosity, no_color=self.no_color)


LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
STDERR_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"
# Build workers log from their own threads
LOGFILE_FORMAT = "%(asctime)s %(threadName)s %(name)s %(levelname)s: %(message)s"


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATEFMT))
    return handler


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Attach stderr (and optionally file) handlers to the ``docpub`` logger.

    Loggers of third-party libraries and the root logger are not touched.
    With ``logdir`` set, a ``docpub_<timestamp>.log`` file is created there.
    """
    level = LOG_LEVELS.get(max(verbosity, 0), logging.DEBUG)

    app_logger = logging.getLogger("docpub")
    app_logger.setLevel(level)
    app_logger.handlers.clear()
    app_logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level, STDERR_FORMAT))

    if not logdir:
        return

    directory = Path(logdir)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / f"docpub_{datetime.now():%Y%m%d_%H%M%S}.log"
    app_logger.addHandler(
        _handler(logging.FileHandler(log_file, encoding="utf-8"), level, LOGFILE_FORMAT)
    )
    logger.info(f"Writing log file {log_file}")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docpub version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: str = typer.Option(
        InitCommand.DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path of the workspace config file",
        metavar="PATH",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Also write logs to a timestamped file in DIR",
        metavar="DIR",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="0 prints results only, 1 adds progress, 2 adds debug detail",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Print without ANSI colors",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Print the docpub version",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Publish documentation spaces as immutable, content-addressed builds."""
    _configure_logging(verbosity, logdir)
    ctx.obj = CLIContext(config, verbosity, no_color)


@app.command()
def init(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Display name of the new site"),
    content_dir: Optional[str] = typer.Option(
        None,
        "--content-dir",
        help="Directory with a docpub.yaml index to publish from",
        metavar="DIR",
    ),
    backend: str = typer.Option(
        BACKEND_FILESYSTEM,
        "--backend",
        help="Storage backend: filesystem or http",
    ),
    storage_root: str = typer.Option(
        StorageConfig.root,
        "--storage-root",
        help="Root directory of the filesystem backend",
        metavar="DIR",
    ),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="Public base URL of published objects",
        metavar="URL",
    ),
    owner: str = typer.Option(
        InitCommand.DEFAULT_OWNER_ID,
        "--owner",
        help="Organization/project owning the site",
    ),
    actor: str = typer.Option(
        InitCommand.DEFAULT_ACTOR_ID,
        "--actor",
        help="Actor recorded on builds requested from this workspace",
    ),
) -> None:
    """Create a site and write the workspace config."""
    options: CLIContext = ctx.obj
    output = options.output()

    try:
        output.info(f"Initializing workspace in {options.config_path}...")
        site = InitCommand(options.config_path).run(
            name,
            owner_id=owner,
            actor_id=actor,
            backend=backend,
            storage_root=storage_root,
            base_url=base_url,
            content_dir=content_dir,
        )
        output.success(f"Created site '{site.name}' ({site.id})")
        output.print(f"  Primary host: {site.primary_host}")
        output.print(f"  Config: {options.config_path}")
        raise typer.Exit(ExitCode.SUCCESS)

    except typer.Exit:
        raise

    except PublishError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except Exception as e:
        logger.exception("Unexpected error during init")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


@app.command()
def publish(ctx: typer.Context) -> None:
    """Publish the site's selected spaces as a new build."""
    options: CLIContext = ctx.obj
    command = PublishCommand(options.output(), options.config_path)
    raise typer.Exit(command.publish())


@app.command()
def revert(
    ctx: typer.Context,
    build_id: str = typer.Argument(..., help="Successful publish build to make live again"),
) -> None:
    """Make an earlier successful publish live again without re-rendering."""
    options: CLIContext = ctx.obj
    command = PublishCommand(options.output(), options.config_path)
    raise typer.Exit(command.revert(build_id))


@app.command()
def builds(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Show at most this many builds",
    ),
) -> None:
    """List builds of the site, newest first."""
    options: CLIContext = ctx.obj
    command = PublishCommand(options.output(), options.config_path)
    raise typer.Exit(command.builds(limit))


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the live build and the most recent build."""
    options: CLIContext = ctx.obj
    command = PublishCommand(options.output(), options.config_path)
    raise typer.Exit(command.status())


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
