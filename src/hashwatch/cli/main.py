"""
hashwatch CLI - main entry point.

Commands for checking a file once, watching it, and querying its
recorded hash history.
"""

from __future__ import annotations

import os
import sys
import traceback
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError as PydanticValidationError

from hashwatch import __version__
from hashwatch.config import get_config_safe
from hashwatch.config.models import Config
from hashwatch.exceptions import ConfigError, HashWatchError
from hashwatch.history.tracker import HashTracker
from hashwatch.utils.console import console
from hashwatch.utils.logger import get_logger, setup_logging
from hashwatch.watch.session import WatchSession, get_watch_session


app = typer.Typer(
    name="hashwatch",
    help="🔒 hashwatch: keep track of file integrity with SHA-256 history",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

from hashwatch.cli.commands.config import app as config_app  # noqa: E402
app.add_typer(config_app, name="config")


def _config() -> Config:
    """Effective configuration, with load failures turned into ConfigError."""
    try:
        return get_config_safe()
    except (PydanticValidationError, yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Configuration could not be loaded: {e.__class__.__name__}") from e


def _tracker() -> HashTracker:
    return HashTracker.from_config(_config())


def _session() -> WatchSession:
    _config()  # surfaces load failures as ConfigError before the session reads it
    return get_watch_session()


def _fail(error: HashWatchError) -> None:
    """Log and display a core error, then exit with status 1."""
    get_logger(__name__).error(f"Command failed: {error.message}", **error.context)
    error.display()
    raise typer.Exit(1)


def initialize_logging() -> None:
    """Install log sinks before any command runs."""
    try:
        config = _config()
    except ConfigError:
        # Reported by the command itself; log with environment defaults meanwhile
        setup_logging(None)
        return
    console.configure(no_color=config.app.no_color)
    setup_logging(config)


def global_exception_handler(exc_type: type, exc_value: BaseException, exc_tb: Any) -> None:
    """
    Last-resort handler for anything that escaped a command.

    Args:
        exc_type: Exception type
        exc_value: Exception instance
        exc_tb: Exception traceback
    """
    logger = get_logger(__name__)

    if isinstance(exc_value, KeyboardInterrupt):
        logger.info("Interrupted by user")
        console.print("\n👋 Goodbye!")
        sys.exit(0)

    if isinstance(exc_value, HashWatchError):
        exc_value.display()
        sys.exit(1)

    logger.exception(f"Uncaught {exc_type.__name__}", error_type=exc_type.__name__)
    console.error(f"Unexpected {exc_type.__name__}: {exc_value or 'no details'}")

    if os.getenv("HASHWATCH_DEBUG"):
        console.print("\n[dim]Traceback:[/dim]")
        traceback.print_exception(exc_type, exc_value, exc_tb)
    else:
        console.info("Re-run with --debug for the full traceback", emoji=False)

    sys.exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit"),
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level and show tracebacks"),
) -> None:
    """
    hashwatch: track the SHA-256 history of files.

    Every check records the file's digest; unchanged files only get the
    timestamp of their last entry refreshed.
    """
    if debug:
        os.environ["HASHWATCH_DEBUG"] = "1"

    initialize_logging()
    get_logger(__name__).debug("CLI invoked", version=__version__, command=ctx.invoked_subcommand)

    if version:
        console.print(f"hashwatch version [bold primary]{__version__}[/bold primary]")
        raise typer.Exit()


@app.command("check")
def check_command(
    path: Path = typer.Argument(..., help="File to hash and record", metavar="PATH"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Don't print the history afterwards"),
) -> None:
    """✅ Compute and record the hash of a file once."""
    from hashwatch.cli.commands.check import run_check

    try:
        run_check(_tracker(), path, show=not quiet)
    except HashWatchError as e:
        _fail(e)


@app.command("history")
def history_command(
    path: Path = typer.Argument(..., help="File whose history to show", metavar="PATH"),
) -> None:
    """📜 Show the recorded hash history of a file, oldest first."""
    from hashwatch.cli.commands.history import show_history

    try:
        show_history(_tracker(), path)
    except HashWatchError as e:
        _fail(e)


@app.command("status")
def status_command() -> None:
    """📂 List every tracked file with its latest digest."""
    from hashwatch.cli.commands.history import show_status

    try:
        show_status(_tracker())
    except HashWatchError as e:
        _fail(e)


@app.command("watch")
def watch_command(
    path: Path = typer.Argument(..., help="File to monitor", metavar="PATH"),
    interval: Optional[float] = typer.Option(
        None, "--interval", "-i", min=0.1, help="Seconds between checks"
    ),
) -> None:
    """👁️ Continuously monitor a file for hash changes (Ctrl+C to stop)."""
    from hashwatch.cli.commands.watch import watch_foreground

    try:
        session = _session()
        if interval is not None:
            session.interval = interval
        error = watch_foreground(session, path)
    except HashWatchError as e:
        _fail(e)
        return

    if error is not None:
        _fail(error)


@app.command("shell")
def shell_command() -> None:
    """🐚 Interactive shell: watch in the background, check in the foreground."""
    from hashwatch.cli.commands.shell import run_shell

    try:
        session = _session()
    except HashWatchError as e:
        _fail(e)
        return
    run_shell(session.tracker, session)


def cli_main() -> None:
    """Console-script entry point."""
    sys.excepthook = global_exception_handler
    app()


if __name__ == "__main__":
    cli_main()
