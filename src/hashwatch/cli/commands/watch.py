"""
Watch command.

Console reporting for the watch session and the foreground ``watch``
command that runs until interrupted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from rich.markup import escape

from hashwatch.cli.commands.check import report_decision
from hashwatch.exceptions import HashWatchError
from hashwatch.history.models import Decision, DigestResult
from hashwatch.utils.console import console
from hashwatch.watch.session import WatchObserver, WatchSession


class ConsoleWatchReporter(WatchObserver):
    """Prints watch progress lines to the console."""

    def on_started(self, path: Path) -> None:
        console.print(f"👁️  Now watching: [path]{escape(str(path))}[/path]")

    def on_decision(self, result: DigestResult, decision: Decision) -> None:
        report_decision(result, decision)

    def on_error(self, path: Path, error: HashWatchError) -> None:
        console.error(f"Error watching {escape(str(path))}: {escape(error.message)}")

    def on_stopped(self, path: Path, error: Optional[HashWatchError]) -> None:
        if error is None:
            console.print(f"🛑 Stopped watching [path]{escape(str(path))}[/path].")
        else:
            console.warning(f"Watch of {escape(str(path))} ended after an error.")


def watch_foreground(
    session: WatchSession,
    path: Union[str, Path],
    poll: float = 0.5,
) -> Optional[HashWatchError]:
    """
    Watch ``path`` until Ctrl+C or until the loop ends on its own.

    Args:
        session: The process-wide watch session
        path: File to watch
        poll: How often the foreground checks whether the loop ended

    Returns:
        The error that ended the loop, or None after a normal stop

    Raises:
        AlreadyWatchingError: If the session is already watching
    """
    session.start_watch(path, ConsoleWatchReporter())
    console.print("[dim]Press Ctrl+C to stop watching.[/dim]")

    try:
        while session.is_watching:
            session.join(poll)
    except KeyboardInterrupt:
        console.print()
        if session.is_watching:
            session.stop_watch()

    return session.last_error
