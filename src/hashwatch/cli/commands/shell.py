"""
Interactive shell.

A prompt_toolkit REPL that can check files while a watch keeps running
in the background:

    <path> / check <path>   record a file once and show its history
    watch <path>            start the background watch
    stopwatch               stop it
    history <path>          show a file's history
    status                  list tracked files
    help / exit
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import HTML

from hashwatch import __version__
from hashwatch.cli.commands.check import run_check
from hashwatch.cli.commands.history import show_history, show_status
from hashwatch.cli.commands.watch import ConsoleWatchReporter
from hashwatch.exceptions import HashWatchError
from hashwatch.history.tracker import HashTracker
from hashwatch.utils.console import console
from hashwatch.utils.logger import get_logger
from hashwatch.watch.session import WatchSession

logger = get_logger(__name__)

SHELL_COMMANDS = ["check", "watch", "stopwatch", "history", "status", "help", "exit"]

HELP_LINES = [
    "<file-path>         Compute and record the hash of a file once",
    "check <file-path>   Same as above",
    "watch <file-path>   Continuously monitor a file in the background",
    "stopwatch           Stop watching the current file",
    "history <file-path> Show the recorded hash history of a file",
    "status              List every tracked file",
    "help                Show this help",
    "exit                Quit the shell",
]


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


class ShellDispatcher:
    """Parses one shell line and runs the matching command."""

    def __init__(self, tracker: HashTracker, session: WatchSession):
        self.tracker = tracker
        self.session = session
        self._commands: Dict[str, Callable[[str], None]] = {
            "check": self._check,
            "watch": self._watch,
            "stopwatch": self._stopwatch,
            "history": self._history,
            "status": self._status,
            "help": self._help,
        }

    def dispatch(self, line: str) -> bool:
        """
        Run one line of input.

        Returns:
            False when the shell should exit, True otherwise
        """
        line = line.strip()
        if not line:
            return True

        name, _, argument = line.partition(" ")
        if name in ("exit", "quit"):
            return False

        handler = self._commands.get(name)
        try:
            if handler is None:
                # A bare path is a one-shot check
                self._check(line)
            else:
                handler(argument)
        except HashWatchError as e:
            logger.debug("Shell command failed", line=line, error=e.message)
            e.display()
        return True

    def close(self) -> None:
        """Stop a running watch before leaving the shell."""
        if self.session.is_watching:
            self.session.stop_watch()

    def _require_path(self, argument: str, command: str) -> Optional[str]:
        path = _strip_quotes(argument)
        if not path:
            console.warning(f"Usage: {command} <file-path>")
            return None
        return path

    def _check(self, argument: str) -> None:
        path = self._require_path(argument, "check")
        if path:
            run_check(self.tracker, path)

    def _watch(self, argument: str) -> None:
        path = self._require_path(argument, "watch")
        if path:
            self.session.start_watch(path, ConsoleWatchReporter())

    def _stopwatch(self, argument: str) -> None:
        self.session.stop_watch()

    def _history(self, argument: str) -> None:
        path = self._require_path(argument, "history")
        if path:
            show_history(self.tracker, path)

    def _status(self, argument: str) -> None:
        show_status(self.tracker)

    def _help(self, argument: str) -> None:
        console.command_help_panel(
            command="hashwatch shell",
            description="Keep track of file integrity using SHA-256 hashing. "
                        "Unchanged files only get their timestamp refreshed.",
            examples=HELP_LINES,
        )


def _bottom_toolbar(session: WatchSession) -> HTML:
    target = session.target
    if target:
        return HTML("<b>hashwatch {}</b>  <ansigreen>watching {}</ansigreen>").format(__version__, str(target))
    return HTML("<b>hashwatch {}</b>  <ansiyellow>not watching</ansiyellow>").format(__version__)


def run_shell(tracker: HashTracker, session: WatchSession) -> None:
    """Run the interactive loop until exit, Ctrl+D or Ctrl+C."""
    dispatcher = ShellDispatcher(tracker, session)

    console.print(f"[panel.title]🔒 hashwatch shell[/panel.title] [dim]v{__version__}[/dim]")
    dispatcher.dispatch("help")

    prompt = PromptSession(completer=WordCompleter(SHELL_COMMANDS, sentence=True))

    try:
        while True:
            try:
                line = prompt.prompt("> ", bottom_toolbar=lambda: _bottom_toolbar(session))
            except (EOFError, KeyboardInterrupt):
                break
            if not dispatcher.dispatch(line):
                break
    finally:
        dispatcher.close()
        console.print("[dim]Goodbye! 👋[/dim]")
