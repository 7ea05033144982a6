"""
hashwatch CLI Commands.

Command implementations shared by the Typer app and the interactive shell.
"""

from hashwatch.cli.commands.check import run_check
from hashwatch.cli.commands.history import show_history, show_status
from hashwatch.cli.commands.watch import ConsoleWatchReporter, watch_foreground

__all__ = [
    "run_check",
    "show_history",
    "show_status",
    "ConsoleWatchReporter",
    "watch_foreground",
]
