"""
Themed Rich console shared by every hashwatch command.

Command output goes to stdout through this console; log records go to
stderr through the loguru sink, so piping ``hashwatch status`` stays clean.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from hashwatch.cli.theme import hashwatch_theme

# Prefix shown before each kind of one-line message
_PREFIXES: Dict[str, str] = {
    "success": "✅ ",
    "error": "❌ ",
    "warning": "⚠️  ",
    "info": "ℹ️  ",
}


class HashWatchConsole:
    """Process-wide console with hashwatch styles and message helpers."""

    _instance: Optional[HashWatchConsole] = None

    def __new__(cls) -> HashWatchConsole:
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._console = Console(
                theme=hashwatch_theme,
                force_terminal=True if os.getenv("HASHWATCH_DEBUG") else None,
                no_color=bool(os.getenv("NO_COLOR")),
            )
            cls._instance = instance
        return cls._instance

    @property
    def console(self) -> Console:
        """The underlying Rich console."""
        return self._console

    def configure(self, no_color: bool = False) -> None:
        """Apply settings that are only known once configuration is loaded."""
        self._console.no_color = no_color

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def _message(self, kind: str, message: str, emoji: bool) -> None:
        prefix = _PREFIXES[kind] if emoji else ""
        self._console.print(f"{prefix}{message}", style=f"{kind}.text")

    def success(self, message: str, emoji: bool = True) -> None:
        self._message("success", message, emoji)

    def error(self, message: str, emoji: bool = True) -> None:
        self._message("error", message, emoji)

    def warning(self, message: str, emoji: bool = True) -> None:
        self._message("warning", message, emoji)

    def info(self, message: str, emoji: bool = True) -> None:
        self._message("info", message, emoji)

    def command_help_panel(
        self,
        command: str,
        description: str,
        examples: Iterable[str],
    ) -> None:
        """
        Show a command's description and its usage lines in a panel.

        Args:
            command: Name shown in the panel title
            description: One or two sentences about the command
            examples: Usage lines, one per sub-command
        """
        body = Text(description, style="dim")
        lines = list(examples)
        if lines:
            body.append("\n\nCommands:\n", style="help.option")
            body.append("\n".join(f"  {line}" for line in lines), style="help.example")

        self._console.print(
            Panel(
                body,
                title=f"📘 {command}",
                title_align="left",
                border_style="panel.border",
                padding=(1, 2),
            )
        )


console = HashWatchConsole()

__all__ = ["console", "HashWatchConsole"]
