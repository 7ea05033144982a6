"""
History listing commands.

Renders a file's recorded digests, oldest first, and the overview of
every tracked file.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from rich.markup import escape
from rich.table import Table

from hashwatch.history.models import FileHistory
from hashwatch.history.tracker import HashTracker
from hashwatch.utils.console import console


def format_timestamp(value: datetime) -> str:
    return value.isoformat(sep=" ", timespec="seconds")


def render_history_table(history: FileHistory, title: Optional[str] = None) -> Table:
    """Table of index, digest and timestamp per entry, oldest first."""
    table = Table(
        title=title or f"📜 Hash history: {escape(history.path or history.identity)}",
        title_justify="left",
        header_style="table.header",
        border_style="table.border",
    )
    table.add_column("#", justify="right", style="muted")
    table.add_column("Digest (SHA-256)", style="digest", no_wrap=True)
    table.add_column("Observed at", style="timestamp", no_wrap=True)

    for index, entry in enumerate(history.entries, start=1):
        table.add_row(str(index), entry.digest, format_timestamp(entry.observed_at))

    return table


def show_history(tracker: HashTracker, path: Union[str, Path]) -> FileHistory:
    """Print the stored history of ``path``."""
    history = tracker.history(path)

    if history.is_empty:
        console.info(f"No hash history found for {escape(str(path))}")
        return history

    console.print(render_history_table(history))
    return history


def show_status(tracker: HashTracker) -> int:
    """Print one row per tracked file and return how many there are."""
    histories = tracker.tracked()

    if not histories:
        console.info("No files are tracked yet. Run 'hashwatch check <path>' to start.")
        return 0

    table = Table(
        title="📂 Tracked files",
        title_justify="left",
        header_style="table.header",
        border_style="table.border",
    )
    table.add_column("Path", style="path", overflow="fold")
    table.add_column("Entries", justify="right")
    table.add_column("Last digest", style="digest", no_wrap=True)
    table.add_column("Last seen", style="timestamp", no_wrap=True)

    for history in histories:
        last = history.last_entry
        table.add_row(
            escape(history.path or history.identity),
            str(len(history)),
            last.digest[:16] if last else "-",
            format_timestamp(last.observed_at) if last else "-",
        )

    console.print(table)
    return len(histories)
