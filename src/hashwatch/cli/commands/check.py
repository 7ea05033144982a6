"""
One-shot check command.

Hashes a file once, records the observation and prints the outcome.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from hashwatch.cli.commands.history import format_timestamp, show_history
from hashwatch.history.models import Decision, DigestResult
from hashwatch.history.tracker import HashTracker
from hashwatch.utils.console import console


def report_decision(result: DigestResult, decision: Decision) -> None:
    """Print the progress line for one recorded observation."""
    stamp = f"[timestamp]\\[{format_timestamp(result.observed_at)}][/timestamp]"

    if decision is Decision.ADDED_INITIAL:
        console.print(f"{stamp} ✅ Initial hash stored: [digest]{result.digest}[/digest]")
    elif decision is Decision.ADDED_CHANGED:
        console.print(f"{stamp} 🔄 File changed! New hash recorded: [digest]{result.digest}[/digest]")
    else:
        console.print(f"{stamp} ⏱️  No change detected, timestamp updated.")


def run_check(tracker: HashTracker, path: Union[str, Path], show: bool = True) -> Decision:
    """
    Check ``path`` once and record the result.

    Args:
        tracker: Tracker bound to the history store
        path: File to check
        show: Also print the full history afterwards

    Raises:
        DigestError: If the file cannot be read
        StorageError: If the history cannot be persisted
    """
    decision, result = tracker.check(path)
    report_decision(result, decision)

    if show:
        console.print()
        show_history(tracker, path)

    return decision
