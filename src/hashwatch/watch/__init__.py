"""
hashwatch watch layer.

A single process-wide session that polls one file until it is stopped.
"""

from hashwatch.watch.session import (
    WatchObserver,
    WatchSession,
    WatchState,
    get_watch_session,
    reset_watch_session,
)

__all__ = [
    "WatchObserver",
    "WatchSession",
    "WatchState",
    "get_watch_session",
    "reset_watch_session",
]
