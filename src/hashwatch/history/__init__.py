"""
hashwatch history layer.

Digest computation, the append-only per-file history store and the
reconciler that decides between appending and refreshing.
"""

from hashwatch.history.digest import compute_digest
from hashwatch.history.models import (
    Decision,
    DigestResult,
    FileHistory,
    HistoryEntry,
    normalize_digest,
)
from hashwatch.history.reconciler import Reconciler
from hashwatch.history.store import HistoryStore, identity_key
from hashwatch.history.tracker import HashTracker

__all__ = [
    "compute_digest",
    "normalize_digest",
    "Decision",
    "DigestResult",
    "FileHistory",
    "HistoryEntry",
    "HistoryStore",
    "identity_key",
    "Reconciler",
    "HashTracker",
]
