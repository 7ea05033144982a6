"""One-shot checks and history queries for tracked files."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

from hashwatch.config.models import Config
from hashwatch.history.digest import DEFAULT_CHUNK_SIZE, compute_digest
from hashwatch.history.models import Decision, DigestResult, FileHistory
from hashwatch.history.reconciler import Reconciler
from hashwatch.history.store import HistoryStore, identity_key
from hashwatch.utils.logger import get_logger

logger = get_logger(__name__)


class HashTracker:
    """Hashes a file and reconciles the result against its stored history."""

    def __init__(self, store: HistoryStore, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.store = store
        self.reconciler = Reconciler(store)
        self.chunk_size = chunk_size

    @classmethod
    def from_config(cls, config: Config) -> HashTracker:
        store = HistoryStore(config.storage.history_dir, backup=config.storage.backup)
        return cls(store, chunk_size=config.storage.chunk_size)

    def check(self, path: Union[str, Path]) -> Tuple[Decision, DigestResult]:
        """Digest ``path`` and record the observation.

        Raises:
            DigestError: If the file cannot be read
            StorageError: If the history cannot be read or written
        """
        with logger.time_operation("check", path=str(path)):
            result = compute_digest(path, chunk_size=self.chunk_size)
            decision = self.reconciler.reconcile(path, result.digest, result.observed_at)
        return decision, result

    def history(self, path: Union[str, Path]) -> FileHistory:
        """Stored history of ``path``; empty if it was never checked."""
        return self.store.load(identity_key(path))

    def tracked(self) -> List[FileHistory]:
        return self.store.list_histories()

    def last_digest(self, path: Union[str, Path]) -> Optional[str]:
        entry = self.store.last_entry(identity_key(path))
        return entry.digest if entry else None
