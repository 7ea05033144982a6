"""History store persisting one YAML record per tracked file.

Each record lives at ``<history_dir>/<identity>.yaml`` where the identity
is the SHA-256 of the file's canonical absolute path. Every write replaces
the whole record atomically (temp file + rename), so readers always see
either the previous or the new complete record.
"""

import hashlib
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import yaml
from filelock import FileLock
from pydantic import ValidationError as PydanticValidationError

from hashwatch.exceptions import (
    CorruptRecordError,
    EmptyHistoryError,
    StorageUnavailableError,
)
from hashwatch.history.models import FileHistory, HistoryEntry
from hashwatch.utils.logger import get_logger
from hashwatch.utils.paths import (
    PathOperationError,
    canonical_path,
    ensure_directory,
    safe_read,
    safe_write,
)

logger = get_logger(__name__)

RECORD_SUFFIX = ".yaml"
LOCK_SUFFIX = ".lock"


def identity_key(path: Union[str, Path]) -> str:
    """Deterministic identity of a file, derived from its canonical path.

    Example:
        >>> identity_key("notes.txt") == identity_key("./notes.txt")
        True
    """
    canonical = str(canonical_path(path))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class HistoryStore:
    """Durable, append-only storage of FileHistory records.

    Writers must hold ``locked(identity)`` around a read-decide-write
    sequence; the store's own mutators take the same re-entrant lock so a
    single call is always serialized per identity. The lock is backed by a
    ``<identity>.yaml.lock`` file, so a ``watch`` process and a ``check``
    process writing the same record exclude each other too.
    """

    def __init__(self, history_dir: Path, backup: bool = True):
        """Initialize the store.

        Args:
            history_dir: Directory holding one record per identity
            backup: Keep ``<record>.backup`` of the previous version on rewrite
        """
        self.history_dir = Path(history_dir)
        self.backup = backup
        self._locks: Dict[str, Tuple[threading.RLock, FileLock]] = {}
        self._locks_guard = threading.Lock()

    # --- locking ---------------------------------------------------------

    def lock_path(self, identity: str) -> Path:
        return self.history_dir / f"{identity}{RECORD_SUFFIX}{LOCK_SUFFIX}"

    @contextmanager
    def locked(self, identity: str) -> Iterator[None]:
        """Hold the mutual-exclusion section for one identity.

        Re-entrant within a thread. Other threads of this store wait on the
        thread lock; other stores and other processes wait on the lock file.

        Raises:
            StorageUnavailableError: If the lock file cannot be created
        """
        with self._locks_guard:
            if identity not in self._locks:
                self._locks[identity] = (threading.RLock(), FileLock(str(self.lock_path(identity))))
            thread_lock, file_lock = self._locks[identity]

        with thread_lock:
            try:
                ensure_directory(self.history_dir)
                file_lock.acquire()
            except PathOperationError as e:
                raise StorageUnavailableError(e.message, identity) from e
            except OSError as e:
                raise StorageUnavailableError(
                    f"Cannot lock {self.lock_path(identity)}: {e}", identity
                ) from e
            try:
                yield
            finally:
                file_lock.release()

    # --- reads -----------------------------------------------------------

    def record_path(self, identity: str) -> Path:
        return self.history_dir / f"{identity}{RECORD_SUFFIX}"

    def load(self, identity: str) -> FileHistory:
        """Load the history for an identity.

        Returns an empty FileHistory when no record exists.

        Raises:
            StorageUnavailableError: If the record cannot be read
            CorruptRecordError: If the record cannot be parsed
        """
        record = self.record_path(identity)
        try:
            text = safe_read(record)
        except PathOperationError as e:
            raise StorageUnavailableError(e.message, identity) from e
        except UnicodeDecodeError as e:
            raise CorruptRecordError(f"History record is not valid text: {record}", identity) from e

        if text is None:
            return FileHistory(identity=identity)

        return self._parse(record, identity, text)

    def last_entry(self, identity: str) -> Optional[HistoryEntry]:
        return self.load(identity).last_entry

    def list_histories(self) -> List[FileHistory]:
        """Every record in the history directory, sorted by path.

        Unreadable records are skipped with a warning so one corrupt file
        does not hide the others.
        """
        if not self.history_dir.is_dir():
            return []

        histories = []
        try:
            records = sorted(self.history_dir.glob(f"*{RECORD_SUFFIX}"))
        except OSError as e:
            raise StorageUnavailableError(f"Cannot list {self.history_dir}: {e}") from e

        for record in records:
            identity = record.name[: -len(RECORD_SUFFIX)]
            try:
                histories.append(self.load(identity))
            except (CorruptRecordError, StorageUnavailableError) as e:
                logger.warning("Skipping unreadable history record", record=str(record), error=e.message)

        return sorted(histories, key=lambda h: h.path or "")

    # --- writes ----------------------------------------------------------

    def append(self, identity: str, entry: HistoryEntry, path: Optional[Union[str, Path]] = None) -> FileHistory:
        """Append an entry to the end of an identity's history and persist it.

        Args:
            identity: Identity key
            entry: Entry to append
            path: File path to record alongside the history

        Returns:
            The updated FileHistory
        """
        with self.locked(identity):
            history = self.load(identity)
            history.entries.append(entry)
            if path is not None:
                history.path = str(canonical_path(path))
            self.save(history)
            return history

    def refresh_last_timestamp(self, identity: str, timestamp: datetime) -> FileHistory:
        """Replace the timestamp of the most recent entry and persist it.

        Raises:
            EmptyHistoryError: If the identity has no entries
        """
        with self.locked(identity):
            history = self.load(identity)
            if history.is_empty:
                raise EmptyHistoryError(
                    "Cannot refresh the timestamp of an empty history",
                    identity,
                )
            history.entries[-1] = history.entries[-1].with_timestamp(timestamp)
            self.save(history)
            return history

    def save(self, history: FileHistory) -> Path:
        """Atomically write a complete FileHistory record.

        Raises:
            StorageUnavailableError: If the record cannot be written
        """
        record = self.record_path(history.identity)
        data = history.model_dump(mode="json")
        content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

        try:
            ensure_directory(self.history_dir)
            safe_write(record, content, backup=self.backup, mode=0o600)
        except PathOperationError as e:
            logger.error("Failed to persist history record", record=str(record), error=e.message)
            raise StorageUnavailableError(e.message, history.identity) from e

        logger.debug("Persisted history record", record=str(record), entries=len(history))
        return record

    # --- internals -------------------------------------------------------

    def _parse(self, record: Path, identity: str, text: str) -> FileHistory:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CorruptRecordError(f"History record is not valid YAML: {record}", identity) from e

        if not isinstance(data, dict):
            raise CorruptRecordError(f"History record has unexpected structure: {record}", identity)

        try:
            history = FileHistory.model_validate(data)
        except PydanticValidationError as e:
            raise CorruptRecordError(
                f"History record failed validation: {record} ({e.error_count()} errors)",
                identity,
            ) from e

        if history.identity != identity:
            raise CorruptRecordError(
                f"History record {record} belongs to identity {history.identity}",
                identity,
            )
        return history
