"""
Filesystem helpers for the history store.

``safe_write`` is the only way records reach disk: it writes a sibling
temporary file, fsyncs it and renames it over the target, so a crash
leaves either the old or the new record and never a truncated one.
"""

import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union

from hashwatch.exceptions import HashWatchError

BACKUP_SUFFIX = ".backup"

_mkdir_lock = threading.RLock()


class PathOperationError(HashWatchError):
    """A filesystem call made on behalf of the store failed."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(
            message,
            suggestion="Check permissions and free space of the target directory",
            context={"path": str(path)} if path else {},
        )
        self.path = path


def canonical_path(path: Union[str, Path]) -> Path:
    """
    Canonical absolute form of a user-supplied path.

    Expands ``~``, makes the path absolute and resolves symlinks and ``..``
    components. The target does not need to exist.

    Example:
        >>> canonical_path("~/notes/../notes/todo.txt")
        PosixPath('/home/me/notes/todo.txt')
    """
    return Path(path).expanduser().resolve()


def ensure_directory(directory: Path, parents: bool = True, mode: int = 0o700) -> bool:
    """
    Create ``directory`` (owner-only by default) unless it already exists.

    Returns:
        True if it was created by this call

    Raises:
        PathOperationError: If it cannot be created or a file is in the way
    """
    directory = Path(directory)

    with _mkdir_lock:
        if directory.is_dir():
            return False
        try:
            directory.mkdir(parents=parents, exist_ok=True, mode=mode)
        except OSError as e:
            # Lost a race with another process creating it
            if directory.is_dir():
                return False
            raise PathOperationError(f"Cannot create directory {directory}: {e}", directory) from e

    return True


def safe_write(
    file_path: Path,
    content: Union[str, bytes],
    backup: bool = True,
    encoding: str = "utf-8",
    mode: Optional[int] = None,
) -> Optional[Path]:
    """
    Atomically replace ``file_path`` with ``content``.

    Args:
        file_path: Destination
        content: Text (encoded with ``encoding``) or bytes
        backup: First copy the current file to ``<name>.backup``
        encoding: Encoding for text content
        mode: Permissions applied to the new file before the rename

    Returns:
        The backup path when one was written

    Raises:
        PathOperationError: If any step fails; the destination is untouched
    """
    file_path = Path(file_path)
    ensure_directory(file_path.parent)

    backup_path: Optional[Path] = None
    if backup and file_path.exists():
        backup_path = file_path.with_name(file_path.name + BACKUP_SUFFIX)
        try:
            shutil.copy2(file_path, backup_path)
        except OSError as e:
            raise PathOperationError(f"Cannot write backup {backup_path}: {e}", backup_path) from e

    data = content.encode(encoding) if isinstance(content, str) else content
    try:
        fd, name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp")
    except OSError as e:
        raise PathOperationError(f"Cannot create a temporary file next to {file_path}: {e}", file_path) from e
    temp_path = Path(name)

    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        if mode is not None:
            os.chmod(temp_path, mode)
        temp_path.replace(file_path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise PathOperationError(f"Cannot write {file_path}: {e}", file_path) from e

    return backup_path


def safe_read(file_path: Path, encoding: str = "utf-8") -> Optional[str]:
    """
    Text of ``file_path``, or None when it does not exist.

    Raises:
        PathOperationError: If the file exists but cannot be read
        UnicodeDecodeError: If the content is not valid text
    """
    file_path = Path(file_path)
    try:
        return file_path.read_text(encoding=encoding)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise PathOperationError(f"Cannot read {file_path}: {e}", file_path) from e


__all__ = [
    "PathOperationError",
    "canonical_path",
    "ensure_directory",
    "safe_write",
    "safe_read",
]
