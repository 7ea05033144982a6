"""Streaming SHA-256 digests of file contents."""

import hashlib
from datetime import datetime
from pathlib import Path
from typing import Union

from hashwatch.exceptions import DigestNotFoundError, DigestReadError
from hashwatch.history.models import DigestResult
from hashwatch.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def compute_digest(path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE) -> DigestResult:
    """Hash a file's full contents without loading it into memory.

    The observation timestamp is taken once the last chunk has been read.

    Args:
        path: File to hash
        chunk_size: Read buffer size in bytes

    Returns:
        DigestResult with the lowercase hex digest

    Raises:
        DigestNotFoundError: If the path is missing, not a file or not readable
        DigestReadError: If reading fails part-way through
    """
    file_path = Path(path)
    hasher = hashlib.sha256()
    size = 0

    try:
        handle = open(file_path, "rb")
    except (FileNotFoundError, NotADirectoryError) as e:
        raise DigestNotFoundError(f"File not found: {file_path}", str(file_path)) from e
    except IsADirectoryError as e:
        raise DigestNotFoundError(f"Not a regular file: {file_path}", str(file_path)) from e
    except PermissionError as e:
        raise DigestNotFoundError(f"Permission denied: {file_path}", str(file_path)) from e
    except OSError as e:
        raise DigestNotFoundError(f"Failed to open {file_path}: {e}", str(file_path)) from e

    with handle:
        try:
            while True:
                chunk = handle.read(chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
                size += len(chunk)
        except OSError as e:
            raise DigestReadError(f"Failed to read {file_path}: {e}", str(file_path)) from e

    observed_at = datetime.now().astimezone()
    digest = hasher.hexdigest()
    logger.debug("Computed digest", path=str(file_path), digest=digest, size_bytes=size)

    return DigestResult(path=file_path, digest=digest, observed_at=observed_at, size_bytes=size)
