"""History models for hashwatch.

A file's history is an ordered list of (digest, observed_at) entries,
oldest first, where no two consecutive entries share a digest.
"""

import re
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DIGEST_LENGTH = 64
_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


def normalize_digest(value: str) -> str:
    """Return ``value`` as a lowercase SHA-256 hex digest.

    Raises:
        ValueError: If the value is not 64 hexadecimal characters
    """
    if not isinstance(value, str):
        raise ValueError("digest must be a string")
    digest = value.strip().lower()
    if not _DIGEST_RE.match(digest):
        raise ValueError(f"digest must be {DIGEST_LENGTH} hexadecimal characters")
    return digest


def ensure_aware(value: datetime) -> datetime:
    """Attach the local timezone to naive datetimes."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.astimezone()
    return value


class Decision(str, Enum):
    """Outcome of reconciling one observation against the stored history."""

    ADDED_INITIAL = "added_initial"
    ADDED_CHANGED = "added_changed"
    REFRESHED = "refreshed"


class HistoryEntry(BaseModel):
    """One observation of a file's digest."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    digest: str = Field(..., description="Lowercase SHA-256 hex digest")
    observed_at: datetime = Field(..., description="When the digest was last observed")

    @field_validator('digest', mode='before')
    @classmethod
    def validate_digest(cls, v):
        return normalize_digest(v)

    @field_validator('observed_at')
    @classmethod
    def validate_observed_at(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    def matches(self, digest: str) -> bool:
        """Case-insensitive digest comparison."""
        return self.digest == digest.strip().lower()

    def with_timestamp(self, observed_at: datetime) -> "HistoryEntry":
        """Copy of this entry observed at a different time."""
        return HistoryEntry(digest=self.digest, observed_at=observed_at)


class FileHistory(BaseModel):
    """Chronological record of one file identity."""

    model_config = ConfigDict(extra="forbid")

    identity: str = Field(..., description="Identity key derived from the file path")
    path: Optional[str] = Field(None, description="Canonical absolute path of the file")
    entries: List[HistoryEntry] = Field(default_factory=list)

    @property
    def last_entry(self) -> Optional[HistoryEntry]:
        return self.entries[-1] if self.entries else None

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def has_consecutive_duplicates(self) -> bool:
        """True if any two neighbouring entries share a digest."""
        return any(
            prev.digest == curr.digest
            for prev, curr in zip(self.entries, self.entries[1:])
        )


class DigestResult(BaseModel):
    """Digest of a file's full contents at one point in time."""

    model_config = ConfigDict(frozen=True)

    path: Path
    digest: str
    observed_at: datetime
    size_bytes: int = Field(0, ge=0)

    @field_validator('digest', mode='before')
    @classmethod
    def validate_digest(cls, v):
        return normalize_digest(v)
