"""Decides whether an observed digest extends a file's history."""

from datetime import datetime
from pathlib import Path
from typing import Union

from hashwatch.exceptions import ValidationError
from hashwatch.history.models import Decision, HistoryEntry, ensure_aware, normalize_digest
from hashwatch.history.store import HistoryStore, identity_key
from hashwatch.utils.logger import get_logger

logger = get_logger(__name__)


class Reconciler:
    """The only writer of new history entries.

    A new digest is appended; a digest equal to the last recorded one only
    refreshes that entry's timestamp, so consecutive entries never repeat.
    """

    def __init__(self, store: HistoryStore):
        self.store = store

    def reconcile(self, path: Union[str, Path], digest: str, timestamp: datetime) -> Decision:
        """Record one observation of ``path``.

        Args:
            path: Observed file
            digest: Hex digest of its contents (any case)
            timestamp: When the digest was observed

        Returns:
            The Decision taken

        Raises:
            StorageError: If the history cannot be read or written
        """
        try:
            digest = normalize_digest(digest)
        except ValueError as e:
            raise ValidationError(str(e), field="digest") from e
        timestamp = ensure_aware(timestamp)
        identity = identity_key(path)

        with self.store.locked(identity):
            last = self.store.last_entry(identity)

            if last is not None and timestamp < last.observed_at:
                # Clock went backwards; keep the sequence non-decreasing
                logger.warning(
                    "Observation older than last entry, clamping timestamp",
                    path=str(path),
                    observed_at=timestamp.isoformat(),
                    last_observed_at=last.observed_at.isoformat(),
                )
                timestamp = last.observed_at

            if last is None:
                self.store.append(identity, HistoryEntry(digest=digest, observed_at=timestamp), path=path)
                decision = Decision.ADDED_INITIAL
            elif not last.matches(digest):
                self.store.append(identity, HistoryEntry(digest=digest, observed_at=timestamp), path=path)
                decision = Decision.ADDED_CHANGED
            else:
                self.store.refresh_last_timestamp(identity, timestamp)
                decision = Decision.REFRESHED

        logger.info("Reconciled observation", path=str(path), digest=digest, decision=decision.value)
        return decision
