"""Process-wide watch session polling one file in the background.

State machine::

    IDLE --start_watch--> WATCHING --stop_watch--> STOP_REQUESTED --> IDLE
                             |                                         ^
                             +------ storage error ends the loop ------+

The loop waits on a threading.Event, so a stop interrupts the sleep
between cycles; a cycle already hashing the file finishes first.
"""

from __future__ import annotations

import threading
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from hashwatch.exceptions import (
    AlreadyWatchingError,
    DigestError,
    HashWatchError,
    NotWatchingError,
    StorageError,
)
from hashwatch.history.models import Decision, DigestResult
from hashwatch.history.tracker import HashTracker
from hashwatch.utils.logger import get_logger

logger = get_logger(__name__)


class WatchState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"
    STOP_REQUESTED = "stop_requested"


class WatchObserver:
    """Receives watch loop events. Called from the worker thread."""

    def on_started(self, path: Path) -> None:
        pass

    def on_decision(self, result: DigestResult, decision: Decision) -> None:
        pass

    def on_error(self, path: Path, error: HashWatchError) -> None:
        pass

    def on_stopped(self, path: Path, error: Optional[HashWatchError]) -> None:
        pass


class WatchSession:
    """Owns the single active watch: its state, target and cancellation signal."""

    def __init__(
        self,
        tracker: HashTracker,
        interval: float = 5.0,
        retry_backoff: float = 3.0,
    ):
        self.tracker = tracker
        self.interval = interval
        self.retry_backoff = retry_backoff

        self._lock = threading.Lock()
        self._state = WatchState.IDLE
        self._target: Optional[Path] = None
        self._cancel = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self.last_error: Optional[HashWatchError] = None

    # --- state -----------------------------------------------------------

    @property
    def state(self) -> WatchState:
        with self._lock:
            return self._state

    @property
    def target(self) -> Optional[Path]:
        with self._lock:
            return self._target

    @property
    def is_watching(self) -> bool:
        return self.state is not WatchState.IDLE

    # --- transitions -----------------------------------------------------

    def start_watch(self, path: Union[str, Path], observer: Optional[WatchObserver] = None) -> None:
        """Start polling ``path`` on a background thread.

        Raises:
            AlreadyWatchingError: If a watch is already active
        """
        target = Path(path)
        observer = observer or WatchObserver()

        with self._lock:
            if self._state is not WatchState.IDLE:
                raise AlreadyWatchingError(str(self._target))

            self._state = WatchState.WATCHING
            self._target = target
            self._cancel = threading.Event()
            self.last_error = None
            self._worker = threading.Thread(
                target=self._run,
                args=(target, observer, self._cancel),
                name="hashwatch-watch",
                daemon=True,
            )
            worker = self._worker

        logger.info("Watch started", path=str(target), interval=self.interval)
        worker.start()

    def stop_watch(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """Request the active watch to stop.

        Args:
            wait: Block until the worker has returned to IDLE
            timeout: Maximum seconds to wait

        Raises:
            NotWatchingError: If no watch is active
        """
        with self._lock:
            if self._state is WatchState.IDLE:
                raise NotWatchingError()
            self._state = WatchState.STOP_REQUESTED
            self._cancel.set()
            worker = self._worker
            target = self._target

        logger.info("Watch stop requested", path=str(target))
        if wait and worker is not None and worker is not threading.current_thread():
            worker.join(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until the current watch, if any, has ended."""
        with self._lock:
            worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)

    # --- loop ------------------------------------------------------------

    def run_cycle(self, path: Path, observer: WatchObserver) -> float:
        """Run one digest + reconcile cycle and return the wait before the next.

        Digest errors are reported and answered with the retry backoff.

        Raises:
            StorageError: Ends the loop; history writes are never skipped silently
        """
        try:
            decision, result = self.tracker.check(path)
        except DigestError as e:
            logger.warning("Watch cycle could not read file", path=str(path), error=e.message)
            observer.on_error(path, e)
            return self.retry_backoff

        observer.on_decision(result, decision)
        return self.interval

    def _run(self, path: Path, observer: WatchObserver, cancel: threading.Event) -> None:
        error: Optional[HashWatchError] = None
        observer.on_started(path)
        try:
            while not cancel.is_set():
                delay = self.run_cycle(path, observer)
                if cancel.wait(delay):
                    break
        except StorageError as e:
            error = e
            logger.error("Watch stopped by storage error", path=str(path), error=e.message)
            observer.on_error(path, e)
        except Exception as e:
            error = HashWatchError(f"Unexpected error while watching {path}: {e}")
            logger.exception("Watch loop crashed", path=str(path))
            observer.on_error(path, error)
        finally:
            with self._lock:
                self._state = WatchState.IDLE
                self._target = None
                self._worker = None
                self.last_error = error
            logger.info("Watch stopped", path=str(path))
            observer.on_stopped(path, error)


_session: Optional[WatchSession] = None
_session_lock = threading.Lock()


def get_watch_session(tracker: Optional[HashTracker] = None) -> WatchSession:
    """The process-wide WatchSession, created from configuration on first use."""
    global _session
    with _session_lock:
        if _session is None:
            from hashwatch.config import get_config_safe

            config = get_config_safe()
            _session = WatchSession(
                tracker or HashTracker.from_config(config),
                interval=config.watch.interval_seconds,
                retry_backoff=config.watch.retry_backoff_seconds,
            )
        return _session


def reset_watch_session() -> None:
    """Forget the process-wide session (useful for testing)."""
    global _session
    with _session_lock:
        _session = None
