"""
Pytest configuration and fixtures for hashwatch testing.

This module provides fixtures for:
- An isolated HOME so configuration, history and logs never touch the real one
- History stores and trackers bound to temporary directories
- Sample files to hash
- CLI test runners for Typer commands
- Watch sessions with short intervals
"""

from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator, List, Optional, Tuple

import pytest
from typer.testing import CliRunner

# Add src to path for imports during testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hashwatch.config import clear_config
from hashwatch.exceptions import HashWatchError
from hashwatch.history.models import Decision, DigestResult
from hashwatch.history.store import HistoryStore
from hashwatch.history.tracker import HashTracker
from hashwatch.watch.session import WatchObserver, WatchSession, reset_watch_session


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Generator[Path, None, None]:
    """
    Point HOME at a temporary directory and reset process-wide singletons.

    Runs for every test so the loaded configuration and the watch session
    never leak between tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    workdir = tmp_path / "work"
    workdir.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(workdir)
    for var in (
        "HASHWATCH_HOME", "HASHWATCH_HISTORY_DIR", "HASHWATCH_BACKUP",
        "HASHWATCH_CHUNK_SIZE", "HASHWATCH_WATCH_INTERVAL", "HASHWATCH_RETRY_BACKOFF",
        "HASHWATCH_DEBUG", "HASHWATCH_LOG_LEVEL", "NO_COLOR",
    ):
        monkeypatch.delenv(var, raising=False)

    clear_config()
    reset_watch_session()
    yield home
    clear_config()
    reset_watch_session()


@pytest.fixture
def history_dir(tmp_path: Path) -> Path:
    """Directory for history records (created lazily by the store)."""
    return tmp_path / "history"


@pytest.fixture
def store(history_dir: Path) -> HistoryStore:
    return HistoryStore(history_dir)


@pytest.fixture
def tracker(store: HistoryStore) -> HashTracker:
    return HashTracker(store)


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A small text file to hash."""
    path = tmp_path / "work" / "notes.txt"
    path.write_text("first version\n")
    return path


@pytest.fixture
def timestamps() -> List[datetime]:
    """Four increasing, timezone-aware observation times."""
    base = datetime(2025, 3, 14, 9, 26, 53, 589793, tzinfo=timezone.utc)
    return [base + timedelta(minutes=i) for i in range(4)]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Typer CLI test runner."""
    return CliRunner()


class RecordingObserver(WatchObserver):
    """Collects watch events and lets tests wait for them."""

    def __init__(self) -> None:
        self.started: List[Path] = []
        self.decisions: List[Tuple[DigestResult, Decision]] = []
        self.errors: List[HashWatchError] = []
        self.stopped: List[Tuple[Path, Optional[HashWatchError]]] = []
        self._cond = threading.Condition()

    def on_started(self, path: Path) -> None:
        with self._cond:
            self.started.append(path)
            self._cond.notify_all()

    def on_decision(self, result: DigestResult, decision: Decision) -> None:
        with self._cond:
            self.decisions.append((result, decision))
            self._cond.notify_all()

    def on_error(self, path: Path, error: HashWatchError) -> None:
        with self._cond:
            self.errors.append(error)
            self._cond.notify_all()

    def on_stopped(self, path: Path, error: Optional[HashWatchError]) -> None:
        with self._cond:
            self.stopped.append((path, error))
            self._cond.notify_all()

    def wait_for(self, predicate, timeout: float = 5.0) -> bool:
        with self._cond:
            return self._cond.wait_for(predicate, timeout)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def fast_session(tracker: HashTracker) -> Generator[WatchSession, None, None]:
    """Watch session with millisecond intervals; stopped after the test."""
    session = WatchSession(tracker, interval=0.01, retry_backoff=0.01)
    yield session
    if session.is_watching:
        session.stop_watch(timeout=5)
