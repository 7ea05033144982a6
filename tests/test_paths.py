"""Tests for path utilities."""

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from hashwatch.utils.paths import (
    PathOperationError,
    canonical_path,
    ensure_directory,
    safe_read,
    safe_write,
)


class TestCanonicalPath:
    """Test canonical_path."""

    def test_relative_becomes_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert canonical_path("a.txt") == tmp_path / "a.txt"

    def test_expands_user(self, isolated_home):
        assert canonical_path("~/a.txt") == isolated_home / "a.txt"

    def test_collapses_parent_references(self, tmp_path):
        (tmp_path / "sub").mkdir()
        assert canonical_path(tmp_path / "sub" / ".." / "a.txt") == tmp_path / "a.txt"

    def test_resolves_symlinks(self, tmp_path):
        real = tmp_path / "real.txt"
        real.write_text("x")
        link = tmp_path / "link.txt"
        link.symlink_to(real)

        assert canonical_path(link) == real


class TestEnsureDirectory:
    """Test ensure_directory."""

    def test_creates_nested_directory(self, tmp_path):
        target = tmp_path / "a" / "b"

        assert ensure_directory(target) is True
        assert target.is_dir()
        assert ensure_directory(target) is False

    def test_restrictive_mode(self, tmp_path):
        target = tmp_path / "private"
        ensure_directory(target, mode=0o700)

        assert stat.S_IMODE(target.stat().st_mode) & 0o077 == 0

    def test_file_in_the_way(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(PathOperationError):
            ensure_directory(blocker)


class TestSafeWrite:
    """Test atomic writes."""

    def test_writes_text(self, tmp_path):
        target = tmp_path / "out" / "record.yaml"

        assert safe_write(target, "hello") is None
        assert target.read_text() == "hello"

    def test_writes_bytes(self, tmp_path):
        target = tmp_path / "record.bin"
        safe_write(target, b"\x00\x01")
        assert target.read_bytes() == b"\x00\x01"

    def test_backup_of_previous_version(self, tmp_path):
        target = tmp_path / "record.yaml"
        target.write_text("old")

        backup = safe_write(target, "new")

        assert backup == tmp_path / "record.yaml.backup"
        assert backup.read_text() == "old"
        assert target.read_text() == "new"

    def test_no_backup_when_disabled(self, tmp_path):
        target = tmp_path / "record.yaml"
        target.write_text("old")

        assert safe_write(target, "new", backup=False) is None
        assert not (tmp_path / "record.yaml.backup").exists()

    def test_applies_mode(self, tmp_path):
        target = tmp_path / "record.yaml"
        safe_write(target, "data", mode=0o600)
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_failed_replace_keeps_original(self, tmp_path):
        store_dir = tmp_path / "store"
        store_dir.mkdir()
        target = store_dir / "record.yaml"
        target.write_text("old")

        with patch.object(Path, "replace", side_effect=OSError("rename failed")):
            with pytest.raises(PathOperationError) as exc_info:
                safe_write(target, "new", backup=False)

        assert "rename failed" in exc_info.value.message
        assert target.read_text() == "old"
        assert [p.name for p in store_dir.iterdir()] == ["record.yaml"]

    def test_failed_fsync_keeps_original(self, tmp_path):
        target = tmp_path / "record.yaml"
        target.write_text("old")

        with patch("hashwatch.utils.paths.os.fsync", side_effect=OSError("io error")):
            with pytest.raises(PathOperationError):
                safe_write(target, "new", backup=False)

        assert target.read_text() == "old"


class TestSafeRead:
    """Test safe_read."""

    def test_missing_file_returns_none(self, tmp_path):
        assert safe_read(tmp_path / "missing.yaml") is None

    def test_reads_text(self, tmp_path):
        target = tmp_path / "a.txt"
        target.write_text("content")
        assert safe_read(target) == "content"

    def test_directory_raises(self, tmp_path):
        with pytest.raises(PathOperationError):
            safe_read(tmp_path)

    def test_invalid_text_propagates_decode_error(self, tmp_path):
        target = tmp_path / "a.bin"
        target.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(UnicodeDecodeError):
            safe_read(target)


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="requires non-root POSIX")
def test_unreadable_file_raises(tmp_path):
    target = tmp_path / "secret.txt"
    target.write_text("x")
    target.chmod(0)
    try:
        with pytest.raises(PathOperationError):
            safe_read(target)
    finally:
        target.chmod(0o600)
