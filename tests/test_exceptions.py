"""Tests for the exception hierarchy."""

from unittest.mock import patch

import pytest

from hashwatch.exceptions import (
    AlreadyWatchingError,
    ConfigError,
    CorruptRecordError,
    DigestError,
    DigestNotFoundError,
    DigestReadError,
    EmptyHistoryError,
    HashWatchError,
    NotWatchingError,
    StorageError,
    StorageUnavailableError,
    ValidationError,
    WatchError,
)


class TestHashWatchError:
    """Test the base exception."""

    def test_basic_exception(self):
        error = HashWatchError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.suggestion is None
        assert error.context == {}

    def test_exception_with_suggestion_and_context(self):
        error = HashWatchError("Failed", suggestion="Try again", context={"path": "/tmp/x"})

        assert error.suggestion == "Try again"
        assert error.context["path"] == "/tmp/x"

    def test_display_prints_panel(self):
        error = HashWatchError("Test error", suggestion="Fix it")

        with patch("hashwatch.exceptions.console") as mock_console:
            error.display()

        mock_console.print.assert_called_once()


@pytest.mark.parametrize(
    "error,parent",
    [
        (DigestNotFoundError("missing", "/x"), DigestError),
        (DigestReadError("broken", "/x"), DigestError),
        (StorageUnavailableError("denied", "abc"), StorageError),
        (CorruptRecordError("garbage", "abc"), StorageError),
        (EmptyHistoryError("empty", "abc"), StorageError),
        (AlreadyWatchingError("/x"), WatchError),
        (NotWatchingError(), WatchError),
        (ConfigError("bad"), HashWatchError),
        (ValidationError("bad", "field"), HashWatchError),
    ],
)
def test_hierarchy(error, parent):
    assert isinstance(error, parent)
    assert isinstance(error, HashWatchError)


def test_digest_errors_carry_path():
    error = DigestNotFoundError("File not found: /x", "/x")

    assert error.path == "/x"
    assert error.context == {"path": "/x"}
    assert error.suggestion


def test_storage_errors_carry_identity():
    error = CorruptRecordError("bad record", "abc")

    assert error.identity == "abc"
    assert "backup" in error.suggestion


def test_already_watching_names_target():
    error = AlreadyWatchingError("/var/log/app.log")

    assert error.target == "/var/log/app.log"
    assert "Already watching /var/log/app.log" == error.message


def test_not_watching_message():
    assert NotWatchingError().message == "No file is currently being watched"


def test_config_error_default_suggestion():
    assert "hashwatch config validate" in ConfigError("Invalid config").suggestion


def test_validation_error_field_context():
    error = ValidationError("Invalid", field="interval_seconds")
    assert error.context == {"field": "interval_seconds"}
    assert "interval_seconds" in error.suggestion


def test_validation_error_is_a_value_error():
    error = ValidationError("Invalid digest", field="digest")

    assert isinstance(error, ValueError)
    assert error.field == "digest"
