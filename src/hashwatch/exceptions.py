"""
hashwatch Exception Hierarchy.

Every failure the core can report is a HashWatchError, so the CLI can show
it as a Rich panel with a suggestion and exit non-zero.
"""

from typing import Optional, Any
from rich.panel import Panel
from rich.text import Text

from hashwatch.utils.console import console


class HashWatchError(Exception):
    """
    Base exception for all hashwatch errors.

    Provides error formatting with Rich panels.
    """

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ):
        """
        Initialize hashwatch exception.

        Args:
            message: The error message
            suggestion: Optional helpful suggestion for fixing the error
            context: Optional context data for debugging
        """
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}

    def display(self) -> None:
        """Display the error in the console."""
        error_text = Text(self.message, style="bold red")

        if self.suggestion:
            error_text.append("\n\n💡 ", style="yellow")
            error_text.append(self.suggestion, style="italic yellow")

        panel = Panel(
            error_text,
            title="❌ Error",
            title_align="left",
            border_style="red",
            padding=(1, 2)
        )
        console.print(panel)


class ConfigError(HashWatchError):
    """The configuration files or environment could not be turned into a Config."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(
            message,
            suggestion or "Run 'hashwatch config validate' to see which setting is wrong",
        )


class ValidationError(HashWatchError, ValueError):
    """A value handed to the core (e.g. a digest) is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            f"Check the value of '{field}'" if field else None,
            {"field": field} if field else {},
        )
        self.field = field


# --- Digest engine -------------------------------------------------------

class DigestError(HashWatchError):
    """Raised when a file's digest cannot be computed."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        context = {"path": path} if path else {}
        super().__init__(message, suggestion, context)
        self.path = path


class DigestNotFoundError(DigestError):
    """Raised when the file does not exist or cannot be opened."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message,
            path,
            suggestion="Check that the path exists, is a regular file and is readable",
        )


class DigestReadError(DigestError):
    """Raised when an I/O error interrupts the read."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, path, suggestion="Check the file and try again")


# --- History store -------------------------------------------------------

class StorageError(HashWatchError):
    """Raised when the history store cannot satisfy a request."""

    def __init__(
        self,
        message: str,
        identity: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        context = {"identity": identity} if identity else {}
        super().__init__(message, suggestion, context)
        self.identity = identity


class StorageUnavailableError(StorageError):
    """Raised when the history directory cannot be read or written."""

    def __init__(self, message: str, identity: Optional[str] = None):
        super().__init__(
            message,
            identity,
            suggestion="Check permissions and free space of the history directory",
        )


class CorruptRecordError(StorageError):
    """Raised when a persisted history record cannot be parsed.

    The record is left untouched; further writes to it fail until it is
    repaired or removed by hand.
    """

    def __init__(self, message: str, identity: Optional[str] = None):
        super().__init__(
            message,
            identity,
            suggestion="Inspect the record (a .backup copy may exist next to it) and repair or remove it",
        )


class EmptyHistoryError(StorageError):
    """Raised when an operation needs a last entry but the history is empty."""


# --- Watch session -------------------------------------------------------

class WatchError(HashWatchError):
    """Raised for watch session state violations."""


class AlreadyWatchingError(WatchError):
    """Raised when a watch is started while another one is active."""

    def __init__(self, target: str):
        super().__init__(
            f"Already watching {target}",
            suggestion="Stop the current watch first",
            context={"target": target},
        )
        self.target = target


class NotWatchingError(WatchError):
    """Raised when stopping a watch while none is active."""

    def __init__(self) -> None:
        super().__init__("No file is currently being watched")
