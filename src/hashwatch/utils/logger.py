"""
hashwatch logging built on loguru.

Two sinks are installed by ``setup_logging``:

* a Rich console sink on stderr, at the configured level (WARNING by
  default) so progress lines on stdout stay readable;
* a JSON file under ``<state_dir>/logs/hashwatch.log`` that always
  receives DEBUG records: every digest, reconcile decision and write.

Modules obtain a ``LoggerAdapter`` through ``get_logger(__name__)`` and
pass structured fields as keyword arguments.
"""

from __future__ import annotations

import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, TYPE_CHECKING

from loguru import logger
from rich.console import Console

if TYPE_CHECKING:
    from hashwatch.config.models import Config

LOG_FILE_NAME = "hashwatch.log"
_TRUTHY = ("1", "true", "yes", "on")


def _level_styles() -> Dict[str, str]:
    # Imported lazily: the theme module pulls in rich at import time
    from hashwatch.cli.theme import ERROR, INFO, MUTED, SUCCESS, WARNING

    return {
        "TRACE": MUTED,
        "DEBUG": MUTED,
        "INFO": INFO,
        "SUCCESS": SUCCESS,
        "WARNING": WARNING,
        "ERROR": ERROR,
        "CRITICAL": ERROR,
    }


def _escape_markup(value: str) -> str:
    return value.replace("[", r"\[")


def console_formatter(record: Dict[str, Any]) -> str:
    """
    Render one record as a Rich markup line.

    ``time | LEVEL | module | message (key=value, ...)``
    """
    level = record["level"].name
    color = _level_styles().get(level, "white")

    extra = dict(record.get("extra", {}))
    module = (extra.pop("name", None) or record["name"] or "").replace("hashwatch.", "", 1)

    line = " | ".join([
        f"[dim]{record['time']:%H:%M:%S}[/dim]",
        f"[bold {color}]{level:<8}[/bold {color}]",
        f"[dim]{module:<15}[/dim]",
        _escape_markup(record["message"]),
    ])
    if extra:
        fields = ", ".join(f"{key}={value}" for key, value in extra.items())
        line += f" [dim]({_escape_markup(fields)})[/dim]"

    # loguru formats the returned string again, so braces must be doubled
    return line.replace("{", "{{").replace("}", "}}") + "\n"


def setup_logging(config: Optional[Config] = None) -> Path:
    """
    Install the console and file sinks, replacing any existing ones.

    Args:
        config: Loaded configuration. When None (e.g. the configuration
            itself failed to load) the HASHWATCH_* variables are read directly.

    Returns:
        Path of the JSON log file
    """
    logger.remove()

    if config is not None:
        level = config.app.log_level
        debug = config.app.debug
        no_color = config.app.no_color
        state_dir = config.state_dir
    else:
        level = os.getenv("HASHWATCH_LOG_LEVEL", "WARNING").upper()
        debug = os.getenv("HASHWATCH_DEBUG", "").lower() in _TRUTHY
        no_color = bool(os.getenv("NO_COLOR"))
        state_dir = Path(os.getenv("HASHWATCH_HOME") or Path.home()).expanduser() / ".hashwatch"

    if debug:
        level = "DEBUG"

    stderr = Console(stderr=True, no_color=no_color, highlight=False)
    logger.add(
        lambda message: stderr.print(message.rstrip("\n"), markup=True, highlight=False),
        format=console_formatter,
        level=level,
        colorize=False,
        backtrace=debug,
        diagnose=debug,
    )

    log_file = state_dir / "logs" / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        format="{message}",
        serialize=True,
        level="DEBUG",
        rotation="10 MB",
        retention="7 days",
        compression="gz",
        backtrace=True,
        diagnose=False,
        enqueue=True,  # records arrive from the watch thread too
    )

    logger.bind(name=__name__).debug("Logging configured", level=level, log_file=str(log_file))
    return log_file


class LoggerAdapter:
    """
    Thin wrapper around a bound loguru logger.

    Keyword arguments become ``extra`` fields instead of ``str.format``
    arguments, so messages may contain braces (paths, YAML snippets).
    """

    def __init__(self, bound: Any, name: str):
        self._logger = bound
        self.name = name

    def bind(self, **fields: Any) -> LoggerAdapter:
        return LoggerAdapter(self._logger.bind(**fields), self.name)

    def log(self, level: str, message: str, **fields: Any) -> None:
        self._emit(level, message, fields, exception=False)

    def _emit(self, level: str, message: str, fields: Dict[str, Any], exception: bool) -> None:
        target = self._logger.bind(**fields) if fields else self._logger
        # depth=2 attributes the record to the caller of debug()/info()/...
        target.opt(depth=2, exception=exception).log(level, message)

    def debug(self, message: str, **fields: Any) -> None:
        self._emit("DEBUG", message, fields, exception=False)

    def info(self, message: str, **fields: Any) -> None:
        self._emit("INFO", message, fields, exception=False)

    def success(self, message: str, **fields: Any) -> None:
        self._emit("SUCCESS", message, fields, exception=False)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("WARNING", message, fields, exception=False)

    def error(self, message: str, **fields: Any) -> None:
        self._emit("ERROR", message, fields, exception=False)

    def critical(self, message: str, **fields: Any) -> None:
        self._emit("CRITICAL", message, fields, exception=False)

    def exception(self, message: str, **fields: Any) -> None:
        """ERROR record carrying the active exception's traceback."""
        self._emit("ERROR", message, fields, exception=True)

    @contextmanager
    def time_operation(self, operation: str, **fields: Any) -> Iterator[None]:
        """
        Log how long the wrapped block took.

        Success is logged at DEBUG; a failure at INFO, since the caller
        decides how loudly the exception itself is reported.
        """
        started = time.perf_counter()
        self.debug(f"Starting {operation}", **fields)
        try:
            yield
        except BaseException as e:
            elapsed = round((time.perf_counter() - started) * 1000, 2)
            self.info(f"Failed {operation}: {e}", duration_ms=elapsed, **fields)
            raise
        elapsed = round((time.perf_counter() - started) * 1000, 2)
        self.debug(f"Completed {operation}", duration_ms=elapsed, **fields)


def get_logger(name: str) -> LoggerAdapter:
    """Logger for a module; pass ``__name__``."""
    return LoggerAdapter(logger.bind(name=name), name)


__all__ = [
    "setup_logging",
    "get_logger",
    "LoggerAdapter",
]
