"""
Configuration loader for hashwatch.

Sources, lowest to highest precedence:

1. built-in defaults (the pydantic models)
2. ``~/.hashwatch/config.yaml``
3. ``.hashwatch.yaml`` in the working directory
4. ``.env`` in the working directory (only fills unset variables)
5. ``HASHWATCH_*`` / ``NO_COLOR`` environment variables
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.panel import Panel
from rich.text import Text

from hashwatch.utils.console import console
from hashwatch.utils.logger import get_logger
from .models import Config

logger = get_logger(__name__)

PROJECT_CONFIG_NAME = ".hashwatch.yaml"


def global_config_path() -> Path:
    """Location of the user-wide configuration file."""
    return Path.home() / ".hashwatch" / "config.yaml"


def project_config_path() -> Path:
    """Location of the configuration file for the current directory."""
    return Path.cwd() / PROJECT_CONFIG_NAME


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_number(cast: Callable[[str], Any]) -> Callable[[str], Any]:
    def convert(value: str) -> Any:
        try:
            return cast(value)
        except ValueError:
            # Left as text so validation names the offending field
            console.warning(f"Expected a number, got {value!r}")
            return value
    return convert


def _as_text(value: str) -> str:
    return value


EnvSpec = Tuple[Tuple[str, str], Callable[[str], Any]]


class ConfigLoader:
    """Merges every configuration source into one validated Config."""

    ENVIRONMENT: Dict[str, EnvSpec] = {
        "HASHWATCH_DEBUG": (("app", "debug"), _as_bool),
        "HASHWATCH_LOG_LEVEL": (("app", "log_level"), _as_text),
        "NO_COLOR": (("app", "no_color"), _as_bool),
        "HASHWATCH_HOME": (("storage", "base_dir"), Path),
        "HASHWATCH_HISTORY_DIR": (("storage", "directory"), Path),
        "HASHWATCH_BACKUP": (("storage", "backup"), _as_bool),
        "HASHWATCH_CHUNK_SIZE": (("storage", "chunk_size"), _as_number(int)),
        "HASHWATCH_WATCH_INTERVAL": (("watch", "interval_seconds"), _as_number(float)),
        "HASHWATCH_RETRY_BACKOFF": (("watch", "retry_backoff_seconds"), _as_number(float)),
    }

    def load(self) -> Config:
        """
        Build the effective configuration.

        Raises:
            ValidationError: If the merged values are invalid (a panel
                listing each bad field is printed first)
            yaml.YAMLError: If a configuration file is malformed
        """
        merged: Dict[str, Any] = {}

        for path in (global_config_path(), project_config_path()):
            data = self._read_yaml(path)
            if data:
                merged = self._merge(merged, data)
                logger.debug("Loaded config file", path=str(path))

        env_file = Path.cwd() / ".env"
        if env_file.exists():
            load_dotenv(env_file)
            logger.debug("Loaded environment file", path=str(env_file))

        for variable, (location, convert) in self.ENVIRONMENT.items():
            raw = os.getenv(variable)
            if raw:
                section, key = location
                merged.setdefault(section, {})
                if not isinstance(merged[section], dict):
                    merged[section] = {}
                merged[section][key] = convert(raw)

        try:
            return Config(**merged)
        except ValidationError as e:
            self._report(e)
            raise

    def _read_yaml(self, path: Path) -> Optional[Dict[str, Any]]:
        """Mapping stored in ``path``; None if absent, {} if not a mapping."""
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            console.error(f"Invalid YAML in {path}: {e}")
            raise
        except OSError as e:
            console.error(f"Cannot read {path}: {e}")
            raise

        return data if isinstance(data, dict) else {}

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursive dict merge; values from ``override`` win."""
        result = dict(base)
        for key, value in override.items():
            current = result.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                result[key] = self._merge(current, value)
            else:
                result[key] = value
        return result

    def _report(self, error: ValidationError) -> None:
        """Print one block per invalid field."""
        text = Text()
        for index, problem in enumerate(error.errors()):
            if index:
                text.append("\n")
            text.append("Field: ", style="dim")
            text.append(".".join(str(part) for part in problem["loc"]), style="warning.text")
            text.append("\nError: ", style="dim")
            text.append(problem["msg"], style="error.text")
            text.append("\n")

        console.print()
        console.print(
            Panel(
                text,
                title="[error]❌ Invalid configuration[/error]",
                title_align="left",
                border_style="error.text",
                padding=(1, 2),
            )
        )
