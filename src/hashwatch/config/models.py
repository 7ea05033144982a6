"""
Pydantic models for hashwatch configuration.

Provides strongly-typed configuration models with validation for the
history store, the watch loop and general application settings.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StorageConfig(BaseModel):
    """Configuration for the on-disk history store."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    base_dir: Path = Field(
        default_factory=Path.home,
        description="Base directory the hidden history folder lives in",
    )
    directory: Path = Field(
        default=Path(".hashwatch/history"),
        description="History folder, relative to base_dir unless absolute",
    )
    backup: bool = Field(
        True,
        description="Keep a copy of the previous record next to each rewritten one",
    )
    chunk_size: int = Field(
        64 * 1024,
        ge=4 * 1024,
        le=16 * 1024 * 1024,
        description="Read buffer size in bytes used while hashing",
    )

    @field_validator('base_dir')
    @classmethod
    def expand_base_dir(cls, v: Path) -> Path:
        """Expand ~ and make the base directory absolute."""
        return v.expanduser().resolve()

    @property
    def history_dir(self) -> Path:
        """Resolved directory holding one record per tracked file."""
        directory = self.directory.expanduser()
        if directory.is_absolute():
            return directory
        return self.base_dir / directory


class WatchConfig(BaseModel):
    """Configuration for the polling watch loop."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    interval_seconds: float = Field(
        5.0,
        gt=0,
        le=3600,
        description="Sleep between two successful polling cycles",
    )
    retry_backoff_seconds: float = Field(
        3.0,
        gt=0,
        le=3600,
        description="Sleep after a cycle that failed to read the file",
    )


class ApplicationConfig(BaseModel):
    """General application settings."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Console logging level"
    )
    no_color: bool = Field(False, description="Disable colored output")

    @field_validator('debug')
    @classmethod
    def check_debug_env(cls, v: bool) -> bool:
        """Check HASHWATCH_DEBUG environment variable."""
        env_debug = os.getenv('HASHWATCH_DEBUG')
        if env_debug:
            return env_debug.lower() in ('1', 'true', 'yes', 'on')
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('no_color')
    @classmethod
    def check_no_color_env(cls, v: bool) -> bool:
        """Check NO_COLOR environment variable."""
        if os.getenv('NO_COLOR'):
            return True
        return v


class Config(BaseModel):
    """
    Main configuration model for hashwatch.

    Combines all configuration sections with validation and defaults.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="History store configuration"
    )
    watch: WatchConfig = Field(
        default_factory=WatchConfig,
        description="Watch loop configuration"
    )
    app: ApplicationConfig = Field(
        default_factory=ApplicationConfig,
        description="Application settings"
    )

    @property
    def state_dir(self) -> Path:
        """Directory for logs and other tool state (~/.hashwatch by default)."""
        return self.storage.base_dir / ".hashwatch"

    def model_dump_display(self) -> Dict[str, Any]:
        """Dump model to a JSON-friendly dict, including derived paths."""
        data = self.model_dump(mode="json")
        data["storage"]["history_dir"] = str(self.storage.history_dir)
        return data


__all__ = [
    "Config",
    "StorageConfig",
    "WatchConfig",
    "ApplicationConfig",
]
