"""
hashwatch Configuration Management.

Provides thread-safe singleton access to configuration with hierarchical
loading from multiple sources.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from .loader import ConfigLoader, global_config_path, project_config_path
from .models import Config


class ConfigManager:
    """
    Thread-safe singleton configuration manager.

    The watch thread and the foreground command path both read the
    configuration, so loading is guarded by a re-entrant lock.
    """

    _instance: Optional[ConfigManager] = None
    _lock = threading.Lock()
    _config: Optional[Config] = None
    _config_lock = threading.RLock()

    def __new__(cls) -> ConfigManager:
        """Thread-safe singleton implementation."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def load_config(self, reload: bool = False) -> Config:
        """
        Load configuration with thread-safe singleton pattern.

        Args:
            reload: Force reload even if config is already loaded

        Returns:
            Validated Config instance
        """
        with self._config_lock:
            if self._config is None or reload:
                loader = ConfigLoader()
                self._config = loader.load()

            return self._config

    def get_config(self) -> Config:
        """
        Get current configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded yet
        """
        with self._config_lock:
            if self._config is None:
                raise RuntimeError(
                    "Configuration not loaded. Call load_config() first or use get_config_safe()."
                )
            return self._config

    def get_config_safe(self) -> Config:
        """Get configuration, loading it if necessary."""
        with self._config_lock:
            if self._config is None:
                return self.load_config()
            return self._config

    def is_loaded(self) -> bool:
        """Check if configuration is loaded."""
        with self._config_lock:
            return self._config is not None

    def clear(self) -> None:
        """Clear loaded configuration (useful for testing)."""
        with self._config_lock:
            self._config = None


# Global instance
_manager = ConfigManager()


def load_config(reload: bool = False) -> Config:
    """Load configuration (singleton pattern)."""
    return _manager.load_config(reload=reload)


def get_config() -> Config:
    """Get current configuration; raises RuntimeError if not loaded yet."""
    return _manager.get_config()


def get_config_safe() -> Config:
    """Get configuration, loading it automatically if needed."""
    return _manager.get_config_safe()


def is_config_loaded() -> bool:
    """Check if configuration is loaded."""
    return _manager.is_loaded()


def clear_config() -> None:
    """Clear loaded configuration (useful for testing)."""
    _manager.clear()


PROJECT_TEMPLATE = '''# hashwatch configuration
# Values here override ~/.hashwatch/config.yaml for this directory.

storage:
  # base_dir: ~            # Base directory the history folder lives in
  directory: .hashwatch/history
  backup: true             # Keep <record>.backup of the previous version
  chunk_size: 65536        # Read buffer in bytes

watch:
  interval_seconds: 5      # Sleep between polling cycles
  retry_backoff_seconds: 3 # Sleep after a failed read

app:
  debug: false
  log_level: WARNING       # Options: DEBUG, INFO, WARNING, ERROR
  no_color: false

# Environment overrides:
# HASHWATCH_HOME, HASHWATCH_HISTORY_DIR, HASHWATCH_BACKUP, HASHWATCH_CHUNK_SIZE,
# HASHWATCH_WATCH_INTERVAL, HASHWATCH_RETRY_BACKOFF, HASHWATCH_DEBUG,
# HASHWATCH_LOG_LEVEL, NO_COLOR
'''

GLOBAL_TEMPLATE = '''# hashwatch global configuration
# Location: ~/.hashwatch/config.yaml

storage:
  directory: .hashwatch/history
  backup: true

watch:
  interval_seconds: 5
  retry_backoff_seconds: 3

app:
  log_level: WARNING
'''


def init_project_config(path: Optional[Path] = None) -> Path:
    """
    Initialize a new .hashwatch.yaml configuration file.

    Args:
        path: Path for the config file (defaults to .hashwatch.yaml in current directory)

    Returns:
        Path to the created configuration file

    Raises:
        FileExistsError: If config file already exists
    """
    config_path = path or project_config_path()

    if config_path.exists():
        raise FileExistsError(f"Configuration file already exists: {config_path}")

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(PROJECT_TEMPLATE, encoding='utf-8')
    return config_path


def init_global_config() -> Path:
    """
    Initialize global user configuration at ~/.hashwatch/config.yaml.

    Raises:
        FileExistsError: If the global configuration already exists
    """
    config_path = global_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.exists():
        raise FileExistsError(f"Global configuration already exists: {config_path}")

    config_path.write_text(GLOBAL_TEMPLATE, encoding='utf-8')
    return config_path


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "get_config",
    "get_config_safe",
    "is_config_loaded",
    "clear_config",
    "init_project_config",
    "init_global_config",
    "global_config_path",
    "project_config_path",
]
