"""Tests for configuration loading and models."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from hashwatch.config import (
    clear_config,
    get_config,
    get_config_safe,
    init_global_config,
    init_project_config,
    is_config_loaded,
    load_config,
)
from hashwatch.config.loader import ConfigLoader
from hashwatch.config.models import ApplicationConfig, Config, StorageConfig, WatchConfig


class TestConfigModels:
    """Test configuration model defaults and validation."""

    def test_defaults(self, isolated_home):
        config = Config()

        assert config.storage.history_dir == isolated_home / ".hashwatch" / "history"
        assert config.storage.backup is True
        assert config.storage.chunk_size == 64 * 1024
        assert config.watch.interval_seconds == 5.0
        assert config.watch.retry_backoff_seconds == 3.0
        assert config.app.log_level == "WARNING"
        assert config.state_dir == isolated_home / ".hashwatch"

    def test_absolute_history_directory(self, tmp_path):
        storage = StorageConfig(directory=tmp_path / "records")
        assert storage.history_dir == tmp_path / "records"

    def test_base_dir_expands_user(self, isolated_home):
        storage = StorageConfig(base_dir=Path("~/data"))
        assert storage.base_dir == (isolated_home / "data").resolve()

    @pytest.mark.parametrize("chunk_size", [0, 1024, 64 * 1024 * 1024])
    def test_chunk_size_bounds(self, chunk_size):
        with pytest.raises(ValidationError):
            StorageConfig(chunk_size=chunk_size)

    @pytest.mark.parametrize("field", ["interval_seconds", "retry_backoff_seconds"])
    def test_intervals_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            WatchConfig(**{field: 0})

    def test_log_level_is_case_insensitive(self):
        assert ApplicationConfig(log_level="debug").log_level == "DEBUG"

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            Config(storage={"unknown": 1})

    def test_display_includes_history_dir(self, isolated_home):
        data = Config().model_dump_display()
        assert data["storage"]["history_dir"] == str(isolated_home / ".hashwatch" / "history")


class TestConfigLoader:
    """Test hierarchical loading."""

    def test_defaults_without_files(self):
        config = ConfigLoader().load()
        assert config.watch.interval_seconds == 5.0

    def test_global_file(self, isolated_home):
        global_path = isolated_home / ".hashwatch" / "config.yaml"
        global_path.parent.mkdir()
        global_path.write_text(yaml.safe_dump({"watch": {"interval_seconds": 10}}))

        assert ConfigLoader().load().watch.interval_seconds == 10.0

    def test_project_overrides_global(self, isolated_home, tmp_path):
        global_path = isolated_home / ".hashwatch" / "config.yaml"
        global_path.parent.mkdir()
        global_path.write_text(yaml.safe_dump({"watch": {"interval_seconds": 10, "retry_backoff_seconds": 7}}))
        (tmp_path / "work" / ".hashwatch.yaml").write_text(yaml.safe_dump({"watch": {"interval_seconds": 2}}))

        config = ConfigLoader().load()

        assert config.watch.interval_seconds == 2.0
        assert config.watch.retry_backoff_seconds == 7.0

    def test_environment_overrides_files(self, tmp_path, monkeypatch):
        (tmp_path / "work" / ".hashwatch.yaml").write_text(
            yaml.safe_dump({"storage": {"backup": True, "chunk_size": 8192}})
        )
        monkeypatch.setenv("HASHWATCH_BACKUP", "false")
        monkeypatch.setenv("HASHWATCH_CHUNK_SIZE", "16384")
        monkeypatch.setenv("HASHWATCH_LOG_LEVEL", "info")

        config = ConfigLoader().load()

        assert config.storage.backup is False
        assert config.storage.chunk_size == 16384
        assert config.app.log_level == "INFO"

    def test_home_and_directory_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HASHWATCH_HOME", str(tmp_path / "state"))
        monkeypatch.setenv("HASHWATCH_HISTORY_DIR", "records")

        config = ConfigLoader().load()

        assert config.storage.history_dir == (tmp_path / "state").resolve() / "records"
        assert config.state_dir == (tmp_path / "state").resolve() / ".hashwatch"

    def test_debug_and_no_color_flags(self, monkeypatch):
        monkeypatch.setenv("HASHWATCH_DEBUG", "1")
        monkeypatch.setenv("NO_COLOR", "1")

        config = ConfigLoader().load()

        assert config.app.debug is True
        assert config.app.no_color is True

    def test_invalid_number_is_reported(self, monkeypatch):
        monkeypatch.setenv("HASHWATCH_WATCH_INTERVAL", "soon")

        with pytest.raises(ValidationError):
            ConfigLoader().load()

    def test_malformed_yaml_raises(self, tmp_path):
        (tmp_path / "work" / ".hashwatch.yaml").write_text("watch: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            ConfigLoader().load()


class TestConfigManager:
    """Test the configuration singleton."""

    def test_get_config_before_load_raises(self):
        assert not is_config_loaded()
        with pytest.raises(RuntimeError):
            get_config()

    def test_load_is_cached_until_cleared(self, monkeypatch):
        first = load_config()
        monkeypatch.setenv("HASHWATCH_WATCH_INTERVAL", "9")

        assert get_config_safe() is first
        assert load_config(reload=True).watch.interval_seconds == 9.0

        clear_config()
        assert not is_config_loaded()

    def test_init_project_config(self, tmp_path):
        path = init_project_config()

        assert path == tmp_path / "work" / ".hashwatch.yaml"
        assert yaml.safe_load(path.read_text())["watch"]["interval_seconds"] == 5

        with pytest.raises(FileExistsError):
            init_project_config()

    def test_templates_load_cleanly(self, isolated_home):
        init_project_config()
        init_global_config()

        config = load_config(reload=True)

        assert config.storage.history_dir == isolated_home / ".hashwatch" / "history"
        assert config.app.log_level == "WARNING"
