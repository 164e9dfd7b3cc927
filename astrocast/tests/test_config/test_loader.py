"""Tests for config loading, saving, and get/set."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from astrocast.config.loader import (
    config_hash,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from astrocast.config.schema import StationConfig, WeatherMode


class TestLoadConfig:
    def test_load_from_yaml(self, config_yaml_path: Path):
        config = load_config(config_yaml_path)
        assert config.provider.api_key == "abc123"
        assert config.location.latitude == 45.5
        assert config.ops.refresh_interval_seconds == 7200

    def test_empty_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config == StationConfig()

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "nope.yaml")
        assert config.mode == WeatherMode.API

    def test_invalid_yaml_values(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("ops:\n  tick_interval_seconds: 0\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestSaveConfig:
    def test_save_and_reload(self, tmp_path: Path):
        config = StationConfig(mode=WeatherMode.SIMULATED)
        path = tmp_path / "configs" / "saved.yaml"
        save_config(config, path)
        assert load_config(path) == config


class TestConfigHash:
    def test_deterministic(self):
        assert config_hash(StationConfig()) == config_hash(StationConfig())

    def test_changes_with_config(self):
        other = StationConfig(mode=WeatherMode.SIMULATED)
        assert config_hash(StationConfig()) != config_hash(other)


class TestGetSetValue:
    def test_get_nested(self):
        config = StationConfig()
        assert get_config_value(config, "ops.refresh_interval_seconds") == 21600

    def test_get_missing(self):
        with pytest.raises(KeyError):
            get_config_value(StationConfig(), "ops.nope")

    def test_set_int_coerced(self):
        config = set_config_value(StationConfig(), "ops.refresh_interval_seconds", "3600")
        assert config.ops.refresh_interval_seconds == 3600

    def test_set_float_coerced(self):
        config = set_config_value(StationConfig(), "location.latitude", "51.5")
        assert config.location.latitude == 51.5

    def test_set_string(self):
        config = set_config_value(StationConfig(), "provider.api_key", "xyz")
        assert config.provider.api_key == "xyz"

    def test_set_revalidates(self):
        with pytest.raises(ValidationError):
            set_config_value(StationConfig(), "location.latitude", "120")

    def test_set_unknown_key(self):
        with pytest.raises(KeyError):
            set_config_value(StationConfig(), "provider.secret", "1")
