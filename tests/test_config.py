"""
Unit Tests for Engine Configuration

Tests for EngineConfig defaults, validation and loading from JSON files.
"""

import json
from pathlib import Path

import pytest

from bitblue.board import STARTING_FEN
from bitblue.config import DEFAULT_LOG_FILE, SETTINGS_ENV_VAR, EngineConfig


def write_settings(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestEngineConfig:
    """Tests for EngineConfig defaults and validation."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.name == "BitBlue"
        assert config.hash_size_mb == 16
        assert config.default_depth == 5
        assert config.max_depth == 64
        assert config.move_overhead_ms == 50
        assert config.default_movestogo == 30
        assert config.start_fen == STARTING_FEN
        assert config.log_file == DEFAULT_LOG_FILE
        assert not config.debug

    def test_log_file_is_path(self):
        config = EngineConfig(log_file="~/bitblue-test.log")
        assert isinstance(config.log_file, Path)
        assert "~" not in str(config.log_file)

    @pytest.mark.parametrize("kwargs", [
        {'hash_size_mb': 0},
        {'hash_size_mb': 4096},
        {'max_depth': 0},
        {'default_depth': 0},
        {'default_depth': 10, 'max_depth': 8},
        {'move_overhead_ms': -1},
        {'default_movestogo': 0},
        {'start_fen': "this is not a fen"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)


class TestLoading:
    """Tests for reading settings files."""

    def test_from_json(self, tmp_path):
        path = write_settings(tmp_path / "settings.json", {
            'hash_size_mb': 64,
            'default_depth': 6,
            'log_file': None,
            'start_fen': "4k3/8/8/8/8/8/8/4K2R w K - 0 1",
        })
        config = EngineConfig.from_json(path)

        assert config.hash_size_mb == 64
        assert config.default_depth == 6
        assert config.log_file is None
        assert config.start_fen == "4k3/8/8/8/8/8/8/4K2R w K - 0 1"
        assert config.max_depth == 64, "Unset fields keep their defaults"

    def test_unknown_setting(self, tmp_path):
        path = write_settings(tmp_path / "settings.json", {'hash_mb': 64})
        with pytest.raises(ValueError, match="hash_mb"):
            EngineConfig.from_json(path)

    def test_not_an_object(self, tmp_path):
        path = write_settings(tmp_path / "settings.json", [1, 2, 3])
        with pytest.raises(ValueError):
            EngineConfig.from_json(path)

    def test_invalid_value_in_file(self, tmp_path):
        path = write_settings(tmp_path / "settings.json", {'hash_size_mb': 0})
        with pytest.raises(ValueError):
            EngineConfig.from_json(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_json(tmp_path / "missing.json")

    def test_load_defaults(self, monkeypatch):
        monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
        assert EngineConfig.load() == EngineConfig()

    def test_load_from_environment(self, tmp_path, monkeypatch):
        path = write_settings(tmp_path / "env.json", {'default_depth': 3})
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))

        assert EngineConfig.load().default_depth == 3

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        env_path = write_settings(tmp_path / "env.json", {'default_depth': 3})
        path = write_settings(tmp_path / "explicit.json", {'default_depth': 7})
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(env_path))

        assert EngineConfig.load(path).default_depth == 7
