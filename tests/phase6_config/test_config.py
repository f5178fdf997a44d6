"""
Phase 6 Tests: Configuration

Tests for SqlSiftConfig layering: defaults, the project config file and
SQLSIFT_* environment variables.
"""

import json
from pathlib import Path

import pytest

from sqlsift.config import SqlSiftConfig
from sqlsift.constants import DEFAULT_IGNORE_DIRS, DEFAULT_SQL_PATTERNS, MAX_FILE_SIZE
from sqlsift.types import ConfigurationError, ErrorCode


def write_config(root: Path, data) -> Path:
    config_dir = root / ".sqlsift"
    config_dir.mkdir(exist_ok=True)
    path = config_dir / "config.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return path


class TestDefaults:
    """Tests for built-in defaults."""

    def test_defaults(self):
        config = SqlSiftConfig()
        assert config.file_patterns == DEFAULT_SQL_PATTERNS
        assert config.ignore_dirs == DEFAULT_IGNORE_DIRS
        assert config.max_file_size == MAX_FILE_SIZE
        assert config.debug is False

    def test_defaults_are_copies(self):
        config = SqlSiftConfig()
        config.ignore_dirs.add("migrations")
        assert "migrations" not in DEFAULT_IGNORE_DIRS

    def test_load_without_file(self, tmp_path: Path):
        config = SqlSiftConfig.load(tmp_path, environ={})
        assert config == SqlSiftConfig()


class TestLayering:
    """File and environment layers."""

    def test_file_layer(self, tmp_path: Path):
        write_config(tmp_path, {"max_file_size": 500, "file_patterns": ["db/*.sql"]})
        config = SqlSiftConfig.load(tmp_path, environ={})
        assert config.max_file_size == 500
        assert config.file_patterns == ["db/*.sql"]

    def test_environment_overrides_file(self, tmp_path: Path):
        write_config(tmp_path, {"max_file_size": 500})
        config = SqlSiftConfig.load(tmp_path, environ={"SQLSIFT_MAX_FILE_SIZE": "2048"})
        assert config.max_file_size == 2048

    def test_environment_lists(self, tmp_path: Path):
        environ = {
            "SQLSIFT_FILE_PATTERNS": "migrations/**/*.sql, queries/*.sql",
            "SQLSIFT_IGNORE_DIRS": "vendor,tmp",
        }
        config = SqlSiftConfig.load(tmp_path, environ=environ)
        assert config.file_patterns == ["migrations/**/*.sql", "queries/*.sql"]
        assert config.ignore_dirs == {"vendor", "tmp"}

    @pytest.mark.parametrize(
        "raw,expected",
        [("1", True), ("true", True), ("YES", True), ("0", False), ("off", False)],
    )
    def test_environment_booleans(self, tmp_path: Path, raw, expected):
        config = SqlSiftConfig.load(tmp_path, environ={"SQLSIFT_DEBUG": raw})
        assert config.debug is expected

    def test_unknown_keys_ignored(self, tmp_path: Path):
        write_config(tmp_path, {"colour": "blue", "pattern_cache_size": 5})
        config = SqlSiftConfig.load(tmp_path, environ={})
        assert config.pattern_cache_size == 5


class TestInvalidConfig:
    """Invalid values raise ConfigurationError."""

    def test_corrupt_json(self, tmp_path: Path):
        path = write_config(tmp_path, "{not json")
        with pytest.raises(ConfigurationError) as excinfo:
            SqlSiftConfig.load(tmp_path, environ={})
        assert excinfo.value.code == ErrorCode.INVALID_CONFIG
        assert excinfo.value.context.file_path == str(path)

    def test_non_object_json(self, tmp_path: Path):
        write_config(tmp_path, "[1, 2]")
        with pytest.raises(ConfigurationError):
            SqlSiftConfig.load(tmp_path, environ={})

    @pytest.mark.parametrize(
        "data",
        [
            {"max_file_size": "big"},
            {"max_file_size": 0},
            {"max_file_size": True},
            {"pattern_cache_size": -1},
            {"file_patterns": []},
            {"file_patterns": [1, 2]},
            {"debug": "maybe"},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ConfigurationError) as excinfo:
            SqlSiftConfig.from_dict(data)
        field = next(iter(data))
        assert excinfo.value.context.additional_info["field"] == field
        assert excinfo.value.recovery_actions

    def test_invalid_environment_value(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            SqlSiftConfig.load(tmp_path, environ={"SQLSIFT_PATTERN_CACHE_SIZE": "lots"})


class TestSerialization:
    """to_dict() output."""

    def test_to_dict_is_json_serializable(self):
        config = SqlSiftConfig(ignore_dirs={"b", "a"})
        data = json.loads(json.dumps(config.to_dict()))
        assert data["ignore_dirs"] == ["a", "b"]
        assert data["file_patterns"] == DEFAULT_SQL_PATTERNS

    def test_to_dict_round_trip(self):
        config = SqlSiftConfig(max_file_size=10, debug=True)
        assert SqlSiftConfig.from_dict(config.to_dict()) == config
