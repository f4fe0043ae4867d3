"""Tests for runtime configuration."""
import pytest

from iobench.core.config import (
    DEFAULT_EXCLUDED_FS_TYPES,
    BenchConfig,
    get_config,
    load_config,
    set_config,
)
from iobench.core.errors import ConfigError


class TestBenchConfig:
    """Defaults and validation."""

    def test_defaults(self):
        config = BenchConfig()

        assert config.repeat == 2
        assert config.dd_block_size == "1M"
        assert config.dd_count == 1024
        assert config.fio_block_size == "4k"
        assert config.fio_iodepth == 4
        assert config.fio_size == "1G"
        assert config.jobs == 1
        assert config.quick_dir == "/tmp/io_test"
        assert "tmpfs" in config.excluded_fs_types

    def test_excluded_types_not_shared(self):
        config = BenchConfig()
        config.excluded_fs_types.append("nfs")
        assert "nfs" not in DEFAULT_EXCLUDED_FS_TYPES
        assert "nfs" not in BenchConfig().excluded_fs_types

    @pytest.mark.parametrize("field", ["repeat", "jobs", "dd_count"])
    def test_rejects_zero(self, field):
        with pytest.raises(ConfigError, match=field):
            BenchConfig(**{field: 0})

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ConfigError):
            BenchConfig(command_timeout=0)

    @pytest.mark.parametrize("field, value", [
        ("repeat", 2.5),
        ("jobs", "2"),
        ("dd_count", True),
        ("command_timeout", "600"),
    ])
    def test_rejects_non_numeric(self, field, value):
        with pytest.raises(ConfigError, match=field):
            BenchConfig(**{field: value})

    def test_rejects_bare_string_exclusions(self):
        with pytest.raises(ConfigError, match="excluded_fs_types"):
            BenchConfig(excluded_fs_types="tmpfs")

    def test_integer_sizes_become_strings(self):
        config = BenchConfig(fio_size=1024, dd_block_size=4096)
        assert config.fio_size == "1024"
        assert config.dd_block_size == "4096"

    def test_merged_ignores_none(self):
        config = BenchConfig().merged({"repeat": 5, "jobs": None})
        assert config.repeat == 5
        assert config.jobs == 1

    def test_merged_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown config keys: colour"):
            BenchConfig().merged({"colour": "blue"})


class TestFromEnv:
    """IOBENCH_* environment variables."""

    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("IOBENCH_REPEAT", "4")
        monkeypatch.setenv("IOBENCH_COMMAND_TIMEOUT", "90.5")
        monkeypatch.setenv("IOBENCH_QUICK_DIR", "/srv/io")

        config = BenchConfig.from_env()

        assert config.repeat == 4
        assert config.command_timeout == 90.5
        assert config.quick_dir == "/srv/io"

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("IOBENCH_JOBS", "many")
        with pytest.raises(ConfigError):
            BenchConfig.from_env()


class TestLoadConfig:
    """YAML file on top of environment."""

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("IOBENCH_REPEAT", "4")
        config_file = tmp_path / "iobench.yml"
        config_file.write_text("repeat: 3\nfio_size: 2G\nexcluded_fs_types: [tmpfs, nfs4]\n")

        config = load_config(str(config_file))

        assert config.repeat == 3
        assert config.fio_size == "2G"
        assert config.excluded_fs_types == ["tmpfs", "nfs4"]

    def test_env_selects_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("jobs: 2\n")
        monkeypatch.setenv("IOBENCH_CONFIG", str(config_file))

        assert load_config().jobs == 2

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("iobench.core.config.CONFIG_PATHS", [str(tmp_path / "iobench.yml")])
        assert load_config() == BenchConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(str(tmp_path / "missing.yml"))

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "iobench.yml"
        config_file.write_text("")
        assert load_config(str(config_file)) == BenchConfig()

    @pytest.mark.parametrize("content", [
        "repeat: [1\n",
        "- repeat\n",
        "repeat: zero\n",
        "repeat: 2.5\n",
        "excluded_fs_types: tmpfs\n",
    ])
    def test_invalid_file(self, tmp_path, content):
        config_file = tmp_path / "iobench.yml"
        config_file.write_text(content)
        with pytest.raises(ConfigError):
            load_config(str(config_file))


def test_global_config():
    custom = BenchConfig(repeat=7)
    set_config(custom)
    assert get_config() is custom

    set_config(None)
    assert get_config().repeat == 2
