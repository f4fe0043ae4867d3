"""iobench runtime configuration and settings."""
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from iobench.core.errors import ConfigError

# Config search paths (ordered by proximity to current run)
CONFIG_PATHS = [
    "./iobench.yml",
    str(Path.home() / ".config" / "iobench" / "iobench.yml"),
    "/etc/iobench/iobench.yml",
]

DEFAULT_EXCLUDED_FS_TYPES = [
    "tmpfs",
    "devtmpfs",
    "overlay",
    "squashfs",
    "proc",
    "sysfs",
    "cgroup",
    "cgroup2",
    "pstore",
    "aufs",
    "ramfs",
    "devpts",
    "mqueue",
    "debugfs",
    "tracefs",
    "securityfs",
    "configfs",
    "fusectl",
    "bpf",
    "hugetlbfs",
    "autofs",
    "binfmt_misc",
    "efivarfs",
    "nsfs",
    "rpc_pipefs",
]


@dataclass
class BenchConfig:
    """Runtime configuration for benchmark runs.

    Attributes:
        repeat: Benchmark repetitions averaged per mount (default: 2)
        dd_block_size: dd block size (default: 1M)
        dd_count: dd block count (default: 1024)
        fio_block_size: fio block size for all access patterns (default: 4k)
        fio_iodepth: fio queue depth (default: 4)
        fio_size: fio working set per job (default: 1G)
        fio_ioengine: fio I/O engine (default: libaio)
        mixed_numjobs: Parallel fio jobs in the quick random read/write mix
        mixed_runtime: Seconds the quick random read/write mix runs for
        command_timeout: Hard wall-clock timeout per dd/fio invocation
        jobs: Mounts benchmarked in parallel (default: 1)
        quick_dir: Scratch directory used by ``iobench quick`` when no path is given
        excluded_fs_types: Filesystem types skipped by mount discovery
    """

    repeat: int = 2
    dd_block_size: str = "1M"
    dd_count: int = 1024
    fio_block_size: str = "4k"
    fio_iodepth: int = 4
    fio_size: str = "1G"
    fio_ioengine: str = "libaio"
    mixed_numjobs: int = 4
    mixed_runtime: int = 30
    command_timeout: float = 600.0
    jobs: int = 1
    quick_dir: str = "/tmp/io_test"
    excluded_fs_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_FS_TYPES)
    )

    def __post_init__(self):
        for name in ("repeat", "dd_count", "fio_iodepth", "mixed_numjobs", "mixed_runtime", "jobs"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be a whole number, got {value!r}")
            if value < 1:
                raise ConfigError(f"{name} must be at least 1, got {value}")

        if isinstance(self.command_timeout, bool) or not isinstance(self.command_timeout, (int, float)):
            raise ConfigError(f"command_timeout must be a number, got {self.command_timeout!r}")
        if self.command_timeout <= 0:
            raise ConfigError(f"command_timeout must be positive, got {self.command_timeout}")

        # Sizes such as `fio_size: 1024` arrive from YAML as ints
        for name in ("dd_block_size", "fio_block_size", "fio_size", "fio_ioengine", "quick_dir"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (str, int)) or value == "":
                raise ConfigError(f"{name} must be a non-empty string, got {value!r}")
            setattr(self, name, str(value))

        if not isinstance(self.excluded_fs_types, (list, tuple)) or not all(
            isinstance(fs_type, str) for fs_type in self.excluded_fs_types
        ):
            raise ConfigError(
                f"excluded_fs_types must be a list of filesystem names, got {self.excluded_fs_types!r}"
            )
        self.excluded_fs_types = list(self.excluded_fs_types)

    @classmethod
    def from_env(cls) -> "BenchConfig":
        """Create config from environment variables.

        Environment variables:
            IOBENCH_REPEAT: Repetitions per benchmark
            IOBENCH_COMMAND_TIMEOUT: Timeout per dd/fio invocation in seconds
            IOBENCH_JOBS: Mounts benchmarked in parallel
            IOBENCH_FIO_SIZE: fio working set per job
            IOBENCH_QUICK_DIR: Scratch directory for ``iobench quick``

        Returns:
            BenchConfig instance with values from environment or defaults
        """
        try:
            return cls(
                repeat=int(os.getenv("IOBENCH_REPEAT", cls.repeat)),
                command_timeout=float(
                    os.getenv("IOBENCH_COMMAND_TIMEOUT", cls.command_timeout)
                ),
                jobs=int(os.getenv("IOBENCH_JOBS", cls.jobs)),
                fio_size=os.getenv("IOBENCH_FIO_SIZE", cls.fio_size),
                quick_dir=os.getenv("IOBENCH_QUICK_DIR", cls.quick_dir),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid IOBENCH_* environment value: {e}") from e

    def merged(self, overrides: Dict[str, Any]) -> "BenchConfig":
        """Return a copy with ``overrides`` applied, ignoring ``None`` values."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        try:
            return replace(self, **changes)
        except TypeError as e:
            raise ConfigError(str(e)) from e


def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
    """Locate the YAML config file, if any."""
    if config_path:
        return Path(config_path)

    if env_config := os.environ.get("IOBENCH_CONFIG"):
        return Path(env_config)

    for path in CONFIG_PATHS:
        if Path(path).exists():
            return Path(path)

    return None


def load_config(config_path: Optional[str] = None) -> BenchConfig:
    """Build a config from defaults, environment and an optional YAML file.

    Raises:
        ConfigError: If an explicitly named file is missing or invalid
    """
    config = BenchConfig.from_env()
    path = find_config_file(config_path)
    if path is None:
        return config

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not raw:
        return config
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping of settings")

    return config.merged(raw)


# Global config instance (can be overridden)
_config: Optional[BenchConfig] = None


def get_config() -> BenchConfig:
    """Get the global iobench configuration.

    Returns:
        BenchConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = BenchConfig.from_env()
    return _config


def set_config(config: Optional[BenchConfig]):
    """Set the global iobench configuration.

    Args:
        config: BenchConfig instance to use globally, or None to reset
    """
    global _config
    _config = config
