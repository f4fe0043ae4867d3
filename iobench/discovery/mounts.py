"""Mounted filesystem discovery.

Reads the kernel mount table and sysfs directly; no lsblk/df needed.
"""
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional

from iobench.core.config import DEFAULT_EXCLUDED_FS_TYPES
from iobench.core.logger import get_logger
from iobench.models.bench import MountEntry, MountRecord

logger = get_logger(__name__)

UNKNOWN_MODEL = "Unknown"

_OCTAL_ESCAPE_RE = re.compile(r"\\([0-7]{3})")


def _unescape(field: str) -> str:
    """Decode the octal escapes the kernel uses for spaces etc. in /proc/mounts."""
    return _OCTAL_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 8)), field)


class MountDiscovery:
    """Discover benchmarkable mounts and the disks behind them."""

    def __init__(
        self,
        mounts_file: str = "/proc/self/mounts",
        sys_root: str = "/sys",
        excluded_fs_types: Optional[Iterable[str]] = None,
    ):
        self.mounts_file = Path(mounts_file)
        self.sys_root = Path(sys_root)
        self.excluded_fs_types = set(
            excluded_fs_types if excluded_fs_types is not None else DEFAULT_EXCLUDED_FS_TYPES
        )

    # -----------------------------
    #  Mount table
    # -----------------------------
    def list_mounts(self) -> List[MountEntry]:
        """All mounts in kernel order."""
        entries = []
        for line in self.mounts_file.read_text().splitlines():
            parts = line.split()
            if len(parts) < 3:
                continue
            entries.append(MountEntry(
                device=_unescape(parts[0]),
                mount_path=_unescape(parts[1]),
                fs_type=parts[2],
            ))
        return entries

    def is_real(self, entry: MountEntry) -> bool:
        """False for pseudo filesystems and loop devices."""
        if entry.fs_type in self.excluded_fs_types:
            return False
        if entry.device.startswith("/dev/loop"):
            return False
        return True

    def list_real_mounts(self) -> List[MountEntry]:
        """Mounts backed by real storage, in discovery order."""
        return [entry for entry in self.list_mounts() if self.is_real(entry)]

    # -----------------------------
    #  Block device resolution
    # -----------------------------
    def backing_disk(self, device: str) -> str:
        """Whole-disk name behind a device path, e.g. /dev/sda1 -> sda.

        Device-mapper volumes are followed through their first slave.
        Devices outside /dev (network shares, etc.) are returned unchanged.
        """
        if not device.startswith("/dev/"):
            return device

        name = Path(os.path.realpath(device)).name
        seen = set()
        while name not in seen:
            seen.add(name)
            sys_block = self.sys_root / "class" / "block" / name
            if not sys_block.exists():
                return name

            slaves_dir = sys_block / "slaves"
            if slaves_dir.is_dir():
                slaves = sorted(p.name for p in slaves_dir.iterdir())
                if slaves:
                    name = slaves[0]
                    continue

            if (sys_block / "partition").exists():
                return Path(os.path.realpath(sys_block)).parent.name
            return name
        return name

    def disk_model(self, disk: str) -> str:
        """Model string from sysfs, or UNKNOWN_MODEL."""
        model_file = self.sys_root / "block" / disk / "device" / "model"
        try:
            model = model_file.read_text().strip()
        except OSError:
            return UNKNOWN_MODEL
        return model or UNKNOWN_MODEL

    # -----------------------------
    #  Records
    # -----------------------------
    def to_record(self, entry: MountEntry) -> MountRecord:
        disk = self.backing_disk(entry.device)
        return MountRecord(
            mount_path=entry.mount_path,
            device=entry.device,
            backing_disk=disk,
            filesystem_type=entry.fs_type,
            model=self.disk_model(disk),
        )

    def discover(self) -> List[MountRecord]:
        """One record per real mount, in discovery order."""
        records = [self.to_record(entry) for entry in self.list_real_mounts()]
        logger.debug(f"Discovered {len(records)} real mount(s)")
        return records

    def resolve(self, path: str) -> MountRecord:
        """Record for the mount holding ``path``; the record's mount_path is ``path``.

        Raises:
            FileNotFoundError: If ``path`` is not an existing directory
        """
        target = os.path.realpath(path)
        if not os.path.isdir(target):
            raise FileNotFoundError(f"Benchmark target not found: {path}")

        best: Optional[MountEntry] = None
        for entry in self.list_mounts():
            mount = entry.mount_path
            if target == mount or target.startswith(mount.rstrip("/") + "/"):
                if best is None or len(mount) >= len(best.mount_path):
                    best = entry

        if best is None:
            return MountRecord(
                mount_path=target,
                device="unknown",
                backing_disk="unknown",
                filesystem_type="unknown",
            )

        record = self.to_record(best)
        record.mount_path = target
        return record
