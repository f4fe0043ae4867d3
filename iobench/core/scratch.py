"""Scratch file handling under a benchmark target."""
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from iobench.core.lock import MountLock
from iobench.core.logger import get_logger

logger = get_logger(__name__)

SCRATCH_NAME = ".iobench_scratch"


@contextmanager
def scratch_dir(target: Path, create_target: bool = False) -> Iterator[Path]:
    """Hold the target's lock and yield an empty scratch directory in it.

    The scratch directory is removed on every exit path, including dd/fio
    failures and KeyboardInterrupt. With ``create_target`` a missing target
    directory is created and removed again afterwards.

    Raises:
        LockError: If another iobench run holds the target
        FileNotFoundError: If the target is missing and not created
    """
    target = Path(target)
    created = False
    if not target.is_dir():
        if not create_target:
            raise FileNotFoundError(f"Benchmark target not found: {target}")
        target.mkdir(parents=True)
        created = True

    scratch = target / SCRATCH_NAME
    try:
        with MountLock(target):
            if scratch.exists():
                logger.warning(f"Removing leftover scratch directory {scratch}")
                shutil.rmtree(scratch)
            scratch.mkdir()
            try:
                yield scratch
            finally:
                shutil.rmtree(scratch, ignore_errors=True)
                logger.debug(f"Cleaned up {scratch}")
    finally:
        if created:
            shutil.rmtree(target, ignore_errors=True)
