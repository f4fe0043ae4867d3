"""Per-mount locking for benchmark runs.

Two iobench processes benchmarking the same mount would write the same
scratch files and skew each other's numbers, so each run holds an exclusive
lock file at the mount root while it works.
"""
import fcntl
import os
import time
from pathlib import Path
from typing import Optional

from iobench.core.errors import IOBenchError
from iobench.core.logger import get_logger

logger = get_logger(__name__)

LOCK_NAME = ".iobench.lock"


class LockError(IOBenchError):
    """Raised when unable to acquire lock."""
    pass


class MountLock:
    """File-based lock guarding one mount's scratch area."""

    def __init__(self, mount_path: Path, timeout: int = 0):
        """Initialize lock.

        Args:
            mount_path: Directory the lock file is created in
            timeout: Seconds to wait for lock (0 = fail immediately)
        """
        self.lock_file = Path(mount_path) / LOCK_NAME
        self.timeout = timeout
        self.lock_fd = None

    def acquire(self) -> bool:
        """Acquire the lock.

        Returns:
            True if lock acquired successfully

        Raises:
            LockError: If unable to acquire lock
        """
        self.lock_fd = open(self.lock_file, 'a+')

        start_time = time.time()
        while True:
            try:
                fcntl.flock(self.lock_fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)

                # Record the holder only once the lock is ours
                self.lock_fd.seek(0)
                self.lock_fd.truncate()
                self.lock_fd.write(f"{os.getpid()}\n")
                self.lock_fd.write(f"{time.strftime('%Y-%m-%d %H:%M:%S')}\n")
                self.lock_fd.flush()

                logger.debug(f"Acquired lock: {self.lock_file}")
                return True

            except OSError:
                if self.timeout == 0:
                    lock_info = self._read_lock_info()
                    self._close()
                    raise LockError(
                        f"Another iobench run is using {self.lock_file.parent} "
                        f"(PID {lock_info['pid']} since {lock_info['time']}). "
                        f"Wait for it to finish, or remove {self.lock_file} if stale."
                    )

                elapsed = time.time() - start_time
                if elapsed >= self.timeout:
                    lock_info = self._read_lock_info()
                    self._close()
                    raise LockError(
                        f"Timeout waiting for lock after {self.timeout}s. "
                        f"Lock held by PID {lock_info['pid']} since {lock_info['time']}"
                    )

                time.sleep(0.5)

    def release(self):
        """Release the lock and remove the lock file."""
        if self.lock_fd is None:
            return

        try:
            fcntl.flock(self.lock_fd.fileno(), fcntl.LOCK_UN)
            logger.debug(f"Released lock: {self.lock_file}")
        except OSError as e:
            logger.warning(f"Error releasing lock: {e}")
        finally:
            self._close()

        try:
            self.lock_file.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Error removing lock file: {e}")

    def _close(self):
        if self.lock_fd is not None:
            self.lock_fd.close()
            self.lock_fd = None

    def _read_lock_info(self) -> dict:
        """Read info from lock file about who holds it."""
        try:
            with open(self.lock_file) as f:
                lines = f.readlines()
                if len(lines) >= 2:
                    return {
                        'pid': lines[0].strip(),
                        'time': lines[1].strip()
                    }
        except OSError:
            pass

        return {'pid': 'unknown', 'time': 'unknown'}

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
