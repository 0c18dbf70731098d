from contextlib import contextmanager
from pathlib import Path

import filelock

from .log import get_logger

logger = get_logger(__name__)


class VenvLockManager:
    """Process-safe locking for venv provisioning."""

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)

    @classmethod
    def for_venv(cls, venv_path: Path) -> "VenvLockManager":
        return cls(Path(venv_path).parent / ".locks")

    @contextmanager
    def acquire_lock(self, lock_name: str, timeout: float = 300.0):
        """
        Acquire an exclusive lock for critical operations.

        Args:
            lock_name: Name of the lock (e.g., the venv directory name)
            timeout: Max seconds to wait for lock
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_file = self.lock_dir / f"{lock_name}.lock"
        lock = filelock.FileLock(str(lock_file))
        try:
            lock.acquire(timeout=timeout)
        except filelock.Timeout as e:
            raise TimeoutError(f"Failed to acquire '{lock_name}' lock after {timeout}s") from e
        logger.debug("lock acquired", lock=str(lock_file))
        try:
            yield lock_file  # Critical section runs here
        finally:
            lock.release()
