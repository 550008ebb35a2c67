"""
Concurrent access control for golta.

Installs and uninstalls of the same tool version from several processes
(for example two shims auto-installing at once) are serialized with a
per-version file lock from the `filelock` library.

Usage:
    from golta.core.locking import LockManager, InstallCoordinator

    lock_manager = LockManager(paths.lock_dir)
    coordinator = InstallCoordinator(lock_manager)
    with coordinator.coordinate("go", "1.22.3", is_complete) as should_install:
        if should_install:
            install()
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable

from filelock import FileLock
from filelock import Timeout as FileLockTimeout

from golta.core.exceptions import LockTimeout

logger = logging.getLogger(__name__)


class LockManager:
    """
    Manages per-version lock files.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path, timeout: int = 300):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (usually ~/.golta/lock)
            timeout: Default wait time in seconds
        """
        self.lock_dir = Path(lock_dir)
        self.timeout = timeout

    def lock_path(self, tool: str, version: str) -> Path:
        """Get the lock file path for a tool version."""
        safe_id = f"{tool}-{version}"
        for char in ("/", "\\", ":"):
            safe_id = safe_id.replace(char, "-")
        return self.lock_dir / f"{safe_id}.lock"

    @contextmanager
    def version_lock(self, tool: str, version: str, timeout: int = None):
        """
        Acquire the lock guarding one installed version.

        Args:
            tool: Tool name
            version: Version string
            timeout: Maximum wait time in seconds (default: manager timeout)

        Yields:
            None

        Raises:
            LockTimeout: If lock can't be acquired within timeout

        Example:
            >>> with lock_manager.version_lock('go', '1.22.3'):
            ...     install_go('1.22.3')
        """
        if timeout is None:
            timeout = self.timeout

        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.lock_path(tool, version)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired version lock: {lock_path}")
                yield
                logger.debug(f"Released version lock: {lock_path}")
        except FileLockTimeout as e:
            raise LockTimeout(
                f"Could not acquire lock for {tool} {version} after {timeout}s. "
                "Another golta process may be installing or removing it."
            ) from e


class InstallCoordinator:
    """
    Coordinate installs of the same version across processes.

    The first process to take the lock performs the work; processes that
    were waiting re-check completeness once they get the lock and skip
    the install if it has already happened.
    """

    def __init__(self, lock_manager: LockManager):
        self.lock_manager = lock_manager

    @contextmanager
    def coordinate(self, tool: str, version: str, is_complete: Callable[[], bool]):
        """
        Decide whether the current process should install a version.

        Args:
            tool: Tool name
            version: Version string
            is_complete: Returns True when the version is fully installed

        Yields:
            bool: True if this process should install, False if already done
        """
        # Quick check without lock
        if is_complete():
            logger.debug(f"{tool} {version} already installed, no lock needed")
            yield False
            return

        with self.lock_manager.version_lock(tool, version):
            # Check again after acquiring lock (another process may have completed)
            if is_complete():
                logger.info(f"Another process completed install of {tool} {version}")
                yield False
            else:
                yield True


__all__ = [
    "LockManager",
    "InstallCoordinator",
    "LockTimeout",
]
