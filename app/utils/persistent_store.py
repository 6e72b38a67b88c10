"""Small persistent key-value store shared between processes.

Each key is one file under the store directory. Writes go through a temp
file and ``os.replace`` under an advisory lock file, so a reader in another
process sees either the previous or the new value, never a torn one.

The store also provides the cross-process change signal: an instance
remembers the file state it last read or wrote, and
:meth:`KeyValueFileStore.poll_external_change` reports when some other
writer has replaced the file since.
"""
from __future__ import annotations

import logging
import os
import threading
import time

from app.domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class FileLock:
    """Simple file-lock using a lockfile (cross-platform, advisory).

    Note: This is a lightweight lock suitable for single-writer or low-contention
    scenarios. It uses atomic creation of a .lock file and retries until timeout.
    """

    def __init__(self, lock_path: str, timeout: float = 5.0, retry: float = 0.05) -> None:
        self.lock_path = lock_path
        self.timeout = float(timeout)
        self.retry = float(retry)
        self._acquired = False

    def acquire(self) -> bool:
        start = time.time()
        while True:
            try:
                # O_EXCL ensures atomic creation; failing if exists
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                os.close(fd)
                self._acquired = True
                return True
            except FileExistsError:
                if (time.time() - start) >= self.timeout:
                    return False
                time.sleep(self.retry)

    def release(self) -> None:
        try:
            if self._acquired and os.path.exists(self.lock_path):
                os.unlink(self.lock_path)
        finally:
            self._acquired = False

    def __enter__(self):
        ok = self.acquire()
        if not ok:
            raise RepositoryError(
                f"Failed to acquire file lock: {self.lock_path}", detail={"lock_path": self.lock_path}
            )
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


class KeyValueFileStore:
    """Bytes stored under a single key, shared by every process using ``directory``."""

    def __init__(self, directory: str, key: str, *, lock_timeout: float = 5.0) -> None:
        if not key or os.sep in key:
            raise ValueError(f"Invalid store key: {key!r}")
        self.directory = directory
        self.key = key
        self.path = os.path.join(directory, f"{key}.json")
        self._lock_path = self.path + ".lock"
        self._lock_timeout = lock_timeout
        self._known_state: tuple[int, int] | None = None
        self._state_lock = threading.Lock()
        os.makedirs(directory, exist_ok=True)

    def _file_state(self) -> tuple[int, int] | None:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return (st.st_mtime_ns, st.st_size)

    def load(self) -> bytes | None:
        """Return the stored bytes, or None when absent or unreadable."""
        try:
            if not os.path.exists(self.path):
                with self._state_lock:
                    self._known_state = None
                return None
            with FileLock(self._lock_path, timeout=self._lock_timeout):
                with open(self.path, "rb") as fh:
                    data = fh.read()
                with self._state_lock:
                    self._known_state = self._file_state()
            return data
        except (OSError, RepositoryError) as e:
            logger.warning("Failed to load store key %s: %s", self.key, e)
            return None

    def save(self, data: bytes) -> None:
        """Replace the stored bytes; failures are logged and dropped."""
        try:
            with FileLock(self._lock_path, timeout=self._lock_timeout):
                tmp = self.path + ".tmp"
                with open(tmp, "wb") as fh:
                    fh.write(data)
                # Own writes never show up in poll_external_change
                with self._state_lock:
                    os.replace(tmp, self.path)
                    self._known_state = self._file_state()
        except (OSError, RepositoryError) as e:
            logger.warning("Failed to save store key %s: %s", self.key, e)

    def poll_external_change(self) -> bool:
        """True when the file changed since this instance last read or wrote it."""
        with self._state_lock:
            current = self._file_state()
            if current == self._known_state:
                return False
            self._known_state = current
        logger.debug("Store key %s changed externally", self.key)
        return True
