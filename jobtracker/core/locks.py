"""Per-application locks serializing mutations of one aggregate.

Example:
    ```python
    from jobtracker.core.locks import application_locks

    with application_locks.hold(application_id):
        ...  # load, mutate, commit
    ```
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from jobtracker.core.config import get_settings
from jobtracker.core.errors import InternalError
from jobtracker.core.logging import setup_logging

logger = setup_logging('core_locks')


class ApplicationLocks:
    """Registry of one lock per application id.

    Locks are created on first use and kept for the life of the process;
    ``discard`` drops the lock of a deleted application.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._registry_lock = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        if self._timeout is not None:
            return self._timeout
        return get_settings().lock_timeout_seconds

    def _lock_for(self, application_id: int) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(application_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[application_id] = lock
            return lock

    @contextmanager
    def hold(self, application_id: int) -> Iterator[None]:
        """Hold the lock of ``application_id`` for the enclosed block."""
        lock = self._lock_for(application_id)
        if not lock.acquire(timeout=self.timeout):
            logger.error(f"Timed out waiting for lock on application {application_id}")
            raise InternalError("Application is busy, please retry")
        try:
            yield
        finally:
            lock.release()

    def discard(self, application_id: int) -> None:
        with self._registry_lock:
            self._locks.pop(application_id, None)

    def __len__(self):
        return len(self._locks)


application_locks = ApplicationLocks()
