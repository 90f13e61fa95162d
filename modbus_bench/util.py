"""Small concurrency helpers."""

import threading
import time
from typing import Optional


class TimeoutLock:
    """Mutex whose acquire never waits past a timeout or deadline.

    Example:
        >>> lock = TimeoutLock()
        >>> lock.acquire(timeout=1.0)
        True
        >>> lock.locked()
        True
        >>> lock.release()
    """

    def __init__(self):
        self._lock = threading.Lock()

    def locked(self) -> bool:
        """Check whether the lock is held, without blocking."""
        return self._lock.locked()

    def acquire(self, timeout: Optional[float] = None) -> bool:
        """Acquire the lock.

        Args:
            timeout: Seconds to wait; None waits forever, 0 does not wait

        Returns:
            bool: True if acquired, False if the timeout passed first
        """
        if timeout is None:
            return self._lock.acquire()
        if timeout <= 0:
            return self._lock.acquire(blocking=False)
        return self._lock.acquire(timeout=timeout)

    def acquire_until(self, deadline: float) -> bool:
        """Acquire the lock before a time.monotonic() deadline."""
        return self.acquire(timeout=max(0.0, deadline - time.monotonic()))

    def release(self) -> None:
        self._lock.release()

    def __enter__(self) -> 'TimeoutLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
