"""Store-scoped write lock.

Every store identifier gets one lock per process. Writers take it with a
bounded wait and release it through the handle's context manager::

    with lock_for(store.identifier).acquire(timeout=20) as handle:
        ...
"""
from __future__ import annotations

import logging
import threading
from typing import Dict

from .errors import LockTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 20.0


class LockHandle:
    def __init__(self, lock: "StoreLock") -> None:
        self._lock = lock
        self.released = False

    def release(self) -> None:
        if not self.released:
            self.released = True
            self._lock._release()

    def __enter__(self) -> "LockHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()


class StoreLock:
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        self._lock = threading.Lock()

    def acquire(self, timeout: float = DEFAULT_LOCK_TIMEOUT) -> LockHandle:
        if not self._lock.acquire(timeout=max(timeout, 0)):
            logger.warning("[LOCK] timed out after %.1fs waiting for %s", timeout, self.identifier)
            raise LockTimeoutError()
        return LockHandle(self)

    def locked(self) -> bool:
        return self._lock.locked()

    def _release(self) -> None:
        self._lock.release()


_LOCKS: Dict[str, StoreLock] = {}
_REGISTRY_GUARD = threading.Lock()


def lock_for(identifier: str) -> StoreLock:
    with _REGISTRY_GUARD:
        lock = _LOCKS.get(identifier)
        if lock is None:
            lock = StoreLock(identifier)
            _LOCKS[identifier] = lock
        return lock


__all__ = ["DEFAULT_LOCK_TIMEOUT", "LockHandle", "StoreLock", "lock_for"]
