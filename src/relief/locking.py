"""Per-row locks and serialized command dispatch.

Every command that reads-then-writes a stock balance declares the rows it
touches through ``@serialized_by``. ``dispatch()`` takes those row locks in
lexicographic key order, processes the command synchronously (validation,
mutation, movement writes and commit all happen inside the handler's Unit of
Work), then releases the locks. Acquiring in one global order means two
transfers moving the same item in opposite directions can never deadlock.

The lock wait is bounded by ``RELIEF_LOCK_TIMEOUT`` seconds; when it runs out
the caller receives ``Busy`` and may retry.
"""

import os
import threading
from contextlib import contextmanager

from protean.utils.globals import current_domain

from relief.domain import logger
from relief.errors import Busy

DEFAULT_LOCK_TIMEOUT = 5.0

# The in-memory provider commits by swapping its whole store, so unrelated
# commits must not interleave.
MEMORY_STORE_KEY = "~memory-store"


class LockRegistry:
    """Lazily created ``threading.Lock`` objects, one per key."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def is_locked(self, key: str) -> bool:
        with self._guard:
            lock = self._locks.get(key)
        return lock is not None and lock.locked()


_registry = LockRegistry()
_resolvers = {}


def get_registry() -> LockRegistry:
    return _registry


def lock_timeout() -> float:
    return float(os.getenv("RELIEF_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT))


@contextmanager
def hold(keys, timeout: float | None = None):
    """Hold the locks for ``keys`` (sorted, de-duplicated) for the block's duration."""
    ordered = sorted(set(keys))
    timeout = lock_timeout() if timeout is None else timeout
    acquired = []
    try:
        for key in ordered:
            lock = _registry.lock_for(key)
            if not lock.acquire(timeout=timeout):
                logger.warning("Lock wait timed out", key=key, keys=ordered, timeout=timeout)
                raise Busy(ordered, timeout)
            acquired.append(lock)
        yield ordered
    finally:
        for lock in reversed(acquired):
            lock.release()


def serialized_by(resolver):
    """Register ``resolver(command) -> iterable of lock keys`` for a command class.

    Apply it above the domain's ``@command`` decorator so the registered class
    is the one Protean hands back.
    """

    def decorator(command_cls):
        _resolvers[command_cls] = resolver
        return command_cls

    return decorator


def row_keys_for(command) -> list[str]:
    """Row keys ``command`` declares, in declaration order."""
    resolver = _resolvers.get(type(command))
    return list(resolver(command)) if resolver else []


def lock_keys_for(command) -> list[str]:
    keys = row_keys_for(command)
    if _uses_memory_store():
        keys.append(MEMORY_STORE_KEY)
    return keys


def _uses_memory_store() -> bool:
    provider = current_domain.providers["default"]
    return provider.conn_info["provider"] == "memory"


def dispatch(command):
    """Process ``command`` synchronously while holding the rows it declares."""
    with hold(lock_keys_for(command)):
        return current_domain.process(command, asynchronous=False)
