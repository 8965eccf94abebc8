"""Named asyncio locks used to serialize scans."""

import asyncio
from contextlib import asynccontextmanager
import logging

logger = logging.getLogger(__name__)


class StateLock:
    """Async lock that tracks how many holders are queued or active."""

    def __init__(self, name: str):
        """Initialize state lock."""
        self.name = name
        self._lock = asyncio.Lock()
        self._waiters = 0
        logger.debug(f"State lock '{name}' created")

    @asynccontextmanager
    async def locked(self):
        """Hold the lock for the duration of the block."""
        self._waiters += 1
        try:
            await self._lock.acquire()
            logger.debug(f"State lock '{self.name}' acquired (waiters: {self._waiters})")
            try:
                yield
            finally:
                self._lock.release()
                logger.debug(f"State lock '{self.name}' released")
        finally:
            self._waiters -= 1

    def is_locked(self) -> bool:
        """Whether the lock is currently held."""
        return self._lock.locked()

    def waiter_count(self) -> int:
        """Number of tasks holding or waiting for the lock."""
        return self._waiters


class StateManager:
    """Registry of named state locks."""

    def __init__(self):
        """Initialize state manager."""
        self._locks: dict[str, StateLock] = {}

    def get_lock(self, name: str) -> StateLock:
        """Get or create a state lock."""
        if name not in self._locks:
            self._locks[name] = StateLock(name)
        return self._locks[name]

    @asynccontextmanager
    async def lock_state(self, lock_name: str):
        """Context manager for locking specific state."""
        async with self.get_lock(lock_name).locked():
            yield

    def get_lock_status(self) -> dict[str, bool]:
        """Whether each registered lock is currently held."""
        return {name: lock.is_locked() for name, lock in self._locks.items()}
