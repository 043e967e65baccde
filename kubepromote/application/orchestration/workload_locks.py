"""
Workload Locks

Architectural Intent:
- Serialises promote/rollback decisions per (namespace, label) inside one process
- Held across observe -> set version -> history append, released before the
  confirmation watcher is spawned
- Does not coordinate across processes; two controllers can still race
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class WorkloadLocks:
    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}

    def _lock_for(self, namespace: str, label: str) -> asyncio.Lock:
        key = (namespace, label)
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def is_held(self, namespace: str, label: str) -> bool:
        lock = self._locks.get((namespace, label))
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, namespace: str, label: str) -> AsyncIterator[None]:
        lock = self._lock_for(namespace, label)
        if lock.locked():
            logger.info("Waiting for in-flight change on %s/%s", namespace, label)
        async with lock:
            yield
