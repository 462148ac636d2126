import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

logger = logging.getLogger(__name__)


class RoomLocks:
    """One asyncio lock per room id.

    Every conflict-check-and-commit for a room runs while holding that room's
    lock, so two requests in this process can never both see a slot as free.
    """

    def __init__(self) -> None:
        self._locks: Dict[int, asyncio.Lock] = {}

    def _lock_for(self, room_id: int) -> asyncio.Lock:
        lock = self._locks.get(room_id)
        if lock is None:
            lock = self._locks[room_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        lock = self._lock_for(room_id)
        if lock.locked():
            logger.debug("Waiting for lock on room %s", room_id)
        async with lock:
            yield
