"""Per facility/sport serialization of court allocation.

Only one allocation may read the ledger and insert a booking at a time for a
given facility and sport. Inside one process an asyncio.Lock per key does
that; on PostgreSQL a transaction-scoped advisory lock extends it across
processes and is released when the caller commits or rolls back.
"""
import asyncio
import hashlib
import logging
from contextlib import asynccontextmanager
from typing import Dict, Tuple

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def advisory_lock_key(facility_id: str, sport_id: str) -> int:
    """Stable signed 64-bit key for pg_advisory_xact_lock."""
    digest = hashlib.blake2b(f"{facility_id}:{sport_id}".encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


class AllocationLockRegistry:
    """Hands out allocation locks keyed by (facility_id, sport_id)."""

    def __init__(self):
        self._locks: Dict[Tuple[str, str], asyncio.Lock] = {}
        self._users: Dict[Tuple[str, str], int] = {}

    @asynccontextmanager
    async def hold(self, db: AsyncSession, facility_id: str, sport_id: str):
        """
        Hold the allocation lock for a facility and sport.

        The caller must commit or roll back before leaving the block.

        Args:
            db: Session the allocation runs in
            facility_id: Facility ID
            sport_id: Sport ID
        """
        key = (facility_id, sport_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1

        try:
            async with lock:
                if db.get_bind().dialect.name == "postgresql":
                    await db.execute(
                        text("SELECT pg_advisory_xact_lock(:key)"),
                        {"key": advisory_lock_key(facility_id, sport_id)},
                    )
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                # Nobody holds or waits for this key any more
                del self._users[key]
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


# Singleton instance
allocation_locks = AllocationLockRegistry()
