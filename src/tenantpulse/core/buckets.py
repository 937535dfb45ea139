"""Per-minute bucket persistence with in-process write deduplication.

Many dashboard requests land in the same minute. The lock registry turns N
redundant upserts for a ``(tenant, minute)`` key into at most one in flight
per process. It is a cost optimisation only: writers in other processes, or
writers that race past an expired lock, are absorbed by the store's
idempotent upsert.
"""

import asyncio
import time
from collections.abc import Callable

from tenantpulse.core.logs import get_logger
from tenantpulse.core.models import BucketKey, MetricsSnapshot, TimeBucket
from tenantpulse.core.ports import BucketStoragePort

logger = get_logger(__name__)

DEFAULT_LOCK_TTL_SECONDS = 5.0


class WriteLockRegistry:
    """Process-local set of write locks keyed by ``BucketKey``.

    A lock expires ``ttl_seconds`` after acquisition even if nobody releases
    it, so a crashed or abandoned writer can only block its key briefly.
    ``try_acquire`` does not await between checking and setting, which makes
    it atomic with respect to other coroutines on the same event loop.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_LOCK_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._acquired_at: dict[BucketKey, float] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _expired(self, key: BucketKey, now: float) -> bool:
        acquired = self._acquired_at.get(key)
        return acquired is not None and now - acquired >= self._ttl

    def is_locked(self, key: BucketKey) -> bool:
        """Return True while a live lock is held for ``key``."""
        now = self._clock()
        if self._expired(key, now):
            del self._acquired_at[key]
        return key in self._acquired_at

    def try_acquire(self, key: BucketKey) -> bool:
        """Take the lock for ``key`` unless a live one already exists."""
        if self.is_locked(key):
            return False
        self._acquired_at[key] = self._clock()
        return True

    def acquired_at(self, key: BucketKey) -> float | None:
        """Return the clock reading at which the live lock was taken."""
        return self._acquired_at.get(key) if self.is_locked(key) else None

    def release(self, key: BucketKey, acquired_at: float | None = None) -> None:
        """Drop the lock for ``key``; releasing twice is harmless.

        When ``acquired_at`` is given, only the lock taken at that instant is
        dropped, so a late timer cannot release a newer holder.
        """
        if acquired_at is not None and self._acquired_at.get(key) != acquired_at:
            return
        self._acquired_at.pop(key, None)

    def __len__(self) -> int:
        now = self._clock()
        for key in [k for k in self._acquired_at if self._expired(k, now)]:
            del self._acquired_at[key]
        return len(self._acquired_at)


class BucketWriteCoordinator:
    """Persists snapshots into minute buckets, skipping keys already in flight.

    Persistence is best effort: store errors are logged and swallowed so the
    request that triggered the write still succeeds.
    """

    def __init__(
        self,
        storage: BucketStoragePort,
        locks: WriteLockRegistry | None = None,
    ) -> None:
        self._storage = storage
        self._locks = locks if locks is not None else WriteLockRegistry()

    @property
    def locks(self) -> WriteLockRegistry:
        return self._locks

    def _schedule_release(self, key: BucketKey, acquired_at: float | None) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        loop.call_later(self._locks.ttl_seconds, self._locks.release, key, acquired_at)

    async def persist(
        self, tenant_id: str, snapshot: MetricsSnapshot, now_ms: int
    ) -> bool:
        """Upsert ``snapshot`` into the tenant's bucket for the current minute.

        Args:
            tenant_id: Owning tenant.
            snapshot: Values to store.
            now_ms: Current epoch millis; truncated to the minute.

        Returns:
            True if this call wrote the bucket, False if it skipped because
            another write for the key was in flight, or if the upsert failed.
        """
        key = BucketKey.for_time(tenant_id, now_ms)
        if not self._locks.try_acquire(key):
            logger.debug(
                "Bucket %s@%d already being written, skipping",
                key.tenant_id,
                key.minute_epoch_ms,
            )
            return False

        acquired_at = self._locks.acquired_at(key)
        # Safety net in case the explicit release below never runs
        self._schedule_release(key, acquired_at)
        try:
            await self._storage.upsert(TimeBucket(key=key, snapshot=snapshot))
        except Exception:
            logger.warning(
                "Failed to upsert metrics bucket %s@%d",
                key.tenant_id,
                key.minute_epoch_ms,
                exc_info=True,
            )
            return False
        finally:
            # Our lock may have expired and been taken by a newer writer
            self._locks.release(key, acquired_at)
        return True
