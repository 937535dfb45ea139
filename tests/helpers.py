"""Test doubles shared across test modules."""

import asyncio

from tenantpulse.core.models import StorageHealth


class StubHealthProbe:
    """HealthProbePort whose answers (or failures) are set per test."""

    def __init__(
        self,
        storage: StorageHealth | BaseException | None = None,
        auth: bool | BaseException = True,
        delay: float = 0.0,
    ) -> None:
        self.storage = storage or StorageHealth(
            connected=True, status="healthy", latency_ms=42.0
        )
        self.auth = auth
        self.delay = delay

    async def storage_health(self) -> StorageHealth:
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.storage, BaseException):
            raise self.storage
        return self.storage

    async def auth_reachable(self) -> bool:
        if isinstance(self.auth, BaseException):
            raise self.auth
        return self.auth


class FailingBucketStorage:
    """BucketStoragePort whose every call raises."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or ConnectionError("store unavailable")
        self.upsert_calls = 0

    async def upsert(self, bucket: object) -> None:
        self.upsert_calls += 1
        raise self.error

    async def query_recent(self, tenant_id: str, limit: int) -> list:
        raise self.error


class SlowBucketStorage:
    """In-memory-style store that yields control during upsert.

    Lets concurrent writers interleave at the await point.
    """

    def __init__(self, delay: float = 0.01) -> None:
        self.delay = delay
        self.buckets: dict = {}
        self.upsert_calls = 0

    async def upsert(self, bucket) -> None:
        self.upsert_calls += 1
        await asyncio.sleep(self.delay)
        self.buckets[bucket.key] = bucket

    async def query_recent(self, tenant_id: str, limit: int) -> list:
        rows = [b for b in self.buckets.values() if b.tenant_id == tenant_id]
        rows.sort(key=lambda b: b.minute_epoch_ms, reverse=True)
        return rows[:limit]
