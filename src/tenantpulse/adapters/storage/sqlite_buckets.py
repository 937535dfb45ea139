"""SQLite storage adapter for minute buckets."""

import sqlite3

import aiosqlite

from tenantpulse.adapters.storage.in_memory import clamp_recent_limit
from tenantpulse.adapters.storage.sqlite_base import SQLiteStorageBase
from tenantpulse.core.models import BucketKey, MetricsSnapshot, TimeBucket

_BUCKETS_SCHEMA = """
CREATE TABLE IF NOT EXISTS metrics_buckets (
    tenant_id TEXT NOT NULL,
    minute_epoch_ms INTEGER NOT NULL,
    users INTEGER NOT NULL,
    sessions INTEGER NOT NULL,
    uptime_pct REAL NOT NULL,
    alert_count INTEGER NOT NULL,
    storage_ok INTEGER NOT NULL,
    auth_ok INTEGER NOT NULL,
    api_latency_ms REAL NOT NULL,
    created_at_ms INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER) * 1000),
    PRIMARY KEY (tenant_id, minute_epoch_ms)
);
"""

# Last write wins; created_at_ms keeps the first insert time
_UPSERT_BUCKET = """
INSERT INTO metrics_buckets (
    tenant_id, minute_epoch_ms, users, sessions, uptime_pct,
    alert_count, storage_ok, auth_ok, api_latency_ms
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (tenant_id, minute_epoch_ms) DO UPDATE SET
    users = excluded.users,
    sessions = excluded.sessions,
    uptime_pct = excluded.uptime_pct,
    alert_count = excluded.alert_count,
    storage_ok = excluded.storage_ok,
    auth_ok = excluded.auth_ok,
    api_latency_ms = excluded.api_latency_ms
"""

_SELECT_RECENT = """
SELECT tenant_id, minute_epoch_ms, users, sessions, uptime_pct,
       alert_count, storage_ok, auth_ok, api_latency_ms
FROM metrics_buckets
WHERE tenant_id = ?
ORDER BY minute_epoch_ms DESC
LIMIT ?
"""

_SELECT_ONE = """
SELECT tenant_id, minute_epoch_ms, users, sessions, uptime_pct,
       alert_count, storage_ok, auth_ok, api_latency_ms
FROM metrics_buckets
WHERE tenant_id = ? AND minute_epoch_ms = ?
"""

_COUNT_BUCKETS = """
SELECT COUNT(*) FROM metrics_buckets
"""


class SQLiteBucketStorage(SQLiteStorageBase):
    """SQLite implementation of BucketStoragePort.

    The ``(tenant_id, minute_epoch_ms)`` primary key plus
    ``INSERT ... ON CONFLICT DO UPDATE`` makes every upsert idempotent, so
    duplicate writers from any process converge on one row per key.
    """

    def __init__(self, db_path: str) -> None:
        super().__init__(db_path, _BUCKETS_SCHEMA)

    @staticmethod
    def _to_row(bucket: TimeBucket) -> tuple[object, ...]:
        s = bucket.snapshot
        return (
            bucket.tenant_id,
            bucket.minute_epoch_ms,
            s.users,
            s.sessions,
            s.uptime_pct,
            s.alert_count,
            int(s.storage_ok),
            int(s.auth_ok),
            s.api_latency_ms,
        )

    @staticmethod
    def _from_row(row: sqlite3.Row | aiosqlite.Row | tuple) -> TimeBucket:
        return TimeBucket(
            key=BucketKey(tenant_id=row[0], minute_epoch_ms=int(row[1])),
            snapshot=MetricsSnapshot(
                users=int(row[2]),
                sessions=int(row[3]),
                uptime_pct=float(row[4]),
                alert_count=int(row[5]),
                storage_ok=bool(row[6]),
                auth_ok=bool(row[7]),
                api_latency_ms=float(row[8]),
            ),
        )

    async def upsert(self, bucket: TimeBucket) -> None:
        """Insert the bucket or overwrite the fields of the existing row."""
        async with self.async_connection() as db:
            await db.execute(_UPSERT_BUCKET, self._to_row(bucket))
            await db.commit()

    async def query_recent(self, tenant_id: str, limit: int) -> list[TimeBucket]:
        """Return up to ``limit`` buckets for the tenant, newest first."""
        async with self.async_connection() as db:
            async with db.execute(
                _SELECT_RECENT, (tenant_id, clamp_recent_limit(limit))
            ) as cursor:
                return [self._from_row(row) async for row in cursor]

    async def get(self, key: BucketKey) -> TimeBucket | None:
        """Return the bucket stored for ``key``, if any."""
        async with self.async_connection() as db:
            async with db.execute(
                _SELECT_ONE, (key.tenant_id, key.minute_epoch_ms)
            ) as cursor:
                row = await cursor.fetchone()
                return self._from_row(row) if row else None

    async def count(self) -> int:
        """Return total number of buckets in storage."""
        async with self.async_connection() as db:
            async with db.execute(_COUNT_BUCKETS) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0
