"""Shared connection handling for the aiosqlite stores."""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from tenantpulse.core.models import StorageHealth

MEMORY_DB = ":memory:"

# A health probe slower than this reports "degraded"
DEGRADED_LATENCY_MS = 1000.0


class SQLiteStorageBase:
    """Base for the SQLite bucket and audit stores.

    The schema is applied once, on first use. A ``:memory:`` database only
    lives as long as its connection, so that case keeps a single shared
    connection open until ``close()``. File databases use WAL mode and a
    fresh connection per operation.
    """

    def __init__(self, db_path: str, schema: str) -> None:
        self._db_path = db_path
        self._schema = schema
        self._ready = False
        self._ready_lock: asyncio.Lock | None = None
        self._shared: aiosqlite.Connection | None = None

    @property
    def _in_memory(self) -> bool:
        return self._db_path == MEMORY_DB

    async def _prepare(self) -> None:
        if self._ready:
            return
        # Created lazily so construction needs no running loop
        if self._ready_lock is None:
            self._ready_lock = asyncio.Lock()
        async with self._ready_lock:
            if self._ready:
                return
            if self._in_memory:
                self._shared = await aiosqlite.connect(MEMORY_DB)
                await self._shared.executescript(self._schema)
            else:
                async with aiosqlite.connect(self._db_path) as db:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.executescript(self._schema)
            self._ready = True

    @asynccontextmanager
    async def async_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a connection with the schema in place."""
        await self._prepare()
        if self._in_memory:
            assert self._shared is not None
            yield self._shared
            return
        db = await aiosqlite.connect(self._db_path)
        try:
            yield db
        finally:
            await db.close()

    async def close(self) -> None:
        """Close the shared ``:memory:`` connection; its data is discarded."""
        if self._shared is not None:
            await self._shared.close()
            self._shared = None
            self._ready = False

    async def health(self) -> StorageHealth:
        """Run a trivial query and report connectivity and round-trip latency."""
        start = time.perf_counter()
        try:
            async with self.async_connection() as db:
                async with db.execute("SELECT 1") as cursor:
                    await cursor.fetchone()
        except (aiosqlite.Error, OSError) as exc:
            return StorageHealth(connected=False, status=f"error: {exc}")
        latency_ms = (time.perf_counter() - start) * 1000
        status = "healthy" if latency_ms < DEGRADED_LATENCY_MS else "degraded"
        return StorageHealth(connected=True, status=status, latency_ms=latency_ms)
