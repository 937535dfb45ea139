"""SQLite storage adapter for the audit log."""

import aiosqlite

from tenantpulse.adapters.storage.sqlite_base import SQLiteStorageBase
from tenantpulse.core.models import AuditEvent

_AUDIT_SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tenant_id TEXT NOT NULL,
    timestamp_ms INTEGER NOT NULL,
    action TEXT NOT NULL,
    actor_id TEXT,
    entity_type TEXT,
    entity_id TEXT,
    actor_role TEXT,
    actor_name TEXT,
    actor_email TEXT
);
CREATE INDEX IF NOT EXISTS idx_audit_tenant_timestamp
    ON audit_events(tenant_id, timestamp_ms);
"""

_INSERT_EVENT = """
INSERT INTO audit_events (
    tenant_id, timestamp_ms, action, actor_id, entity_type,
    entity_id, actor_role, actor_name, actor_email
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

# Newest `limit` rows in range; callers get them back oldest first
_SELECT_EVENTS = """
SELECT tenant_id, timestamp_ms, action, actor_id, entity_type,
       entity_id, actor_role, actor_name, actor_email
FROM (
    SELECT * FROM audit_events
    WHERE tenant_id = ?
      AND (? IS NULL OR timestamp_ms >= ?)
      AND (? IS NULL OR timestamp_ms < ?)
    ORDER BY timestamp_ms DESC, id DESC
    LIMIT ?
)
ORDER BY timestamp_ms ASC, id ASC
"""

_COUNT_EVENTS = """
SELECT COUNT(*) FROM audit_events
"""


def _from_row(row: aiosqlite.Row | tuple) -> AuditEvent:
    return AuditEvent(
        tenant_id=row[0],
        timestamp_ms=int(row[1]),
        action=row[2],
        actor_id=row[3],
        entity_type=row[4],
        entity_id=row[5],
        actor_role=row[6],
        actor_name=row[7],
        actor_email=row[8],
    )


class SQLiteAuditLog(SQLiteStorageBase):
    """SQLite implementation of AuditLogPort.

    Append-only: this adapter never updates or deletes rows.
    """

    def __init__(self, db_path: str) -> None:
        super().__init__(db_path, _AUDIT_SCHEMA)

    async def append(self, event: AuditEvent) -> None:
        """Append an event to the log."""
        async with self.async_connection() as db:
            await db.execute(
                _INSERT_EVENT,
                (
                    event.tenant_id,
                    event.timestamp_ms,
                    event.action,
                    event.actor_id,
                    event.entity_type,
                    event.entity_id,
                    event.actor_role,
                    event.actor_name,
                    event.actor_email,
                ),
            )
            await db.commit()

    async def count(self) -> int:
        """Return total number of events in storage."""
        async with self.async_connection() as db:
            async with db.execute(_COUNT_EVENTS) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    async def list(
        self,
        tenant_id: str,
        start_ms: int | None = None,
        end_ms: int | None = None,
        limit: int = 1000,
    ) -> list[AuditEvent]:
        """List the tenant's events in ``[start_ms, end_ms)``.

        Returns at most ``limit`` events, the newest ones, oldest first.
        """
        if limit <= 0:
            return []
        params = (tenant_id, start_ms, start_ms, end_ms, end_ms, limit)
        async with self.async_connection() as db:
            async with db.execute(_SELECT_EVENTS, params) as cursor:
                return [_from_row(row) async for row in cursor]
