"""In-memory adapters for buckets, audit events, directory data and logs."""

from collections.abc import AsyncIterable

from tenantpulse.core.models import (
    AuditEvent,
    BucketKey,
    CaseNote,
    ClientRecord,
    LogEntry,
    TimeBucket,
    UserStats,
)

MAX_RECENT_BUCKETS = 120


def clamp_recent_limit(limit: int) -> int:
    """Clamp a ``query_recent`` limit into ``[1, 120]``."""
    return max(1, min(MAX_RECENT_BUCKETS, int(limit)))


class InMemoryBucketStorage:
    """In-memory implementation of BucketStoragePort.

    Buckets live in a dict keyed by ``BucketKey``, so a repeat upsert for a
    key replaces the stored snapshot. Suitable for testing and single-process
    deployments where persistence is not required.
    """

    def __init__(self) -> None:
        self._buckets: dict[BucketKey, TimeBucket] = {}

    async def upsert(self, bucket: TimeBucket) -> None:
        """Insert or replace the bucket for its key."""
        self._buckets[bucket.key] = bucket

    async def query_recent(self, tenant_id: str, limit: int) -> list[TimeBucket]:
        """Return up to ``limit`` buckets for the tenant, newest first."""
        tenant_buckets = [b for b in self._buckets.values() if b.tenant_id == tenant_id]
        tenant_buckets.sort(key=lambda b: b.minute_epoch_ms, reverse=True)
        return tenant_buckets[: clamp_recent_limit(limit)]

    async def get(self, key: BucketKey) -> TimeBucket | None:
        """Return the bucket stored for ``key``, if any."""
        return self._buckets.get(key)

    async def count(self) -> int:
        """Return total number of buckets in storage."""
        return len(self._buckets)


class InMemoryAuditLog:
    """In-memory implementation of AuditLogPort.

    Events are appended to a list and never mutated.
    """

    def __init__(self) -> None:
        self._events: list[AuditEvent] = []

    async def append(self, event: AuditEvent) -> None:
        """Append an event to the log."""
        self._events.append(event)

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
        matching = [
            e
            for e in self._events
            if e.tenant_id == tenant_id
            and (start_ms is None or e.timestamp_ms >= start_ms)
            and (end_ms is None or e.timestamp_ms < end_ms)
        ]
        matching.sort(key=lambda e: e.timestamp_ms)
        if limit <= 0:
            return []
        return matching[-limit:]


class InMemoryDirectory:
    """In-memory implementation of DirectoryPort.

    Holds user records per tenant and a presence map of user id to last
    seen epoch millis.
    """

    def __init__(self) -> None:
        self._users: dict[str, list[dict[str, object]]] = {}
        self._last_seen: dict[str, int] = {}

    def add_user(
        self,
        tenant_id: str,
        user_id: str,
        role: str,
        status: str = "active",
        **fields: object,
    ) -> None:
        """Register a user in a tenant."""
        record: dict[str, object] = {
            "id": user_id,
            "role": role,
            "status": status,
            **fields,
        }
        self._users.setdefault(tenant_id, []).append(record)

    def mark_seen(self, user_id: str, at_ms: int) -> None:
        """Record that a user was seen at ``at_ms``."""
        self._last_seen[user_id] = at_ms

    async def user_stats(self, tenant_id: str) -> UserStats:
        """Return head counts for the tenant's users."""
        users = self._users.get(tenant_id, [])
        by_role: dict[str, int] = {}
        for user in users:
            role = str(user["role"])
            by_role[role] = by_role.get(role, 0) + 1
        return UserStats(
            total=len(users),
            active=sum(1 for u in users if u["status"] == "active"),
            inactive=sum(1 for u in users if u["status"] == "inactive"),
            suspended=sum(1 for u in users if u["status"] == "suspended"),
            by_role=by_role,
        )

    async def list_users(self, tenant_id: str) -> list[dict[str, object]]:
        """Return copies of the tenant's user records."""
        return [dict(u) for u in self._users.get(tenant_id, [])]

    async def online_session_count(self, tenant_id: str, since_ms: int) -> int:
        """Count the tenant's users seen at or after ``since_ms``."""
        return sum(
            1
            for u in self._users.get(tenant_id, [])
            if self._last_seen.get(str(u["id"]), -1) >= since_ms
        )


class InMemoryCaseload:
    """In-memory implementation of CaseloadPort."""

    def __init__(self) -> None:
        self._clients: dict[str, list[ClientRecord]] = {}
        self._notes: dict[str, list[CaseNote]] = {}

    def add_client(self, tenant_id: str, client: ClientRecord) -> None:
        self._clients.setdefault(tenant_id, []).append(client)

    def add_note(self, tenant_id: str, note: CaseNote) -> None:
        self._notes.setdefault(tenant_id, []).append(note)

    async def list_clients(self, tenant_id: str) -> list[ClientRecord]:
        return list(self._clients.get(tenant_id, []))

    async def list_notes(self, tenant_id: str) -> list[CaseNote]:
        return list(self._notes.get(tenant_id, []))


class InMemoryLogStorage:
    """In-memory implementation of LogStoragePort.

    Stores log entries in a list. Suitable for testing and
    low-volume applications where persistence is not required.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self._entries.append(entry)

    def write_sync(self, entry: LogEntry) -> None:
        """Write a log entry from synchronous code (logging handlers)."""
        self._entries.append(entry)

    async def read(
        self, since: float = 0, level: str | None = None
    ) -> AsyncIterable[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending,
        optionally restricted to one level (case-insensitive).
        """
        filtered = [
            e
            for e in self._entries
            if e.timestamp > since and (level is None or e.level.upper() == level.upper())
        ]
        for entry in sorted(filtered, key=lambda e: e.timestamp):
            yield entry
