"""Port interfaces for the collaborators of the aggregation core.

These protocols define the contracts that storage and provider adapters must
implement. The core depends only on these interfaces, not on concrete
implementations.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from tenantpulse.core.models import (
    AuditEvent,
    CaseNote,
    ClientRecord,
    LogEntry,
    StorageHealth,
    TimeBucket,
    UserStats,
)


@runtime_checkable
class BucketStoragePort(Protocol):
    """Port for minute-bucket storage.

    Adapters implementing this protocol store one bucket per
    ``(tenant_id, minute_epoch_ms)`` key.
    Examples: InMemoryBucketStorage, SQLiteBucketStorage.
    """

    async def upsert(self, bucket: TimeBucket) -> None:
        """Insert the bucket, or replace the fields of an existing one.

        Must be idempotent and safe under concurrent duplicate calls;
        the last write for a key wins.
        """
        ...

    async def query_recent(self, tenant_id: str, limit: int) -> list[TimeBucket]:
        """Return up to ``limit`` buckets for the tenant, newest first."""
        ...


@runtime_checkable
class AuditLogPort(Protocol):
    """Port for the append-only audit log.

    Examples: InMemoryAuditLog, SQLiteAuditLog.
    """

    async def append(self, event: AuditEvent) -> None:
        """Append an event to the log."""
        ...

    async def list(
        self,
        tenant_id: str,
        start_ms: int | None = None,
        end_ms: int | None = None,
        limit: int = 1000,
    ) -> Sequence[AuditEvent]:
        """List a tenant's events in ``[start_ms, end_ms)``, oldest first.

        Args:
            tenant_id: Tenant whose events to return.
            start_ms: Inclusive lower bound, or None for unbounded.
            end_ms: Exclusive upper bound, or None for unbounded.
            limit: Maximum number of events returned (the newest ones).
        """
        ...


@runtime_checkable
class DirectoryPort(Protocol):
    """Port for user and presence lookups."""

    async def user_stats(self, tenant_id: str) -> UserStats:
        """Return head counts for the tenant's users."""
        ...

    async def list_users(self, tenant_id: str) -> list[dict[str, object]]:
        """Return the tenant's users as plain records."""
        ...

    async def online_session_count(self, tenant_id: str, since_ms: int) -> int:
        """Return how many of the tenant's users were seen since ``since_ms``."""
        ...


@runtime_checkable
class CaseloadPort(Protocol):
    """Port for a tenant's clients and case notes.

    Examples: InMemoryCaseload.
    """

    async def list_clients(self, tenant_id: str) -> list[ClientRecord]:
        """Return every client of the tenant."""
        ...

    async def list_notes(self, tenant_id: str) -> list[CaseNote]:
        """Return every case note written within the tenant."""
        ...


@runtime_checkable
class HealthProbePort(Protocol):
    """Port for component health checks."""

    async def storage_health(self) -> StorageHealth:
        """Probe the backing store."""
        ...

    async def auth_reachable(self) -> bool:
        """Return True when the auth provider answers. May raise."""
        ...


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for storage of the package's own diagnostic log entries."""

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def write_sync(self, entry: LogEntry) -> None:
        """Write a log entry from synchronous code."""
        ...
