"""Storage adapters implementing core ports."""

from tenantpulse.adapters.storage.in_memory import (
    InMemoryAuditLog,
    InMemoryBucketStorage,
    InMemoryCaseload,
    InMemoryDirectory,
    InMemoryLogStorage,
)
from tenantpulse.adapters.storage.sqlite_audit import SQLiteAuditLog
from tenantpulse.adapters.storage.sqlite_buckets import SQLiteBucketStorage

__all__ = [
    "InMemoryAuditLog",
    "InMemoryBucketStorage",
    "InMemoryCaseload",
    "InMemoryDirectory",
    "InMemoryLogStorage",
    "SQLiteAuditLog",
    "SQLiteBucketStorage",
]
