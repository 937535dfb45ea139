"""tenantpulse: per-minute metric buckets, dashboard series and audit reports.

Public API:
    - Models: MetricsSnapshot, BucketKey, TimeBucket, AuditEvent, DateRange
    - Parsing: parse_window, resolve_date_range
    - Real-time path: SnapshotCollector, BucketWriteCoordinator,
      WriteLockRegistry, SeriesReconstructor, MetricsSeriesService
    - Report path: ReportService, aggregate_audits, aggregate_performance,
      aggregate_support_workers, daily_buckets
    - Storage: in-memory and SQLite adapters
"""

from tenantpulse.adapters.storage import (
    InMemoryAuditLog,
    InMemoryBucketStorage,
    InMemoryCaseload,
    InMemoryDirectory,
    InMemoryLogStorage,
    SQLiteAuditLog,
    SQLiteBucketStorage,
)
from tenantpulse.core.buckets import BucketWriteCoordinator, WriteLockRegistry
from tenantpulse.core.collector import SnapshotCollector
from tenantpulse.core.config import AggregationConfig
from tenantpulse.core.date_range import resolve_date_range
from tenantpulse.core.logs import get_logger
from tenantpulse.core.models import (
    AuditEvent,
    BucketKey,
    Caller,
    DateRange,
    MetricsSnapshot,
    TimeBucket,
)
from tenantpulse.core.reports import (
    ReportKind,
    ReportService,
    aggregate_audits,
    aggregate_performance,
    aggregate_support_workers,
    daily_buckets,
)
from tenantpulse.core.series import (
    MetricSeries,
    MetricsSeriesService,
    SeriesReconstructor,
    reconstruct_series,
)
from tenantpulse.core.window import parse_window

__all__ = [
    "AggregationConfig",
    "AuditEvent",
    "BucketKey",
    "BucketWriteCoordinator",
    "Caller",
    "DateRange",
    "InMemoryAuditLog",
    "InMemoryBucketStorage",
    "InMemoryCaseload",
    "InMemoryDirectory",
    "InMemoryLogStorage",
    "MetricSeries",
    "MetricsSeriesService",
    "MetricsSnapshot",
    "ReportKind",
    "ReportService",
    "SQLiteAuditLog",
    "SQLiteBucketStorage",
    "SeriesReconstructor",
    "SnapshotCollector",
    "TimeBucket",
    "WriteLockRegistry",
    "aggregate_audits",
    "aggregate_performance",
    "aggregate_support_workers",
    "daily_buckets",
    "get_logger",
    "parse_window",
    "reconstruct_series",
    "resolve_date_range",
]
