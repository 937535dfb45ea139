"""Fixed-length dashboard series reconstruction from minute buckets."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from tenantpulse.core.buckets import BucketWriteCoordinator
from tenantpulse.core.collector import SnapshotCollector
from tenantpulse.core.logs import get_logger
from tenantpulse.core.models import MetricsSnapshot, TimeBucket
from tenantpulse.core.ports import BucketStoragePort

logger = get_logger(__name__)


@dataclass(frozen=True)
class MetricSeries:
    """One chart-ready list per tracked metric, oldest sample first.

    Every list has the same length: the requested sample count.
    """

    users: list[int]
    uptime: list[float]
    alerts: list[int]
    sessions: list[int]
    storage_ok: list[bool]
    auth_ok: list[bool]
    api_latency_ms: list[float]

    def __len__(self) -> int:
        return len(self.users)


# Series field -> snapshot field it is read from
TRACKED_METRICS: dict[str, Callable[[MetricsSnapshot], Any]] = {
    "users": lambda s: s.users,
    "uptime": lambda s: s.uptime_pct,
    "alerts": lambda s: s.alert_count,
    "sessions": lambda s: s.sessions,
    "storage_ok": lambda s: s.storage_ok,
    "auth_ok": lambda s: s.auth_ok,
    "api_latency_ms": lambda s: s.api_latency_ms,
}


def _left_pad(values: list[Any], samples: int, fill: Any) -> list[Any]:
    if len(values) >= samples:
        return values
    return [fill] * (samples - len(values)) + values


def reconstruct_series(
    buckets_newest_first: Sequence[TimeBucket],
    samples: int,
    current: MetricsSnapshot,
) -> MetricSeries:
    """Build exactly ``samples`` points per metric from stored buckets.

    Args:
        buckets_newest_first: Stored buckets, newest first. Extra entries
            beyond ``samples`` are ignored.
        samples: Number of points per metric.
        current: Snapshot whose values fill missing history.

    Returns:
        Chronological series; missing history is flat-lined backward from
        the current values, never zero-filled.
    """
    ordered = list(buckets_newest_first[:samples])
    ordered.reverse()
    columns: dict[str, list[Any]] = {}
    for name, select in TRACKED_METRICS.items():
        values = [select(bucket.snapshot) for bucket in ordered]
        columns[name] = _left_pad(values, samples, select(current))
    return MetricSeries(**columns)


def flat_series(samples: int, current: MetricsSnapshot) -> MetricSeries:
    """Series made only of the current values, used when history is unreadable."""
    return reconstruct_series([], samples, current)


class SeriesReconstructor:
    """Reads recent buckets and reconstructs gap-free series."""

    def __init__(self, storage: BucketStoragePort) -> None:
        self._storage = storage

    async def reconstruct(
        self, tenant_id: str, samples: int, current: MetricsSnapshot
    ) -> MetricSeries:
        """Return ``samples`` points per metric for the tenant.

        A store failure degrades to flat series of the current values.
        """
        try:
            buckets = await self._storage.query_recent(tenant_id, samples)
        except Exception as exc:
            logger.warning(
                "Failed to fetch metrics series for %s, using flat series: %s",
                tenant_id,
                exc,
            )
            return flat_series(samples, current)
        return reconstruct_series(list(buckets), samples, current)


class MetricsSeriesService:
    """The real-time path: collect a snapshot, persist it, return the series."""

    def __init__(
        self,
        collector: SnapshotCollector,
        coordinator: BucketWriteCoordinator,
        reconstructor: SeriesReconstructor,
    ) -> None:
        self._collector = collector
        self._coordinator = coordinator
        self._reconstructor = reconstructor

    async def series(self, tenant_id: str, samples: int, now_ms: int) -> MetricSeries:
        """Collect, persist and reconstruct for one dashboard request."""
        snapshot = await self._collector.collect(tenant_id, now_ms)
        await self._coordinator.persist(tenant_id, snapshot, now_ms)
        return await self._reconstructor.reconstruct(tenant_id, samples, snapshot)
