"""Concurrent snapshot collection from independently fallible probes."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from tenantpulse.core.config import AggregationConfig
from tenantpulse.core.logs import get_logger
from tenantpulse.core.models import MetricsSnapshot, StorageHealth
from tenantpulse.core.ports import DirectoryPort, HealthProbePort

logger = get_logger(__name__)

T = TypeVar("T")


class TenantpulseError(Exception):
    """Base class for errors raised inside tenantpulse."""


class ProbeTimeoutError(TenantpulseError):
    """A probe did not answer within its timeout."""

    def __init__(self, name: str, timeout: float) -> None:
        super().__init__(f"probe {name!r} timed out after {timeout:.2f}s")
        self.name = name
        self.timeout = timeout


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A probe that answered."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed(Generic[T]):
    """A probe that raised or timed out; ``value`` is the conservative default."""

    value: T
    error: BaseException

    @property
    def ok(self) -> bool:
        return False


ProbeResult = Union[Ok[T], Failed[T]]


async def run_probe(
    name: str,
    probe: Callable[[], Awaitable[T]],
    default: T,
    timeout: float,
) -> ProbeResult[T]:
    """Run one probe under its own timeout.

    Args:
        name: Probe name used in log messages.
        probe: Zero-argument coroutine factory.
        default: Value reported if the probe fails.
        timeout: Seconds to wait before giving up.

    Returns:
        ``Ok(value)`` on success, ``Failed(default, error)`` otherwise.
        Never raises for probe errors; cancellation still propagates.
    """
    try:
        value = await asyncio.wait_for(probe(), timeout=timeout)
    except asyncio.TimeoutError:
        error = ProbeTimeoutError(name, timeout)
        logger.warning("Probe %s timed out, using default %r", name, default)
        return Failed(default, error)
    except Exception as exc:
        logger.warning("Probe %s failed (%s), using default %r", name, exc, default)
        return Failed(default, exc)
    return Ok(value)


class SnapshotCollector:
    """Fans out to the count and health probes and folds one snapshot.

    Collection always completes: every probe carries its own timeout and a
    failing probe contributes its default instead of an error.
    """

    def __init__(
        self,
        directory: DirectoryPort,
        health: HealthProbePort,
        config: AggregationConfig | None = None,
    ) -> None:
        self._directory = directory
        self._health = health
        self._config = config or AggregationConfig()

    async def _user_count(self, tenant_id: str) -> int:
        stats = await self._directory.user_stats(tenant_id)
        return int(stats.total or 0)

    async def _auth_ok(self) -> bool:
        return bool(await self._health.auth_reachable())

    async def collect(self, tenant_id: str, now_ms: int) -> MetricsSnapshot:
        """Collect the current snapshot for a tenant.

        Args:
            tenant_id: Tenant to count users and sessions for.
            now_ms: Current epoch millis, used for the session window.

        Returns:
            A snapshot; degraded probes show up as their defaults.
        """
        cfg = self._config
        timeout = cfg.probe_timeout_seconds
        since_ms = now_ms - cfg.session_window_ms
        unreachable = StorageHealth(connected=False, status="unhealthy")

        users, sessions, storage, auth = await asyncio.gather(
            run_probe("users", lambda: self._user_count(tenant_id), 0, timeout),
            run_probe(
                "sessions",
                lambda: self._directory.online_session_count(tenant_id, since_ms),
                0,
                timeout,
            ),
            run_probe("storage", self._health.storage_health, unreachable, timeout),
            run_probe("auth", self._auth_ok, False, timeout),
        )

        health: StorageHealth = storage.value
        latency = (
            health.latency_ms
            if storage.ok and health.latency_ms is not None
            else cfg.default_latency_ms
        )
        return MetricsSnapshot.create(
            users=users.value,
            sessions=sessions.value,
            uptime_pct=cfg.uptime_pct,
            alert_count=cfg.alert_count,
            storage_ok=health.ok,
            auth_ok=auth.value,
            api_latency_ms=latency,
        )
