"""Tests for the httpx-backed health probe."""

import httpx
import pytest

from tenantpulse.adapters.health import HttpHealthProbe
from tenantpulse.adapters.storage.in_memory import InMemoryDirectory
from tenantpulse.adapters.storage.sqlite_buckets import SQLiteBucketStorage
from tenantpulse.core.collector import SnapshotCollector
from tenantpulse.core.ports import HealthProbePort

pytestmark = pytest.mark.tier(2)

AUTH_URL = "http://auth.test/health"


def _client(status_code: int) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _unreachable_client() -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHttpHealthProbe:
    """Tests for HttpHealthProbe."""

    @pytest.mark.api
    def test_implements_health_probe_port(self) -> None:
        probe = HttpHealthProbe(SQLiteBucketStorage(":memory:").health, AUTH_URL)
        assert isinstance(probe, HealthProbePort)

    @pytest.mark.api
    @pytest.mark.parametrize("status_code", [200, 204, 302])
    async def test_auth_reachable_on_success(
        self, memory_bucket_db: SQLiteBucketStorage, status_code: int
    ) -> None:
        async with _client(status_code) as client:
            probe = HttpHealthProbe(memory_bucket_db.health, AUTH_URL, client)
            assert await probe.auth_reachable() is True

    @pytest.mark.api
    async def test_auth_error_status_raises(
        self, memory_bucket_db: SQLiteBucketStorage
    ) -> None:
        async with _client(503) as client:
            probe = HttpHealthProbe(memory_bucket_db.health, AUTH_URL, client)
            with pytest.raises(httpx.HTTPStatusError):
                await probe.auth_reachable()

    @pytest.mark.api
    async def test_storage_health_delegates(
        self, memory_bucket_db: SQLiteBucketStorage
    ) -> None:
        probe = HttpHealthProbe(memory_bucket_db.health, AUTH_URL)
        health = await probe.storage_health()
        assert health.connected

    @pytest.mark.api
    async def test_collector_with_unreachable_auth(
        self,
        memory_bucket_db: SQLiteBucketStorage,
        directory: InMemoryDirectory,
        now_ms: int,
    ) -> None:
        """Connection errors from the auth provider become auth_ok=False."""
        async with _unreachable_client() as client:
            probe = HttpHealthProbe(memory_bucket_db.health, AUTH_URL, client)
            snapshot = await SnapshotCollector(directory, probe).collect("org_1", now_ms)

        assert snapshot.auth_ok is False
        assert snapshot.storage_ok is True
        assert 20.0 <= snapshot.api_latency_ms <= 500.0
