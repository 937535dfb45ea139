"""Shared test fixtures for all test modules."""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import httpx
import pytest

from tenantpulse.adapters.storage.in_memory import (
    InMemoryAuditLog,
    InMemoryBucketStorage,
    InMemoryDirectory,
)
from tenantpulse.core.models import MetricsSnapshot
from tests.helpers import StubHealthProbe

# 2024-03-05 12:34:56.789 UTC
NOW_MS = 1_709_642_096_789


@pytest.fixture
def now_ms() -> int:
    """A fixed "now" for deterministic bucketing."""
    return NOW_MS


@pytest.fixture
def bucket_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for bucket storage tests."""
    return str(tmp_path / "buckets.db")


@pytest.fixture
def audit_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for audit log tests."""
    return str(tmp_path / "audit.db")


@pytest.fixture
def snapshot_factory() -> Callable[..., MetricsSnapshot]:
    """Factory fixture for snapshots with overridable fields."""

    def _snapshot(**overrides: object) -> MetricsSnapshot:
        values: dict[str, object] = {
            "users": 12,
            "sessions": 3,
            "uptime_pct": 99.9,
            "alert_count": 0,
            "storage_ok": True,
            "auth_ok": True,
            "api_latency_ms": 45.0,
        }
        values.update(overrides)
        return MetricsSnapshot.create(**values)  # type: ignore[arg-type]

    return _snapshot


@pytest.fixture
def health_probe() -> StubHealthProbe:
    return StubHealthProbe()


@pytest.fixture
def directory(now_ms: int) -> InMemoryDirectory:
    """Directory with one tenant of four users, two of them online."""
    d = InMemoryDirectory()
    d.add_user("org_1", "u_admin", "admin", email="admin@example.org")
    d.add_user("org_1", "u_lead", "team_leader", email="lead@example.org")
    d.add_user("org_1", "u_sw", "support_worker", email="sw@example.org")
    d.add_user("org_1", "u_client", "client", status="inactive")
    d.mark_seen("u_admin", now_ms - 60_000)
    d.mark_seen("u_sw", now_ms - 2 * 60_000)
    d.mark_seen("u_lead", now_ms - 60 * 60_000)
    return d


@pytest.fixture
def bucket_storage() -> InMemoryBucketStorage:
    return InMemoryBucketStorage()


@pytest.fixture
def audit_log() -> InMemoryAuditLog:
    return InMemoryAuditLog()


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/endpoint")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client


@pytest.fixture
async def memory_bucket_db() -> AsyncGenerator:
    """SQLite bucket storage on :memory: with proper cleanup."""
    from tenantpulse.adapters.storage.sqlite_buckets import SQLiteBucketStorage

    storage = SQLiteBucketStorage(":memory:")
    yield storage
    await storage.close()
