"""Tests for core domain models."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tenantpulse.core.models import (
    API_LATENCY_CEILING_MS,
    API_LATENCY_FLOOR_MS,
    MetricsSnapshot,
    StorageHealth,
    clamp_latency,
)

pytestmark = pytest.mark.tier(0)


@pytest.mark.core
class TestMetricsSnapshot:
    """Tests for MetricsSnapshot.create()."""

    def test_create_coerces_types(self) -> None:
        snapshot = MetricsSnapshot.create(
            users=3.0,  # type: ignore[arg-type]
            sessions=1,
            uptime_pct=100,
            alert_count=0,
            storage_ok=1,  # type: ignore[arg-type]
            auth_ok=0,  # type: ignore[arg-type]
            api_latency_ms=75,
        )
        assert snapshot.users == 3
        assert isinstance(snapshot.users, int)
        assert snapshot.storage_ok is True
        assert snapshot.auth_ok is False
        assert snapshot.api_latency_ms == 75.0

    def test_snapshot_is_frozen(self) -> None:
        snapshot = MetricsSnapshot.create(
            users=1,
            sessions=1,
            uptime_pct=99.9,
            alert_count=0,
            storage_ok=True,
            auth_ok=True,
            api_latency_ms=50,
        )
        with pytest.raises(AttributeError):
            snapshot.users = 2  # type: ignore[misc]

    @given(st.floats(allow_nan=False, allow_infinity=True))
    def test_latency_always_in_range(self, raw: float) -> None:
        assert API_LATENCY_FLOOR_MS <= clamp_latency(raw) <= API_LATENCY_CEILING_MS


@pytest.mark.core
class TestStorageHealth:
    """Tests for StorageHealth.ok."""

    @pytest.mark.parametrize(
        ("health", "expected"),
        [
            (StorageHealth(connected=True, status="healthy"), True),
            (StorageHealth(connected=True, status="healthy", latency_ms=5000.0), True),
            (StorageHealth(connected=True, status="degraded", latency_ms=999.0), True),
            (StorageHealth(connected=True, status="degraded", latency_ms=1000.0), False),
            (StorageHealth(connected=False, status="healthy", latency_ms=1.0), False),
        ],
    )
    def test_ok(self, health: StorageHealth, expected: bool) -> None:
        assert health.ok is expected
