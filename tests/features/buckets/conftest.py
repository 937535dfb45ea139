"""BDD step definitions for minute bucket write features."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from tenantpulse.core.buckets import BucketWriteCoordinator
from tenantpulse.core.models import MetricsSnapshot
from tests.helpers import FailingBucketStorage, SlowBucketStorage

# Start of a minute, so "same minute" offsets stay inside it
BASE_MS = 1_709_640_000_000


def run_async(coro: Any) -> Any:
    """Run a coroutine from a synchronous step."""
    return asyncio.run(coro)


def _snapshot(users: int = 1) -> MetricsSnapshot:
    return MetricsSnapshot.create(
        users=users,
        sessions=0,
        uptime_pct=99.9,
        alert_count=0,
        storage_ok=True,
        auth_ok=True,
        api_latency_ms=40.0,
    )


@dataclass
class BucketScenarioContext:
    """Shared state between steps in a bucket write scenario."""

    storage: Any = None
    coordinator: BucketWriteCoordinator | None = None
    results: list[bool] = field(default_factory=list)


@pytest.fixture
def ctx() -> BucketScenarioContext:
    """Fresh scenario context for each test."""
    return BucketScenarioContext()


async def _persist_all(
    ctx: BucketScenarioContext, writes: list[tuple[str, int, MetricsSnapshot]]
) -> list[bool]:
    assert ctx.coordinator is not None
    return list(
        await asyncio.gather(
            *(ctx.coordinator.persist(t, s, at) for t, at, s in writes)
        )
    )


# === Background Steps ===
@given(parsers.parse("a bucket store that takes {delay_ms:d} ms per upsert"))
def step_slow_store(ctx: BucketScenarioContext, delay_ms: int) -> None:
    ctx.storage = SlowBucketStorage(delay=delay_ms / 1000)


@given("a bucket store that always fails")
def step_failing_store(ctx: BucketScenarioContext) -> None:
    ctx.storage = FailingBucketStorage()


@given("a write coordinator over that store")
def step_coordinator(ctx: BucketScenarioContext) -> None:
    ctx.coordinator = BucketWriteCoordinator(ctx.storage)


# === Write Steps ===
@when(
    parsers.re(
        r'(?P<n>\d+) requests? for tenant "(?P<tenant>[^"]+)" persists? '
        r"in the same minute at once"
    )
)
def step_same_minute(ctx: BucketScenarioContext, n: str, tenant: str) -> None:
    writes = [(tenant, BASE_MS + i * 1000, _snapshot(i)) for i in range(int(n))]
    ctx.results = run_async(_persist_all(ctx, writes))


@when(
    parsers.parse(
        '{n:d} requests for tenant "{tenant}" persist in consecutive minutes at once'
    )
)
def step_consecutive_minutes(ctx: BucketScenarioContext, n: int, tenant: str) -> None:
    writes = [(tenant, BASE_MS + i * 60_000, _snapshot()) for i in range(n)]
    ctx.results = run_async(_persist_all(ctx, writes))


@when(
    parsers.parse(
        'tenants "{first}" and "{second}" persist in the same minute at once'
    )
)
def step_two_tenants(ctx: BucketScenarioContext, first: str, second: str) -> None:
    writes = [(first, BASE_MS, _snapshot()), (second, BASE_MS, _snapshot())]
    ctx.results = run_async(_persist_all(ctx, writes))


@when(
    parsers.parse(
        'tenant "{tenant}" persists {first:d} users and then {second:d} users '
        "in the same minute"
    )
)
def step_sequential(
    ctx: BucketScenarioContext, tenant: str, first: int, second: int
) -> None:
    async def _run() -> list[bool]:
        assert ctx.coordinator is not None
        a = await ctx.coordinator.persist(tenant, _snapshot(first), BASE_MS)
        b = await ctx.coordinator.persist(tenant, _snapshot(second), BASE_MS + 30_000)
        return [a, b]

    ctx.results = run_async(_run())


# === Outcome Steps ===
@then(parsers.re(r"the store received (?P<n>\d+) upserts?"))
def step_upsert_calls(ctx: BucketScenarioContext, n: str) -> None:
    assert ctx.storage.upsert_calls == int(n)


@then(parsers.parse("exactly {n:d} request reports a write"))
def step_writes_reported(ctx: BucketScenarioContext, n: int) -> None:
    assert sum(ctx.results) == n


@then("no request reports a write")
def step_no_writes(ctx: BucketScenarioContext) -> None:
    assert not any(ctx.results)


@then(parsers.re(r'tenant "(?P<tenant>[^"]+)" has (?P<n>\d+) stored buckets?'))
def step_stored_buckets(ctx: BucketScenarioContext, tenant: str, n: str) -> None:
    stored = run_async(ctx.storage.query_recent(tenant, 120))
    assert len(stored) == int(n)


@then(parsers.parse('the latest bucket for tenant "{tenant}" holds {users:d} users'))
def step_latest_users(ctx: BucketScenarioContext, tenant: str, users: int) -> None:
    (latest,) = run_async(ctx.storage.query_recent(tenant, 1))
    assert latest.snapshot.users == users


@then("no write lock is held")
def step_no_locks(ctx: BucketScenarioContext) -> None:
    assert ctx.coordinator is not None
    assert len(ctx.coordinator.locks) == 0
