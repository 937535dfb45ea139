"""Example FastAPI dashboard backend wired to SQLite storage.

Run with:
    uvicorn examples.dashboard_app:app --reload

Endpoints:
    /metrics/series?window=15m          - chart arrays, one sample per minute
    /reports?type=audits&range=7days    - audit report envelope
    /reports?type=supportWorkerAnalytics - per-worker caseload and note time
    /reports/audits/export?range=30days - scoped audit rows as NDJSON
    /logs                               - tenantpulse's own captured warnings

Callers are identified by the X-User-Id, X-User-Role and X-Tenant-Id
headers, standing in for a real auth provider.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tenantpulse import (
    AggregationConfig,
    BucketWriteCoordinator,
    Caller,
    InMemoryCaseload,
    InMemoryDirectory,
    InMemoryLogStorage,
    MetricsSeriesService,
    ReportService,
    SeriesReconstructor,
    SnapshotCollector,
    SQLiteAuditLog,
    SQLiteBucketStorage,
    WriteLockRegistry,
)
from tenantpulse.adapters.frameworks.fastapi import create_dashboard_router
from tenantpulse.adapters.health import HttpHealthProbe
from tenantpulse.adapters.logging import install_log_capture

config = AggregationConfig.from_env()

bucket_storage = SQLiteBucketStorage("dashboard.db")
audit_log = SQLiteAuditLog("dashboard.db")
directory = InMemoryDirectory()
directory.add_user("org_demo", "u_admin", "admin", email="admin@example.org")
directory.add_user(
    "org_demo", "u_sw", "support_worker", email="sw@example.org", first_name="Sam"
)
caseload = InMemoryCaseload()

log_storage = InMemoryLogStorage()
install_log_capture(log_storage)

health = HttpHealthProbe(bucket_storage.health, "https://auth.example.org/health")
series_service = MetricsSeriesService(
    SnapshotCollector(directory, health, config),
    BucketWriteCoordinator(bucket_storage, WriteLockRegistry(config.lock_ttl_seconds)),
    SeriesReconstructor(bucket_storage),
)
report_service = ReportService(audit_log, directory, config, caseload=caseload)


async def caller_from_headers(request: Request) -> Caller | None:
    user_id = request.headers.get("x-user-id")
    if not user_id:
        return None
    return Caller(
        user_id=user_id,
        role=request.headers.get("x-user-role"),
        tenant_id=request.headers.get("x-tenant-id"),
    )


app = FastAPI(title="Operations Dashboard")
app.include_router(
    create_dashboard_router(series_service, report_service, caller_from_headers, config)
)


@app.get("/logs")
async def get_logs(since: float = 0) -> JSONResponse:
    """Return captured log entries as JSON, newest first."""
    entries = [
        {
            "timestamp": e.timestamp,
            "level": e.level,
            "message": e.message,
            "attributes": e.attributes,
        }
        async for e in log_storage.read(since=since)
    ]
    entries.reverse()
    return JSONResponse(content=entries[:100])
