"""FastAPI adapter for the dashboard metrics and report endpoints."""

import time
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse

from tenantpulse.adapters.frameworks.query_params import (
    _parse_epoch_ms_param,
    _parse_report_type,
)
from tenantpulse.core.config import AggregationConfig
from tenantpulse.core.date_range import resolve_date_range
from tenantpulse.core.encoding.ndjson import encode_audit_rows
from tenantpulse.core.encoding.payloads import encode_series
from tenantpulse.core.logs import get_logger, log_exception
from tenantpulse.core.models import Caller, DateRange
from tenantpulse.core.reports import ReportService
from tenantpulse.core.series import MetricsSeriesService
from tenantpulse.core.window import parse_window

logger = get_logger(__name__)

CallerResolver = Callable[[Request], Awaitable[Caller | None]]
Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Current wall-clock time in epoch millis."""
    return int(time.time() * 1000)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_dashboard_router(
    series_service: MetricsSeriesService,
    report_service: ReportService,
    resolve_caller: CallerResolver,
    config: AggregationConfig | None = None,
    clock: Clock = wall_clock_ms,
) -> APIRouter:
    """Create a FastAPI router with the dashboard read endpoints.

    Args:
        series_service: Real-time path (collect, persist, reconstruct).
        report_service: Report path over the audit log.
        resolve_caller: Returns the authenticated caller for a request, or
            None when the request is unauthenticated.
        config: Sample limits and the roles allowed to read metrics.
        clock: Source of "now" in epoch millis.

    Returns:
        APIRouter with /metrics/series, /reports and
        /reports/audits/export configured.
    """
    cfg = config or AggregationConfig()
    router = APIRouter()

    async def require_caller(request: Request) -> Caller:
        caller = await resolve_caller(request)
        if caller is None:
            raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return caller

    CurrentCaller = Annotated[Caller, Depends(require_caller)]

    def date_range_from(
        range_: str | None, start_date: str | None, end_date: str | None
    ) -> DateRange:
        return resolve_date_range(
            _parse_epoch_ms_param(start_date),
            _parse_epoch_ms_param(end_date),
            range_,
            now_ms=clock(),
        )

    @router.get("/metrics/series")
    async def get_metrics_series(
        caller: CurrentCaller,
        window: str | None = Query(default=None),
    ) -> Response:
        """Return chart-ready arrays of ``K`` samples per metric."""
        if (caller.role or "").lower() not in cfg.admin_roles:
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Forbidden")
        if not caller.tenant_id:
            return _error(
                status.HTTP_400_BAD_REQUEST,
                "No organization associated with current user",
            )
        samples = parse_window(window, cfg.default_samples, cfg.max_samples)
        try:
            series = await series_service.series(caller.tenant_id, samples, clock())
        except Exception:
            log_exception("Error in metrics series endpoint", logger)
            return _error(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch metrics series"
            )
        return JSONResponse(
            content=encode_series(series), headers={"Cache-Control": "no-store"}
        )

    @router.get("/reports")
    async def get_report(
        caller: CurrentCaller,
        type_: Annotated[str | None, Query(alias="type")] = None,
        range_: Annotated[str | None, Query(alias="range")] = None,
        start_date: Annotated[str | None, Query(alias="startDate")] = None,
        end_date: Annotated[str | None, Query(alias="endDate")] = None,
    ) -> Response:
        """Return the report envelope for the caller's tenant."""
        date_range = date_range_from(range_, start_date, end_date)
        try:
            body = await report_service.generate(
                _parse_report_type(type_), caller.tenant_id, date_range, clock()
            )
        except Exception:
            log_exception("Error generating report", logger)
            return _error(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate report"
            )
        return JSONResponse(content=body)

    @router.get("/reports/audits/export")
    async def export_audit_rows(
        caller: CurrentCaller,
        range_: Annotated[str | None, Query(alias="range")] = None,
        start_date: Annotated[str | None, Query(alias="startDate")] = None,
        end_date: Annotated[str | None, Query(alias="endDate")] = None,
    ) -> Response:
        """Return the caller's scoped audit rows as NDJSON.

        Like the report endpoint, a failed lookup degrades to an empty body.
        """
        if not caller.tenant_id:
            return Response(content="", media_type="application/x-ndjson")
        date_range = date_range_from(range_, start_date, end_date)
        try:
            rows = await report_service.audit_rows(caller.tenant_id, date_range)
        except Exception as exc:
            logger.warning(
                "Audit export lookup failed for %s: %s", caller.tenant_id, exc
            )
            rows = []
        return Response(content=encode_audit_rows(rows), media_type="application/x-ndjson")

    return router
