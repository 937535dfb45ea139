"""JSON-ready encoders for series and report payloads.

Field names follow the dashboard's camelCase wire format.
"""

from typing import Any

from tenantpulse.core.models import (
    ActorSummary,
    AuditEvent,
    AuditReport,
    DailyCount,
    PerformanceReport,
    SupportWorkerReport,
    TimeTotal,
    UserStats,
    WorkerCaseload,
)
from tenantpulse.core.series import MetricSeries


def encode_series(series: MetricSeries) -> dict[str, list[Any]]:
    """Encode a series as ``{users, uptime, alerts, sessions, storageOk, authOk, apiLatencyMs}``."""
    return {
        "users": list(series.users),
        "uptime": list(series.uptime),
        "alerts": list(series.alerts),
        "sessions": list(series.sessions),
        "storageOk": list(series.storage_ok),
        "authOk": list(series.auth_ok),
        "apiLatencyMs": list(series.api_latency_ms),
    }


def encode_audit_event(event: AuditEvent) -> dict[str, Any]:
    return {
        "actorId": event.actor_id,
        "actorName": event.actor_name,
        "actorEmail": event.actor_email,
        "actorRole": event.actor_role,
        "action": event.action,
        "entityType": event.entity_type,
        "entityId": event.entity_id,
        "tenantId": event.tenant_id,
        "timestamp": event.timestamp_ms,
    }


def encode_daily_count(point: DailyCount) -> dict[str, int]:
    return {"date": point.date_ms, "count": point.count}


def encode_audit_report(report: AuditReport) -> dict[str, Any]:
    return {
        "total": report.total,
        "byAction": dict(report.by_action),
        "byEntityType": dict(report.by_entity_type),
        "series": [encode_daily_count(p) for p in report.series],
        "rows": [encode_audit_event(e) for e in report.rows],
    }


def encode_actor_summary(summary: ActorSummary) -> dict[str, Any]:
    return {
        "actorId": summary.actor_id,
        "actorName": summary.actor_name,
        "actorEmail": summary.actor_email,
        "actorRole": summary.actor_role,
        "totalActions": summary.total_actions,
        "byAction": dict(summary.by_action),
        "byEntityType": dict(summary.by_entity_type),
    }


def encode_performance_report(report: PerformanceReport) -> dict[str, Any]:
    return {
        "byActor": {
            key: encode_actor_summary(summary)
            for key, summary in report.by_actor.items()
        },
        "clientCount": report.client_count,
    }


def encode_time_total(total: TimeTotal) -> dict[str, int]:
    return {
        "totalMinutes": total.total_minutes,
        "hours": total.hours,
        "minutes": total.minutes,
    }


def encode_worker_caseload(worker: WorkerCaseload) -> dict[str, Any]:
    return {
        "workerId": worker.worker_id,
        "workerName": worker.worker_name,
        "workerEmail": worker.worker_email,
        "clientCount": worker.client_count,
        "totalNotes": worker.total_notes,
        "timeTracking": {
            period: encode_time_total(total)
            for period, total in worker.time_tracking.items()
        },
        "notesPerClient": dict(worker.notes_per_client),
        "clients": [
            {"id": c.client_id, "name": c.name, "noteCount": c.note_count}
            for c in worker.clients
        ],
    }


def encode_support_worker_report(report: SupportWorkerReport) -> dict[str, Any]:
    return {
        "supportWorkers": [encode_worker_caseload(w) for w in report.workers],
        "totalSupportWorkers": report.total_support_workers,
        "totalClients": report.total_clients,
        "totalNotes": report.total_notes,
    }


def encode_user_stats(stats: UserStats) -> dict[str, Any]:
    return {
        "total": stats.total,
        "active": stats.active,
        "inactive": stats.inactive,
        "suspended": stats.suspended,
        "byRole": dict(stats.by_role),
    }
