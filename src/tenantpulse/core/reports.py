"""Audit-log aggregation into dashboard reports."""

import time
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any

from tenantpulse.core.config import AggregationConfig
from tenantpulse.core.encoding.payloads import (
    encode_audit_report,
    encode_performance_report,
    encode_support_worker_report,
    encode_user_stats,
)
from tenantpulse.core.logs import get_logger
from tenantpulse.core.models import (
    ActorSummary,
    AuditEvent,
    AuditReport,
    CaseNote,
    ClientNoteCount,
    ClientRecord,
    DailyCount,
    DateRange,
    PerformanceReport,
    SupportWorkerReport,
    TimeTotal,
    WorkerCaseload,
)
from tenantpulse.core.ports import AuditLogPort, CaseloadPort, DirectoryPort

logger = get_logger(__name__)

UNKNOWN_ACTOR = "unknown"
SUPPORT_WORKER_ROLE = "support_worker"
DAY_MS = 24 * 60 * 60 * 1000

# Look-back windows for logged note time, in days
TIME_TRACKING_PERIODS = {"day": 1, "week": 7, "month": 30}


class ReportKind(str, Enum):
    AUDITS = "audits"
    PERFORMANCE = "performance"
    USER_MANAGEMENT = "userManagement"
    SUPPORT_WORKER_ANALYTICS = "supportWorkerAnalytics"


def day_start_ms(timestamp_ms: int, tz: tzinfo | None = None) -> int:
    """Return the epoch millis of the start of the day containing ``timestamp_ms``.

    Without ``tz`` the process's local time zone decides where days begin.
    """
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp() * 1000)


def daily_buckets(
    events: Iterable[AuditEvent], tz: tzinfo | None = None
) -> list[DailyCount]:
    """Count events per day, ascending by day start."""
    counts = Counter(day_start_ms(e.timestamp_ms, tz) for e in events)
    return [DailyCount(date_ms=day, count=counts[day]) for day in sorted(counts)]


def aggregate_audits(
    events: Sequence[AuditEvent], tz: tzinfo | None = None
) -> AuditReport:
    """Summarise events by action, entity type and day."""
    by_action: dict[str, int] = {}
    by_entity_type: dict[str, int] = {}
    for event in events:
        by_action[event.action] = by_action.get(event.action, 0) + 1
        if event.entity_type:
            by_entity_type[event.entity_type] = (
                by_entity_type.get(event.entity_type, 0) + 1
            )
    return AuditReport(
        total=len(events),
        by_action=by_action,
        by_entity_type=by_entity_type,
        series=daily_buckets(events, tz),
        rows=list(events),
    )


def actor_key(event: AuditEvent) -> str:
    """Stable grouping key: id, then email, then name, then ``"unknown"``."""
    return event.actor_id or event.actor_email or event.actor_name or UNKNOWN_ACTOR


def aggregate_performance(
    events: Iterable[AuditEvent],
    allowed_roles: Iterable[str],
    client_count: int = 0,
) -> PerformanceReport:
    """Roll up actions per actor, keeping only actors in ``allowed_roles``."""
    allowed = {role.lower() for role in allowed_roles}
    by_actor: dict[str, ActorSummary] = {}
    for event in events:
        if (event.actor_role or "").lower() not in allowed:
            continue
        key = actor_key(event)
        summary = by_actor.get(key)
        if summary is None:
            summary = ActorSummary(
                actor_id=event.actor_id,
                actor_name=event.actor_name or "Unknown",
                actor_email=event.actor_email,
                actor_role=event.actor_role,
            )
            by_actor[key] = summary
        summary.total_actions += 1
        summary.by_action[event.action] = summary.by_action.get(event.action, 0) + 1
        if event.entity_type:
            summary.by_entity_type[event.entity_type] = (
                summary.by_entity_type.get(event.entity_type, 0) + 1
            )
    return PerformanceReport(by_actor=by_actor, client_count=client_count)


def logged_minutes(notes: Iterable[CaseNote], since_ms: int) -> TimeTotal:
    """Sum the minutes of notes dated at or after ``since_ms``."""
    return TimeTotal(sum(n.minutes for n in notes if n.timestamp_ms >= since_ms))


def _worker_name(user: dict[str, object]) -> str:
    first = user.get("first_name") or ""
    last = user.get("last_name") or ""
    name = f"{first} {last}".strip()
    return name or str(user.get("email") or "")


def aggregate_support_workers(
    users: Iterable[dict[str, object]],
    clients: Sequence[ClientRecord],
    notes: Sequence[CaseNote],
    now_ms: int,
) -> SupportWorkerReport:
    """Build each support worker's caseload and logged time.

    Time is summed over the trailing day, week and 30 days ending at
    ``now_ms``. The org-wide totals count every client and note, assigned
    or not.
    """
    workers: list[WorkerCaseload] = []
    for user in users:
        if str(user.get("role") or "").lower() != SUPPORT_WORKER_ROLE:
            continue
        worker_id = str(user["id"])
        own_clients = [c for c in clients if c.support_worker_id == worker_id]
        own_notes = [n for n in notes if n.support_worker_id == worker_id]
        per_client = [
            ClientNoteCount(
                client_id=c.client_id,
                name=c.name,
                note_count=sum(1 for n in own_notes if n.client_id == c.client_id),
            )
            for c in own_clients
        ]
        email = user.get("email")
        workers.append(
            WorkerCaseload(
                worker_id=worker_id,
                worker_name=_worker_name(user),
                worker_email=str(email) if email else None,
                client_count=len(own_clients),
                total_notes=len(own_notes),
                time_tracking={
                    period: logged_minutes(own_notes, now_ms - days * DAY_MS)
                    for period, days in TIME_TRACKING_PERIODS.items()
                },
                notes_per_client={c.name: c.note_count for c in per_client},
                clients=per_client,
            )
        )
    return SupportWorkerReport(
        workers=workers, total_clients=len(clients), total_notes=len(notes)
    )


def scope_events(
    events: Iterable[AuditEvent], tenant_id: str, date_range: DateRange
) -> list[AuditEvent]:
    """Keep the tenant's events that fall inside ``date_range``, oldest first."""
    scoped = [
        e
        for e in events
        if e.tenant_id == tenant_id and date_range.contains(e.timestamp_ms)
    ]
    scoped.sort(key=lambda e: e.timestamp_ms)
    return scoped


def _now_ms() -> int:
    return int(time.time() * 1000)


class ReportService:
    """Builds report envelopes for the reports endpoint.

    Example:
        >>> service = ReportService(audit_log, directory)
        >>> body = await service.generate("audits", "org_1", DateRange(), now_ms)
        >>> body["data"]["total"]
        42
    """

    def __init__(
        self,
        audit_log: AuditLogPort,
        directory: DirectoryPort,
        config: AggregationConfig | None = None,
        tz: tzinfo | None = None,
        caseload: CaseloadPort | None = None,
    ) -> None:
        self._audit_log = audit_log
        self._directory = directory
        self._config = config or AggregationConfig()
        self._tz = tz
        self._caseload = caseload

    async def _scoped_events(
        self, tenant_id: str, date_range: DateRange
    ) -> list[AuditEvent]:
        events = await self._audit_log.list(
            tenant_id,
            start_ms=date_range.start_ms,
            end_ms=date_range.end_ms,
            limit=self._config.audit_limit,
        )
        return scope_events(events, tenant_id, date_range)

    async def _client_count(self, tenant_id: str) -> int:
        try:
            stats = await self._directory.user_stats(tenant_id)
        except Exception as exc:
            logger.warning("User stats unavailable for %s: %s", tenant_id, exc)
            return 0
        return int(stats.by_role.get("client", 0))

    async def audit_rows(
        self, tenant_id: str, date_range: DateRange
    ) -> list[AuditEvent]:
        """Return the tenant's scoped audit rows; raises on lookup failure."""
        return await self._scoped_events(tenant_id, date_range)

    async def _or_empty(
        self, what: str, tenant_id: str, lookup: Callable[[str], Awaitable[list[Any]]]
    ) -> list[Any]:
        try:
            return list(await lookup(tenant_id))
        except Exception as exc:
            logger.warning("%s unavailable for %s: %s", what, tenant_id, exc)
            return []

    async def _support_worker_data(self, tenant_id: str, now_ms: int) -> dict[str, Any]:
        users = await self._or_empty("User list", tenant_id, self._directory.list_users)
        clients: list[ClientRecord] = []
        notes: list[CaseNote] = []
        if self._caseload is not None:
            clients = await self._or_empty(
                "Client list", tenant_id, self._caseload.list_clients
            )
            notes = await self._or_empty("Case notes", tenant_id, self._caseload.list_notes)
        report = aggregate_support_workers(users, clients, notes, now_ms)
        return encode_support_worker_report(report)

    async def _data(
        self, kind: ReportKind, tenant_id: str, date_range: DateRange, now_ms: int
    ) -> dict[str, Any]:
        if kind is ReportKind.SUPPORT_WORKER_ANALYTICS:
            return await self._support_worker_data(tenant_id, now_ms)
        if kind is ReportKind.USER_MANAGEMENT:
            stats = await self._directory.user_stats(tenant_id)
            try:
                users = await self._directory.list_users(tenant_id)
            except Exception as exc:
                logger.warning("User list unavailable for %s: %s", tenant_id, exc)
                users = []
            return {"stats": encode_user_stats(stats), "users": users}

        events = await self._scoped_events(tenant_id, date_range)
        if kind is ReportKind.AUDITS:
            return encode_audit_report(aggregate_audits(events, self._tz))

        client_count = await self._client_count(tenant_id)
        report = aggregate_performance(
            events, self._config.performance_roles, client_count
        )
        return encode_performance_report(report)

    async def generate(
        self,
        kind: str,
        tenant_id: str | None,
        date_range: DateRange,
        now_ms: int | None = None,
    ) -> dict[str, Any]:
        """Produce the ``{type, tenantId, filters, data, generatedAt}`` envelope.

        Unknown kinds, a missing tenant, or a failing lookup all yield
        ``data: {}`` rather than an error.
        """
        generated_at = _now_ms() if now_ms is None else now_ms
        envelope: dict[str, Any] = {
            "type": kind,
            "tenantId": tenant_id,
            "filters": {
                "startDate": date_range.start_ms,
                "endDate": date_range.end_ms,
            },
            "data": {},
            "generatedAt": generated_at,
        }
        if not tenant_id:
            return envelope
        try:
            report_kind = ReportKind(kind)
        except ValueError:
            logger.info("Unknown report type %r requested", kind)
            return envelope
        try:
            envelope["data"] = await self._data(
                report_kind, tenant_id, date_range, generated_at
            )
        except Exception as exc:
            logger.warning(
                "Failed to build %s report for %s: %s", kind, tenant_id, exc
            )
        return envelope
