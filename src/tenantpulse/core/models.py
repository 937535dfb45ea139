"""Core domain models for dashboard aggregation."""

from dataclasses import dataclass, field

MINUTE_MS = 60_000

API_LATENCY_FLOOR_MS = 20.0
API_LATENCY_CEILING_MS = 500.0


def clamp_latency(value: float) -> float:
    """Clamp a raw latency reading into the charted range [20, 500] ms."""
    return max(API_LATENCY_FLOOR_MS, min(API_LATENCY_CEILING_MS, float(value)))


@dataclass(frozen=True)
class MetricsSnapshot:
    """An instantaneous set of dashboard metric values.

    Attributes:
        users: Total users in the tenant.
        sessions: Users seen online within the session window.
        uptime_pct: Uptime percentage.
        alert_count: Number of open alerts.
        storage_ok: Whether the backing store reported healthy.
        auth_ok: Whether the auth provider was reachable.
        api_latency_ms: Storage round-trip latency, within [20, 500].
    """

    users: int
    sessions: int
    uptime_pct: float
    alert_count: int
    storage_ok: bool
    auth_ok: bool
    api_latency_ms: float

    @classmethod
    def create(
        cls,
        *,
        users: int,
        sessions: int,
        uptime_pct: float,
        alert_count: int,
        storage_ok: bool,
        auth_ok: bool,
        api_latency_ms: float,
    ) -> "MetricsSnapshot":
        """Build a snapshot, clamping the latency into range."""
        return cls(
            users=int(users),
            sessions=int(sessions),
            uptime_pct=float(uptime_pct),
            alert_count=int(alert_count),
            storage_ok=bool(storage_ok),
            auth_ok=bool(auth_ok),
            api_latency_ms=clamp_latency(api_latency_ms),
        )


@dataclass(frozen=True)
class BucketKey:
    """Identity of a one-minute bucket: tenant plus truncated epoch millis."""

    tenant_id: str
    minute_epoch_ms: int

    @classmethod
    def for_time(cls, tenant_id: str, now_ms: int) -> "BucketKey":
        """Return the key of the minute containing ``now_ms``."""
        return cls(tenant_id, (int(now_ms) // MINUTE_MS) * MINUTE_MS)


@dataclass(frozen=True)
class TimeBucket:
    """A persisted minute bucket holding the snapshot written last."""

    key: BucketKey
    snapshot: MetricsSnapshot

    @property
    def tenant_id(self) -> str:
        return self.key.tenant_id

    @property
    def minute_epoch_ms(self) -> int:
        return self.key.minute_epoch_ms


@dataclass(frozen=True)
class AuditEvent:
    """A single audit-log record.

    Attributes:
        actor_id: Identifier of the user who acted, if known.
        action: What was done (e.g., "note.create").
        entity_type: Kind of entity acted on, if any.
        entity_id: Identifier of the entity acted on, if any.
        tenant_id: Owning tenant.
        timestamp_ms: Unix epoch milliseconds.
        actor_role: Role of the actor at the time of the event.
        actor_name: Display name of the actor.
        actor_email: Email of the actor.
    """

    action: str
    tenant_id: str
    timestamp_ms: int
    actor_id: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    actor_role: str | None = None
    actor_name: str | None = None
    actor_email: str | None = None


@dataclass(frozen=True)
class DateRange:
    """A half-open ``[start_ms, end_ms)`` interval; ``None`` means unbounded."""

    start_ms: int | None = None
    end_ms: int | None = None

    @property
    def unbounded(self) -> bool:
        return self.start_ms is None and self.end_ms is None

    def contains(self, timestamp_ms: int) -> bool:
        if self.start_ms is not None and timestamp_ms < self.start_ms:
            return False
        if self.end_ms is not None and timestamp_ms >= self.end_ms:
            return False
        return True


@dataclass(frozen=True)
class DailyCount:
    """Number of events that fell on the local day starting at ``date_ms``."""

    date_ms: int
    count: int


@dataclass(frozen=True)
class AuditReport:
    total: int
    by_action: dict[str, int]
    by_entity_type: dict[str, int]
    series: list[DailyCount]
    rows: list[AuditEvent] = field(default_factory=list)


@dataclass
class ActorSummary:
    """Per-actor rollup for the performance report."""

    actor_id: str | None
    actor_name: str
    actor_email: str | None
    actor_role: str | None
    total_actions: int = 0
    by_action: dict[str, int] = field(default_factory=dict)
    by_entity_type: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceReport:
    by_actor: dict[str, ActorSummary]
    client_count: int = 0


@dataclass(frozen=True)
class ClientRecord:
    """A client on a tenant's caseload.

    Attributes:
        client_id: Client identifier.
        first_name: Given name.
        last_name: Family name.
        support_worker_id: User id of the assigned support worker, if any.
    """

    client_id: str
    first_name: str = ""
    last_name: str = ""
    support_worker_id: str | None = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class CaseNote:
    """A case note written by a support worker about a client.

    Attributes:
        client_id: Client the note is about.
        support_worker_id: Author's user id.
        timestamp_ms: Note date, falling back to creation time, in epoch millis.
        duration_minutes: Time spent when no activity breakdown exists.
        activity_minutes: Per-activity minutes; replaces ``duration_minutes``
            when present.
    """

    client_id: str
    support_worker_id: str | None
    timestamp_ms: int
    duration_minutes: int = 0
    activity_minutes: tuple[int, ...] | None = None

    @property
    def minutes(self) -> int:
        if self.activity_minutes is not None:
            return sum(self.activity_minutes)
        return self.duration_minutes


@dataclass(frozen=True)
class TimeTotal:
    total_minutes: int = 0

    @property
    def hours(self) -> int:
        return self.total_minutes // 60

    @property
    def minutes(self) -> int:
        return self.total_minutes % 60


@dataclass(frozen=True)
class ClientNoteCount:
    client_id: str
    name: str
    note_count: int


@dataclass
class WorkerCaseload:
    """Caseload and logged time for one support worker."""

    worker_id: str
    worker_name: str
    worker_email: str | None
    client_count: int = 0
    total_notes: int = 0
    time_tracking: dict[str, TimeTotal] = field(default_factory=dict)
    notes_per_client: dict[str, int] = field(default_factory=dict)
    clients: list[ClientNoteCount] = field(default_factory=list)


@dataclass(frozen=True)
class SupportWorkerReport:
    workers: list[WorkerCaseload]
    total_clients: int = 0
    total_notes: int = 0

    @property
    def total_support_workers(self) -> int:
        return len(self.workers)


@dataclass(frozen=True)
class UserStats:
    """Head counts for a tenant's users."""

    total: int = 0
    active: int = 0
    inactive: int = 0
    suspended: int = 0
    by_role: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class StorageHealth:
    """Result of probing the backing store."""

    connected: bool
    status: str
    latency_ms: float | None = None

    @property
    def ok(self) -> bool:
        if not self.connected:
            return False
        return self.status == "healthy" or (self.latency_ms or 0.0) < 1000.0


@dataclass(frozen=True)
class Caller:
    """The authenticated principal behind a dashboard request."""

    user_id: str
    role: str | None = None
    tenant_id: str | None = None


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry captured from the package's own loggers.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, WARNING).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)
