"""Runtime configuration for the aggregation core."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_PERFORMANCE_ROLES = frozenset({"team_leader", "support_worker"})
DEFAULT_ADMIN_ROLES = frozenset({"admin", "superadmin"})

_ENV_PREFIX = "TENANTPULSE_"


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(_ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    # Reject NaN and infinities
    if value != value or value in (float("inf"), float("-inf")):
        return default
    return value


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(_ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_roles(env: Mapping[str, str], name: str, default: frozenset[str]) -> frozenset[str]:
    raw = env.get(_ENV_PREFIX + name)
    if not raw:
        return default
    roles = frozenset(r.strip().lower() for r in raw.split(",") if r.strip())
    return roles or default


@dataclass(frozen=True)
class AggregationConfig:
    """Tunables for collection, bucketing and reporting.

    Attributes:
        default_samples: Sample count used when the window token is unusable.
        max_samples: Upper bound on the sample count.
        lock_ttl_seconds: Lifetime of a bucket write lock.
        probe_timeout_seconds: Per-probe timeout in the snapshot collector.
        default_latency_ms: Latency reported when the storage probe fails.
        uptime_pct: Uptime reported in every snapshot.
        alert_count: Alert count reported in every snapshot.
        session_window_ms: How far back presence counts as an online session.
        audit_limit: Maximum audit events fetched per report.
        performance_roles: Roles included in the performance report.
        admin_roles: Roles allowed to read the metrics series.
    """

    default_samples: int = 10
    max_samples: int = 60
    lock_ttl_seconds: float = 5.0
    probe_timeout_seconds: float = 2.0
    default_latency_ms: float = 120.0
    uptime_pct: float = 99.9
    alert_count: int = 0
    session_window_ms: int = 6 * 60 * 1000
    audit_limit: int = 1000
    performance_roles: frozenset[str] = field(default=DEFAULT_PERFORMANCE_ROLES)
    admin_roles: frozenset[str] = field(default=DEFAULT_ADMIN_ROLES)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "AggregationConfig":
        """Build a config from ``TENANTPULSE_*`` variables.

        Missing or malformed values fall back to the defaults.
        """
        env = os.environ if env is None else env
        base = cls()
        return cls(
            default_samples=_env_int(env, "DEFAULT_SAMPLES", base.default_samples),
            max_samples=_env_int(env, "MAX_SAMPLES", base.max_samples),
            lock_ttl_seconds=_env_float(env, "LOCK_TTL_SECONDS", base.lock_ttl_seconds),
            probe_timeout_seconds=_env_float(
                env, "PROBE_TIMEOUT_SECONDS", base.probe_timeout_seconds
            ),
            default_latency_ms=_env_float(
                env, "DEFAULT_LATENCY_MS", base.default_latency_ms
            ),
            uptime_pct=_env_float(env, "UPTIME_PCT", base.uptime_pct),
            alert_count=_env_int(env, "ALERT_COUNT", base.alert_count),
            session_window_ms=_env_int(env, "SESSION_WINDOW_MS", base.session_window_ms),
            audit_limit=_env_int(env, "AUDIT_LIMIT", base.audit_limit),
            performance_roles=_env_roles(
                env, "PERFORMANCE_ROLES", base.performance_roles
            ),
            admin_roles=_env_roles(env, "ADMIN_ROLES", base.admin_roles),
        )
