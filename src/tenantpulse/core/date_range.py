"""Resolve report date filters into concrete intervals."""

from tenantpulse.core.models import DateRange

HOUR_MS = 60 * 60 * 1000

PRESET_DURATIONS_MS: dict[str, int] = {
    "24hours": 24 * HOUR_MS,
    "7days": 7 * 24 * HOUR_MS,
    "30days": 30 * 24 * HOUR_MS,
    "90days": 90 * 24 * HOUR_MS,
}


def resolve_date_range(
    start_ms: int | None = None,
    end_ms: int | None = None,
    preset: str | None = None,
    *,
    now_ms: int,
) -> DateRange:
    """Turn explicit bounds or a named preset into a ``DateRange``.

    Explicit bounds win whenever either is given. Otherwise a known preset
    spans ``[now_ms - duration, now_ms]``. ``"all"``, a missing preset or an
    unknown one leaves the range unbounded.
    """
    if start_ms is not None or end_ms is not None:
        return DateRange(start_ms=start_ms, end_ms=end_ms)
    if not preset or preset == "all":
        return DateRange()
    duration = PRESET_DURATIONS_MS.get(preset)
    if duration is None:
        return DateRange()
    return DateRange(start_ms=now_ms - duration, end_ms=now_ms)
