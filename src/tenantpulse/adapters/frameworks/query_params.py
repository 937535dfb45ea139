"""Query parameter normalisation shared by the HTTP adapters.

Dashboard filters never fail a request: malformed values are treated as
absent and the core applies its defaults.
"""

import math

DEFAULT_REPORT_TYPE = "userManagement"


def _parse_epoch_ms_param(raw: str | None) -> int | None:
    """Parse an epoch-millis query value.

    Returns:
        The value as int, or None if missing, malformed, zero, negative,
        NaN or infinite.
    """
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value) or value <= 0:
        return None
    return int(value)


def _parse_report_type(raw: str | None) -> str:
    """Return the requested report type, defaulting to ``userManagement``.

    Unknown types are passed through unchanged; the report service answers
    them with empty data.
    """
    return raw or DEFAULT_REPORT_TYPE
