"""NDJSON encoder for audit rows."""

import json
from collections.abc import Iterable

from tenantpulse.core.encoding.payloads import encode_audit_event
from tenantpulse.core.models import AuditEvent


def encode_audit_rows(events: Iterable[AuditEvent]) -> str:
    """Encode audit events to newline-delimited JSON.

    Args:
        events: An iterable of AuditEvent objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no events.
    """
    lines = [json.dumps(encode_audit_event(event)) for event in events]

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
