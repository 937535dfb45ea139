"""Wire encoders for series, reports and audit rows."""

from tenantpulse.core.encoding.ndjson import encode_audit_rows
from tenantpulse.core.encoding.payloads import (
    encode_audit_report,
    encode_performance_report,
    encode_series,
    encode_support_worker_report,
    encode_user_stats,
)

__all__ = [
    "encode_audit_report",
    "encode_audit_rows",
    "encode_performance_report",
    "encode_series",
    "encode_support_worker_report",
    "encode_user_stats",
]
