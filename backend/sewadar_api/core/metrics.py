"""Prometheus metrics shared by middleware, the auth gate and the audit sink."""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "sewadar_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "sewadar_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
AUTH_REJECTIONS = Counter(
    "sewadar_auth_rejections_total",
    "Requests rejected by the authorization gate",
    ["reason"],
)
AUDIT_WRITE_FAILURES = Counter(
    "sewadar_audit_write_failures_total",
    "Audit records that could not be persisted after all attempts",
    ["action"],
)
