# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services, repositories and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "volunteer_requests_total",
    "Total HTTP requests to the volunteer service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "volunteer_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "volunteer_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
VOLUNTEERS_CREATED = Counter(
    "volunteers_created_total",
    "Total volunteers created",
)
VOLUNTEERS_UPDATED = Counter(
    "volunteers_updated_total",
    "Total volunteer updates applied",
)
VOLUNTEERS_DELETED = Counter(
    "volunteers_deleted_total",
    "Total volunteers deleted",
)
VOLUNTEER_SEARCHES = Counter(
    "volunteer_searches_total",
    "Total volunteer searches performed",
    ["active"],
)
VALIDATION_FAILURES = Counter(
    "volunteer_validation_failures_total",
    "Create/update requests rejected by validation",
    ["field"],
)

# ── Storage Metrics (updated by repository only) ──
VOLUNTEERS_TOTAL = Gauge(
    "volunteers_total",
    "Number of volunteers currently on the roster",
)
MIRROR_WRITES = Counter(
    "volunteer_mirror_writes_total",
    "Successful full rewrites of the JSON mirror",
)
MIRROR_WRITE_FAILURES = Counter(
    "volunteer_mirror_write_failures_total",
    "Failed attempts to rewrite the JSON mirror",
)
MIRROR_WRITE_LATENCY = Histogram(
    "volunteer_mirror_write_seconds",
    "Time to rewrite the JSON mirror",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)
