# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "scheduling_requests_total",
    "Total HTTP requests to scheduling service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "scheduling_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "scheduling_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
ASSIGNMENTS_COMMITTED = Counter(
    "scheduling_assignments_committed_total",
    "Total assignments written to a schedule day",
    ["source"],
)
CONFLICTS_DETECTED = Counter(
    "scheduling_conflicts_detected_total",
    "Total overlapping assignments reported",
    ["source"],
)
JOBS_PLACED = Counter(
    "scheduling_jobs_placed_total",
    "Total jobs placed on a day without a person",
)
RECURRING_INSTANCES = Counter(
    "scheduling_recurring_instances_total",
    "Recurring job dates processed, by outcome",
    ["outcome"],
)
TEMPLATES_CREATED = Counter(
    "scheduling_templates_created_total",
    "Total recurring job templates created",
)
ACTIVE_TEMPLATES = Gauge(
    "scheduling_active_templates",
    "Number of active recurring job templates",
)
