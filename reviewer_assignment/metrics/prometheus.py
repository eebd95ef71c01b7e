# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus collectors for the reviewer assignment service.

HTTP collectors are fed by MetricsMiddleware, business collectors by the
service layer. Controllers never touch them.
"""

from prometheus_client import Counter, Histogram

HTTP_LABELS = ["method", "endpoint", "status"]

# ── HTTP ──
REQUEST_COUNT = Counter(
    "review_requests_total",
    "HTTP requests handled by the reviewer assignment service",
    HTTP_LABELS,
)
REQUEST_LATENCY = Histogram(
    "review_request_duration_seconds",
    "HTTP request handling time",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)
HTTP_ERRORS = Counter(
    "review_http_errors_total",
    "HTTP responses with status >= 400",
    HTTP_LABELS,
)

# ── Teams & users ──
TEAMS_CREATED = Counter("teams_created_total", "Teams created")
USER_ACTIVITY_CHANGES = Counter(
    "user_activity_changes_total",
    "is_active updates, by new value",
    ["is_active"],
)

# ── Pull requests ──
PULL_REQUESTS_CREATED = Counter("pull_requests_created_total", "Pull requests created")
PULL_REQUESTS_MERGED = Counter(
    "pull_requests_merged_total",
    "Merge calls that succeeded, repeats on merged pull requests included",
)
REVIEWERS_ASSIGNED = Histogram(
    "reviewers_assigned",
    "Reviewers assigned when a pull request is created",
    buckets=(0, 1, 2, 3, 5),
)
REASSIGNMENTS = Counter(
    "reviewer_reassignments_total",
    "Reviewer reassignment attempts, by outcome (success or error code)",
    ["outcome"],
)
