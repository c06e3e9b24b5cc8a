"""
Prometheus metrics for monitoring.

Metrics collected:
- HTTP request duration (histogram)
- HTTP request count by status code (counter)
- Active requests (gauge)
- Authentication outcomes per plane (counter)
- Session lifecycle (counters)
- Temporary access exchanges (counter)
- Billing webhook events (counter)
- Background task duration (histogram)
"""

from prometheus_client import Counter, Histogram, Gauge, Info

from app.config import settings


# Application info
app_info = Info("onlytrack_app", "OnlyTrack application information")
app_info.info({
    "version": settings.app_version,
    "environment": settings.environment,
})

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
)

# Authentication metrics
login_attempts_total = Counter(
    "onlytrack_login_attempts_total",
    "Login attempts by plane and outcome",
    ["plane", "outcome"],
)

auth_failures_total = Counter(
    "onlytrack_auth_failures_total",
    "Rejected authenticated requests by plane and reason",
    ["plane", "reason"],
)

sessions_created_total = Counter(
    "onlytrack_sessions_created_total",
    "Sessions created at login",
)

sessions_revoked_total = Counter(
    "onlytrack_sessions_revoked_total",
    "Sessions deleted by logout or purge",
    ["reason"],
)

demo_exchanges_total = Counter(
    "onlytrack_demo_exchanges_total",
    "Temporary access tokens exchanged for demo tokens",
    ["outcome"],
)

# Billing metrics
billing_webhook_events_total = Counter(
    "onlytrack_billing_webhook_events_total",
    "Billing webhook events received",
    ["event_type", "handled"],
)

# Background task metrics
task_duration_seconds = Histogram(
    "task_duration_seconds",
    "Background task duration in seconds",
    ["task_name", "status"],
    buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0),
)
