"""Prometheus metric definitions for the payment service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter(
    "payment_requests_total", "Total payment operations", ["service", "operation"]
)
payment_latency_seconds = Histogram(
    "payment_latency_seconds", "Payment operation latency seconds", ["service", "operation"]
)
payment_transitions_total = Counter(
    "payment_transitions_total", "Applied payment status transitions", ["service", "to_state"]
)
order_lookup_failures_total = Counter(
    "order_lookup_failures_total",
    "Remote order fetches that failed",
    ["service", "operation"],
)
payment_divergence_total = Counter(
    "payment_divergence_total",
    "Payments persisted while the remote order status update failed",
    ["service"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
