"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
content_moderated_total = Counter(
    "content_moderated_total",
    "Total moderation transitions",
    ["target_state"],  # APPROVED, REJECTED
)

content_sync_items_total = Counter(
    "content_sync_items_total",
    "Content items processed by the mobile sync projector",
    ["kind", "result"],  # created, existing, failed
)

usage_records_total = Counter(
    "usage_records_total",
    "Usage ledger calls",
    ["kind", "outcome"],  # new, existing
)

payment_requests_expired_total = Counter(
    "payment_requests_expired_total",
    "Payment requests flipped from PENDING to EXPIRED",
)

subscriptions_expired_total = Counter(
    "subscriptions_expired_total",
    "Stored subscription rows flipped from ACTIVE to EXPIRED",
)

storage_errors_total = Counter(
    "storage_errors_total",
    "Transient storage faults surfaced to callers",
)

# Histograms
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

sync_batch_duration_seconds = Histogram(
    "sync_batch_duration_seconds",
    "Duration of a full sync_all run",
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0],
)


router = APIRouter()


@router.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
