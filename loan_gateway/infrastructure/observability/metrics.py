"""Prometheus metrics for monitoring application outcomes, loan sizes, and disbursements"""

from typing import Optional
from prometheus_client import Counter, Histogram

# Application metrics
application_counter = Counter(
    "loan_application_total",
    "Total loan applications processed",
    ["outcome"],  # accepted | exceeds_max | error
)

max_principal_bucket_counter = Counter(
    "loan_max_principal_bucket",
    "Computed maximum principal by bucket",
    ["bucket"],  # 0, 0-50k, 50k-150k, 150k-300k, 300k+
)

quote_counter = Counter(
    "loan_quote_total",
    "Advisory loan calculations served",
)

# Approval workflow metrics
decision_counter = Counter(
    "loan_decision_total",
    "Admin decisions on loan applications",
    ["decision"],  # approved | denied
)

disbursement_latency_histogram = Histogram(
    "loan_disbursement_latency_seconds",
    "Time to credit approved funds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

disbursement_failure_counter = Counter(
    "loan_disbursement_failures_total",
    "Failed disbursement attempts",
)

notification_failure_counter = Counter(
    "loan_notification_failures_total",
    "Failed best-effort notification inserts",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_application(outcome: str, max_principal: Optional[float] = None) -> None:
    """Record apply outcome and the distribution of computed ceilings"""
    application_counter.labels(outcome=outcome).inc()

    if max_principal is None:
        return

    # Bucket ceilings for distribution analysis
    if max_principal <= 0:
        bucket = "0"
    elif max_principal <= 50_000:
        bucket = "0-50k"
    elif max_principal <= 150_000:
        bucket = "50k-150k"
    elif max_principal <= 300_000:
        bucket = "150k-300k"
    else:
        bucket = "300k+"

    max_principal_bucket_counter.labels(bucket=bucket).inc()
