"""
Prometheus Metrics for M-Pesa SDK

Three views of Daraja traffic:
- responses received, by operation and HTTP status
- requests that never got a response, by operation and failure kind
- acknowledgements Daraja rejected, by operation and ResponseCode

Host application should expose the prometheus_client registry.
"""

import logging
from typing import Optional

from prometheus_client import Counter, Histogram

from .exceptions import TimeoutError as MpesaTimeoutError, TransportError

logger = logging.getLogger("mpesa_sdk.metrics")

REQUEST_COUNT = Counter(
    "mpesa_sdk_requests_total",
    "Daraja responses received",
    ["endpoint", "code"],
)

REQUEST_LATENCY = Histogram(
    "mpesa_sdk_request_latency_seconds",
    "Daraja request latency in seconds, failed requests included",
    ["endpoint"],
)

TRANSPORT_FAILURES = Counter(
    "mpesa_sdk_transport_failures_total",
    "Daraja requests that got no HTTP response",
    ["endpoint", "kind"],
)

REJECTIONS = Counter(
    "mpesa_sdk_rejections_total",
    "Daraja acknowledgements with a non-zero ResponseCode",
    ["endpoint", "response_code"],
)


def metrics_request(endpoint: str, code: int, latency: float) -> None:
    """
    Record a response received from Daraja.

    Args:
        endpoint: Operation name (e.g., 'b2c', 'oauth')
        code: HTTP status code
        latency: Request duration in seconds
    """
    try:
        REQUEST_COUNT.labels(endpoint=endpoint, code=str(code)).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)
    except Exception as e:
        # Metrics failures should not crash the SDK
        logger.debug("Failed to record metrics: %s", e)


def metrics_transport_failure(endpoint: str, error: TransportError, latency: float) -> None:
    """Record a request that ended without a response."""
    kind = "timeout" if isinstance(error, MpesaTimeoutError) else "network"
    try:
        TRANSPORT_FAILURES.labels(endpoint=endpoint, kind=kind).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)
    except Exception as e:
        logger.debug("Failed to record metrics: %s", e)


def metrics_rejection(endpoint: str, response_code: Optional[str]) -> None:
    """Record an acknowledgement Daraja did not accept."""
    try:
        REJECTIONS.labels(endpoint=endpoint, response_code=response_code or "missing").inc()
    except Exception as e:
        logger.debug("Failed to record metrics: %s", e)
