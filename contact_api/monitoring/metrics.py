"""Prometheus collectors mirroring the telemetry sent to CloudWatch."""

import logging

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

# Define metrics
REQUEST_DURATION = Histogram(
    "contact_api_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

REQUEST_COUNT = Counter(
    "contact_api_requests_total",
    "Number of HTTP requests served",
    ["endpoint"],
)

ERRORS = Counter(
    "contact_api_errors_total",
    "Number of failures caught while serving requests",
    ["error_type"],
)


class PrometheusExporter:
    """Records request and error metrics into the process-local Prometheus registry."""

    def record_request(self, endpoint: str, duration_ms: float) -> None:
        """
        Record a completed request.

        Args:
            endpoint: Request path
            duration_ms: Wall-clock duration of the request in milliseconds
        """
        REQUEST_DURATION.labels(endpoint=endpoint).observe(duration_ms / 1000.0)
        REQUEST_COUNT.labels(endpoint=endpoint).inc()

    def record_error(self, error_type: str) -> None:
        """
        Record a caught failure.

        Args:
            error_type: Failure category (e.g., 'ContactSubmissionError')
        """
        ERRORS.labels(error_type=error_type).inc()

    @staticmethod
    def render() -> tuple[bytes, str]:
        """Return the text exposition of all collectors and its content type."""
        return generate_latest(), CONTENT_TYPE_LATEST
