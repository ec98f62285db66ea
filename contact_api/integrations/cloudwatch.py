"""
CloudWatch telemetry emitter for the Contact Form API.

Request duration, request count and error count are pushed to CloudWatch with
``PutMetricData``. Every call is fire-and-forget: the metric is sent from a
detached asyncio task, the blocking boto3 call runs in a worker thread, and
any failure is logged instead of being raised to the caller.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

import boto3
from botocore.client import BaseClient

from contact_api.config.settings import Settings
from contact_api.monitoring.metrics import PrometheusExporter

logger = logging.getLogger(__name__)

ENDPOINT_DIMENSION = "Endpoint"
ERROR_TYPE_DIMENSION = "ErrorType"


def build_cloudwatch_client(settings: Settings) -> BaseClient:
    """
    Create a CloudWatch client from the application settings.

    Explicit credentials are used when configured, otherwise boto3 falls back
    to its default credential chain.
    """
    kwargs: Dict[str, Any] = {"region_name": settings.AWS_REGION}
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
    return boto3.client("cloudwatch", **kwargs)


class TelemetryEmitter:
    """
    Best-effort metrics emitter.

    Each recorded event updates the local Prometheus collectors synchronously
    and, when a CloudWatch client is configured, schedules a ``PutMetricData``
    call in the background.
    """

    def __init__(
        self,
        client: Optional[BaseClient] = None,
        namespace: str = "ContactFormAPI",
        exporter: Optional[PrometheusExporter] = None,
    ):
        """
        Initialize the emitter.

        Args:
            client: boto3 CloudWatch client, or None to keep metrics local only
            namespace: CloudWatch namespace the metrics are published under
            exporter: Local Prometheus exporter
        """
        self.client = client
        self.namespace = namespace
        self.exporter = exporter or PrometheusExporter()
        self._pending: Set[asyncio.Task] = set()

        if client is None:
            logger.info("CloudWatch metrics disabled - recording to Prometheus only")
        else:
            logger.info(f"CloudWatch telemetry emitter initialized for namespace {namespace}")

    @property
    def pending(self) -> int:
        """Number of CloudWatch deliveries still in flight."""
        return len(self._pending)

    def record_request(self, endpoint: str, duration_ms: float) -> None:
        """
        Record one completed request: a duration datum and a count of one.

        Args:
            endpoint: Request path, used as the Endpoint dimension
            duration_ms: Request duration in milliseconds
        """
        self.exporter.record_request(endpoint, duration_ms)
        timestamp = datetime.now(timezone.utc)
        dimensions = [{"Name": ENDPOINT_DIMENSION, "Value": endpoint}]
        self._emit([
            {
                "MetricName": "RequestDuration",
                "Value": float(duration_ms),
                "Unit": "Milliseconds",
                "Timestamp": timestamp,
                "Dimensions": dimensions,
            },
            {
                "MetricName": "RequestCount",
                "Value": 1.0,
                "Unit": "Count",
                "Timestamp": timestamp,
                "Dimensions": dimensions,
            },
        ])

    def record_error(self, error_type: str) -> None:
        """
        Record one caught failure.

        Args:
            error_type: Failure category, used as the ErrorType dimension
        """
        self.exporter.record_error(error_type)
        self._emit([
            {
                "MetricName": "Errors",
                "Value": 1.0,
                "Unit": "Count",
                "Timestamp": datetime.now(timezone.utc),
                "Dimensions": [{"Name": ERROR_TYPE_DIMENSION, "Value": error_type}],
            },
        ])

    async def drain(self) -> None:
        """Wait for every in-flight CloudWatch delivery to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _emit(self, metric_data: List[Dict[str, Any]]) -> None:
        if self.client is None:
            return
        try:
            task = asyncio.get_running_loop().create_task(self._put_metric_data(metric_data))
        except RuntimeError:
            logger.warning("No running event loop - dropping CloudWatch metric")
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _put_metric_data(self, metric_data: List[Dict[str, Any]]) -> bool:
        """
        Send a batch of metric data to CloudWatch.

        Returns:
            bool: True if CloudWatch accepted the data, False otherwise
        """
        try:
            await asyncio.to_thread(
                self.client.put_metric_data,
                Namespace=self.namespace,
                MetricData=metric_data,
            )
            logger.debug(f"Pushed {len(metric_data)} metric(s) to CloudWatch")
            return True
        except Exception as e:
            logger.error(f"CloudWatch Metric Error: {e}")
            return False
