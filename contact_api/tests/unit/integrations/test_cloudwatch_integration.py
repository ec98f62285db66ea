"""
Unit tests for the CloudWatch telemetry emitter.
"""

import asyncio
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from contact_api.config.settings import Settings
from contact_api.integrations.cloudwatch import TelemetryEmitter, build_cloudwatch_client


class TestTelemetryEmitter:
    """Test cases for TelemetryEmitter."""

    @pytest.mark.asyncio
    async def test_record_request_sends_duration_and_count(self):
        client = MagicMock()
        exporter = MagicMock()
        emitter = TelemetryEmitter(client=client, namespace="ContactFormAPI", exporter=exporter)

        emitter.record_request("/api/contact", 42.0)
        await emitter.drain()

        client.put_metric_data.assert_called_once()
        kwargs = client.put_metric_data.call_args.kwargs
        assert kwargs["Namespace"] == "ContactFormAPI"

        duration, count = kwargs["MetricData"]
        assert duration["MetricName"] == "RequestDuration"
        assert duration["Value"] == 42.0
        assert duration["Unit"] == "Milliseconds"
        assert duration["Dimensions"] == [{"Name": "Endpoint", "Value": "/api/contact"}]
        assert isinstance(duration["Timestamp"], datetime)
        assert count["MetricName"] == "RequestCount"
        assert count["Value"] == 1.0
        assert count["Unit"] == "Count"
        assert count["Dimensions"] == [{"Name": "Endpoint", "Value": "/api/contact"}]

        exporter.record_request.assert_called_once_with("/api/contact", 42.0)

    @pytest.mark.asyncio
    async def test_record_error_sends_error_count(self):
        client = MagicMock()
        exporter = MagicMock()
        emitter = TelemetryEmitter(client=client, exporter=exporter)

        emitter.record_error("FetchSubmissionsError")
        await emitter.drain()

        (datum,) = client.put_metric_data.call_args.kwargs["MetricData"]
        assert datum["MetricName"] == "Errors"
        assert datum["Value"] == 1.0
        assert datum["Unit"] == "Count"
        assert datum["Dimensions"] == [{"Name": "ErrorType", "Value": "FetchSubmissionsError"}]
        exporter.record_error.assert_called_once_with("FetchSubmissionsError")

    @pytest.mark.asyncio
    async def test_delivery_does_not_block_caller(self):
        """record_* returns before CloudWatch has been called."""
        client = MagicMock()
        emitter = TelemetryEmitter(client=client, exporter=MagicMock())

        emitter.record_request("/", 1.0)

        assert emitter.pending == 1
        client.put_metric_data.assert_not_called()

        await emitter.drain()
        assert emitter.pending == 0
        client.put_metric_data.assert_called_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutMetricData"),
            EndpointConnectionError(endpoint_url="https://monitoring.us-east-1.amazonaws.com"),
            RuntimeError("unexpected"),
        ],
    )
    async def test_delivery_failure_is_logged_not_raised(self, error, caplog):
        client = MagicMock()
        client.put_metric_data.side_effect = error
        emitter = TelemetryEmitter(client=client, exporter=MagicMock())

        emitter.record_error("ContactSubmissionError")
        await emitter.drain()

        assert emitter.pending == 0
        assert "CloudWatch Metric Error" in caplog.text

    @pytest.mark.asyncio
    async def test_put_metric_data_reports_outcome(self):
        client = MagicMock()
        emitter = TelemetryEmitter(client=client, exporter=MagicMock())
        assert await emitter._put_metric_data([{"MetricName": "Errors"}]) is True

        client.put_metric_data.side_effect = RuntimeError("boom")
        assert await emitter._put_metric_data([{"MetricName": "Errors"}]) is False

    @pytest.mark.asyncio
    async def test_without_client_only_prometheus_is_updated(self):
        exporter = MagicMock()
        emitter = TelemetryEmitter(client=None, exporter=exporter)

        emitter.record_request("/api/submissions", 3.0)
        emitter.record_error("UnknownError")

        assert emitter.pending == 0
        exporter.record_request.assert_called_once_with("/api/submissions", 3.0)
        exporter.record_error.assert_called_once_with("UnknownError")

    def test_record_without_event_loop_drops_cloudwatch_call(self):
        client = MagicMock()
        emitter = TelemetryEmitter(client=client, exporter=MagicMock())

        emitter.record_error("ContactSubmissionError")

        assert emitter.pending == 0
        client.put_metric_data.assert_not_called()

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self):
        emitter = TelemetryEmitter(client=MagicMock(), exporter=MagicMock())
        await asyncio.wait_for(emitter.drain(), timeout=1)


class TestBuildCloudWatchClient:
    """Test cases for client construction."""

    def test_uses_explicit_credentials(self):
        app_settings = Settings(
            _env_file=None,
            AWS_REGION="eu-central-1",
            AWS_ACCESS_KEY_ID="AKIA_TEST",
            AWS_SECRET_ACCESS_KEY="secret",
        )
        with patch("contact_api.integrations.cloudwatch.boto3") as mock_boto3:
            build_cloudwatch_client(app_settings)

        mock_boto3.client.assert_called_once_with(
            "cloudwatch",
            region_name="eu-central-1",
            aws_access_key_id="AKIA_TEST",
            aws_secret_access_key="secret",
        )

    def test_falls_back_to_default_credential_chain(self):
        app_settings = Settings(_env_file=None, AWS_REGION="us-west-2")
        app_settings.AWS_ACCESS_KEY_ID = None
        app_settings.AWS_SECRET_ACCESS_KEY = None
        with patch("contact_api.integrations.cloudwatch.boto3") as mock_boto3:
            build_cloudwatch_client(app_settings)

        mock_boto3.client.assert_called_once_with("cloudwatch", region_name="us-west-2")
