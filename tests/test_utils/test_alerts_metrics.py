"""Tests for operator alerts and job metrics."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import utc
from app.domain.entities.dispatch import DispatchReport, FailureStage
from app.utils import alerts
from app.utils.errors import ErrorCategory, ErrorContext, MailDeliveryError, NotionAPIError
from app.utils.metrics import MetricsCollector


def notion_context() -> ErrorContext:
    return ErrorContext(
        category=ErrorCategory.API_NOTION,
        operation="reminder_dispatch.select",
        error_type="NotionAPIError",
        message="query_all: 503",
    )


class TestAlerts:
    """Test suite for alert emails."""

    @pytest.fixture(autouse=True)
    def reset_limits(self):
        alerts.reset_alert_limits()
        yield
        alerts.reset_alert_limits()

    @pytest.mark.asyncio
    async def test_no_alert_email_configured(self):
        with patch.object(alerts.settings, "alert_email", ""):
            assert await alerts.send_alert(notion_context()) is False

    @pytest.mark.asyncio
    async def test_alert_is_sent_and_rate_limited(self):
        mailer = MagicMock()
        mailer.send = AsyncMock()

        with patch.object(alerts.settings, "alert_email", "ops@example.com"):
            with patch("app.services.mailer.get_mailer", return_value=mailer):
                results = [await alerts.send_alert(notion_context()) for _ in range(5)]

        assert results == [True, True, True, False, False]
        assert mailer.send.await_count == 3
        to, subject, _ = mailer.send.await_args.args
        assert to == "ops@example.com"
        assert "reminder_dispatch.select" in subject

    @pytest.mark.asyncio
    async def test_failed_alert_delivery_returns_false(self):
        mailer = MagicMock()
        mailer.send = AsyncMock(side_effect=MailDeliveryError("smtp down"))

        with patch.object(alerts.settings, "alert_email", "ops@example.com"):
            with patch("app.services.mailer.get_mailer", return_value=mailer):
                assert await alerts.send_alert(notion_context()) is False

    @pytest.mark.asyncio
    async def test_alert_critical_error_uses_error_category(self):
        with patch.object(alerts, "send_alert", new=AsyncMock(return_value=True)) as mock_send:
            context = await alerts.alert_critical_error(
                NotionAPIError("query_all: 503", status=503),
                "reminder_dispatch.select",
            )

        assert context.category == ErrorCategory.API_NOTION
        mock_send.assert_awaited_once()


class TestMetricsCollector:
    """Test suite for MetricsCollector."""

    @pytest.mark.asyncio
    async def test_record_job(self):
        collector = MetricsCollector()

        report = DispatchReport(timestamp=utc(2024, 1, 1), processed_count=3)
        report.record_sent()
        report.record_sent()
        report.record_failure("r2", FailureStage.SEND, "550")
        await collector.record_job("reminder_dispatch", report, 12.5)
        await collector.record_job(
            "reminder_dispatch",
            DispatchReport.selection_failed(utc(2024, 1, 1, 0, 1), "503"),
            3.0,
        )

        [metrics] = collector.get_job_metrics("reminder_dispatch")
        assert metrics["run_count"] == 2
        assert metrics["failed_runs"] == 1
        assert metrics["processed_total"] == 3
        assert metrics["sent_total"] == 2
        assert metrics["error_total"] == 1
        assert metrics["last_report"]["success"] is False

        summary = collector.get_summary()
        assert summary["jobs"]["total_runs"] == 2

    def test_reset(self):
        collector = MetricsCollector()
        collector.reset()

        assert collector.get_job_metrics() == []
