"""Tests for the admin and health endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

from conftest import make_reminder, utc
from app.domain.entities.dispatch import DispatchReport, FailureStage
from app.domain.entities.reminder import ReminderStatus


class TestHealth:
    """Test suite for health checks."""

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_detailed(self, test_client):
        notion = MagicMock()
        notion.test_connection = AsyncMock(return_value=False)

        with patch("app.services.notion.get_notion_service", return_value=notion):
            response = test_client.get("/health/detailed")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "degraded"
        assert body["checks"]["scheduler"]["status"] == "disabled"


class TestAdminDispatch:
    """Test suite for POST /admin/dispatch."""

    def test_dispatch_success(self, test_client):
        report = DispatchReport(timestamp=utc(2024, 1, 1, 0, 5), processed_count=3)
        report.record_sent()
        report.record_sent()
        report.record_failure("r2", FailureStage.SEND, "550 Mailbox unavailable")

        with patch("app.api.admin.dispatch_due_reminders", new=AsyncMock(return_value=report)):
            response = test_client.post("/admin/dispatch")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["processed_count"] == 3
        assert body["sent_count"] == 2
        assert body["error_count"] == 1
        assert body["timestamp"] == "2024-01-01T00:05:00.000Z"
        assert body["failures"] == [
            {"reminder_id": "r2", "stage": "send", "message": "550 Mailbox unavailable"}
        ]

    def test_dispatch_selection_failure_returns_500(self, test_client):
        report = DispatchReport.selection_failed(utc(2024, 1, 1, 0, 5), "query_all: 503")

        with patch("app.api.admin.dispatch_due_reminders", new=AsyncMock(return_value=report)):
            response = test_client.post("/admin/dispatch")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "query_all: 503",
            "timestamp": "2024-01-01T00:05:00.000Z",
        }

    def test_triggers(self, test_client):
        response = test_client.get("/admin/triggers")

        assert response.status_code == 200
        assert response.json() == {"triggers": []}

    def test_metrics(self, test_client):
        response = test_client.get("/admin/metrics")

        assert response.status_code == 200
        assert "jobs" in response.json()


class TestFailedReminders:
    """Test suite for the failed-reminder recovery endpoints."""

    def test_list_and_retry(self, test_client, reminder_repository):
        reminder_repository.reminders = {
            "r1": make_reminder("r1", status=ReminderStatus.FAILED, last_error="550"),
            "r2": make_reminder("r2"),
        }

        listed = test_client.get("/admin/reminders/failed")
        retried = test_client.post("/admin/reminders/r1/retry")

        assert listed.json()["count"] == 1
        assert retried.status_code == 200
        assert retried.json()["status"] == "pending"
        assert retried.json()["last_error"] is None

    def test_retry_non_failed_is_422(self, test_client, reminder_repository):
        reminder_repository.reminders = {"r2": make_reminder("r2")}

        response = test_client.post("/admin/reminders/r2/retry")

        assert response.status_code == 422

    def test_retry_missing_is_404(self, test_client):
        response = test_client.post("/admin/reminders/missing/retry")

        assert response.status_code == 404
