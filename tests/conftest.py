"""Pytest configuration and fixtures for Todo Reminders tests."""

import dataclasses
import os
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytz
from fastapi.testclient import TestClient

# Set test environment
os.environ["APP_ENV"] = "test"
os.environ["DEBUG"] = "true"
os.environ["TZ"] = "Asia/Kathmandu"
os.environ["NOTION_API_KEY"] = "test_notion_key"
os.environ["NOTION_REMINDERS_DATA_SOURCE_ID"] = "reminders_ds"
os.environ["NOTION_TODOS_DATA_SOURCE_ID"] = "todos_ds"
os.environ["SMTP_USERNAME"] = "bot@example.com"
os.environ["SMTP_PASSWORD"] = "test_password"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["ALERT_EMAIL"] = ""

from app.domain.entities.reminder import Reminder, ReminderFilter, ReminderStatus  # noqa: E402
from app.domain.entities.todo import Todo, TodoFilter  # noqa: E402
from app.domain.repositories.base import IReminderRepository, ITodoRepository  # noqa: E402
from app.services.mailer import MailTransport  # noqa: E402
from app.utils.errors import MailDeliveryError, NotFoundError, NotionAPIError  # noqa: E402


def utc(year, month, day, hour=0, minute=0, second=0) -> datetime:
    """Aware UTC datetime shortcut."""
    return datetime(year, month, day, hour, minute, second, tzinfo=pytz.utc)


# ==================== FAKES ====================


class FakeReminderRepository(IReminderRepository):
    """In-memory reminder store that records every write."""

    def __init__(self, reminders: list[Reminder] | None = None):
        self.reminders: dict[str, Reminder] = {r.id: r for r in reminders or []}
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_find: Exception | None = None
        self.fail_update_ids: set[str] = set()
        self._next_id = 1

    async def get_by_id(self, id: str) -> Reminder | None:
        return self.reminders.get(id)

    async def create(self, reminder: Reminder) -> Reminder:
        created = dataclasses.replace(
            reminder,
            id=f"rem_{self._next_id}",
            created_at=utc(2024, 1, 1),
        )
        self._next_id += 1
        self.reminders[created.id] = created
        return created

    async def update(self, id: str, fields: dict[str, Any]) -> Reminder:
        self.updates.append((id, dict(fields)))
        if id in self.fail_update_ids:
            raise NotionAPIError("update_page: 500 Internal Server Error", status=500)
        if id not in self.reminders:
            raise NotFoundError("Recordatorio", id)
        updated = dataclasses.replace(self.reminders[id], **fields)
        self.reminders[id] = updated
        return updated

    async def delete(self, id: str) -> bool:
        return self.reminders.pop(id, None) is not None

    async def find(self, filter: ReminderFilter) -> list[Reminder]:
        if self.fail_find is not None:
            raise self.fail_find

        key = (lambda r: r.remind_at) if filter.order_by == "remind_at" else (lambda r: r.created_at or r.remind_at)
        found = sorted(
            (r for r in self.reminders.values() if filter.matches(r)),
            key=key,
            reverse=filter.descending,
        )
        return found[:filter.limit] if filter.limit else found


class FakeTodoRepository(ITodoRepository):
    """In-memory todo store."""

    def __init__(self, todos: list[Todo] | None = None):
        self.todos: dict[str, Todo] = {t.id: t for t in todos or []}
        self._next_id = 1

    async def get_by_id(self, id: str) -> Todo | None:
        return self.todos.get(id)

    async def create(self, todo: Todo) -> Todo:
        created = dataclasses.replace(
            todo,
            id=f"todo_{self._next_id}",
            created_at=utc(2024, 1, 1, 0, self._next_id),
        )
        self._next_id += 1
        self.todos[created.id] = created
        return created

    async def update(self, id: str, fields: dict[str, Any]) -> Todo:
        if id not in self.todos:
            raise NotFoundError("Pendiente", id)
        updated = dataclasses.replace(self.todos[id], **fields)
        self.todos[id] = updated
        return updated

    async def delete(self, id: str) -> bool:
        return self.todos.pop(id, None) is not None

    async def find(self, filter: TodoFilter) -> list[Todo]:
        found = [
            t for t in self.todos.values()
            if (filter.user_id is None or t.user_id == filter.user_id)
            and (filter.completed is None or t.completed == filter.completed)
            and (not filter.search or filter.search.lower() in t.title.lower())
        ]
        found.sort(key=lambda t: t.created_at, reverse=filter.descending)
        return found[:filter.limit] if filter.limit else found


class FakeMailer(MailTransport):
    """Mail transport that records messages and fails for chosen recipients."""

    def __init__(self, fail_for: set[str] | None = None):
        self.sent: list[dict[str, Any]] = []
        self.fail_for = fail_for or set()

    async def send(self, to, subject, html_body, text_body=None) -> None:
        if to in self.fail_for:
            raise MailDeliveryError(f"550 Mailbox unavailable: {to}")
        self.sent.append({
            "to": to,
            "subject": subject,
            "html_body": html_body,
            "text_body": text_body,
        })


# ==================== SAMPLE DATA ====================


def make_reminder(id: str = "rem_1", **overrides) -> Reminder:
    """Build a pending reminder; any field can be overridden."""
    data = {
        "id": id,
        "email": f"{id}@example.com",
        "subject": "Pay rent",
        "description": "Transfer before noon",
        "remind_at": utc(2024, 1, 1, 0, 0),
        "status": ReminderStatus.PENDING,
        "email_sent": False,
        "user_id": "user_1",
        "timezone": "Asia/Kathmandu",
        "created_at": utc(2023, 12, 31),
    }
    data.update(overrides)
    return Reminder(**data)


@pytest.fixture
def fake_mailer():
    return FakeMailer()


@pytest.fixture
def reminder_repository():
    return FakeReminderRepository()


@pytest.fixture
def todo_repository():
    return FakeTodoRepository()


@pytest.fixture
def sample_reminder():
    return make_reminder()


# ==================== NOTION ====================


@pytest.fixture
def mock_notion_client():
    """AsyncClient mock with the namespaces NotionService uses."""
    client = MagicMock()
    client.data_sources.query = AsyncMock()
    client.pages.create = AsyncMock()
    client.pages.update = AsyncMock()
    client.pages.retrieve = AsyncMock()
    client.users.me = AsyncMock(return_value={"id": "bot_user"})
    return client


# ==================== TEST CLIENT ====================


@pytest.fixture
def test_client(reminder_repository, todo_repository):
    """FastAPI client wired to in-memory services."""
    from app.domain.services.reminder_service import ReminderService
    from app.domain.services.todo_service import TodoService
    from app.main import app

    reminder_service = ReminderService(reminder_repository)
    todo_service = TodoService(todo_repository)

    with patch("app.api.admin.get_reminder_service", return_value=reminder_service), \
         patch("app.api.reminders.get_reminder_service", return_value=reminder_service), \
         patch("app.api.todos.get_todo_service", return_value=todo_service):
        with TestClient(app) as client:
            yield client
