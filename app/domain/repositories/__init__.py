"""Domain Repositories - Interfaces y implementaciones."""

from app.domain.repositories.base import (
    IRepository,
    IReminderRepository,
    ITodoRepository,
)
from app.domain.repositories.notion_reminder_repository import NotionReminderRepository
from app.domain.repositories.notion_todo_repository import NotionTodoRepository

# Singletons
_reminder_repository: IReminderRepository | None = None
_todo_repository: ITodoRepository | None = None


def get_reminder_repository() -> IReminderRepository:
    """Obtiene el repositorio de recordatorios (singleton)."""
    global _reminder_repository
    if _reminder_repository is None:
        _reminder_repository = NotionReminderRepository()
    return _reminder_repository


def get_todo_repository() -> ITodoRepository:
    """Obtiene el repositorio de pendientes (singleton)."""
    global _todo_repository
    if _todo_repository is None:
        _todo_repository = NotionTodoRepository()
    return _todo_repository


__all__ = [
    # Interfaces
    "IRepository",
    "IReminderRepository",
    "ITodoRepository",
    # Implementations
    "NotionReminderRepository",
    "NotionTodoRepository",
    # Getters
    "get_reminder_repository",
    "get_todo_repository",
]
