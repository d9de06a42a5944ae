"""
Domain Services - Servicios de dominio sobre los repositorios.

Encapsulan validación y conversión de zona horaria antes de llegar al store.
"""

from app.domain.services.reminder_service import ReminderService, get_reminder_service
from app.domain.services.todo_service import TodoService, get_todo_service

__all__ = [
    "ReminderService",
    "get_reminder_service",
    "TodoService",
    "get_todo_service",
]
