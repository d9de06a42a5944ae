"""Routers HTTP de Todo Reminders."""

from app.api.admin import router as admin_router
from app.api.reminders import router as reminders_router
from app.api.todos import router as todos_router

__all__ = [
    "admin_router",
    "reminders_router",
    "todos_router",
]
