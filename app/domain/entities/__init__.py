"""Domain Entities - Dataclasses del dominio."""

from app.domain.entities.reminder import Reminder, ReminderFilter, ReminderStatus
from app.domain.entities.todo import Todo, TodoFilter
from app.domain.entities.dispatch import DispatchFailure, DispatchReport, FailureStage

__all__ = [
    "Reminder",
    "ReminderFilter",
    "ReminderStatus",
    "Todo",
    "TodoFilter",
    "DispatchFailure",
    "DispatchReport",
    "FailureStage",
]
