"""
Reminders API - CRUD de recordatorios del usuario.

La identidad del usuario llega en el header X-User-Id, que pone la capa
de autenticación externa.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Header
from pydantic import BaseModel

from app.domain.services import get_reminder_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["reminders"])


class ReminderCreate(BaseModel):
    """Datos para crear un recordatorio; remind_at es hora local de referencia."""
    email: str
    subject: str
    description: str
    remind_at: datetime
    is_recurring: bool = False


class ReminderUpdate(BaseModel):
    email: str | None = None
    subject: str | None = None
    description: str | None = None
    remind_at: datetime | None = None
    is_recurring: bool | None = None


@router.post("", status_code=201)
async def create_reminder(data: ReminderCreate, x_user_id: str = Header(...)):
    reminder = await get_reminder_service().create_reminder(
        user_id=x_user_id,
        email=data.email,
        subject=data.subject,
        description=data.description,
        remind_at=data.remind_at,
        is_recurring=data.is_recurring,
    )
    return reminder.to_dict()


@router.get("")
async def list_reminders(x_user_id: str = Header(...)):
    reminders = await get_reminder_service().get_reminders(x_user_id)
    return {"reminders": [r.to_dict() for r in reminders]}


@router.get("/upcoming")
async def list_upcoming(limit: int = 5, x_user_id: str = Header(...)):
    reminders = await get_reminder_service().get_upcoming_reminders(x_user_id, limit=limit)
    return {"reminders": [r.to_dict() for r in reminders]}


@router.get("/overdue")
async def list_overdue(x_user_id: str = Header(...)):
    reminders = await get_reminder_service().get_overdue_reminders(x_user_id)
    return {"reminders": [r.to_dict() for r in reminders]}


@router.get("/{reminder_id}")
async def get_reminder(reminder_id: str, x_user_id: str = Header(...)):
    reminder = await get_reminder_service().get_reminder(reminder_id, user_id=x_user_id)
    return reminder.to_dict()


@router.patch("/{reminder_id}")
async def update_reminder(reminder_id: str, data: ReminderUpdate, x_user_id: str = Header(...)):
    """Actualiza sólo los campos enviados; null explícito se rechaza con 422."""
    updates = data.model_dump(exclude_unset=True)
    reminder = await get_reminder_service().update_reminder(reminder_id, updates, user_id=x_user_id)
    return reminder.to_dict()


@router.post("/{reminder_id}/cancel")
async def cancel_reminder(reminder_id: str, x_user_id: str = Header(...)):
    reminder = await get_reminder_service().cancel_reminder(reminder_id, user_id=x_user_id)
    return reminder.to_dict()


@router.delete("/{reminder_id}", status_code=204)
async def delete_reminder(reminder_id: str, x_user_id: str = Header(...)):
    await get_reminder_service().delete_reminder(reminder_id, user_id=x_user_id)
