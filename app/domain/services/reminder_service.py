"""
Reminder Service - Servicio de dominio para recordatorios por correo.

Funcionalidades:
- Crear recordatorios convirtiendo la hora de referencia a UTC
- Listar recordatorios (todos, próximos, vencidos)
- Cancelar, borrar y marcar como enviados
- Recuperación manual de recordatorios fallidos
"""

import logging
import re
from datetime import datetime
from typing import Any

from app.config import get_settings
from app.domain.entities.reminder import Reminder, ReminderFilter, ReminderStatus
from app.domain.repositories import IReminderRepository, get_reminder_repository
from app.utils.errors import NotFoundError, ValidationError
from app.utils.timezone import local_to_utc, now_utc

logger = logging.getLogger(__name__)
settings = get_settings()

# Se valida con fullmatch: sin espacios ni saltos de línea en todo el valor
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

# Campos que el usuario puede modificar
EDITABLE_FIELDS = {"email", "subject", "description", "remind_at", "is_recurring"}


class ReminderService:
    """
    Servicio para gestionar recordatorios.

    Las horas que recibe de los usuarios son horas civiles de la zona de
    referencia; el repositorio sólo ve instantes UTC.
    """

    def __init__(
        self,
        repository: IReminderRepository | None = None,
        tz_name: str | None = None,
    ):
        self._repository = repository or get_reminder_repository()
        self._tz_name = tz_name or settings.tz

    # ==================== VALIDATION ====================

    def validate_reminder(
        self,
        data: dict[str, Any],
        now: datetime | None = None,
    ) -> dict[str, str]:
        """
        Valida los datos de un recordatorio.

        Args:
            data: email, subject, description, remind_at (hora local)
            now: Instante de referencia (default: ahora)

        Returns:
            Diccionario campo -> mensaje; vacío si es válido
        """
        errors: dict[str, str] = {}

        email = (data.get("email") or "").strip()
        if not EMAIL_PATTERN.fullmatch(email):
            errors["email"] = "Se requiere un email válido"

        if not (data.get("subject") or "").strip():
            errors["subject"] = "El asunto es obligatorio"

        if not (data.get("description") or "").strip():
            errors["description"] = "La descripción es obligatoria"

        remind_at = data.get("remind_at")
        if not remind_at:
            errors["remind_at"] = "La fecha y hora del recordatorio es obligatoria"
        elif local_to_utc(remind_at, self._tz_name) <= (now or now_utc()):
            errors["remind_at"] = "El recordatorio debe ser en el futuro"

        return errors

    # ==================== CRUD ====================

    async def create_reminder(
        self,
        user_id: str,
        email: str,
        subject: str,
        description: str,
        remind_at: datetime,
        is_recurring: bool = False,
        now: datetime | None = None,
    ) -> Reminder:
        """
        Crea un nuevo recordatorio pendiente.

        Args:
            user_id: ID del usuario dueño
            email: Destinatario
            subject: Asunto
            description: Descripción
            remind_at: Hora civil en la zona de referencia
            is_recurring: Marca informativa de recurrencia

        Returns:
            Reminder creado

        Raises:
            ValidationError: si los datos no son válidos
        """
        data = {
            "email": email,
            "subject": subject,
            "description": description,
            "remind_at": remind_at,
        }
        errors = self.validate_reminder(data, now=now)
        if errors:
            raise ValidationError("Recordatorio inválido", errors=errors)

        reminder = Reminder(
            id="",
            email=email.strip(),
            subject=subject.strip(),
            description=description,
            remind_at=local_to_utc(remind_at, self._tz_name),
            status=ReminderStatus.PENDING,
            email_sent=False,
            user_id=user_id,
            timezone=self._tz_name,
            is_recurring=is_recurring,
        )
        created = await self._repository.create(reminder)
        logger.info(f"Recordatorio creado: {subject} para {created.remind_at}")
        return created

    async def get_reminder(self, reminder_id: str, user_id: str | None = None) -> Reminder:
        """
        Obtiene un recordatorio o lanza NotFoundError.

        Con `user_id`, un recordatorio de otro usuario se trata como inexistente.
        """
        reminder = await self._repository.get_by_id(reminder_id)
        if reminder is None or (user_id is not None and reminder.user_id != user_id):
            raise NotFoundError("Recordatorio", reminder_id)
        return reminder

    async def get_reminders(self, user_id: str) -> list[Reminder]:
        """Obtiene todos los recordatorios del usuario, más recientes primero."""
        return await self._repository.find(ReminderFilter(user_id=user_id))

    async def get_upcoming_reminders(
        self,
        user_id: str,
        limit: int = 5,
        now: datetime | None = None,
    ) -> list[Reminder]:
        """Recordatorios pendientes que todavía no llegan a su hora."""
        return await self._repository.find(ReminderFilter(
            user_id=user_id,
            status=ReminderStatus.PENDING,
            remind_at_after=now or now_utc(),
            order_by="remind_at",
            descending=False,
            limit=limit,
        ))

    async def get_overdue_reminders(
        self,
        user_id: str,
        now: datetime | None = None,
    ) -> list[Reminder]:
        """Recordatorios pendientes cuya hora ya pasó."""
        return await self._repository.find(ReminderFilter(
            user_id=user_id,
            status=ReminderStatus.PENDING,
            remind_at_before=now or now_utc(),
            order_by="remind_at",
            descending=True,
        ))

    async def update_reminder(
        self,
        reminder_id: str,
        updates: dict[str, Any],
        user_id: str | None = None,
    ) -> Reminder:
        """
        Actualiza campos editables de un recordatorio.

        Si cambia `remind_at` se interpreta como hora de la zona de referencia.
        Ningún campo editable acepta null.
        """
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Campos no editables",
                errors={field: "Campo no editable" for field in sorted(unknown)},
            )

        errors = {
            field: "El campo no puede ser nulo"
            for field, value in sorted(updates.items())
            if value is None
        }
        for field in ("subject", "description"):
            if isinstance(updates.get(field), str) and not updates[field].strip():
                errors[field] = "El campo no puede estar vacío"
        if isinstance(updates.get("email"), str) and not EMAIL_PATTERN.fullmatch(updates["email"].strip()):
            errors["email"] = "Se requiere un email válido"
        if errors:
            raise ValidationError("Recordatorio inválido", errors=errors)

        if user_id is not None:
            await self.get_reminder(reminder_id, user_id)

        fields = dict(updates)
        if "email" in fields:
            fields["email"] = fields["email"].strip()
        if "remind_at" in fields:
            fields["remind_at"] = local_to_utc(fields["remind_at"], self._tz_name)

        return await self._repository.update(reminder_id, fields)

    async def mark_as_sent(self, reminder_id: str, sent_at: datetime | None = None) -> Reminder:
        """Marca un recordatorio como enviado."""
        return await self._repository.update(reminder_id, {
            "email_sent": True,
            "status": ReminderStatus.SENT,
            "sent_at": sent_at or now_utc(),
        })

    async def cancel_reminder(self, reminder_id: str, user_id: str | None = None) -> Reminder:
        """Cancela un recordatorio; el dispatch ya no lo selecciona."""
        if user_id is not None:
            await self.get_reminder(reminder_id, user_id)
        reminder = await self._repository.update(reminder_id, {"status": ReminderStatus.CANCELLED})
        logger.info(f"Recordatorio {reminder_id} cancelado")
        return reminder

    async def delete_reminder(self, reminder_id: str, user_id: str | None = None) -> bool:
        """Elimina un recordatorio."""
        if user_id is not None:
            await self.get_reminder(reminder_id, user_id)
        deleted = await self._repository.delete(reminder_id)
        if not deleted:
            raise NotFoundError("Recordatorio", reminder_id)
        return deleted

    async def get_due_reminders(self, now: datetime | None = None) -> list[Reminder]:
        """Recordatorios elegibles para el dispatch."""
        return await self._repository.get_due(now or now_utc())

    # ==================== OPERADORES ====================

    async def get_failed_reminders(self) -> list[Reminder]:
        """Recordatorios que el dispatch marcó como fallidos."""
        return await self._repository.find(ReminderFilter(
            status=ReminderStatus.FAILED,
            order_by="remind_at",
            descending=True,
        ))

    async def retry_failed_reminder(self, reminder_id: str) -> Reminder:
        """
        Regresa un recordatorio fallido a pendiente.

        Es el único camino para reintentar: el dispatch nunca reintenta
        por su cuenta un recordatorio en estado failed.
        """
        reminder = await self.get_reminder(reminder_id)
        if reminder.status != ReminderStatus.FAILED:
            raise ValidationError(
                "Sólo se pueden reintentar recordatorios fallidos",
                errors={"status": f"Estado actual: {reminder.status.value}"},
            )

        updated = await self._repository.update(reminder_id, {
            "status": ReminderStatus.PENDING,
            "last_error": None,
        })
        logger.info(f"Recordatorio {reminder_id} regresado a pendiente por un operador")
        return updated


# Singleton
_reminder_service: ReminderService | None = None


def get_reminder_service() -> ReminderService:
    """Obtiene la instancia del servicio de recordatorios."""
    global _reminder_service
    if _reminder_service is None:
        _reminder_service = ReminderService()
    return _reminder_service
