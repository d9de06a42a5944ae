"""
Reminder Entity - Representación de un recordatorio por correo.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from app.utils.timezone import format_local, to_iso, utc_to_local


class ReminderStatus(str, Enum):
    """Estados de recordatorio."""
    PENDING = "pending"
    SENT = "sent"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class Reminder:
    """
    Entidad de Recordatorio.

    `remind_at` siempre es un instante UTC; la zona de referencia sólo
    se usa para capturar y mostrar la hora.
    """

    id: str
    email: str
    subject: str
    remind_at: datetime
    description: str = ""
    status: ReminderStatus = ReminderStatus.PENDING

    # Idempotencia del envío
    email_sent: bool = False
    sent_at: datetime | None = None
    last_error: str | None = None

    # Usuario
    user_id: str | None = None

    # Captura
    timezone: str | None = None
    is_recurring: bool = False

    # Metadata
    created_at: datetime | None = None

    # Raw data
    _raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def is_eligible(self, now: datetime) -> bool:
        """Pendiente, sin correo enviado y con hora cumplida."""
        return (
            self.status == ReminderStatus.PENDING
            and not self.email_sent
            and self.remind_at <= now
        )

    def local_time(self, tz_name: str | None = None) -> datetime:
        """Hora programada en la zona de referencia."""
        return utc_to_local(self.remind_at, tz_name or self.timezone)

    def to_dict(self) -> dict[str, Any]:
        """Convierte a diccionario."""
        return {
            "id": self.id,
            "email": self.email,
            "subject": self.subject,
            "description": self.description,
            "remind_at": to_iso(self.remind_at),
            "remind_at_local": format_local(self.remind_at, self.timezone),
            "status": self.status.value,
            "email_sent": self.email_sent,
            "sent_at": to_iso(self.sent_at) if self.sent_at else None,
            "last_error": self.last_error,
            "user_id": self.user_id,
            "timezone": self.timezone,
            "is_recurring": self.is_recurring,
            "created_at": to_iso(self.created_at) if self.created_at else None,
        }


@dataclass
class ReminderFilter:
    """Filtros para buscar recordatorios."""

    user_id: str | None = None
    status: ReminderStatus | list[ReminderStatus] | None = None
    email_sent: bool | None = None
    remind_at_on_or_before: datetime | None = None
    remind_at_before: datetime | None = None
    remind_at_after: datetime | None = None
    order_by: str = "created_at"
    descending: bool = True
    limit: int | None = None

    @classmethod
    def due(cls, now: datetime) -> "ReminderFilter":
        """Filtro de elegibilidad del dispatch."""
        return cls(
            status=ReminderStatus.PENDING,
            email_sent=False,
            remind_at_on_or_before=now,
            order_by="remind_at",
            descending=False,
        )

    def matches(self, reminder: Reminder) -> bool:
        """Evalúa el filtro en memoria."""
        if self.user_id is not None and reminder.user_id != self.user_id:
            return False
        if self.status is not None:
            statuses = [self.status] if isinstance(self.status, ReminderStatus) else self.status
            if reminder.status not in statuses:
                return False
        if self.email_sent is not None and reminder.email_sent != self.email_sent:
            return False
        if self.remind_at_on_or_before and reminder.remind_at > self.remind_at_on_or_before:
            return False
        if self.remind_at_before and reminder.remind_at >= self.remind_at_before:
            return False
        if self.remind_at_after and reminder.remind_at <= self.remind_at_after:
            return False
        return True
