"""
NotionReminderRepository - Implementación del repositorio de recordatorios usando Notion.

Este repositorio traduce entre la entidad Reminder y las propiedades
del data source de recordatorios en Notion.
"""

import logging
from datetime import datetime
from typing import Any

from app.config import get_settings
from app.domain.entities.reminder import Reminder, ReminderFilter, ReminderStatus
from app.domain.repositories.base import IReminderRepository
from app.services.notion import (
    NotionService,
    checkbox_property,
    date_property,
    email_property,
    get_notion_service,
    read_checkbox,
    read_date,
    read_email,
    read_rich_text,
    read_select,
    read_title,
    rich_text_property,
    select_property,
    title_property,
)
from app.utils.errors import NotFoundError, NotionAPIError
from app.utils.timezone import parse_iso_datetime, to_iso

logger = logging.getLogger(__name__)
settings = get_settings()


class ReminderProps:
    """Propiedades del data source de recordatorios - EXACTAS de Notion."""

    SUBJECT = "Asunto"            # Title
    DESCRIPTION = "Descripción"   # Text
    EMAIL = "Email"               # Email
    REMIND_AT = "Fecha"           # Date (UTC)
    STATUS = "Estado"             # Select: pending/sent/cancelled/failed
    EMAIL_SENT = "Email Enviado"  # Checkbox
    SENT_AT = "Enviado En"        # Date
    LAST_ERROR = "Último Error"   # Text
    USER_ID = "Usuario"           # Text
    TIMEZONE = "Zona Horaria"     # Text
    IS_RECURRING = "Recurrente"   # Checkbox


class NotionReminderRepository(IReminderRepository):
    """
    Repositorio de recordatorios usando Notion como backend.

    Responsabilidades:
    - Traducir entre Reminder (dominio) y propiedades de Notion
    - Construir filtros de Notion a partir de ReminderFilter
    """

    def __init__(
        self,
        notion_service: NotionService | None = None,
        data_source_id: str | None = None,
    ):
        self._notion = notion_service or get_notion_service()
        self._data_source_id = data_source_id or settings.notion_reminders_data_source_id

    # ==================== Mappers ====================

    def _page_to_reminder(self, page: dict[str, Any]) -> Reminder:
        """Convierte una página de Notion en Reminder."""
        props = page.get("properties", {})

        status_name = read_select(props, ReminderProps.STATUS) or ReminderStatus.PENDING.value
        try:
            status = ReminderStatus(status_name)
        except ValueError:
            logger.warning(f"Estado desconocido '{status_name}' en recordatorio {page.get('id')}")
            status = ReminderStatus.PENDING

        return Reminder(
            id=page["id"],
            email=read_email(props, ReminderProps.EMAIL),
            subject=read_title(props, ReminderProps.SUBJECT),
            description=read_rich_text(props, ReminderProps.DESCRIPTION),
            remind_at=read_date(props, ReminderProps.REMIND_AT),
            status=status,
            email_sent=read_checkbox(props, ReminderProps.EMAIL_SENT),
            sent_at=read_date(props, ReminderProps.SENT_AT),
            last_error=read_rich_text(props, ReminderProps.LAST_ERROR) or None,
            user_id=read_rich_text(props, ReminderProps.USER_ID) or None,
            timezone=read_rich_text(props, ReminderProps.TIMEZONE) or None,
            is_recurring=read_checkbox(props, ReminderProps.IS_RECURRING),
            created_at=parse_iso_datetime(page.get("created_time")),
            _raw=page,
        )

    def _fields_to_properties(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Convierte campos del dominio en propiedades de Notion."""
        builders = {
            "subject": (ReminderProps.SUBJECT, title_property),
            "description": (ReminderProps.DESCRIPTION, rich_text_property),
            "email": (ReminderProps.EMAIL, email_property),
            "remind_at": (ReminderProps.REMIND_AT, date_property),
            "status": (ReminderProps.STATUS, lambda s: select_property(ReminderStatus(s).value)),
            "email_sent": (ReminderProps.EMAIL_SENT, checkbox_property),
            "sent_at": (ReminderProps.SENT_AT, date_property),
            "last_error": (ReminderProps.LAST_ERROR, rich_text_property),
            "user_id": (ReminderProps.USER_ID, rich_text_property),
            "timezone": (ReminderProps.TIMEZONE, rich_text_property),
            "is_recurring": (ReminderProps.IS_RECURRING, checkbox_property),
        }

        properties = {}
        for key, value in fields.items():
            if key not in builders:
                raise ValueError(f"Campo de recordatorio no soportado: {key}")
            name, build = builders[key]
            properties[name] = build(value)
        return properties

    def _reminder_to_properties(self, reminder: Reminder) -> dict[str, Any]:
        return self._fields_to_properties({
            "subject": reminder.subject,
            "description": reminder.description,
            "email": reminder.email,
            "remind_at": reminder.remind_at,
            "status": reminder.status,
            "email_sent": reminder.email_sent,
            "sent_at": reminder.sent_at,
            "last_error": reminder.last_error,
            "user_id": reminder.user_id,
            "timezone": reminder.timezone,
            "is_recurring": reminder.is_recurring,
        })

    def _build_filter(self, filter: ReminderFilter) -> dict[str, Any] | None:
        """Traduce ReminderFilter a un filtro compuesto de Notion."""
        conditions: list[dict[str, Any]] = []

        if filter.user_id is not None:
            conditions.append({
                "property": ReminderProps.USER_ID,
                "rich_text": {"equals": filter.user_id},
            })

        if filter.status is not None:
            statuses = [filter.status] if isinstance(filter.status, ReminderStatus) else filter.status
            status_conditions = [
                {"property": ReminderProps.STATUS, "select": {"equals": s.value}}
                for s in statuses
            ]
            if len(status_conditions) == 1:
                conditions.append(status_conditions[0])
            else:
                conditions.append({"or": status_conditions})

        if filter.email_sent is not None:
            conditions.append({
                "property": ReminderProps.EMAIL_SENT,
                "checkbox": {"equals": filter.email_sent},
            })

        date_filters = [
            ("on_or_before", filter.remind_at_on_or_before),
            ("before", filter.remind_at_before),
            ("after", filter.remind_at_after),
        ]
        for operator, value in date_filters:
            if value is not None:
                conditions.append({
                    "property": ReminderProps.REMIND_AT,
                    "date": {operator: to_iso(value)},
                })

        if not conditions:
            return None
        if len(conditions) == 1:
            return conditions[0]
        return {"and": conditions}

    def _build_sorts(self, filter: ReminderFilter) -> list[dict[str, Any]]:
        direction = "descending" if filter.descending else "ascending"
        if filter.order_by == "remind_at":
            return [{"property": ReminderProps.REMIND_AT, "direction": direction}]
        return [{"timestamp": "created_time", "direction": direction}]

    # ==================== CRUD ====================

    async def get_by_id(self, id: str) -> Reminder | None:
        page = await self._notion.get_page(id)
        return self._page_to_reminder(page) if page else None

    async def create(self, reminder: Reminder) -> Reminder:
        page = await self._notion.create_page(
            self._data_source_id,
            self._reminder_to_properties(reminder),
        )
        created = self._page_to_reminder(page)
        logger.info(f"Recordatorio creado: {created.id} para {to_iso(created.remind_at)}")
        return created

    async def update(self, id: str, fields: dict[str, Any]) -> Reminder:
        try:
            page = await self._notion.update_page(id, self._fields_to_properties(fields))
        except NotionAPIError as e:
            if e.is_not_found:
                raise NotFoundError("Recordatorio", id) from e
            raise
        return self._page_to_reminder(page)

    async def delete(self, id: str) -> bool:
        return await self._notion.archive_page(id)

    # ==================== Queries ====================

    async def find(self, filter: ReminderFilter) -> list[Reminder]:
        pages = await self._notion.query_all(
            self._data_source_id,
            filter=self._build_filter(filter),
            sorts=self._build_sorts(filter),
            limit=filter.limit,
        )
        reminders = []
        for page in pages:
            reminder = self._page_to_reminder(page)
            if reminder.remind_at is None:
                logger.warning(f"Recordatorio {reminder.id} sin fecha, se ignora")
                continue
            reminders.append(reminder)
        return reminders

    async def get_due(self, now: datetime) -> list[Reminder]:
        due = await self.find(ReminderFilter.due(now))
        # Revalidación de elegibilidad sobre el snapshot
        return [r for r in due if r.is_eligible(now)]
