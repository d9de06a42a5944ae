"""
NotionTodoRepository - Implementación del repositorio de pendientes usando Notion.
"""

import logging
from typing import Any

from app.config import get_settings
from app.domain.entities.todo import Todo, TodoFilter
from app.domain.repositories.base import ITodoRepository
from app.services.notion import (
    NotionService,
    checkbox_property,
    get_notion_service,
    read_checkbox,
    read_rich_text,
    read_title,
    rich_text_property,
    title_property,
)
from app.utils.errors import NotFoundError, NotionAPIError
from app.utils.timezone import parse_iso_datetime

logger = logging.getLogger(__name__)
settings = get_settings()


class TodoProps:
    """Propiedades del data source de pendientes - EXACTAS de Notion."""

    TITLE = "Título"              # Title
    DESCRIPTION = "Descripción"   # Text
    COMPLETED = "Completado"      # Checkbox
    USER_ID = "Usuario"           # Text


class NotionTodoRepository(ITodoRepository):
    """Repositorio de pendientes usando Notion como backend."""

    def __init__(
        self,
        notion_service: NotionService | None = None,
        data_source_id: str | None = None,
    ):
        self._notion = notion_service or get_notion_service()
        self._data_source_id = data_source_id or settings.notion_todos_data_source_id

    # ==================== Mappers ====================

    def _page_to_todo(self, page: dict[str, Any]) -> Todo:
        props = page.get("properties", {})
        return Todo(
            id=page["id"],
            title=read_title(props, TodoProps.TITLE),
            description=read_rich_text(props, TodoProps.DESCRIPTION),
            completed=read_checkbox(props, TodoProps.COMPLETED),
            user_id=read_rich_text(props, TodoProps.USER_ID) or None,
            created_at=parse_iso_datetime(page.get("created_time")),
            updated_at=parse_iso_datetime(page.get("last_edited_time")),
            _raw=page,
        )

    def _fields_to_properties(self, fields: dict[str, Any]) -> dict[str, Any]:
        builders = {
            "title": (TodoProps.TITLE, title_property),
            "description": (TodoProps.DESCRIPTION, rich_text_property),
            "completed": (TodoProps.COMPLETED, checkbox_property),
            "user_id": (TodoProps.USER_ID, rich_text_property),
        }

        properties = {}
        for key, value in fields.items():
            if key not in builders:
                raise ValueError(f"Campo de pendiente no soportado: {key}")
            name, build = builders[key]
            properties[name] = build(value)
        return properties

    def _build_filter(self, filter: TodoFilter) -> dict[str, Any] | None:
        conditions: list[dict[str, Any]] = []

        if filter.user_id is not None:
            conditions.append({"property": TodoProps.USER_ID, "rich_text": {"equals": filter.user_id}})
        if filter.completed is not None:
            conditions.append({"property": TodoProps.COMPLETED, "checkbox": {"equals": filter.completed}})
        if filter.search:
            conditions.append({"property": TodoProps.TITLE, "title": {"contains": filter.search}})

        if not conditions:
            return None
        if len(conditions) == 1:
            return conditions[0]
        return {"and": conditions}

    def _build_sorts(self, filter: TodoFilter) -> list[dict[str, Any]]:
        timestamp = "last_edited_time" if filter.order_by == "updated_at" else "created_time"
        direction = "descending" if filter.descending else "ascending"
        return [{"timestamp": timestamp, "direction": direction}]

    # ==================== CRUD ====================

    async def get_by_id(self, id: str) -> Todo | None:
        page = await self._notion.get_page(id)
        return self._page_to_todo(page) if page else None

    async def create(self, todo: Todo) -> Todo:
        page = await self._notion.create_page(
            self._data_source_id,
            self._fields_to_properties({
                "title": todo.title,
                "description": todo.description,
                "completed": todo.completed,
                "user_id": todo.user_id,
            }),
        )
        return self._page_to_todo(page)

    async def update(self, id: str, fields: dict[str, Any]) -> Todo:
        try:
            page = await self._notion.update_page(id, self._fields_to_properties(fields))
        except NotionAPIError as e:
            if e.is_not_found:
                raise NotFoundError("Pendiente", id) from e
            raise
        return self._page_to_todo(page)

    async def delete(self, id: str) -> bool:
        return await self._notion.archive_page(id)

    async def find(self, filter: TodoFilter) -> list[Todo]:
        pages = await self._notion.query_all(
            self._data_source_id,
            filter=self._build_filter(filter),
            sorts=self._build_sorts(filter),
            limit=filter.limit,
        )
        return [self._page_to_todo(p) for p in pages]
