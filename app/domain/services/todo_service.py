"""
Todo Service - CRUD de la lista de pendientes del usuario.
"""

import logging
from typing import Any

from app.domain.entities.todo import Todo, TodoFilter
from app.domain.repositories import ITodoRepository, get_todo_repository
from app.utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"title", "description", "completed"}


class TodoService:
    """Servicio para gestionar pendientes."""

    def __init__(self, repository: ITodoRepository | None = None):
        self._repository = repository or get_todo_repository()

    async def create_todo(self, user_id: str, title: str, description: str = "") -> Todo:
        """Crea un pendiente sin completar."""
        if not (title or "").strip():
            raise ValidationError("Pendiente inválido", errors={"title": "El título es obligatorio"})

        todo = await self._repository.create(Todo(
            id="",
            title=title.strip(),
            description=description or "",
            completed=False,
            user_id=user_id,
        ))
        logger.info(f"Pendiente creado: {todo.title}")
        return todo

    async def get_todos(self, user_id: str) -> list[Todo]:
        """Todos los pendientes del usuario, más recientes primero."""
        return await self._repository.find(TodoFilter(user_id=user_id))

    async def get_completed_todos(self, user_id: str) -> list[Todo]:
        return await self._repository.find(TodoFilter(
            user_id=user_id,
            completed=True,
            order_by="updated_at",
        ))

    async def get_pending_todos(self, user_id: str) -> list[Todo]:
        return await self._repository.find(TodoFilter(user_id=user_id, completed=False))

    async def search_todos(self, user_id: str, term: str) -> list[Todo]:
        """Busca pendientes cuyo título contenga el término."""
        return await self._repository.find(TodoFilter(user_id=user_id, search=term))

    async def get_todo(self, todo_id: str, user_id: str | None = None) -> Todo:
        """Obtiene un pendiente; con `user_id`, uno ajeno se trata como inexistente."""
        todo = await self._repository.get_by_id(todo_id)
        if todo is None or (user_id is not None and todo.user_id != user_id):
            raise NotFoundError("Pendiente", todo_id)
        return todo

    async def update_todo(
        self,
        todo_id: str,
        updates: dict[str, Any],
        user_id: str | None = None,
    ) -> Todo:
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Campos no editables",
                errors={field: "Campo no editable" for field in sorted(unknown)},
            )
        nulls = sorted(field for field, value in updates.items() if value is None)
        if nulls:
            raise ValidationError(
                "Pendiente inválido",
                errors={field: "El campo no puede ser nulo" for field in nulls},
            )
        if "title" in updates and not updates["title"].strip():
            raise ValidationError("Pendiente inválido", errors={"title": "El título es obligatorio"})
        if user_id is not None:
            await self.get_todo(todo_id, user_id)
        return await self._repository.update(todo_id, updates)

    async def toggle_todo(
        self,
        todo_id: str,
        current_status: bool | None = None,
        user_id: str | None = None,
    ) -> Todo:
        """
        Invierte el estado de completado.

        Si no se conoce el estado actual se lee del store.
        """
        if current_status is None or user_id is not None:
            todo = await self.get_todo(todo_id, user_id)
            if current_status is None:
                current_status = todo.completed
        return await self._repository.update(todo_id, {"completed": not current_status})

    async def delete_todo(self, todo_id: str, user_id: str | None = None) -> bool:
        if user_id is not None:
            await self.get_todo(todo_id, user_id)
        deleted = await self._repository.delete(todo_id)
        if not deleted:
            raise NotFoundError("Pendiente", todo_id)
        return deleted


# Singleton
_todo_service: TodoService | None = None


def get_todo_service() -> TodoService:
    """Obtiene la instancia del servicio de pendientes."""
    global _todo_service
    if _todo_service is None:
        _todo_service = TodoService()
    return _todo_service
