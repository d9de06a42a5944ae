"""
Repository Interfaces - Contratos para la capa de persistencia.

Estas interfaces definen los métodos que cualquier implementación
de repositorio debe proveer, permitiendo cambiar de Notion a otro
backend (o a un fake en tests) sin modificar la lógica de negocio.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Generic, TypeVar

from app.domain.entities.reminder import Reminder, ReminderFilter
from app.domain.entities.todo import Todo, TodoFilter

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """
    Interface base para repositorios.

    Define operaciones CRUD genéricas. `update` recibe sólo los campos
    a modificar y falla con excepción si el store no pudo escribir.
    """

    @abstractmethod
    async def get_by_id(self, id: str) -> T | None:
        """Obtiene una entidad por su ID."""
        pass

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Crea una nueva entidad."""
        pass

    @abstractmethod
    async def update(self, id: str, fields: dict[str, Any]) -> T:
        """Actualiza parcialmente una entidad existente."""
        pass

    @abstractmethod
    async def delete(self, id: str) -> bool:
        """Elimina una entidad por su ID."""
        pass


class IReminderRepository(IRepository[Reminder]):
    """
    Interface para repositorio de recordatorios.
    """

    @abstractmethod
    async def find(self, filter: ReminderFilter) -> list[Reminder]:
        """Busca recordatorios según filtros."""
        pass

    async def get_due(self, now: datetime) -> list[Reminder]:
        """Obtiene los recordatorios elegibles para el dispatch."""
        return await self.find(ReminderFilter.due(now))


class ITodoRepository(IRepository[Todo]):
    """
    Interface para repositorio de pendientes.
    """

    @abstractmethod
    async def find(self, filter: TodoFilter) -> list[Todo]:
        """Busca pendientes según filtros."""
        pass
