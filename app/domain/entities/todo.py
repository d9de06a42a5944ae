"""
Todo Entity - Representación de un pendiente de la lista del usuario.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.utils.timezone import to_iso


@dataclass
class Todo:
    """Entidad de pendiente."""

    id: str
    title: str
    description: str = ""
    completed: bool = False
    user_id: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    _raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "user_id": self.user_id,
            "created_at": to_iso(self.created_at) if self.created_at else None,
            "updated_at": to_iso(self.updated_at) if self.updated_at else None,
        }


@dataclass
class TodoFilter:
    """Filtros para buscar pendientes."""

    user_id: str | None = None
    completed: bool | None = None
    search: str | None = None
    order_by: str = "created_at"
    descending: bool = True
    limit: int | None = None
