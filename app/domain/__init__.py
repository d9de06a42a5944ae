"""
Domain module - Entidades, repositorios y servicios del dominio.

Este módulo implementa el patrón Repository para desacoplar
la lógica de negocio de la persistencia (Notion).

Estructura:
    - entities/: Dataclasses que representan el dominio
    - repositories/: Interfaces y implementaciones de persistencia
    - services/: Casos de uso CRUD sobre los repositorios

NOTA: Los repositories NO se exportan aquí para evitar imports circulares.
Importar directamente de app.domain.repositories cuando se necesiten.
"""

from app.domain.entities import (
    Reminder,
    ReminderStatus,
    Todo,
    DispatchReport,
)

__all__ = [
    "Reminder",
    "ReminderStatus",
    "Todo",
    "DispatchReport",
]
