"""
DispatchReport - Resultado de una corrida del dispatch de recordatorios.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from app.utils.timezone import to_iso


class FailureStage(str, Enum):
    """Etapa en la que falló un recordatorio."""
    SEND = "send"
    WRITE_BACK = "write_back"


@dataclass
class DispatchFailure:
    """Fallo aislado de un recordatorio dentro de una corrida."""

    reminder_id: str
    stage: FailureStage
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "reminder_id": self.reminder_id,
            "stage": self.stage.value,
            "message": self.message,
        }


@dataclass
class DispatchReport:
    """
    Reporte agregado de una corrida.

    Los fallos por recordatorio sólo suben `error_count`; `success` es
    False únicamente cuando la selección misma falló.
    """

    timestamp: datetime
    success: bool = True
    processed_count: int = 0
    sent_count: int = 0
    error_count: int = 0
    error: str | None = None
    failures: list[DispatchFailure] = field(default_factory=list)

    @classmethod
    def selection_failed(cls, timestamp: datetime, error: str) -> "DispatchReport":
        return cls(timestamp=timestamp, success=False, error=error)

    def record_sent(self) -> None:
        self.sent_count += 1

    def record_failure(self, reminder_id: str, stage: FailureStage, message: str) -> None:
        self.error_count += 1
        self.failures.append(DispatchFailure(reminder_id, stage, message))

    def to_dict(self) -> dict[str, Any]:
        """Respuesta estructurada para el scheduler o el trigger HTTP."""
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "timestamp": to_iso(self.timestamp),
            }
        return {
            "success": True,
            "message": f"Procesados {self.processed_count} recordatorios",
            "processed_count": self.processed_count,
            "sent_count": self.sent_count,
            "error_count": self.error_count,
            "timestamp": to_iso(self.timestamp),
            "failures": [f.to_dict() for f in self.failures],
        }
