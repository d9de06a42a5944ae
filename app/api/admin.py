"""
Admin API endpoints.

Endpoints para administración del sistema:
- Ejecutar el dispatch de recordatorios manualmente
- Ver jobs programados y métricas
- Recuperar recordatorios fallidos
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import get_settings
from app.domain.services import get_reminder_service
from app.scheduler.jobs.reminder_dispatcher import dispatch_due_reminders

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/admin", tags=["admin"])


class DispatchFailureResponse(BaseModel):
    """Fallo de un recordatorio dentro de una corrida."""
    reminder_id: str
    stage: str
    message: str


class DispatchResponse(BaseModel):
    """Resultado de una corrida de dispatch."""
    success: bool
    message: str
    processed_count: int
    sent_count: int
    error_count: int
    timestamp: str
    failures: list[DispatchFailureResponse] = []


class TriggersResponse(BaseModel):
    """Jobs programados."""
    triggers: list[dict]


@router.post("/dispatch", response_model=DispatchResponse)
async def run_dispatch():
    """
    Ejecuta el dispatch de recordatorios vencidos.

    Devuelve 500 si no se pudieron seleccionar los recordatorios.
    """
    logger.info("Dispatch manual solicitado")
    report = await dispatch_due_reminders()

    if not report.success:
        return JSONResponse(status_code=500, content=report.to_dict())
    return report.to_dict()


@router.get("/triggers", response_model=TriggersResponse)
async def get_triggers():
    """Obtiene lista de jobs programados."""
    from app.scheduler import get_job_status
    return {"triggers": get_job_status()}


@router.get("/metrics")
async def get_metrics():
    """Métricas de los jobs del proceso."""
    from app.utils.metrics import get_metrics_collector
    return get_metrics_collector().get_summary()


@router.get("/reminders/failed")
async def get_failed_reminders():
    """Recordatorios que requieren intervención manual."""
    reminders = await get_reminder_service().get_failed_reminders()
    return {"reminders": [r.to_dict() for r in reminders], "count": len(reminders)}


@router.post("/reminders/{reminder_id}/retry")
async def retry_failed_reminder(reminder_id: str):
    """Regresa un recordatorio fallido a pendiente para la siguiente corrida."""
    reminder = await get_reminder_service().retry_failed_reminder(reminder_id)
    return reminder.to_dict()
