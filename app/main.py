"""
Todo Reminders

FastAPI application: lista de pendientes y recordatorios por correo,
con Notion como store y un job periódico que despacha los vencidos.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api import admin_router, reminders_router, todos_router
from app.config import get_settings
from app.utils.errors import NotFoundError, NotionAPIError, ValidationError

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle de la aplicación."""
    logger.info("=" * 50)
    logger.info("Iniciando Todo Reminders")
    logger.info("=" * 50)

    # ==================== STARTUP ====================

    if settings.scheduler_enabled:
        logger.info("Inicializando scheduler...")
        from app.scheduler import setup_scheduler
        await setup_scheduler()
    else:
        logger.info("Scheduler deshabilitado (SCHEDULER_ENABLED=false)")

    logger.info(f"Zona horaria de referencia: {settings.tz}")

    yield

    # ==================== SHUTDOWN ====================

    logger.info("Deteniendo Todo Reminders...")

    if settings.scheduler_enabled:
        from app.scheduler import shutdown_scheduler
        await shutdown_scheduler()

    logger.info("Todo Reminders detenido.")


# Crear aplicación FastAPI
app = FastAPI(
    title="Todo Reminders",
    description="Pendientes y recordatorios por correo",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(admin_router)
app.include_router(reminders_router)
app.include_router(todos_router)


# ==================== ERROR HANDLERS ====================


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": exc.message, "errors": exc.errors},
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"error": exc.message})


@app.exception_handler(NotionAPIError)
async def notion_error_handler(request: Request, exc: NotionAPIError):
    logger.error(f"Error de Notion en {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"error": "Error consultando el store", "detail": exc.message},
    )


# ==================== ROUTES ====================


@app.get("/health")
async def health_check():
    """Health check básico."""
    return {"status": "healthy", "service": "todo-reminders"}


@app.get("/health/detailed")
async def health_check_detailed():
    """Health check detallado."""
    from app.scheduler import get_job_status
    from app.services.notion import get_notion_service
    from app.utils.metrics import get_metrics_collector

    jobs = get_job_status()
    notion_ok = await get_notion_service().test_connection()
    metrics = get_metrics_collector().get_summary()

    return {
        "status": "healthy" if notion_ok else "degraded",
        "service": "todo-reminders",
        "version": "1.0.0",
        "environment": settings.app_env,
        "checks": {
            "notion": {"status": "healthy" if notion_ok else "unhealthy"},
            "scheduler": {
                "status": "healthy" if settings.scheduler_enabled else "disabled",
                "jobs_count": len(jobs),
            },
            "dispatch": metrics["jobs"],
        },
    }


# ==================== DEV MODE ====================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
