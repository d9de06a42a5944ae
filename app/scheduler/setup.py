"""Configuración del scheduler con APScheduler."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Scheduler global
_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    """Obtiene la instancia del scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(
            timezone=settings.tz,
            job_defaults={
                "coalesce": True,  # Combinar ejecuciones perdidas
                "max_instances": 1,  # Una sola instancia por job
                "misfire_grace_time": 60,  # Gracia de 60 segundos
            },
        )
    return _scheduler


async def setup_scheduler() -> AsyncIOScheduler:
    """Configura y arranca el scheduler con el job de dispatch."""
    scheduler = get_scheduler()

    from app.scheduler.jobs.reminder_dispatcher import JOB_NAME, dispatch_reminders_job

    interval = settings.reminder_dispatch_interval_minutes
    scheduler.add_job(
        dispatch_reminders_job,
        IntervalTrigger(minutes=interval),
        id=JOB_NAME,
        name="Reminder Email Dispatch",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Job configurado: Reminder Email Dispatch (cada {interval} min)")

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler iniciado")

    return scheduler


async def shutdown_scheduler() -> None:
    """Detiene el scheduler."""
    scheduler = get_scheduler()
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler detenido")


def get_job_status() -> list[dict]:
    """Obtiene el estado de todos los jobs."""
    scheduler = get_scheduler()
    jobs = []

    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
        })

    return jobs
