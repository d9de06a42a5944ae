"""Job para despachar recordatorios vencidos por correo.

Cada corrida toma un snapshot de los recordatorios elegibles (pendientes,
sin correo enviado y con hora cumplida), intenta un correo por cada uno y
registra el resultado. Los fallos de un recordatorio no afectan a los demás.
"""

import asyncio
import logging
import time
from datetime import datetime

from app.config import get_settings
from app.domain.entities.dispatch import DispatchReport, FailureStage
from app.domain.entities.reminder import Reminder, ReminderStatus
from app.domain.repositories import IReminderRepository, get_reminder_repository
from app.services.mailer import MailTransport, get_mailer
from app.utils.alerts import alert_critical_error
from app.utils.errors import ErrorCategory, MailDeliveryError, TodoRemindersError
from app.utils.metrics import get_metrics_collector
from app.utils.text import escape_html, html_paragraphs, truncate_text
from app.utils.timezone import format_local, now_utc

logger = logging.getLogger(__name__)
settings = get_settings()

JOB_NAME = "reminder_dispatch"

# Límite de texto que acepta el store para last_error
LAST_ERROR_MAX_LENGTH = 2000

# Serializa corridas manuales y programadas dentro del proceso
_dispatch_lock = asyncio.Lock()


def build_reminder_email(reminder: Reminder, tz_name: str | None = None) -> tuple[str, str, str]:
    """
    Construye el correo de un recordatorio.

    Returns:
        (asunto, cuerpo HTML, cuerpo de texto)
    """
    scheduled = format_local(reminder.remind_at, tz_name)
    subject = f"Recordatorio: {reminder.subject}"

    html_body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333;">Recordatorio</h2>
        <div style="background-color: #f9f9f9; padding: 20px; border-radius: 5px; margin: 20px 0;">
            <h3 style="color: #2563eb; margin-top: 0;">{escape_html(reminder.subject)}</h3>
            <p style="color: #666; line-height: 1.6;">{html_paragraphs(reminder.description)}</p>
        </div>
        <div style="color: #888; font-size: 12px; text-align: center; margin-top: 30px;">
            <p>Programado para: {escape_html(scheduled)}</p>
            <p>Enviado por tu sistema personal de recordatorios</p>
        </div>
    </div>
    """

    text_body = (
        f"{reminder.subject}\n\n"
        f"{reminder.description}\n\n"
        f"Programado para: {scheduled}"
    )
    return subject, html_body, text_body


class ReminderDispatcher:
    """
    Despacha los recordatorios elegibles.

    Uso:
        dispatcher = ReminderDispatcher(repository, mailer)
        report = await dispatcher.run()
    """

    def __init__(
        self,
        repository: IReminderRepository,
        mailer: MailTransport,
        tz_name: str | None = None,
    ):
        self._repository = repository
        self._mailer = mailer
        self._tz_name = tz_name or settings.tz

    async def run(self, now: datetime | None = None) -> DispatchReport:
        """
        Ejecuta una corrida completa.

        Nunca lanza por fallos de un recordatorio; si la selección falla
        devuelve un reporte fallido sin haber modificado nada.
        """
        now = now or now_utc()
        logger.info(f"Buscando recordatorios vencidos a {now.isoformat()}")

        try:
            due = await self._repository.get_due(now)
        except TodoRemindersError as e:
            await alert_critical_error(e, "reminder_dispatch.select", ErrorCategory.API_NOTION)
            return DispatchReport.selection_failed(now, str(e))
        except Exception as e:
            # Páginas mal formadas u otros errores al mapear el snapshot
            await alert_critical_error(e, "reminder_dispatch.select", ErrorCategory.UNKNOWN)
            return DispatchReport.selection_failed(now, f"{type(e).__name__}: {e}")

        report = DispatchReport(timestamp=now, processed_count=len(due))
        logger.info(f"Encontrados {len(due)} recordatorios vencidos")

        for reminder in due:
            await self._process(reminder, now, report)

        logger.info(
            f"Dispatch terminado: {report.processed_count} procesados, "
            f"{report.sent_count} enviados, {report.error_count} errores"
        )
        return report

    async def _process(self, reminder: Reminder, now: datetime, report: DispatchReport) -> None:
        """Procesa un recordatorio aislado del resto."""
        try:
            subject, html_body, text_body = build_reminder_email(reminder, self._tz_name)
            await self._mailer.send(reminder.email, subject, html_body, text_body)
        except Exception as e:
            reason = e.message if isinstance(e, MailDeliveryError) else f"{type(e).__name__}: {e}"
            logger.error(f"Fallo enviando recordatorio {reminder.id}: {reason}")
            report.record_failure(reminder.id, FailureStage.SEND, reason)
            await self._record_send_failure(reminder, reason)
            return

        # Sólo después de un envío exitoso
        try:
            await self._repository.update(reminder.id, {
                "email_sent": True,
                "status": ReminderStatus.SENT,
                "sent_at": now,
            })
        except Exception as e:
            logger.error(
                f"Correo enviado pero no se pudo registrar el envío de {reminder.id}: {e}"
            )
            report.record_failure(reminder.id, FailureStage.WRITE_BACK, str(e))
            return

        report.record_sent()
        logger.info(f"Recordatorio {reminder.id} enviado a {reminder.email}")

    async def _record_send_failure(self, reminder: Reminder, reason: str) -> None:
        try:
            await self._repository.update(reminder.id, {
                "status": ReminderStatus.FAILED,
                "last_error": truncate_text(reason, LAST_ERROR_MAX_LENGTH),
            })
        except Exception as e:
            logger.error(f"No se pudo marcar como fallido el recordatorio {reminder.id}: {e}")


async def dispatch_due_reminders(now: datetime | None = None) -> DispatchReport:
    """
    Corre el dispatch con las dependencias de producción.

    Comparte un lock con cualquier otra corrida del proceso y registra
    métricas del resultado.
    """
    dispatcher = ReminderDispatcher(get_reminder_repository(), get_mailer())

    async with _dispatch_lock:
        start_time = time.time()
        report = await dispatcher.run(now)
        elapsed_ms = (time.time() - start_time) * 1000

    await get_metrics_collector().record_job(JOB_NAME, report, elapsed_ms)
    return report


async def dispatch_reminders_job() -> None:
    """Job del scheduler: ejecuta el dispatch y registra el resultado."""
    try:
        report = await dispatch_due_reminders()
        if report.success:
            logger.debug(f"Reporte de dispatch: {report.to_dict()}")
        else:
            logger.error(f"Dispatch falló en la selección: {report.error}")
    except Exception as e:
        await alert_critical_error(e, "dispatch_reminders_job", ErrorCategory.SCHEDULER)
