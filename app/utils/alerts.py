"""Sistema de alertas por correo para errores críticos."""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any

from app.config import get_settings
from app.utils.errors import ErrorCategory, ErrorContext, MailDeliveryError, log_error
from app.utils.text import escape_html

logger = logging.getLogger(__name__)
settings = get_settings()

# Rate limiting para evitar spam de alertas
_alert_counts: dict[str, list[datetime]] = defaultdict(list)
_RATE_LIMIT_WINDOW = timedelta(minutes=5)
_MAX_ALERTS_PER_WINDOW = 3


class AlertLevel:
    """Niveles de alerta."""

    CRITICAL = "critical"  # Errores que rompen funcionalidad
    WARNING = "warning"    # Errores recuperables pero importantes
    INFO = "info"          # Información relevante


# Categorías que disparan alertas críticas
CRITICAL_CATEGORIES = {
    ErrorCategory.API_NOTION,
    ErrorCategory.NETWORK,
    ErrorCategory.SCHEDULER,
    ErrorCategory.UNKNOWN,
}


def _is_rate_limited(error_key: str) -> bool:
    """Verifica si una alerta está limitada por rate limit."""
    now = datetime.now()
    cutoff = now - _RATE_LIMIT_WINDOW

    # Limpiar alertas antiguas
    _alert_counts[error_key] = [
        ts for ts in _alert_counts[error_key] if ts > cutoff
    ]

    if len(_alert_counts[error_key]) >= _MAX_ALERTS_PER_WINDOW:
        return True

    _alert_counts[error_key].append(now)
    return False


def _format_alert_subject(context: ErrorContext, level: str) -> str:
    return f"[Todo Reminders] {level.upper()}: {context.operation} ({context.category.value})"


def _format_alert_body(context: ErrorContext, level: str) -> str:
    """Formatea el cuerpo HTML de la alerta."""
    parts = [
        f"<h2>Alerta {escape_html(level.upper())}</h2>",
        "<ul>",
        f"<li><b>Categoría:</b> {escape_html(context.category.value)}</li>",
        f"<li><b>Operación:</b> {escape_html(context.operation)}</li>",
        f"<li><b>Error:</b> {escape_html(context.error_type)}</li>",
        f"<li><b>Ambiente:</b> {escape_html(settings.app_env)}</li>",
        "</ul>",
        f"<pre>{escape_html(context.message[:500])}</pre>",
    ]

    if context.details:
        parts.append("<h3>Detalles</h3><ul>")
        for key, value in list(context.details.items())[:5]:
            parts.append(f"<li>{escape_html(str(key))}: {escape_html(str(value)[:100])}</li>")
        parts.append("</ul>")

    parts.append(f"<p><i>Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}</i></p>")
    return "\n".join(parts)


async def send_alert(
    context: ErrorContext,
    level: str = AlertLevel.CRITICAL,
    force: bool = False,
) -> bool:
    """
    Envía una alerta por correo a ALERT_EMAIL.

    Args:
        context: Contexto del error
        level: Nivel de alerta
        force: Si True, ignora rate limiting

    Returns:
        True si se envió la alerta
    """
    if not settings.alert_email:
        logger.debug("ALERT_EMAIL no configurado, alerta omitida")
        return False

    # Importar aquí para evitar circular imports
    from app.services.mailer import get_mailer

    error_key = f"{context.category.value}:{context.operation}:{context.error_type}"

    if not force and _is_rate_limited(error_key):
        logger.debug(f"Alerta rate-limited: {error_key}")
        return False

    try:
        await get_mailer().send(
            settings.alert_email,
            _format_alert_subject(context, level),
            _format_alert_body(context, level),
        )
    except MailDeliveryError as e:
        logger.error(f"Fallo al enviar alerta {error_key}: {e}")
        return False

    logger.info(f"Alerta enviada: {error_key}")
    return True


async def alert_critical_error(
    error: Exception,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    extra: dict[str, Any] | None = None,
) -> ErrorContext:
    """
    Registra un error crítico y envía alerta.

    Args:
        error: La excepción
        operation: Operación que falló
        category: Categoría del error
        extra: Información adicional

    Returns:
        ErrorContext del error
    """
    context = log_error(error, operation, category, extra)

    if context.category in CRITICAL_CATEGORIES:
        await send_alert(context, AlertLevel.CRITICAL)

    return context


def reset_alert_limits() -> None:
    """Limpia el historial de rate limiting."""
    _alert_counts.clear()
