"""Manejo centralizado de errores y excepciones."""

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from notion_client.errors import RequestTimeoutError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Categorías de errores."""

    NETWORK = "network"
    API_NOTION = "api_notion"
    SMTP = "smtp"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SCHEDULER = "scheduler"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Contexto de un error para logging y alertas."""

    category: ErrorCategory
    operation: str
    error_type: str
    message: str
    details: dict[str, Any] | None = None
    traceback_str: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convierte a diccionario para logging."""
        return {
            "category": self.category.value,
            "operation": self.operation,
            "error_type": self.error_type,
            "message": self.message,
            "details": self.details,
        }


class TodoRemindersError(Exception):
    """Excepción base para Todo Reminders."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"


class NotionAPIError(TodoRemindersError):
    """Error de la API de Notion."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, ErrorCategory.API_NOTION, details)
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class MailDeliveryError(TodoRemindersError):
    """Error entregando un correo al transporte SMTP."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCategory.SMTP, details)


class ValidationError(TodoRemindersError):
    """Error de validación de datos."""

    def __init__(
        self,
        message: str,
        errors: dict[str, str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if errors:
            details["errors"] = errors
        super().__init__(message, ErrorCategory.VALIDATION, details)
        self.errors = errors or {}


class NotFoundError(TodoRemindersError):
    """Entidad inexistente en el store."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} {entity_id} no encontrado",
            ErrorCategory.NOT_FOUND,
            {"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


def log_error(
    error: Exception,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    extra: dict[str, Any] | None = None,
) -> ErrorContext:
    """
    Registra un error con contexto estructurado.

    Args:
        error: La excepción capturada
        operation: Nombre de la operación que falló
        category: Categoría del error
        extra: Información adicional

    Returns:
        ErrorContext con los detalles del error
    """
    if isinstance(error, TodoRemindersError):
        category = error.category
        details = {**(error.details or {}), **(extra or {})}
    else:
        details = extra or {}

    context = ErrorContext(
        category=category,
        operation=operation,
        error_type=type(error).__name__,
        message=str(error),
        details=details,
        traceback_str=traceback.format_exc(),
    )

    logger.error(
        f"Error en {operation}: {error}",
        extra={"error_context": context.to_dict()},
    )

    return context


# Errores de red que vale la pena reintentar
RETRYABLE_NOTION_ERRORS = (
    httpx.TransportError,
    RequestTimeoutError,
    ConnectionError,
    TimeoutError,
)


def retry_notion():
    """Retry configurado para llamadas a Notion API."""
    return retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(RETRYABLE_NOTION_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
