"""Utilidades de Todo Reminders."""

from app.utils.errors import (
    TodoRemindersError,
    NotionAPIError,
    MailDeliveryError,
    ValidationError,
    NotFoundError,
    ErrorCategory,
    ErrorContext,
    log_error,
    retry_notion,
)

from app.utils.text import (
    truncate_text,
    escape_html,
    html_paragraphs,
)

__all__ = [
    # Errors
    "TodoRemindersError",
    "NotionAPIError",
    "MailDeliveryError",
    "ValidationError",
    "NotFoundError",
    "ErrorCategory",
    "ErrorContext",
    "log_error",
    "retry_notion",
    # Text utilities
    "truncate_text",
    "escape_html",
    "html_paragraphs",
]
