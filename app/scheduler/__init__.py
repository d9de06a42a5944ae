"""Scheduler de Todo Reminders."""

from app.scheduler.setup import (
    get_job_status,
    get_scheduler,
    setup_scheduler,
    shutdown_scheduler,
)

__all__ = [
    "get_scheduler",
    "setup_scheduler",
    "shutdown_scheduler",
    "get_job_status",
]
