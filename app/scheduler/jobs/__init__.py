"""Jobs del scheduler."""

from app.scheduler.jobs.reminder_dispatcher import (
    ReminderDispatcher,
    build_reminder_email,
    dispatch_due_reminders,
    dispatch_reminders_job,
)

__all__ = [
    "ReminderDispatcher",
    "build_reminder_email",
    "dispatch_due_reminders",
    "dispatch_reminders_job",
]
