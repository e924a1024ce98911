"""
Accountability Reminders

Interval settings, the reminder scheduler and the background queue
that schedules reminders after a note is created.
"""

from .intervals import (
    DEFAULT_INTERVALS,
    MAX_INTERVAL_DAYS,
    MIN_INTERVAL_DAYS,
    ReminderIntervalSettings,
    ValidationError,
    normalize_intervals,
)
from .scheduler import (
    ACCOUNTABILITY_QUESTIONS,
    REMINDER_TYPE,
    AccountabilityReminder,
    ReminderScheduler,
)
from .task_queue import ReminderTaskQueue

__all__ = [
    "DEFAULT_INTERVALS",
    "MAX_INTERVAL_DAYS",
    "MIN_INTERVAL_DAYS",
    "ReminderIntervalSettings",
    "ValidationError",
    "normalize_intervals",
    "ACCOUNTABILITY_QUESTIONS",
    "REMINDER_TYPE",
    "AccountabilityReminder",
    "ReminderScheduler",
    "ReminderTaskQueue",
]
