"""
Notification Services

Capability interface used by the reminder scheduler, plus a local
SQLite-backed implementation drained by the dispatcher worker.
"""

from .base import (
    DeliveryCallback,
    NotificationCapability,
    NotificationContent,
    NotificationRegistrationError,
)
from .local_queue import LocalNotificationQueue
from .senders import log_sender, webhook_sender

__all__ = [
    "DeliveryCallback",
    "NotificationCapability",
    "NotificationContent",
    "NotificationRegistrationError",
    "LocalNotificationQueue",
    "log_sender",
    "webhook_sender",
]
