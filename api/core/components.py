# core/components.py
"""
Wiring for the Rooted services.

Both the Flask app and the notification worker build the same set of
components around one Database handle.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.config import (
    BIBLE_API_BASE,
    BIBLE_REQUEST_TIMEOUT,
    BOLLS_API_BASE,
    BOLLS_TRANSLATIONS,
    DEFAULT_TRANSLATION,
    NOTIFICATION_WEBHOOK_URL,
    REMINDER_WORKERS,
    WITHDRAW_ON_CANCEL,
)
from services.cache import VerseCache
from services.notes import NoteStore
from services.notifications import (
    LocalNotificationQueue,
    NotificationCapability,
    log_sender,
    webhook_sender,
)
from services.references import BibleApiClient, FetchVerseText, VerseResolver
from services.reminders import ReminderIntervalSettings, ReminderScheduler, ReminderTaskQueue
from utils.db import Database

logger = logging.getLogger(__name__)


@dataclass
class Components:
    db: Database
    cache: VerseCache
    resolver: VerseResolver
    intervals: ReminderIntervalSettings
    notifier: NotificationCapability
    scheduler: ReminderScheduler
    task_queue: ReminderTaskQueue
    notes: NoteStore

    def shutdown(self):
        self.task_queue.shutdown()
        self.scheduler.close()


def build_components(
    db: Database,
    fetch: Optional[FetchVerseText] = None,
    notifier: Optional[NotificationCapability] = None,
    withdraw_on_cancel: bool = WITHDRAW_ON_CANCEL,
    coalesce: bool = False,
    reminder_workers: int = REMINDER_WORKERS,
) -> Components:
    """
    Build every service around db.

    fetch and notifier default to the HTTP Bible client and the local
    notification queue.
    """
    if fetch is None:
        fetch = BibleApiClient(
            base_url=BIBLE_API_BASE,
            bolls_base_url=BOLLS_API_BASE,
            bolls_translations=BOLLS_TRANSLATIONS,
            timeout=BIBLE_REQUEST_TIMEOUT,
        )

    if notifier is None:
        if NOTIFICATION_WEBHOOK_URL:
            sender = webhook_sender(NOTIFICATION_WEBHOOK_URL)
            logger.info(f"Notifications delivered via webhook {NOTIFICATION_WEBHOOK_URL}")
        else:
            sender = log_sender
        notifier = LocalNotificationQueue(db, sender=sender)

    cache = VerseCache(db)
    resolver = VerseResolver(cache, fetch, default_translation=DEFAULT_TRANSLATION, coalesce=coalesce)
    intervals = ReminderIntervalSettings(db)

    scheduler = ReminderScheduler(
        db,
        intervals,
        notifier,
        NoteStore(db),
        withdraw_on_cancel=withdraw_on_cancel,
    )
    task_queue = ReminderTaskQueue(scheduler, max_workers=reminder_workers)
    notes = NoteStore(db, scheduler=scheduler, task_queue=task_queue)

    return Components(
        db=db,
        cache=cache,
        resolver=resolver,
        intervals=intervals,
        notifier=notifier,
        scheduler=scheduler,
        task_queue=task_queue,
        notes=notes,
    )
