# api/services/reminders/task_queue.py
"""
Background queue for reminder scheduling.

Note creation submits the note id and returns immediately; a small
thread pool runs ReminderScheduler.schedule_for_note. Failures are
logged and never reach the caller that created the note.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from core.config import REMINDER_WORKERS

logger = logging.getLogger(__name__)


class ReminderTaskQueue:
    def __init__(self, scheduler, max_workers: int = REMINDER_WORKERS):
        self.scheduler = scheduler
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="reminders",
        )

    def submit(self, note_id: str) -> Future:
        """Queue reminder scheduling for a note."""
        future = self._executor.submit(self.scheduler.schedule_for_note, note_id)
        future.add_done_callback(lambda f: self._log_failure(note_id, f))
        return future

    @staticmethod
    def _log_failure(note_id: str, future: Future):
        if future.cancelled():
            logger.warning(f"Reminder scheduling for note {note_id} was cancelled")
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                f"Reminder scheduling failed for note {note_id}: {exc}",
                exc_info=exc,
            )

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
